"""
In-memory stores for purchases and users.
Keyed by normalized email; each map access happens under the store's lock.
"""

import threading
from purchase_gate.services.errors import Conflict, NotFound


def normalize_email(email):
    if email is None:
        return None
    return str(email).strip().lower()


class PurchaseStore:

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def upsert(self, purchase):
        purchase.email = normalize_email(purchase.email)
        with self._lock:
            self._records[purchase.email] = purchase
        return purchase

    def find(self, email):
        with self._lock:
            return self._records.get(normalize_email(email))

    def set_status(self, email, status):
        """Returns the updated purchase, or None when there is nothing to update."""
        with self._lock:
            purchase = self._records.get(normalize_email(email))
            if purchase:
                purchase.status = status
            return purchase

    def keys(self):
        with self._lock:
            return list(self._records)


class UserStore:

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def insert(self, user):
        user.email = normalize_email(user.email)
        with self._lock:
            if user.email in self._records:
                raise Conflict("User already exists")
            self._records[user.email] = user
        return user

    def find(self, email):
        with self._lock:
            return self._records.get(normalize_email(email))

    def mark_onboarded(self, email):
        with self._lock:
            user = self._records.get(normalize_email(email))
            if not user:
                raise NotFound("User not found")
            user.has_completed_onboarding = True
            return user

    def keys(self):
        with self._lock:
            return list(self._records)
