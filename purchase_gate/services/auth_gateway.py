"""
Auth Gateway: purchase check, password creation, login and onboarding.

Reads and writes the purchase and user stores under simple precondition
checks. Raises GatewayError subclasses; routes turn them into responses.
"""

import secrets
import time
from purchase_gate.models.purchase import Purchase, ACTIVE, INACTIVE
from purchase_gate.models.user import User, MAX_PASSWORD_BYTES
from purchase_gate.services.errors import InvalidInput, NotFound, Unauthorized, Forbidden, Conflict
from purchase_gate.services.stores import normalize_email
from purchase_gate.services.tokens import issue_access_token

DEFAULT_CUSTOMER_NAME = 'Test User'
SIMULATED_PRODUCT_ID = 'simulated-course'


def validate_password(password):
    if not isinstance(password, str):
        raise InvalidInput('Password must be a string')
    if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        raise InvalidInput(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')


class AuthGateway:

    def __init__(self, purchases, users, require_active_purchase=True,
                 bcrypt_rounds=12, default_name=DEFAULT_CUSTOMER_NAME):
        self.purchases = purchases
        self.users = users
        self.require_active_purchase = require_active_purchase
        self.bcrypt_rounds = bcrypt_rounds
        self.default_name = default_name

        self._dummy_user = User(email='', name='')
        self._dummy_user.set_password(secrets.token_urlsafe(16), rounds=bcrypt_rounds)

    def register_purchase(self, email, name=None, purchase_id=None, product_id=None):
        """
        Called by the payment webhook and the purchase simulation.
        Re-delivery overwrites the previous record.
        """
        email = normalize_email(email)
        if not email:
            raise InvalidInput('Email is required')

        purchase = Purchase(
            email=email,
            name=name or self.default_name,
            purchase_id=purchase_id or f'TEST_{int(time.time() * 1000)}',
            product_id=product_id,
            status=ACTIVE,
        )
        return self.purchases.upsert(purchase)

    def deactivate_purchase(self, email):
        """Refunds and chargebacks revoke access; unknown emails are ignored."""
        return self.purchases.set_status(email, INACTIVE)

    def check_purchase(self, email):
        email = normalize_email(email)
        if not email:
            return {'hasPurchase': False, 'error': 'Email is required'}

        purchase = self.purchases.find(email)
        if not purchase:
            return {'hasPurchase': False, 'error': 'No purchase found for this email'}

        if self.require_active_purchase and not purchase.is_active:
            return {'hasPurchase': False, 'error': 'Purchase is not active'}

        return {
            'hasPurchase': True,
            'customerName': purchase.name,
            'purchaseDate': purchase.purchase_date.isoformat(),
        }

    def create_password(self, email, password, name=None):
        email = normalize_email(email)
        if not email or not password:
            raise InvalidInput('Email and password are required')

        validate_password(password)

        purchase = self.purchases.find(email)
        if not purchase:
            raise NotFound('Purchase not found')

        if self.require_active_purchase and not purchase.is_active:
            raise Forbidden('Purchase is not active')

        if self.users.find(email):
            raise Conflict('User already exists')

        user = User(email=email, name=name or purchase.name)
        # Hash outside the store lock; insert re-checks for a concurrent duplicate
        user.set_password(password, rounds=self.bcrypt_rounds)
        self.users.insert(user)

        return {'token': issue_access_token(user), 'user': user.to_dict()}

    def login(self, email, password):
        email = normalize_email(email)
        if not email or not password:
            raise InvalidInput('Email and password are required')

        validate_password(password)

        user = self.users.find(email)
        if not user:
            # Burn a bcrypt check so unknown users take as long as known ones
            self._dummy_user.check_password(password)
            raise Unauthorized('Invalid credentials')
        if not user.check_password(password):
            raise Unauthorized('Invalid credentials')

        if self.require_active_purchase:
            purchase = self.purchases.find(email)
            if not purchase or not purchase.is_active:
                raise Forbidden('Access not authorized')

        return {'token': issue_access_token(user), 'user': user.to_dict()}

    def complete_onboarding(self, email):
        email = normalize_email(email)
        if not email:
            raise InvalidInput('Email is required')
        return self.users.mark_onboarded(email)

    def profile(self, email):
        user = self.users.find(email)
        if not user:
            raise NotFound('User not found')
        return user.to_dict()

    def snapshot(self):
        purchases = self.purchases.keys()
        users = self.users.keys()
        return {
            'users': users,
            'purchases': purchases,
            'totalUsers': len(users),
            'totalPurchases': len(purchases),
        }
