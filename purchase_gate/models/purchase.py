"""
Purchase Model: evidence that an email may create an account.
Status: active | inactive
"""

from datetime import datetime, timezone

ACTIVE = "active"
INACTIVE = "inactive"


class Purchase:

    def __init__(self, email, name, purchase_id, product_id=None,
                 status=ACTIVE, purchase_date=None):
        self.email = email
        self.name = name
        self.purchase_id = purchase_id
        self.product_id = product_id
        self.status = status
        self.purchase_date = purchase_date or datetime.now(timezone.utc)

    @property
    def is_active(self):
        return self.status == ACTIVE

    def to_dict(self):
        return {
            "email":        self.email,
            "name":         self.name,
            "purchaseId":   self.purchase_id,
            "productId":    self.product_id,
            "status":       self.status,
            "purchaseDate": self.purchase_date.isoformat(),
        }
