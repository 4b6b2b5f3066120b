from flask import current_app
from flask_jwt_extended import JWTManager
from purchase_gate.services.auth_gateway import AuthGateway
from purchase_gate.services.stores import PurchaseStore, UserStore

jwt = JWTManager()


class Gateway:
    """Gives every app its own stores, so test apps never share state."""

    def init_app(self, app):
        app.extensions['auth_gateway'] = AuthGateway(
            PurchaseStore(),
            UserStore(),
            require_active_purchase=app.config['REQUIRE_ACTIVE_PURCHASE'],
            bcrypt_rounds=app.config['BCRYPT_ROUNDS'],
            default_name=app.config['DEFAULT_CUSTOMER_NAME'],
        )

    @property
    def current(self):
        return current_app.extensions['auth_gateway']


class Blocklist:
    """Revoked token ids (jti) of the current app, filled by /auth/logout."""

    def init_app(self, app):
        app.extensions['token_blocklist'] = set()

    def add(self, jti):
        current_app.extensions['token_blocklist'].add(jti)

    def __contains__(self, jti):
        return jti in current_app.extensions['token_blocklist']


gateway = Gateway()
blocklist = Blocklist()
