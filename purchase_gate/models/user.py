import bcrypt
from datetime import datetime, timezone

# bcrypt only reads the first 72 bytes and newer releases reject anything longer
MAX_PASSWORD_BYTES = 72


class User:

    def __init__(self, email, name, has_completed_onboarding=False):
        self.email = email
        self.name = name
        self.password_hash = None
        self.has_completed_onboarding = has_completed_onboarding
        self.created_at = datetime.now(timezone.utc)

    def set_password(self, password, rounds=12):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds)).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash:
            return False
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def to_dict(self):
        # Public profile only, never the hash
        return {
            'email': self.email,
            'name': self.name,
            'hasCompletedOnboarding': self.has_completed_onboarding
        }
