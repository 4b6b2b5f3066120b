import os
import datetime
from dotenv import load_dotenv

load_dotenv()


def _flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config():
    """Environment-driven settings, applied onto app.config by create_app."""
    production = os.getenv('FLASK_ENV', 'development') == 'production'

    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET', 'dev-secret-change-me'),
        'JWT_ACCESS_TOKEN_EXPIRES': datetime.timedelta(days=int(os.getenv('JWT_EXPIRES_DAYS', '7'))),
        # Login and check-purchase demand an active purchase when set
        'REQUIRE_ACTIVE_PURCHASE': _flag('REQUIRE_ACTIVE_PURCHASE', True),
        # /simulate-purchase and /debug/data
        'ENABLE_TEST_ROUTES': _flag('ENABLE_TEST_ROUTES', not production),
        # Shared secret sent by the payment provider in X-Hotmart-Hottok
        'WEBHOOK_TOKEN': os.getenv('HOTMART_HOTTOK'),
        'BCRYPT_ROUNDS': int(os.getenv('BCRYPT_ROUNDS', '12')),
        'DEFAULT_CUSTOMER_NAME': os.getenv('DEFAULT_CUSTOMER_NAME', 'Test User'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'PORT': int(os.getenv('PORT', '3001')),
    }
