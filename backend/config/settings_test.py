import os

os.environ.setdefault("USE_SQLITE_DB", "true")
from .settings import *  # noqa: F401,F403

DEBUG = True
SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "test-secret-key")

# SQLite for CI speed/simplicity if POSTGRES_HOST absent
if not os.environ.get("POSTGRES_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "test.db",
        }
    }

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

FRONTEND_URL = "https://app.voyager.test"
COINBASE_USE_STUB = True
COINBASE_COMMERCE_API_KEY = ""
COINBASE_COMMERCE_WEBHOOK_SECRET = "whsec_test"
COINBASE_ONRAMP_APP_ID = "voyager-test"
WALLET_USE_STUB = True
WALLET_RETRY_BACKOFF_SECONDS = 0
