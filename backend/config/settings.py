from pathlib import Path
import os
import environ
from datetime import timedelta

BASE_DIR = Path(__file__).resolve().parent.parent
env = environ.Env()
environ.Env.read_env(os.path.join(BASE_DIR.parent, '.env'))

SECRET_KEY = env('DJANGO_SECRET_KEY', default='dev-secret')
DEBUG = env.bool('DJANGO_DEBUG', default=True)
ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=['*'])

INSTALLED_APPS = [
    'django.contrib.admin','django.contrib.auth','django.contrib.contenttypes',
    'django.contrib.sessions','django.contrib.messages','django.contrib.staticfiles',
    'rest_framework','corsheaders','django_filters',
    'core','accounts','experiences.apps.ExperiencesConfig','bookings','payments',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [{
    'BACKEND': 'django.template.backends.django.DjangoTemplates',
    'DIRS': [],
    'APP_DIRS': True,
    'OPTIONS': {
        'context_processors': [
            'django.template.context_processors.debug',
            'django.template.context_processors.request',
            'django.contrib.auth.context_processors.auth',
            'django.contrib.messages.context_processors.messages',
        ],
    },
}]

WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': env('POSTGRES_DB', default='voyager'),
        'USER': env('POSTGRES_USER', default='voyager'),
        'PASSWORD': env('POSTGRES_PASSWORD', default='voyager'),
        'HOST': env('POSTGRES_HOST', default='localhost'),
        'PORT': env('POSTGRES_PORT', default='5432'),
    }
}

if env.bool('USE_SQLITE_DB', default=False):
    DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }

AUTH_USER_MODEL = 'accounts.User'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
    'DEFAULT_FILTER_BACKENDS': (
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.SearchFilter',
        'rest_framework.filters.OrderingFilter',
    ),
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=30),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=7),
    'AUTH_HEADER_TYPES': ('Bearer',),
}

CORS_ALLOW_ALL_ORIGINS = env.bool('CORS_ALLOW_ALL_ORIGINS', default=True)
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[])

STATIC_URL = 'static/'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOG_LEVEL = env('LOG_LEVEL', default='INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'},
    },
    'handlers': {
        'console': {'class': 'logging.StreamHandler', 'formatter': 'simple'},
    },
    'root': {'handlers': ['console'], 'level': 'WARNING'},
    'loggers': {
        'django': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        'bookings': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'payments': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'experiences': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}

FRONTEND_URL = env('FRONTEND_URL', default='http://localhost:5173')
EMAIL_BACKEND = env('EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')
DEFAULT_FROM_EMAIL = env('DEFAULT_FROM_EMAIL', default='Voyager <bookings@voyager.app>')

MAX_GUESTS_PER_BOOKING = env.int('MAX_GUESTS_PER_BOOKING', default=10)

COINBASE_COMMERCE_API_KEY = env('COINBASE_COMMERCE_API_KEY', default='')
COINBASE_COMMERCE_API_URL = env('COINBASE_COMMERCE_API_URL', default='https://api.commerce.coinbase.com')
COINBASE_COMMERCE_WEBHOOK_SECRET = env('COINBASE_COMMERCE_WEBHOOK_SECRET', default='')
COINBASE_COMMERCE_TIMEOUT_SECONDS = env.float('COINBASE_COMMERCE_TIMEOUT_SECONDS', default=10.0)
COINBASE_USE_STUB = env.bool('COINBASE_USE_STUB', default=True)
COINBASE_ONRAMP_APP_ID = env('COINBASE_ONRAMP_APP_ID', default='')
COINBASE_ONRAMP_URL = env('COINBASE_ONRAMP_URL', default='https://pay.coinbase.com/buy/select-asset')

WALLET_API_URL = env('WALLET_API_URL', default='')
WALLET_API_KEY = env('WALLET_API_KEY', default='')
WALLET_USE_STUB = env.bool('WALLET_USE_STUB', default=True)
WALLET_TIMEOUT_SECONDS = env.float('WALLET_TIMEOUT_SECONDS', default=15.0)
WALLET_BALANCE_RETRY_ATTEMPTS = env.int('WALLET_BALANCE_RETRY_ATTEMPTS', default=3)
WALLET_RETRY_BACKOFF_SECONDS = env.float('WALLET_RETRY_BACKOFF_SECONDS', default=0.5)
WALLET_STUB_BALANCE = env('WALLET_STUB_BALANCE', default='1000000')
