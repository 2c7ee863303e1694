"""
Test settings for the compra project.
"""
# Inherit from base, NOT production: no Sentry, no forced SSL.
from .base import *  # noqa: F401,F403

# ============================================================
# BASIC TEST CONFIGURATION
# ============================================================
DEBUG = False
SECRET_KEY = 'test-secret-key-insecure-but-fast'
ALLOWED_HOSTS = ['testserver', 'localhost', '127.0.0.1']
PUBLIC_BASE_URL = ''

SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 0
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# ============================================================
# CACHE (in-memory)
# ============================================================
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'unique-snowflake',
    }
}

# ============================================================
# STATIC FILES STORAGE
# Use simple storage in tests to avoid requiring a collectstatic manifest.
# ============================================================
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# ============================================================
# DATABASE (in-memory SQLite)
# ============================================================
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# ============================================================
# CELERY (synchronous in tests)
# ============================================================
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# ============================================================
# RATE LIMITING (off; tests that need it turn it back on)
# ============================================================
RATELIMIT_ENABLE = False

# ============================================================
# LOGGING (quiet console; records still propagate to caplog)
# ============================================================
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['null'],
            'level': 'CRITICAL',
            'propagate': False,
        },
        'core': {
            'handlers': ['null'],
            'level': 'DEBUG',
        },
        'surveys': {
            'handlers': ['null'],
            'level': 'DEBUG',
        },
    },
}
