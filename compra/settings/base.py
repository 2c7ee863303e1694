"""
Django settings for the compra project.
Shared by the local, production and test modules.
"""

from pathlib import Path
from decouple import config, Csv
import os

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-compra-dev-key')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

# Public origin used in embed script and script-tag URLs
PUBLIC_BASE_URL = config('PUBLIC_BASE_URL', default='')


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # --- Project apps ---
    'core.apps.CoreConfig',
    'surveys.apps.SurveysConfig',
]

MIDDLEWARE = [
    'core.middleware.ApiCorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'compra.urls'

# API routes have no trailing slash
APPEND_SLASH = False

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'compra.wsgi.application'


# Database
DATABASES = {
    'default': {
        'ENGINE': config('DB_ENGINE', default='django.db.backends.postgresql'),
        'NAME': config('DB_NAME', default='compra_db'),
        'USER': config('DB_USER', default='postgres'),
        'PASSWORD': config('DB_PASSWORD', default=''),
        'HOST': config('DB_HOST', default='127.0.0.1'),
        'PORT': config('DB_PORT', default='5432'),
        'ATOMIC_REQUESTS': False,  # Disable to allow async views
    }
}


# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True


# Static files (admin only)
STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ============================================================
# SURVEY PIPELINE
# ============================================================
SHOPIFY_API_VERSION = config('SHOPIFY_API_VERSION', default='2024-01')
SURVEY_ANALYTICS_CACHE_TIMEOUT = config('SURVEY_ANALYTICS_CACHE_TIMEOUT', default=300, cast=int)
SURVEY_RESPONSE_RATE_LIMIT = config('SURVEY_RESPONSE_RATE_LIMIT', default='60/h')
SURVEY_CORS_ALLOW_ORIGIN = config('SURVEY_CORS_ALLOW_ORIGIN', default='*')
SURVEY_CORS_PATH_PREFIXES = ('/api/', '/surveys/')

# django-ratelimit
RATELIMIT_ENABLE = config('RATELIMIT_ENABLE', default=True, cast=bool)
RATELIMIT_USE_CACHE = 'default'


# ============================================================
# LOGGING CONFIGURATION
# ============================================================
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': { 'format': '[{levelname}] {asctime} {name} {module}.{funcName}:{lineno} - {message}', 'style': '{', 'datefmt': '%Y-%m-%d %H:%M:%S', },
        'simple': { 'format': '[{levelname}] {asctime} - {message}', 'style': '{', 'datefmt': '%Y-%m-%d %H:%M:%S', },
        'detailed': { 'format': '{asctime} | {name:30} | {levelname:8} | {funcName:20} | {message}', 'style': '{', 'datefmt': '%Y-%m-%d %H:%M:%S', },
    },
    'filters': {
        'require_debug_false': { '()': 'django.utils.log.RequireDebugFalse', },
        'require_debug_true': { '()': 'django.utils.log.RequireDebugTrue', },
    },
    'handlers': {
        'console': { 'level': 'DEBUG' if DEBUG else 'INFO', 'class': 'logging.StreamHandler', 'formatter': 'detailed', },
        'file_app': { 'level': 'INFO', 'class': 'logging.handlers.RotatingFileHandler', 'filename': BASE_DIR / 'logs' / 'app.log', 'maxBytes': 1024 * 1024 * 10, 'backupCount': 5, 'formatter': 'detailed', },
        'file_error': { 'level': 'ERROR', 'class': 'logging.handlers.RotatingFileHandler', 'filename': BASE_DIR / 'logs' / 'error.log', 'maxBytes': 1024 * 1024 * 10, 'backupCount': 5, 'formatter': 'verbose', },
        'file_security': { 'level': 'WARNING', 'class': 'logging.handlers.RotatingFileHandler', 'filename': BASE_DIR / 'logs' / 'security.log', 'maxBytes': 1024 * 1024 * 5, 'backupCount': 10, 'formatter': 'verbose', },
        'file_surveys': { 'level': 'INFO', 'class': 'logging.handlers.RotatingFileHandler', 'filename': BASE_DIR / 'logs' / 'surveys.log', 'maxBytes': 1024 * 1024 * 10, 'backupCount': 5, 'formatter': 'detailed', },
        'file_performance': { 'level': 'INFO', 'class': 'logging.handlers.RotatingFileHandler', 'filename': BASE_DIR / 'logs' / 'performance.log', 'maxBytes': 1024 * 1024 * 10, 'backupCount': 3, 'formatter': 'verbose', },
    },
    'loggers': {
        'django': { 'handlers': ['console', 'file_app'], 'level': 'INFO', 'propagate': False, },
        'django.request': { 'handlers': ['console', 'file_app', 'file_error'], 'level': 'INFO', 'propagate': False, },
        'django.security': { 'handlers': ['console', 'file_security'], 'level': 'WARNING', 'propagate': False, },
        'core': { 'handlers': ['console', 'file_app', 'file_error'], 'level': 'DEBUG' if DEBUG else 'INFO', 'propagate': False, },
        'core.performance': { 'handlers': ['console', 'file_performance'], 'level': 'INFO', 'propagate': False, },
        'core.security': { 'handlers': ['console', 'file_security'], 'level': 'WARNING', 'propagate': False, },
        'surveys': { 'handlers': ['console', 'file_surveys', 'file_error'], 'level': 'DEBUG' if DEBUG else 'INFO', 'propagate': False, },
    },
    'root': { 'handlers': ['console', 'file_app'], 'level': 'INFO', },
}

# Ensure logs dir exists
logs_dir = BASE_DIR / 'logs'
if not os.path.exists(logs_dir):
    os.makedirs(logs_dir)

# ============================================================
# CELERY CONFIGURATION
# ============================================================
CELERY_BROKER_URL = config('CELERY_BROKER_URL', default='redis://localhost:6379/0')
CELERY_RESULT_BACKEND = config('CELERY_RESULT_BACKEND', default='redis://localhost:6379/0')
CELERY_WORKER_CONCURRENCY = config('CELERY_WORKER_CONCURRENCY', default=4, cast=int)
CELERY_WORKER_PREFETCH_MULTIPLIER = 4
CELERY_WORKER_MAX_TASKS_PER_CHILD = 1000
CELERY_TASK_ACKS_LATE = True
CELERY_TASK_REJECT_ON_WORKER_LOST = True
CELERY_TASK_TIME_LIMIT = 30 * 60
CELERY_TASK_SOFT_TIME_LIMIT = 25 * 60
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TIMEZONE = TIME_ZONE
CELERY_RESULT_EXPIRES = 3600
CELERY_BROKER_CONNECTION_RETRY_ON_STARTUP = True
CELERY_BROKER_POOL_LIMIT = 10
