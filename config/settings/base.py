"""
Django base settings for the project management backend.
Shared settings between development, production and test.

Overdue pipeline, storage and django-q2 settings are read from the
environment via python-decouple.
"""

from pathlib import Path
from decouple import config, Csv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-in-production')

# Application definition
DJANGO_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
]

THIRD_PARTY_APPS = [
    'django_filters',
    'django_q',
]

LOCAL_APPS = [
    'apps.accounts',
    'apps.tracks',
    'apps.tasks',
    'apps.activity_log',
    'apps.notifications',
    'apps.daily_updates',
]

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
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
    },
]

WSGI_APPLICATION = 'config.wsgi.application'


# =============================================================================
# AUTHENTICATION - Custom User Model
# =============================================================================
AUTH_USER_MODEL = 'accounts.User'

AUTHENTICATION_BACKENDS = [
    'django.contrib.auth.backends.ModelBackend',
]

# Login is handled by the front end; the admin login page is the fallback
LOGIN_URL = 'admin:login'


# =============================================================================
# PASSWORD VALIDATION
# =============================================================================
AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {
            'min_length': 12,
        }
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]

# Password hashing - use Argon2 as primary
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.Argon2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher',
    'django.contrib.auth.hashers.BCryptSHA256PasswordHasher',
]


# =============================================================================
# INTERNATIONALIZATION & TIMEZONE
# =============================================================================
LANGUAGE_CODE = 'ar'

LANGUAGES = [
    ('ar', 'العربية'),
    ('en', 'English'),
]

# Stored and scheduled in UTC; the daily reminder cron is expressed in UTC
TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


# =============================================================================
# STATIC & MEDIA FILES
# =============================================================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

MEDIA_URL = 'media/'
MEDIA_ROOT = BASE_DIR / 'media'


# =============================================================================
# FILE STORAGE (Daily update attachments)
# =============================================================================
# LOCAL or S3 (S3 currently falls back to local storage)
STORAGE_PROVIDER = config('STORAGE_PROVIDER', default='LOCAL')
UPLOAD_DIR = config('UPLOAD_DIR', default=str(BASE_DIR / 'uploads' / 'daily-updates'))

S3_ENDPOINT = config('S3_ENDPOINT', default='')
S3_BUCKET = config('S3_BUCKET', default='')
S3_ACCESS_KEY = config('S3_ACCESS_KEY', default='')
S3_SECRET_KEY = config('S3_SECRET_KEY', default='')
S3_REGION = config('S3_REGION', default='auto')

# Maximum upload size per file
MAX_UPLOAD_MB = config('MAX_UPLOAD_MB', default=25, cast=int)
MAX_UPLOAD_SIZE = MAX_UPLOAD_MB * 1024 * 1024
MAX_FILES_PER_UPDATE = config('MAX_FILES_PER_UPDATE', default=10, cast=int)
DATA_UPLOAD_MAX_MEMORY_SIZE = MAX_UPLOAD_SIZE


# =============================================================================
# SESSION SETTINGS
# =============================================================================
SESSION_ENGINE = 'django.contrib.sessions.backends.db'
SESSION_COOKIE_AGE = config('SESSION_ABSOLUTE_TIMEOUT_HOURS', default=8, cast=int) * 3600
SESSION_SAVE_EVERY_REQUEST = True


# =============================================================================
# OVERDUE TASK PIPELINE
# =============================================================================
# Newly overdue scan: every N minutes, at most BATCH_SIZE tasks per run
OVERDUE_SCAN_INTERVAL_MINUTES = config('OVERDUE_SCAN_INTERVAL_MINUTES', default=15, cast=int)
OVERDUE_SCAN_BATCH_SIZE = config('OVERDUE_SCAN_BATCH_SIZE', default=100, cast=int)

# Daily reminder: 6:00 UTC = 9:00 Riyadh
OVERDUE_REMINDER_CRON = config('OVERDUE_REMINDER_CRON', default='0 6 * * *')
OVERDUE_REMINDER_BATCH_SIZE = config('OVERDUE_REMINDER_BATCH_SIZE', default=200, cast=int)

# False: notify then stamp (a failed send is retried next run, may duplicate)
# True: stamp then notify (a failed send is never retried)
OVERDUE_STAMP_BEFORE_NOTIFY = config('OVERDUE_STAMP_BEFORE_NOTIFY', default=False, cast=bool)


# =============================================================================
# DJANGO-Q2 SETTINGS (Background Tasks)
# =============================================================================
Q_CLUSTER = {
    'name': 'masar_pm',
    'workers': config('Q_WORKERS', default=2, cast=int),
    'recycle': 500,
    'timeout': 300,
    'retry': 600,
    'compress': True,
    'save_limit': 250,
    'queue_limit': 500,
    'cpu_affinity': 1,
    'label': 'Django Q2',
    'orm': 'default',
}


# =============================================================================
# CORS / HOSTS
# =============================================================================
CSRF_TRUSTED_ORIGINS = config('CSRF_TRUSTED_ORIGINS', default='', cast=Csv())


# =============================================================================
# DEFAULT PRIMARY KEY FIELD TYPE
# =============================================================================
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
