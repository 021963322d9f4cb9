"""
Django test settings.

In-memory SQLite, fast password hashing, a throwaway upload directory and
synchronous django-q2 execution.
"""

import tempfile

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

UPLOAD_DIR = tempfile.mkdtemp(prefix='daily-updates-')
STORAGE_PROVIDER = 'LOCAL'
MAX_UPLOAD_MB = 1
MAX_UPLOAD_SIZE = MAX_UPLOAD_MB * 1024 * 1024

Q_CLUSTER = dict(Q_CLUSTER, sync=True)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['null'],
            'level': 'DEBUG',
            'propagate': True,
        },
    },
}
