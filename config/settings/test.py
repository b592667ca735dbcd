"""Test settings.

Runs Celery tasks inline, keeps mail in memory and uses a fast password
hasher so the suite does not need a broker or SMTP server.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = False
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING['handlers']['console']['level'] = 'WARNING'  # noqa: F405
