"""WSGI config for the Fort Smythe booking site.

Exposes the WSGI callable used by runserver and gunicorn. Production
deployments set DJANGO_SETTINGS_MODULE=config.settings.prod.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()
