"""ASGI config for the Fort Smythe booking site.

Exposes the ASGI callable for async-capable servers (uvicorn, daphne). The
booking views are synchronous; Django runs them in a thread pool.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
