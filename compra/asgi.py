"""
ASGI config for the compra project.

The API views are async; serve them with an ASGI server (uvicorn, daphne).
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_ENV', os.environ.get('DJANGO_ENV', 'production'))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'compra.settings')

application = get_asgi_application()
