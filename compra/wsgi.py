"""
WSGI config for the compra project.

It exposes the WSGI callable as a module-level variable named ``application``.
"""

import os

from django.core.wsgi import get_wsgi_application

# Default to production; settings are dynamically selected by `compra.settings`
os.environ.setdefault('DJANGO_ENV', os.environ.get('DJANGO_ENV', 'production'))
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'compra.settings')

application = get_wsgi_application()
