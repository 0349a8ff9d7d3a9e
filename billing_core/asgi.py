"""
ASGI config for the billing back-office.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'billing_core.settings')

application = get_asgi_application()
