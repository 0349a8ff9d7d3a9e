"""
WSGI config for the billing back-office.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'billing_core.settings')

application = get_wsgi_application()
