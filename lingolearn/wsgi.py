"""WSGI config for the lingolearn project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lingolearn.settings')

application = get_wsgi_application()
