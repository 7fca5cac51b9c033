"""WSGI entry point for the eventara project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "eventara.settings")

application = get_wsgi_application()
