"""WSGI entry point for the SIAKAD project."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "siakad.settings")

application = get_wsgi_application()
