"""
WSGI config for the socialhub project.

Exposes the module-level ``application`` used by gunicorn/uwsgi.
"""
import os
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'socialhub.settings')
application = get_wsgi_application()
