"""WSGI entry point.

The datastore connection and structlog configuration are initialised
once here, when Django loads ``config.settings`` at process start.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
