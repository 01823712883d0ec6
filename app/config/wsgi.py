"""
WSGI config for the Django application.

Serves the REST API only. The conversation change feed needs WebSockets,
so production deployments run config.asgi instead; this entry point exists
for WSGI-only hosts and management tooling.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
