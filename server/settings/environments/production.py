"""Settings for production deployments."""

from decouple import Csv

from server.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY')

DEBUG = False

ALLOWED_HOSTS = config('DOMAIN_NAME', cast=Csv(), default='')

SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_CONTENT_TYPE_NOSNIFF = True
