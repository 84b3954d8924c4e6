"""Production settings.

Sensitive values are provided via environment variables; the gateway
credentials are mandatory here.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

ALLOWED_HOSTS = get_env('DJANGO_ALLOWED_HOSTS', '').split(',')

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True

PAYWAY_MERCHANT_ID = get_env('PAYWAY_MERCHANT_ID', required=True)
PAYWAY_PUBLIC_KEY = get_env('PAYWAY_PUBLIC_KEY', required=True)

EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = get_env('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(get_env('EMAIL_PORT', 25))
EMAIL_USE_TLS = get_bool_env('EMAIL_USE_TLS', False)
EMAIL_HOST_USER = get_env('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = get_env('EMAIL_HOST_PASSWORD', '')
