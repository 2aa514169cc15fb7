from django.core.exceptions import ImproperlyConfigured

from .base import *

DEBUG = False

ALLOWED_HOSTS = [h for h in ALLOWED_HOSTS if h]

if SECRET_KEY == "change-me":
    raise ImproperlyConfigured("SECRET_KEY must be set in production")
if not APIKEYS_ENC_KEY:
    raise ImproperlyConfigured("APIKEYS_ENC_KEY must be set in production")

# Cookies sécurisés
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_SSL_REDIRECT = True

# HSTS
SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

SECURE_REFERRER_POLICY = "same-origin"

# Logging JSON forcé
LOGGING["handlers"]["console"]["formatter"] = "json"
