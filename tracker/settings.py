# tracker/settings.py
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Everything environment-specific comes from environment variables
SECRET_KEY    = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG         = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Shared secret expected in the X-Webhook-Key header of the payment webhook
WEBHOOK_API_KEY = os.getenv("WEBHOOK_API_KEY")

# Optional relay of order events to RabbitMQ (skipped when RABBIT_HOST is unset)
RABBIT_HOST     = os.getenv("RABBIT_HOST")
RABBIT_PORT     = int(os.getenv("RABBIT_PORT", "5672"))
RABBIT_VHOST    = os.getenv("RABBIT_VHOST", "/")
RABBIT_USER     = os.getenv("RABBIT_USER", "guest")
RABBIT_PASS     = os.getenv("RABBIT_PASS", "guest")
RABBIT_EXCHANGE = os.getenv("RABBIT_EXCHANGE", "order_events")

INSTALLED_APPS = [
    "daphne",
    "django.contrib.staticfiles",
    "channels",
    "orders",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "tracker.urls"
WSGI_APPLICATION = "tracker.wsgi.application"
ASGI_APPLICATION = "tracker.asgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"context_processors": ["django.template.context_processors.request"]},
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("ORDERS_DB_PATH", str(BASE_DIR / "app.db")),
        "OPTIONS": {
            # busy timeout: a locked database fails fast instead of hanging the request
            "timeout": float(os.getenv("ORDERS_DB_TIMEOUT", "5")),
            # take the write lock at BEGIN so racing transitions queue up instead of
            # failing with "database is locked" when both try to upgrade a read lock
            "transaction_mode": "IMMEDIATE",
        },
        # file-backed so tests can share the database across threads
        "TEST": {"NAME": os.getenv("ORDERS_TEST_DB_PATH", str(BASE_DIR / "test_app.db"))},
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Subscribers live in this process; use channels_redis for multi-process deployments
CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"},
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True

STATIC_URL = "static/"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "default"},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "orders": {
            "handlers": ["console"],
            "level": os.getenv("LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
