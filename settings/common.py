"""Django settings for the nestedforms project."""
import os
import sys
from os.path import abspath
from os.path import dirname
from os.path import join

import dj_database_url

from nestedforms.util import is_truthy

# Name of the deployment environment (dev/test)
ENV = os.environ.get("ENV", "dev")

# -- Paths

# Name of the project
PROJECT_NAME = "nestedforms"

# Absolute path of project Django directory
BASE_DIR = dirname(dirname(abspath(__file__)))

# -- Application

DJANGO_CORE_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
]

NESTEDFORMS_APPS = [
    "nestedforms.apps.NestedFormsConfig",
]

APPS_THAT_MUST_COME_LAST = ["django.forms"]

INSTALLED_APPS = [
    *DJANGO_CORE_APPS,
    *NESTEDFORMS_APPS,
    *APPS_THAT_MUST_COME_LAST,
]

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

# -- Security
SECRET_KEY = os.environ.get("SECRET_KEY", "nestedforms-insecure-development-key")

# Activates debugging
DEBUG = is_truthy(os.environ.get("DEBUG", False))

# -- Database

DB_URL = os.environ.get("DATABASE_URL", f"sqlite:///{join(BASE_DIR, 'db.sqlite3')}")

DATABASES = {
    "default": dj_database_url.parse(DB_URL),
}

SQLITE = DB_URL.startswith("sqlite")

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"

# -- Internationalization

# Enable Django translation system
USE_I18N = False

# Language code - ignored unless USE_I18N is True
LANGUAGE_CODE = "en-gb"

# Make Django use timezone-aware datetimes internally
USE_TZ = True

# Time zone
TIME_ZONE = "Europe/London"

# -- Logging

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {"format": "%(asctime)s %(name)s %(levelname)s %(message)s"},
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
    },
    "loggers": {
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "nestedforms": {
            "handlers": ["console"],
            "level": os.environ.get("LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# -- Sentry error tracking

SENTRY_ENABLED = is_truthy(os.environ.get("SENTRY_DSN", "False"))

if SENTRY_ENABLED:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration

    sentry_kwargs = {
        "dsn": os.environ["SENTRY_DSN"],
        "environment": ENV,
        "integrations": [DjangoIntegration()],
    }
    if "shell" in sys.argv:
        sentry_kwargs["before_send"] = lambda event, hint: None

    if os.getenv("GIT_COMMIT"):
        sentry_kwargs["release"] = os.getenv("GIT_COMMIT")

    sentry_sdk.init(**sentry_kwargs)
