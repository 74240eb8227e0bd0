from settings.common import *


ENV = "test"

# Models used only by the test suite; they have no migrations.
INSTALLED_APPS.append("nestedforms.tests")

DATABASES = {
    "default": dj_database_url.parse(
        os.environ.get("TEST_DATABASE_URL", "sqlite://:memory:"),
    ),
}

LOGGING["loggers"]["nestedforms"]["level"] = os.environ.get("LOG_LEVEL", "DEBUG")
