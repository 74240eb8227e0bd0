from settings.common import *

# Enable debugging
DEBUG = True

# Allow all hostnames to access the server
ALLOWED_HOSTS = ["*"]

LOGGING["loggers"]["nestedforms"]["level"] = os.environ.get("LOG_LEVEL", "DEBUG")
