#!/usr/bin/env python
"""Django's command-line utility for administrative tasks."""
import os
import sys

import dotenv


def set_django_settings_module():
    """Use the test settings when running tests, the dev settings when ENV is
    "dev" and the common settings otherwise."""

    in_test = not {"pytest", "test"}.isdisjoint(sys.argv[1:])
    in_dev = not in_test and str(os.environ.get("ENV")).lower() == "dev"
    os.environ.setdefault(
        "DJANGO_SETTINGS_MODULE",
        "settings.test" if in_test else "settings.dev" if in_dev else "settings",
    )


def main():
    dotenv.load_dotenv()
    set_django_settings_module()

    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
