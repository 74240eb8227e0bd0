import importlib
import os
import sys

import pytest

import manage


@pytest.mark.parametrize(
    ("argv", "env", "expected"),
    [
        (["manage.py", "test"], "dev", "settings.test"),
        (["manage.py", "pytest"], None, "settings.test"),
        (["manage.py", "shell"], "dev", "settings.dev"),
        (["manage.py", "shell"], "DEV", "settings.dev"),
        (["manage.py", "shell"], "production", "settings"),
        (["manage.py", "shell"], None, "settings"),
    ],
)
def test_set_django_settings_module(monkeypatch, argv, env, expected):
    monkeypatch.delenv("DJANGO_SETTINGS_MODULE")
    monkeypatch.setattr(sys, "argv", argv)
    if env is None:
        monkeypatch.delenv("ENV", raising=False)
    else:
        monkeypatch.setenv("ENV", env)

    manage.set_django_settings_module()

    assert os.environ["DJANGO_SETTINGS_MODULE"] == expected


def test_settings_module_already_set_is_kept(monkeypatch):
    monkeypatch.setenv("DJANGO_SETTINGS_MODULE", "settings.custom")
    monkeypatch.setattr(sys, "argv", ["manage.py", "test"])

    manage.set_django_settings_module()

    assert os.environ["DJANGO_SETTINGS_MODULE"] == "settings.custom"


def test_dev_settings():
    dev = importlib.import_module("settings.dev")

    assert dev.DEBUG is True
    assert dev.ALLOWED_HOSTS == ["*"]
    assert "nestedforms.apps.NestedFormsConfig" in dev.INSTALLED_APPS
