from django.apps import AppConfig


class NestedFormsConfig(AppConfig):
    name = "nestedforms"
    verbose_name = "Nested forms"
