from typing import Mapping

from django import forms
from django.core.exceptions import NON_FIELD_ERRORS
from django.core.exceptions import ValidationError

from nestedforms.util import bind_form
from nestedforms.widgets import EmbeddedData
from nestedforms.widgets import EmbeddedFormWidget


class EmbeddedFormField(forms.Field):
    """
    Represents an embedded form inside the fields of its parent form.

    Cleaning binds the embedded form to its slice of the submitted data and
    validates it. The embedded form's cleaned data becomes the cleaned value of
    this field, so the parent's cleaned data is a tree mirroring the forms.
    """

    widget = EmbeddedFormWidget
    default_error_messages = {
        "invalid": "Correct the errors in this section.",
    }

    def __init__(self, form, **kwargs):
        kwargs.setdefault("required", False)
        super().__init__(**kwargs)
        self.form = form
        self.widget.form = form

    def clean(self, value):
        values, files = value if value is not None else EmbeddedData(None, None)
        if values is None:
            values = {}
        elif not isinstance(values, Mapping):
            raise ValidationError(self.error_messages["invalid"], code="invalid")
        if not isinstance(files, Mapping):
            files = {}

        # Bind without reconfiguring: the parent form already ran
        # configure_with_values over the whole tree when it was bound.
        bind_form(self.form, values, files)
        if not self.form.is_valid():
            raise ValidationError(
                self.get_embedded_errors() or self.error_messages["invalid"],
                code="invalid",
            )

        self.run_validators(self.form.cleaned_data)
        return self.form.cleaned_data

    def get_embedded_errors(self):
        """Returns the embedded form's errors, each prefixed with the name of
        the field it belongs to."""
        messages = []
        for name, errors in self.form.errors.items():
            for message in errors:
                if name == NON_FIELD_ERRORS:
                    messages.append(message)
                else:
                    messages.append(f"{name}: {message}")
        return messages

    def has_changed(self, initial, data):
        if data is None:
            return False
        return bool(data.values) or bool(data.files)
