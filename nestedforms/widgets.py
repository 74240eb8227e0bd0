from typing import Any
from typing import Mapping
from typing import NamedTuple
from typing import Optional

from django.forms import widgets
from django.utils.safestring import mark_safe


class EmbeddedData(NamedTuple):
    """The slice of submitted values and files that belongs to one embedded
    form."""

    values: Optional[Any]
    files: Optional[Any]


class EmbeddedFormWidget(widgets.Widget):
    """Custom form widget for use with EmbeddedFormField."""

    def __init__(self, attrs=None, form=None):
        super().__init__(attrs)
        self.form = form

    def value_from_datadict(self, data: Mapping, files: Optional[Mapping], name):
        return EmbeddedData(data.get(name), files.get(name) if files else None)

    def value_omitted_from_data(self, data, files, name):
        return name not in data and name not in (files or {})

    def render(self, name, value, attrs=None, renderer=None):
        return mark_safe(str(self.form))
