import re
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

from django.core.exceptions import ImproperlyConfigured
from django.db.models import Field
from django.db.models import Model
from django.db.models import ManyToOneRel
from django.db.models import OneToOneRel
from django.db.models.fields.related import ForeignObjectRel

NESTED_KEY_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def is_truthy(value: str) -> bool:
    """
    Check whether a string represents a True boolean value.

    :param value str: The value to check
    :rtype: bool
    """
    return str(value).lower() not in ("", "n", "no", "off", "f", "false", "0")


def get_accessor(field: Union[Field, ForeignObjectRel]) -> str:
    """Return the attribute name used to access the field on the model."""
    if isinstance(field, ForeignObjectRel):
        return field.get_accessor_name()
    else:
        return field.name


def get_identifier(obj: Model) -> Tuple:
    """
    Return the primary key of a model instance as a tuple of column values.

    Models with a composite primary key return one item per column, all others
    a single item.
    """
    pk = obj.pk
    if isinstance(pk, tuple):
        return pk
    return (pk,)


def get_relation(model: Union[Model, Type[Model]], alias: str) -> ManyToOneRel:
    """
    Return the reverse one-to-many relation of `model` that is accessed through
    the attribute `alias`.

    Only the reverse side of a ForeignKey (a "collection") is looked up here:
    one-to-one and many-to-many relations do not describe a collection of
    child objects.
    """
    for relation in model._meta.related_objects:
        if get_accessor(relation) != alias:
            continue
        # OneToOneRel is a subclass of ManyToOneRel
        if isinstance(relation, OneToOneRel) or not isinstance(relation, ManyToOneRel):
            raise ImproperlyConfigured(
                f'The relation "{alias}" of {model._meta.label} is not a '
                f"one-to-many relation.",
            )
        return relation

    raise ImproperlyConfigured(
        f'{model._meta.label} has no relation named "{alias}".',
    )


def bind_form(form, data: Optional[Mapping], files: Optional[Mapping] = None):
    """
    Put an already constructed Django form into the bound state, as if `data`
    and `files` had been passed to its constructor.

    Any previously computed errors and bound fields are discarded, so the form
    validates again on next access.
    """
    form.is_bound = True
    form.data = {} if data is None else data
    form.files = {} if files is None else files
    form._errors = None
    form._bound_fields_cache = {}
    if hasattr(form, "cleaned_data"):
        del form.cleaned_data


def nest_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert submitted data with bracketed names into a tree of dictionaries.

    ``{"lines[persistent_5][name]": "x"}`` becomes
    ``{"lines": {"persistent_5": {"name": "x"}}}``. A name ending in ``[]``
    collects every value submitted for it when `data` is a ``QueryDict``.
    """
    nested = {}
    for key in data:
        head, bracket, rest = key.partition("[")
        path = [head]
        if bracket:
            path.extend(NESTED_KEY_PATTERN.findall(bracket + rest))

        if len(path) > 1 and path[-1] == "":
            path = path[:-1]
            if hasattr(data, "getlist"):
                value = data.getlist(key)
            else:
                value = [data[key]]
        else:
            value = data[key]

        node = nested
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[path[-1]] = value

    return nested
