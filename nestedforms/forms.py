import logging
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional
from typing import Sequence

from django import forms
from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS
from django.db import models
from django.db import router

from nestedforms.exceptions import UnknownEmbeddedFormError
from nestedforms.fields import EmbeddedFormField
from nestedforms.objects import NullObject
from nestedforms.util import bind_form
from nestedforms.util import get_relation
from nestedforms.validators import ValidatorSchema

logger = logging.getLogger(__name__)


def get_form_defaults(form) -> Dict[str, Any]:
    if isinstance(form, EmbeddingFormMixin):
        return form.get_defaults()
    return dict(form.initial)


class EmbeddingFormMixin:
    """
    Adds embedded forms and structure changes driven by submitted data to a
    Django form.

    The form is always constructed unbound. Once the fields are in place the
    ``setup`` and ``configure`` hooks run, which is where subclasses embed their
    child forms. Passing `data` or `files` then binds the form through
    ``bind``, giving every embedded form the chance to rebuild itself from the
    submitted values before any validation happens.
    """

    validator_schema_class = ValidatorSchema

    def __init__(self, data=None, files=None, *args, **kwargs):
        self.embedded_forms = {}
        super().__init__(None, None, *args, **kwargs)
        self.validator_schema = self.validator_schema_class.for_fields(self.fields)

        self.setup()
        self.configure()

        if data is not None or files is not None:
            self.bind(data, files)

    def setup(self):
        """Called once the fields exist, before ``configure``."""

    def configure(self):
        """Hook for subclasses to change the form's structure."""

    def has_embedded_form(self, name: str) -> bool:
        return name in self.embedded_forms

    def embed_form(self, name: str, form, **field_kwargs):
        """Embed `form` under `name`, replacing any field or form already
        there."""
        self.embedded_forms[name] = form
        self.fields[name] = EmbeddedFormField(form, **field_kwargs)
        self.validator_schema.setdefault(name, [])
        self.reset_form_fields()

    def unset(self, name: str):
        self.fields.pop(name, None)
        self.validator_schema.pop(name, None)
        self.initial.pop(name, None)
        self.embedded_forms.pop(name, None)
        self.reset_form_fields()

    def unset_all_except(self, keep_names: Sequence[str]):
        """
        Removes every field not named in `keep_names`.

        Unlike only listing fields in ``Meta.fields``, this also works for
        fields added in ``__init__`` and for embedded forms.
        """
        for name in list(self.fields):
            if name not in keep_names:
                self.unset(name)

    def replace_validator_schema(self, schema):
        """
        Swap the validator schema for `schema`, which may be a ValidatorSchema
        subclass or instance.

        Every validator registered on the current schema is carried over, and
        so are the pre- and post-validators when they are set.
        """
        if isinstance(schema, type):
            schema = schema()

        if not isinstance(schema, ValidatorSchema):
            raise TypeError(
                f"The validator schema must be a ValidatorSchema, got "
                f"{type(schema).__name__}.",
            )

        for name, validators in self.validator_schema.items():
            schema[name] = validators

        if self.validator_schema.pre_validator is not None:
            schema.pre_validator = self.validator_schema.pre_validator

        if self.validator_schema.post_validator is not None:
            schema.post_validator = self.validator_schema.post_validator

        self.validator_schema = schema

    def get_defaults(self) -> Dict[str, Any]:
        defaults = dict(self.initial)
        for name, form in self.embedded_forms.items():
            defaults[name] = get_form_defaults(form)
        return defaults

    def _clean_up_defaults(self, fields: Mapping, defaults: Mapping):
        cleaned = {}
        for name, value in defaults.items():
            if name not in fields:
                continue

            field = fields[name]
            if isinstance(value, Mapping) and isinstance(field, EmbeddedFormField):
                value = self._clean_up_defaults(field.form.fields, value)
            cleaned[name] = value

        return cleaned

    def get_cleaned_defaults(self) -> Dict[str, Any]:
        """
        Returns the default values restricted to the fields the form has.

        Model forms take initial values for every field of their model; once
        fields have been removed those values no longer belong to the form.
        """
        return self._clean_up_defaults(self.fields, self.get_defaults())

    def bind_with_defaults(self):
        """Bind the form to its own default values, so that an object can be
        validated without a user submitting the form."""
        self.bind(self.get_cleaned_defaults())

    def remove_embedded_forms(self, names: Optional[Sequence[str]] = None):
        """
        Removes the named embedded forms, or all of them when no names are
        given, along with their fields and validators.

        :raises UnknownEmbeddedFormError: if a name is not an embedded form
        """
        if not names:
            names = list(self.embedded_forms)

        for name in names:
            if not self.has_embedded_form(name):
                raise UnknownEmbeddedFormError(
                    f'The embedded form "{name}" does not exist.',
                )

        for name in names:
            del self.embedded_forms[name]
            self.fields.pop(name, None)
            self.validator_schema.pop(name, None)

        self.reset_form_fields()

    def reset_form_fields(self):
        self._bound_fields_cache = {}

    def bind(self, data=None, files=None):
        """Reconfigure the form for the submitted values, then bind it."""
        data = {} if data is None else data
        files = {} if files is None else files
        self.configure_with_values(data, files)
        bind_form(self, data, files)

    def configure_with_values(self, values, files=None) -> bool:
        """
        Lets every embedded form adapt its structure to its part of the
        submitted data.

        Embedded forms that report a change are pointed at by their existing
        field again and the bound fields are reset, so the parent reflects
        their new shape. Returns whether any of them changed.
        """
        values = values or {}
        files = files or {}
        changed = False

        for name, form in list(self.embedded_forms.items()):
            form_values = values.get(name, {})
            form_files = files.get(name, {})

            if not isinstance(form_values, Mapping) or not isinstance(
                form_files,
                Mapping,
            ):
                continue

            if not form_values and not form_files:
                continue

            if not hasattr(form, "configure_with_values"):
                continue

            if form.configure_with_values(form_values, form_files):
                logger.debug(f"Embedded form {name!r} changed its structure")
                # the field keeps the options it was embedded with
                field = self.fields[name]
                field.form = field.widget.form = self.embedded_forms[name]
                changed = True

        if changed:
            self.reset_form_fields()
        return changed

    def _clean_fields(self):
        try:
            self.validator_schema.run_pre_validator(self.data)
        except ValidationError as e:
            self.add_error(None, e)

        super()._clean_fields()

        for name in list(self.fields):
            for validator in self.validator_schema.get_validators(name):
                if name not in self.cleaned_data:
                    break
                try:
                    validator(self.cleaned_data[name])
                except ValidationError as e:
                    self.add_error(name, e)

    def _clean_form(self):
        super()._clean_form()

        # schema-level validation only runs on otherwise valid data
        if self._errors:
            return

        try:
            self.cleaned_data = self.validator_schema.run_post_validator(
                self.cleaned_data,
            )
        except ValidationError as e:
            self.add_error(None, e)


class Form(EmbeddingFormMixin, forms.Form):
    pass


class SaveCascadeMixin(EmbeddingFormMixin):
    """
    The update and save lifecycle shared by every form that is backed by an
    object, real or not.

    Saving updates the form's object from the cleaned data, saves it, and then
    walks the embedded forms in the order they were embedded, saving each
    one's object followed by its own embedded forms.
    """

    def get_object(self):
        return self.instance

    def _set_object(self, obj):
        self.instance = obj

    def get_connection(self) -> str:
        raise NotImplementedError

    def process_values(self, values):
        return values

    def do_update_object(self, values):
        raise NotImplementedError

    def update_object(self, values=None):
        if values is None:
            values = self.cleaned_data

        values = self.process_values(values)
        self.do_update_object(values)
        self.update_object_embedded_forms(values)

        return self.get_object()

    def update_object_embedded_forms(self, values, forms=None):
        if forms is None:
            forms = self.embedded_forms

        for name, form in forms.items():
            form_values = values.get(name)
            if not isinstance(form_values, dict):
                continue

            if isinstance(form, SaveCascadeMixin):
                form.update_object(form_values)
            else:
                self.update_object_embedded_forms(
                    form_values,
                    getattr(form, "embedded_forms", {}),
                )

    def save(self, commit=True, using=None):
        if self.errors:
            raise ValueError(
                f"The {type(self).__name__} could not be saved because the "
                f"data didn't validate.",
            )

        if commit:
            self.do_save(using)
        else:
            self.update_object()

        return self.get_object()

    def save_object(self, using):
        self.get_object().save(using=using)

    def do_save(self, using=None):
        if using is None:
            using = self.get_connection()

        self.update_object()
        self.save_object(using)
        self.save_embedded_forms(using)

    def save_embedded_forms(self, using=None, forms=None):
        if using is None:
            using = self.get_connection()

        if forms is None:
            forms = self.embedded_forms

        for name, form in forms.items():
            if isinstance(form, SaveCascadeMixin):
                logger.debug(f"Saving embedded form {name!r} on {using!r}")
                form.save_object(using)
                form.save_embedded_forms(using)
            else:
                self.save_embedded_forms(using, getattr(form, "embedded_forms", {}))


class ObjectForm(SaveCascadeMixin, forms.ModelForm):
    """A model form that can embed forms and collections of related
    objects."""

    def get_model_name(self) -> str:
        return self._meta.model._meta.label

    def get_connection(self) -> str:
        return router.db_for_write(self._meta.model, instance=self.instance)

    def is_new(self) -> bool:
        return self.instance._state.adding

    def get_related_model_name(self, alias: str) -> str:
        return get_relation(self._meta.model, alias).related_model._meta.label

    def do_update_object(self, values):
        instance = self.instance
        file_fields = []

        for field in instance._meta.fields:
            if (
                not field.editable
                or isinstance(field, models.AutoField)
                or field.name not in self.fields
                or field.name not in values
            ):
                continue

            # Defer saving file-type fields until after the other fields, so a
            # callable upload_to can use the values from other fields.
            if isinstance(field, models.FileField):
                file_fields.append(field)
            else:
                field.save_form_data(instance, values[field.name])

        for field in file_fields:
            field.save_form_data(instance, values[field.name])

    def save_object(self, using):
        super().save_object(using)
        self._save_m2m()

    def embed_collection(self, name: str, relation_alias: str, **options):
        """
        Embeds a CollectionForm for the objects related to this form's object
        through `relation_alias`.

        `options` are passed on to the collection form, e.g. ``min_num`` or
        ``child_form_class``; ``form_class`` picks a CollectionForm subclass.
        """
        from nestedforms.collection import CollectionForm

        form_class = options.pop("form_class", CollectionForm)
        form = form_class(
            parent_object=self.instance,
            relation_alias=relation_alias,
            **options,
        )
        self.embed_form(name, form)
        return form


class NoObjectForm(SaveCascadeMixin, forms.Form):
    """
    A form that has no object of its own but still saves the objects of the
    forms embedded in it.

    Useful as the top of a form hierarchy where the real object comes from one
    of several embedded forms, and as the base of forms such as collections
    which need their own steps in the save process.
    """

    def __init__(self, *args, **kwargs):
        self.instance = NullObject()
        super().__init__(*args, **kwargs)

    def get_model_name(self):
        return None

    def get_connection(self) -> str:
        return DEFAULT_DB_ALIAS

    def do_update_object(self, values):
        pass

    def do_save(self, using=None):
        if using is None:
            using = self.get_connection()

        self.update_object()
        self.save_embedded_forms(using)
