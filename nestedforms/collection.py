import logging
from typing import List
from typing import Optional

from django.core.exceptions import ImproperlyConfigured
from django.core.exceptions import ValidationError
from django.db import router
from django.db.models import Model
from django.utils.module_loading import import_string

from nestedforms.exceptions import ChildObjectDoesNotExist
from nestedforms.exceptions import InvalidFormError
from nestedforms.forms import NoObjectForm
from nestedforms.util import get_accessor
from nestedforms.util import get_identifier
from nestedforms.util import get_relation

logger = logging.getLogger(__name__)


class CollectionForm(NoObjectForm):
    """
    Embeds one form per object on the "many" side of a one-to-many relation.

    Forms for objects that are already saved are embedded as
    ``persistent_<pk>``, forms for new objects as ``transient_<n>``. When the
    form is bound, the embedded forms are rebuilt from the names present in the
    submitted data, so rows can be added and removed on the client. Saved
    objects that are missing from the validated data are deleted when the form
    is saved.

    Only models with a single column primary key are supported.
    """

    PERSISTENT_PREFIX = "persistent_"
    TRANSIENT_PREFIX = "transient_"

    default_error_messages = {
        "min": "Please add at least %(min)s number of objects.",
        "max": "Please add not more than %(max)s number of objects.",
    }

    def __init__(
        self,
        data=None,
        files=None,
        *args,
        parent_object: Optional[Model] = None,
        relation_alias: Optional[str] = None,
        child_form_class=None,
        child_form_kwargs=None,
        min_num: int = 0,
        max_num: int = 0,
        min_message: Optional[str] = None,
        max_message: Optional[str] = None,
        **kwargs,
    ):
        if parent_object is None:
            raise ImproperlyConfigured("You must pass a parent object.")
        if not isinstance(parent_object, Model):
            raise ImproperlyConfigured(
                "The parent object must be a model instance.",
            )
        if relation_alias is None:
            raise ImproperlyConfigured(
                "You must pass the name of the relation as relation_alias.",
            )

        self.parent_object = parent_object
        self.relation_alias = relation_alias
        self.child_form_class = child_form_class
        self.child_form_kwargs = child_form_kwargs or {}
        self.min_num = min_num
        self.max_num = max_num
        self.min_message = min_message or self.default_error_messages["min"]
        self.max_message = max_message or self.default_error_messages["max"]
        self.scheduled_deletes = []
        self._relation = None

        super().__init__(data, files, *args, **kwargs)

    def get_relation(self):
        if self._relation is None:
            self._relation = get_relation(self.parent_object, self.relation_alias)
        return self._relation

    def get_child_form_class(self):
        """
        Returns the form class used for each child object.

        Defaults to ``<Model>Form`` in the ``forms`` module of the app that
        defines the related model.
        """
        form_class = self.child_form_class
        if form_class is None:
            related_model = self.get_relation().related_model
            form_class = (
                f"{related_model._meta.app_config.name}.forms."
                f"{related_model.__name__}Form"
            )

        if isinstance(form_class, str):
            try:
                form_class = import_string(form_class)
            except ImportError as e:
                raise ImproperlyConfigured(
                    f'The child form class "{form_class}" could not be imported.',
                ) from e

        return form_class

    def get_connection(self) -> str:
        return router.db_for_write(
            self.get_relation().related_model,
            instance=self.parent_object,
        )

    def get_related_objects(self) -> List[Model]:
        relation = self.get_relation()

        # reverse relations cannot be queried until the parent has been saved
        if self.parent_object._state.adding:
            return []
        return list(getattr(self.parent_object, get_accessor(relation)).all())

    def new_child_object(self) -> Model:
        relation = self.get_relation()
        return relation.related_model(**{relation.field.name: self.parent_object})

    def create_child_form(self, obj: Model):
        return self.get_child_form_class()(instance=obj, **self.child_form_kwargs)

    def get_persistent_name(self, obj: Model) -> str:
        return f"{self.PERSISTENT_PREFIX}{get_identifier(obj)[0]}"

    def setup(self):
        super().setup()

        if self.max_num > 0 and self.min_num > self.max_num:
            raise ImproperlyConfigured("min_num cannot be greater than max_num.")

        # embed forms for each child object that is already saved
        count = 0
        for obj in self.get_related_objects():
            if obj._state.adding:
                raise ImproperlyConfigured("Unsaved child objects are not supported.")
            if len(get_identifier(obj)) != 1:
                raise ImproperlyConfigured("Composite primary keys are not supported.")

            self.embed_form(self.get_persistent_name(obj), self.create_child_form(obj))
            count += 1

        # add new objects until the minimum number of children is reached
        for ordinal in range(max(self.min_num - count, 0)):
            self.embed_form(
                f"{self.TRANSIENT_PREFIX}{ordinal}",
                self.create_child_form(self.new_child_object()),
            )

        self.validator_schema.post_validator = self.validate_cardinality

    def validate_cardinality(self, values):
        count = sum(1 for value in values.values() if isinstance(value, dict))

        if count < self.min_num:
            raise ValidationError(
                self.min_message,
                code="min",
                params={"min": self.min_num},
            )

        if self.max_num > 0 and count > self.max_num:
            raise ValidationError(
                self.max_message,
                code="max",
                params={"max": self.max_num},
            )

        return values

    def get_persistent_child_by_pk(self, pk) -> Optional[Model]:
        """
        Returns the related object with primary key `pk`, or None.

        Keys are compared as strings since submitted keys always are. Override
        this to look the object up more efficiently.
        """
        for obj in self.get_related_objects():
            if str(get_identifier(obj)[0]) == str(pk):
                return obj
        return None

    def configure_with_values(self, values, files=None) -> bool:
        """
        Rebuilds the embedded forms from the names in the submitted `values`.

        Names starting with ``persistent_`` must refer to an object that is
        still related to the parent object; any other name gets a new object.
        """
        values = values or {}
        self.remove_embedded_forms()

        for name in values:
            if name.startswith(self.PERSISTENT_PREFIX):
                pk = name[len(self.PERSISTENT_PREFIX) :]
                obj = self.get_persistent_child_by_pk(pk)
                if obj is None:
                    raise ChildObjectDoesNotExist(
                        f'The child object for the embedded form "{name}" does '
                        f"not exist.",
                    )
            else:
                obj = self.new_child_object()

            self.embed_form(name, self.create_child_form(obj))

        logger.debug(
            f"Rebuilt collection {self.relation_alias!r} of {self.parent_object!r} "
            f"with {list(self.embedded_forms)}",
        )
        return True

    def update_object(self, values=None):
        # deletes are worked out here because save_embedded_forms is not
        # passed the values
        if not self.is_valid():
            raise InvalidFormError("This method is only available on valid forms.")

        if values is None:
            values = self.cleaned_data

        self.scheduled_deletes = [
            obj
            for obj in self.get_related_objects()
            if not isinstance(values.get(self.get_persistent_name(obj)), dict)
        ]
        if self.scheduled_deletes:
            logger.debug(f"Scheduled deletes: {self.scheduled_deletes}")

        return super().update_object(values)

    def save_embedded_forms(self, using=None, forms=None):
        if using is None:
            using = self.get_connection()

        for obj in self.scheduled_deletes:
            obj.delete(using=using)
        self.scheduled_deletes = []

        super().save_embedded_forms(using, forms)
