from django.core.exceptions import ObjectDoesNotExist


class InvalidFormError(Exception):
    """Raised when an operation that needs validated values is called on a
    form that did not validate."""


class UnknownEmbeddedFormError(ValueError):
    """Raised when removing an embedded form that the parent form does not
    have."""


class ChildObjectDoesNotExist(ObjectDoesNotExist):
    """Raised when submitted data refers to a persisted child object that is no
    longer related to the parent object of a collection."""
