from unittest.mock import MagicMock

import pytest
from django.core.exceptions import ValidationError

from nestedforms.validators import ValidatorSchema


def test_for_fields():
    schema = ValidatorSchema.for_fields(["a", "b"])

    assert schema == {"a": [], "b": []}
    assert schema.pre_validator is None
    assert schema.post_validator is None


def test_validator_lists_are_copied():
    validators = [MagicMock()]
    schema = ValidatorSchema({"a": validators})
    schema.add_validator("a", MagicMock())

    assert len(validators) == 1
    assert len(schema.get_validators("a")) == 2
    assert schema.get_validators("missing") == []


def test_add_validator_to_new_name():
    validator = MagicMock()
    schema = ValidatorSchema()

    schema.add_validator("a", validator)

    assert schema == {"a": [validator]}


@pytest.mark.parametrize(
    "returned, expected",
    [
        (None, {"a": 1}),
        ({"b": 2}, {"b": 2}),
    ],
)
def test_run_post_validator(returned, expected):
    schema = ValidatorSchema(post_validator=MagicMock(return_value=returned))

    assert schema.run_post_validator({"a": 1}) == expected


def test_run_post_validator_without_validator():
    assert ValidatorSchema().run_post_validator({"a": 1}) == {"a": 1}


def test_run_pre_validator_raises():
    schema = ValidatorSchema(pre_validator=MagicMock(side_effect=ValidationError("x")))

    with pytest.raises(ValidationError):
        schema.run_pre_validator({})
