import pytest
from django import forms
from django.http import QueryDict

from nestedforms.tests.models import TestChild
from nestedforms.tests.models import TestParent
from nestedforms.util import bind_form
from nestedforms.util import get_identifier
from nestedforms.util import get_relation
from nestedforms.util import is_truthy
from nestedforms.util import nest_data


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", False),
        ("false", False),
        ("0", False),
        ("Off", False),
        ("true", True),
        ("1", True),
        ("yes", True),
    ],
)
def test_is_truthy(value, expected):
    assert is_truthy(value) is expected


def test_get_identifier():
    assert get_identifier(TestParent(pk=4)) == (4,)
    assert get_identifier(TestParent()) == (None,)


def test_get_relation():
    relation = get_relation(TestParent, "children")

    assert relation.related_model is TestChild
    assert relation.field.name == "parent"


def test_nest_data():
    data = {
        "name": "Ada",
        "children[persistent_5][name]": "five",
        "children[transient_0][name]": "new",
        "children[transient_0][position]": "2",
    }

    assert nest_data(data) == {
        "name": "Ada",
        "children": {
            "persistent_5": {"name": "five"},
            "transient_0": {"name": "new", "position": "2"},
        },
    }


def test_nest_data_collects_lists_from_query_dicts():
    data = QueryDict("tags[]=a&tags[]=b&person[name]=Ada")

    assert nest_data(data) == {"tags": ["a", "b"], "person": {"name": "Ada"}}


def test_nest_data_with_plain_list_suffix():
    assert nest_data({"tags[]": "a"}) == {"tags": ["a"]}


def test_bind_form_resets_validation():
    class NameForm(forms.Form):
        name = forms.CharField()

    form = NameForm()
    assert not form.is_valid()

    bind_form(form, {"name": "Ada"})
    assert form.is_valid()
    assert form.cleaned_data == {"name": "Ada"}

    bind_form(form, {"name": ""})
    assert not hasattr(form, "cleaned_data")
    assert not form.is_valid()
    assert form.files == {}
