from __future__ import annotations

import pytest

from nestedforms.tests import factories
from nestedforms.tests.forms import TestChildForm


@pytest.fixture
def parent():
    return factories.TestParentFactory.create()


@pytest.fixture
def children(parent):
    """Two saved children of `parent`, with primary keys 5 and 9."""
    return [
        factories.TestChildFactory.create(pk=5, parent=parent, name="five"),
        factories.TestChildFactory.create(pk=9, parent=parent, name="nine"),
    ]


@pytest.fixture
def collection_form_kwargs(parent):
    return {
        "parent_object": parent,
        "relation_alias": "children",
        "child_form_class": TestChildForm,
    }


@pytest.fixture
def child_data():
    """Returns a factory for the submitted values of one child form."""

    def make(name="child", position=""):
        return {"name": name, "position": position}

    return make
