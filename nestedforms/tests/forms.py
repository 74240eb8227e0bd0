from django import forms

from nestedforms.collection import CollectionForm
from nestedforms.forms import Form
from nestedforms.forms import NoObjectForm
from nestedforms.forms import ObjectForm
from nestedforms.tests.models import TestChild
from nestedforms.tests.models import TestParent


class TestChildForm(ObjectForm):
    __test__ = False

    class Meta:
        model = TestChild
        fields = ("name", "position")


class TestParentForm(ObjectForm):
    """Edits a parent together with between one and three children."""

    __test__ = False

    class Meta:
        model = TestParent
        fields = ("name",)

    def setup(self):
        super().setup()
        self.embed_collection("children", "children", min_num=1, max_num=3)


class PlainParentForm(ObjectForm):
    class Meta:
        model = TestParent
        fields = ("name",)


class TwoParentsForm(NoObjectForm):
    """Creates two parents at once, neither of which owns the other."""

    def setup(self):
        super().setup()
        self.embed_form("first", PlainParentForm())
        self.embed_form("second", PlainParentForm())


class CustomCollectionForm(CollectionForm):
    pass


class AddressForm(Form):
    street = forms.CharField()
    city = forms.CharField(required=False)


class PersonForm(Form):
    name = forms.CharField()
    nickname = forms.CharField(required=False)

    def setup(self):
        super().setup()
        self.embed_form(
            "address",
            AddressForm(initial={"street": "High Street", "postcode": "AB1 2CD"}),
        )


class ExtensibleForm(Form):
    """Adds an "extra" field when the submitted values contain one."""

    def configure_with_values(self, values, files=None):
        changed = super().configure_with_values(values, files)
        if "extra" in values and "extra" not in self.fields:
            self.fields["extra"] = forms.CharField()
            self.validator_schema.setdefault("extra", [])
            changed = True
        return changed


class PlainNoteForm(forms.Form):
    note = forms.CharField()


class ChildPositionForm(ObjectForm):
    """A child form whose only field is optional."""

    class Meta:
        model = TestChild
        fields = ("position",)
