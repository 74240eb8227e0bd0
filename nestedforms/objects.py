class NullObject:
    """
    Stands in for a model instance on forms that have no model.

    The save cascade calls ``save()`` on the object of every form it visits, so
    forms without a real object get one of these and nothing is written.
    """

    pk = None

    def save(self, using=None, **kwargs):
        pass

    def delete(self, using=None, **kwargs):
        pass

    def __repr__(self):
        return "<NullObject>"
