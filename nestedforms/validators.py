from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

Validator = Callable

SchemaValidator = Callable[[dict], Optional[dict]]


class ValidatorSchema(dict):
    """
    Maps field names to the extra validators run against their cleaned values,
    and holds the validators that apply to the form as a whole.

    ``pre_validator`` receives the raw submitted data before any field is
    cleaned. ``post_validator`` receives the cleaned data once every field has
    validated and may return a replacement for it. Both report problems by
    raising ``ValidationError``.
    """

    def __init__(
        self,
        validators: Optional[Dict[str, Iterable[Validator]]] = None,
        pre_validator: Optional[SchemaValidator] = None,
        post_validator: Optional[SchemaValidator] = None,
    ):
        super().__init__()
        for name, field_validators in (validators or {}).items():
            self[name] = list(field_validators)
        self.pre_validator = pre_validator
        self.post_validator = post_validator

    @classmethod
    def for_fields(cls, names: Iterable[str]) -> "ValidatorSchema":
        return cls({name: [] for name in names})

    def add_validator(self, name: str, validator: Validator):
        self.setdefault(name, []).append(validator)

    def get_validators(self, name: str) -> List[Validator]:
        return self.get(name, [])

    def run_pre_validator(self, data):
        if self.pre_validator is not None:
            self.pre_validator(data)

    def run_post_validator(self, cleaned_data):
        if self.post_validator is None:
            return cleaned_data

        result = self.post_validator(cleaned_data)
        return cleaned_data if result is None else result
