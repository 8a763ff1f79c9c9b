from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..utils.date_utils import to_naive_utc


def _wire(value):
    if isinstance(value, BaseModel):
        return value.model_dump(mode='json', by_alias=True, exclude_unset=True)
    if isinstance(value, list):
        # List items are whole records, so their defaults are kept.
        return [item.model_dump(mode='json', by_alias=True) if isinstance(item, BaseModel) else item
                for item in value]
    return value


class RequestModel(BaseModel):
    """
    Base for request bodies. Unknown fields are rejected; fields are accepted
    under their camelCase wire name or their snake_case attribute name.

    `not_null` lists fields a client may omit but may not explicitly null out.
    `audit_exclude` lists fields kept out of the audit trail.
    """
    model_config = ConfigDict(
        extra='forbid',
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    not_null: ClassVar[tuple] = ()
    audit_exclude: ClassVar[set] = set()

    @model_validator(mode='after')
    def reject_explicit_nulls(self):
        for name in self.not_null:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    def changes(self):
        """
        Fields the client actually sent, keyed by attribute name. Nested
        objects come back as camelCase dicts, the shape stored in JSON columns.
        """
        return {name: _wire(getattr(self, name)) for name in self.model_fields_set}

    def values(self):
        """Fields the client sent, keyed by attribute name, as Python values."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def audit_values(self):
        return self.model_dump(mode='json', by_alias=True, exclude_unset=True,
                               exclude=self.audit_exclude or None)


UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]
Money = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]
