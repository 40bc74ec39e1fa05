"""Required-association queries consumed by the synthesizer.

The synthesizer does not infer validation rules itself. It asks an
AssociationResolver which relationships of a type must be present and fills
in any that the caller did not override. Resolvers adapt whatever validation
metadata the host ORM keeps. PydanticAssociationResolver, the default, reads
it from pydantic model fields.
"""

from __future__ import annotations

import types
from collections.abc import Sequence
from typing import Any, NamedTuple, Protocol, Union, get_args, get_origin, runtime_checkable

from pydantic import BaseModel
from pydantic.fields import FieldInfo


class RequiredAssociation(NamedTuple):
    """A relationship that must be set for an instance to be valid.

    Attributes:
        name: Attribute holding the associated instance (e.g. "customer").
        foreign_key: Attribute holding its key (e.g. "customer_id").
        associated_type: Type of the associated instance.
    """

    name: str
    foreign_key: str
    associated_type: type


@runtime_checkable
class AssociationResolver(Protocol):
    """Validation metadata queries used during synthesis."""

    def required_associations(self, target_type: type) -> Sequence[RequiredAssociation]:
        """Return required associations of target_type in declaration order."""
        ...

    def is_attribute_required(self, target_type: type, attribute: str) -> bool:
        """Return True if target_type requires a value for attribute."""
        ...


class NullAssociationResolver:
    """Resolver for types without validation metadata: nothing is required."""

    def required_associations(self, target_type: type) -> Sequence[RequiredAssociation]:
        return ()

    def is_attribute_required(self, target_type: type, attribute: str) -> bool:
        return False


class PydanticAssociationResolver:
    """Resolver reading required associations from pydantic model fields.

    An association is a field annotated with another model class, optionally
    wrapped in ``Optional``. It is required when the field itself is required,
    or when its foreign key field (``<name>_id``) is:

        class Order(ExemplarModel):
            customer: Customer              # required association
            warehouse: Warehouse | None = None
            warehouse_id: int               # required through its foreign key
            coupon: Coupon | None = None    # optional, never generated

    Types that are not pydantic models have no requirements.
    """

    foreign_key_suffix = "_id"

    def required_associations(self, target_type: type) -> Sequence[RequiredAssociation]:
        fields = _model_fields(target_type)
        required: list[RequiredAssociation] = []
        for name, field in fields.items():
            associated_type = _model_class(field.annotation)
            if associated_type is None:
                continue
            foreign_key = f"{name}{self.foreign_key_suffix}"
            key_field = fields.get(foreign_key)
            if field.is_required() or (key_field is not None and key_field.is_required()):
                required.append(RequiredAssociation(name, foreign_key, associated_type))
        return tuple(required)

    def is_attribute_required(self, target_type: type, attribute: str) -> bool:
        field = _model_fields(target_type).get(attribute)
        return field is not None and field.is_required()

    def required_attributes(self, target_type: type) -> list[str]:
        """Names of every field target_type requires, in declaration order."""
        return [name for name, field in _model_fields(target_type).items() if field.is_required()]


def _model_fields(target_type: type) -> dict[str, FieldInfo]:
    if isinstance(target_type, type) and issubclass(target_type, BaseModel):
        return dict(target_type.model_fields)
    return {}


def _model_class(annotation: Any) -> type[BaseModel] | None:
    """Return the model class of an annotation like ``Customer | None``."""
    candidates = [annotation]
    if get_origin(annotation) in (Union, types.UnionType):
        candidates = [a for a in get_args(annotation) if a is not type(None)]
    if len(candidates) != 1:
        return None
    (candidate,) = candidates
    if isinstance(candidate, type) and issubclass(candidate, BaseModel):
        return candidate
    return None
