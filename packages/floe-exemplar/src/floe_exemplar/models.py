"""Pydantic models as exemplar targets.

ExemplarModel lets pydantic models take part in the full synthesis workflow:
- spawn() builds with model_construct, so invalid instances can be created
- is_valid() re-validates the current field values
- save() validates, calls the persist() hook, and marks the record saved
- required associations are read from the field annotations by
  PydanticAssociationResolver

Example:
    >>> class Customer(ExemplarModel):
    ...     email: str
    >>> class Order(ExemplarModel):
    ...     customer: Customer
    ...     total: int = 0
    >>> Customer.generator_for("email", start="user-a@example.com", block=succ)
    >>> order = Order.generate_strict()
    >>> order.customer.is_new_record
    False
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, PrivateAttr
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import Self

from floe_exemplar.mixins import PersistentExemplar


class ExemplarModel(PersistentExemplar, BaseModel):
    """Pydantic base model implementing the exemplar persistence contract.

    Subclasses override persist() to write records somewhere real; the
    default only marks them as saved.
    """

    _persisted: bool = PrivateAttr(default=False)
    _errors: list[Any] = PrivateAttr(default_factory=list)

    @classmethod
    def from_exemplar_attributes(cls, values: dict[str, Any]) -> Self:
        """Construct without validation, keeping unknown or invalid values."""
        return cls.model_construct(**values)

    @property
    def errors(self) -> list[Any]:
        """Errors found by the last is_valid() or save() call."""
        return list(self._errors)

    @property
    def is_new_record(self) -> bool:
        return not self._persisted

    def validation_errors(self) -> list[Any]:
        """Validate the current field values, returning pydantic error details."""
        try:
            type(self).model_validate(dict(self))
        except PydanticValidationError as exc:
            return list(exc.errors(include_url=False))
        return []

    def is_valid(self) -> bool:
        self._errors = self.validation_errors()
        return not self._errors

    def save(self) -> bool:
        """Validate and persist the record.

        Returns:
            True if the record was valid and persisted, False otherwise.
        """
        if not self.is_valid():
            return False
        self.persist()
        self._persisted = True
        return True

    def persist(self) -> None:
        """Write the record to storage. No-op by default."""
