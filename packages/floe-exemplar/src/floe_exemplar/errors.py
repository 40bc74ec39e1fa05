"""Custom exception hierarchy for floe-exemplar.

This module defines the exception classes used throughout floe-exemplar:
- ExemplarError: Base exception for all exemplar-related errors
- GeneratorRegistrationError: Base for errors raised while registering generators
- ValidationError: Raised by generate_strict when an instance cannot be saved

Registration errors are always detected eagerly, when generator_for is called,
never deferred to the first spawn. They also subclass ValueError so callers
treating bad arguments generically keep working.
"""

from __future__ import annotations

from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class ExemplarError(Exception):
    """Base exception for floe-exemplar.

    User-facing messages are safe to display; technical details are logged
    internally.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never part of the exception message.

    Example:
        >>> raise ExemplarError(
        ...     "Exemplar could not be loaded",
        ...     internal_details="SyntaxError in tests/exemplars/widget_exemplar.py:3"
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ExemplarError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "exemplar_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class GeneratorRegistrationError(ExemplarError, ValueError):
    """Base class for errors raised by generator_for.

    Attributes:
        target_type: Class the generator was being registered on.
        attribute: Attribute name being registered (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        target_type: type | None = None,
        attribute: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.target_type = target_type
        self.attribute = attribute


class InvalidGeneratorSpecification(GeneratorRegistrationError):
    """Raised when generator_for does not receive exactly one generator.

    Use this exception when:
    - No attribute name is given
    - None of block, producer, method or value is supplied
    - More than one of them is supplied
    - A {attribute: value} mapping has more than one key
    - A start value is given without a block
    """


class DuplicateGeneratorError(GeneratorRegistrationError):
    """Raised when a type already has its own generator for an attribute.

    Generators inherited from ancestors never count as duplicates.

    Example:
        >>> Widget.generator_for("name", "widget")
        >>> Widget.generator_for("name", "other")
        DuplicateGeneratorError: Widget already has a generator for 'name'
    """

    def __init__(self, target_type: type, attribute: str) -> None:
        super().__init__(
            f"{target_type.__name__} already has a generator for '{attribute}'",
            target_type=target_type,
            attribute=attribute,
        )


class UnresolvableGeneratorClass(GeneratorRegistrationError):
    """Raised when a producer has neither a next() method nor __next__."""


class UnresolvableGeneratorMethod(GeneratorRegistrationError):
    """Raised when a generator method name does not exist on the target type."""


class BlockArityError(GeneratorRegistrationError):
    """Raised when a generator block cannot be called with at most one argument."""


class ValidationError(ExemplarError):
    """Raised by generate_strict when the synthesized instance cannot be saved.

    Never raised by spawn or generate.

    Attributes:
        instance: The unsaved instance, still usable for inspection.
        target_type: Class of the instance.
        errors: Validation errors reported by the instance (may be empty).
    """

    def __init__(
        self,
        instance: Any,
        *,
        errors: list[Any] | None = None,
        internal_details: str | None = None,
    ) -> None:
        self.instance = instance
        self.target_type = type(instance)
        self.errors = list(errors or [])

        user_message = f"{self.target_type.__name__} instance failed validation"
        if self.errors:
            user_message = f"{user_message}: {_summarize(self.errors)}"

        super().__init__(user_message, internal_details=internal_details)


def _summarize(errors: list[Any]) -> str:
    """Render validation errors as a short, single-line summary."""
    parts: list[str] = []
    for error in errors:
        if isinstance(error, dict):
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "invalid")
            parts.append(f"{location}: {message}" if location else str(message))
        else:
            parts.append(str(error))
    return "; ".join(parts)
