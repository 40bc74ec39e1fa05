"""Per-type generator registry with ancestor-aware lookup.

Every type gets its own table of attribute -> GeneratorEntry, created on its
first registration. Tables are keyed by the class object, so two classes that
happen to share a name never see each other's generators. Lookup walks the
type's ancestry (its MRO without ``object``) and returns the first table that
has the attribute, so a subclass's own generator always shadows its parents'.

Example:
    >>> registry = GeneratorRegistry()
    >>> registry.register(Widget, "name", block=lambda prev: succ(prev) if prev else "widget")
    >>> registry.lookup("name", SubWidget).owner is Widget
    True
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeVar

from floe_exemplar.errors import (
    BlockArityError,
    DuplicateGeneratorError,
    InvalidGeneratorSpecification,
    UnresolvableGeneratorClass,
    UnresolvableGeneratorMethod,
)
from floe_exemplar.generators import (
    UNSET,
    BlockGenerator,
    GeneratorEntry,
    GeneratorSpec,
    LiteralGenerator,
    MethodGenerator,
    ProducerGenerator,
    accepts_no_arguments,
    block_parameters,
    is_producer,
)
from floe_exemplar.observability import get_logger

F = TypeVar("F", bound=Callable[..., Any])


def ancestry(target_type: type) -> tuple[type, ...]:
    """Return the ordered lookup chain of a type: itself, then its ancestors."""
    return tuple(t for t in target_type.__mro__ if t is not object)


def normalize_attribute(attribute: Any) -> str:
    """Normalize an attribute name so that equivalent spellings collide.

    Strings are used as-is; enum members use their string value, or their
    name when the value is not a string.

    Raises:
        InvalidGeneratorSpecification: If the name is empty or not name-like.
    """
    if isinstance(attribute, Enum):
        attribute = attribute.value if isinstance(attribute.value, str) else attribute.name
    if not isinstance(attribute, str) or not attribute:
        raise InvalidGeneratorSpecification(
            f"Attribute name must be a non-empty string, got {attribute!r}"
        )
    return str(attribute)


class GeneratorRegistry:
    """Registration table mapping type -> attribute -> GeneratorEntry."""

    def __init__(self) -> None:
        self._tables: dict[type, dict[str, GeneratorEntry]] = {}

    def register(
        self,
        target_type: type,
        attribute: Any = UNSET,
        value: Any = UNSET,
        /,
        *,
        block: Callable[..., Any] | None = None,
        producer: Any = None,
        method: Any = None,
        start: Any = UNSET,
    ) -> GeneratorEntry:
        """Register a generator for one attribute of target_type.

        Exactly one of value, block, producer or method must be supplied.
        ``register(Widget, {"name": "widget"})`` is shorthand for
        ``register(Widget, "name", "widget")``.

        Args:
            target_type: Type owning the generator.
            attribute: Attribute name, or a single-key {attribute: value} mapping.
            value: Literal value returned on every call.
            block: Callable taking zero arguments or the previous value.
            producer: Object with a zero-argument next() method, or an iterator.
            method: Name of a zero-argument method on the synthesized type.
            start: First value of a block generator, returned before the block runs.

        Returns:
            The new GeneratorEntry.

        Raises:
            InvalidGeneratorSpecification: If not exactly one generator is supplied.
            DuplicateGeneratorError: If target_type already has its own generator
                for the attribute.
            UnresolvableGeneratorClass: If the producer has no next().
            UnresolvableGeneratorMethod: If target_type has no such method.
            BlockArityError: If the block takes more than one argument.
        """
        if attribute is UNSET:
            raise InvalidGeneratorSpecification(
                "An attribute name is required", target_type=target_type
            )

        if isinstance(attribute, Mapping):
            if len(attribute) != 1:
                raise InvalidGeneratorSpecification(
                    f"Expected a single {{attribute: value}} pair, got {len(attribute)}",
                    target_type=target_type,
                )
            extras = (block, producer, method)
            if value is not UNSET or start is not UNSET or any(x is not None for x in extras):
                raise InvalidGeneratorSpecification(
                    "An {attribute: value} pair cannot be combined with other generators",
                    target_type=target_type,
                )
            ((attribute, value),) = attribute.items()

        name = normalize_attribute(attribute)
        spec = self._build_spec(
            target_type,
            name,
            value=value,
            block=block,
            producer=producer,
            method=method,
            start=start,
        )

        table = self._tables.get(target_type, {})
        if name in table:
            raise DuplicateGeneratorError(target_type, name)

        entry = GeneratorEntry(attribute=name, spec=spec, owner=target_type)
        self._tables.setdefault(target_type, table)[name] = entry

        get_logger().debug(
            "generator_registered",
            target=target_type.__qualname__,
            attribute=name,
            kind=type(spec).__name__,
        )
        return entry

    def generator(
        self, target_type: type, attribute: Any, *, start: Any = UNSET
    ) -> Callable[[F], F]:
        """Decorator form of register() for block generators.

        Example:
            >>> @registry.generator(Widget, "serial", start=1)
            ... def next_serial(previous):
            ...     return previous + 1
        """

        def decorator(block: F) -> F:
            self.register(target_type, attribute, block=block, start=start)
            return block

        return decorator

    def lookup(self, attribute: Any, target_type: type) -> GeneratorEntry | None:
        """Find the generator for an attribute, walking target_type's ancestry.

        Returns:
            The entry from the nearest type that registered one, or None.
        """
        name = normalize_attribute(attribute)
        for candidate in ancestry(target_type):
            table = self._tables.get(candidate)
            if table and name in table:
                return table[name]
        return None

    def attributes(self, target_type: type) -> list[str]:
        """List every attribute with a generator visible from target_type."""
        names: dict[str, None] = {}
        for candidate in ancestry(target_type):
            for name in self._tables.get(candidate, {}):
                names.setdefault(name, None)
        return list(names)

    def generators_for(self, target_type: type) -> Mapping[str, GeneratorEntry]:
        """Read-only view of the generators target_type registered itself."""
        return MappingProxyType(self._tables.get(target_type, {}))

    def clear(self, target_type: type | None = None) -> None:
        """Drop the table of one type, or of every type."""
        if target_type is None:
            self._tables.clear()
        else:
            self._tables.pop(target_type, None)

    def _build_spec(
        self,
        target_type: type,
        name: str,
        *,
        value: Any,
        block: Callable[..., Any] | None,
        producer: Any,
        method: Any,
        start: Any,
    ) -> GeneratorSpec:
        """Validate registration arguments and build the matching variant."""
        supplied = [
            option
            for option, present in (
                ("block", block is not None),
                ("producer", producer is not None),
                ("method", method is not None),
                ("value", value is not UNSET),
            )
            if present
        ]
        if len(supplied) != 1:
            detail = ", ".join(supplied) if supplied else "none"
            raise InvalidGeneratorSpecification(
                f"Generator for '{name}' needs exactly one of block, producer, method "
                f"or value (got {detail})",
                target_type=target_type,
                attribute=name,
            )
        if start is not UNSET and block is None:
            raise InvalidGeneratorSpecification(
                f"A start value for '{name}' requires a block",
                target_type=target_type,
                attribute=name,
            )

        if block is not None:
            if not callable(block):
                raise InvalidGeneratorSpecification(
                    f"Block for '{name}' is not callable",
                    target_type=target_type,
                    attribute=name,
                )
            positional, required_keyword = block_parameters(block)
            if positional > 1 or required_keyword:
                raise BlockArityError(
                    f"Block for '{name}' must accept at most one argument",
                    target_type=target_type,
                    attribute=name,
                )
            return BlockGenerator(block=block, start=start, accepts_previous=positional == 1)

        if producer is not None:
            if not is_producer(producer):
                raise UnresolvableGeneratorClass(
                    f"Producer for '{name}' has no next() method callable without arguments",
                    target_type=target_type,
                    attribute=name,
                )
            return ProducerGenerator(producer=producer)

        if method is not None:
            method_name = normalize_attribute(method)
            problem = _method_problem(target_type, method_name)
            if problem is not None:
                raise UnresolvableGeneratorMethod(
                    f"{target_type.__name__} {problem} for '{name}'",
                    target_type=target_type,
                    attribute=name,
                )
            return MethodGenerator(method=method_name)

        return LiteralGenerator(value=value)


def _method_problem(target_type: type, method_name: str) -> str | None:
    """Describe why method_name cannot generate values for target_type, if it cannot."""
    if not hasattr(target_type, method_name):
        return f"has no method '{method_name}'"
    member = getattr(target_type, method_name)
    if callable(member):
        if not accepts_no_arguments(member):
            return f"method '{method_name}' cannot be called without arguments"
    elif hasattr(type(member), "__get__"):
        # property and friends only resolve on instances
        return f"attribute '{method_name}' is not a class-level method"
    return None


_registry: GeneratorRegistry | None = None


def get_registry() -> GeneratorRegistry:
    """Get the process-wide registry, creating it if necessary."""
    global _registry
    if _registry is None:
        _registry = GeneratorRegistry()
    return _registry
