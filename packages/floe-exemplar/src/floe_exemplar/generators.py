"""Attribute generators and their invocation semantics.

A generator is one of four variants, each holding only the data it needs:
- BlockGenerator: a callable taking the previous value (or nothing), with an
  optional start value
- ProducerGenerator: an object with next() (or an iterator) managing its own state
- MethodGenerator: name of a zero-argument method on the synthesized type
- LiteralGenerator: a static value

invoke() is the single interpretation function. Block generators are the only
stateful variant: each GeneratorEntry remembers the last value its block
produced and hands it back on the next call, so sequences need no counter.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Final, Union

from floe_exemplar.errors import ExemplarError


class _Unset:
    """Sentinel type for "no value supplied", distinct from None."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class BlockGenerator:
    """Generator backed by a callable.

    Attributes:
        block: Callable accepting zero arguments or the previous value.
        start: Value returned on the first call instead of calling the block.
        accepts_previous: Whether the block takes the previous value.
    """

    block: Callable[..., Any]
    start: Any = UNSET
    accepts_previous: bool = True


@dataclass(frozen=True)
class ProducerGenerator:
    """Generator delegating to an object with next() or __next__."""

    producer: Any


@dataclass(frozen=True)
class MethodGenerator:
    """Generator calling a named zero-argument method on the synthesized type."""

    method: str


@dataclass(frozen=True)
class LiteralGenerator:
    """Generator returning the same value on every call."""

    value: Any


GeneratorSpec = Union[BlockGenerator, ProducerGenerator, MethodGenerator, LiteralGenerator]


@dataclass
class GeneratorEntry:
    """Binding of one attribute to a generator on the type that registered it.

    Attributes:
        attribute: Normalized attribute name.
        spec: The generator variant.
        owner: Type whose table holds this entry.
        last_value: Last value produced by a block generator, UNSET before the first call.
    """

    attribute: str
    spec: GeneratorSpec
    owner: type
    last_value: Any = UNSET


def block_parameters(block: Callable[..., Any]) -> tuple[int, bool]:
    """Count the positional parameters a block accepts.

    Returns:
        Tuple of (positional parameter count, has required keyword-only
        parameters). ``*args`` counts as a single positional parameter.
        Callables without an introspectable signature are assumed to take one.
    """
    try:
        signature = inspect.signature(block)
    except (TypeError, ValueError):
        return 1, False

    positional = 0
    required_keyword = False
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
        elif parameter.kind is parameter.VAR_POSITIONAL:
            positional = max(positional, 1)
        elif parameter.kind is parameter.KEYWORD_ONLY and parameter.default is parameter.empty:
            required_keyword = True
    return positional, required_keyword


def accepts_no_arguments(func: Callable[..., Any]) -> bool:
    """Return True if func can be called without arguments.

    Callables without an introspectable signature are assumed to qualify.
    """
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return True
    try:
        signature.bind()
    except TypeError:
        return False
    return True


def is_producer(candidate: Any) -> bool:
    """Return True if candidate can serve a ProducerGenerator.

    A candidate with a ``next`` attribute must be able to call it without
    arguments, so a producer class whose next() is an instance method is
    rejected rather than failing on first use.
    """
    method = getattr(candidate, "next", None)
    if callable(method):
        return accepts_no_arguments(method)
    return isinstance(candidate, Iterator)


def invoke(entry: GeneratorEntry, target_type: type) -> Any:
    """Produce the next value for an entry.

    Args:
        entry: Registry entry to invoke.
        target_type: Type being synthesized; method generators are resolved
            against it, so a subclass can redefine the method.

    Returns:
        Generated value.

    Raises:
        ExemplarError: If a producer is exhausted.
    """
    spec = entry.spec

    if isinstance(spec, BlockGenerator):
        if entry.last_value is UNSET and spec.start is not UNSET:
            entry.last_value = spec.start
            return spec.start
        if spec.accepts_previous:
            previous = None if entry.last_value is UNSET else entry.last_value
            value = spec.block(previous)
        else:
            value = spec.block()
        entry.last_value = value
        return value

    if isinstance(spec, ProducerGenerator):
        producer = spec.producer
        try:
            method = getattr(producer, "next", None)
            return method() if callable(method) else next(producer)
        except StopIteration:
            raise ExemplarError(
                f"Generator for '{entry.attribute}' on {entry.owner.__name__} is exhausted"
            ) from None

    if isinstance(spec, MethodGenerator):
        member = getattr(target_type, spec.method)
        return member() if callable(member) else member

    return spec.value
