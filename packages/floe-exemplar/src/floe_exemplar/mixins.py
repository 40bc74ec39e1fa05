"""Class-level exemplar API.

Mixing Exemplar into a class gives it generator registration and spawn();
PersistentExemplar adds generate() and generate_strict() for classes that
implement the persistence contract (save() and is_valid()).

Example:
    >>> class Widget(Exemplar, SimpleNamespace):
    ...     pass
    >>> Widget.generator_for("name", start="widget-a", block=succ)
    >>> Widget.spawn().name
    'widget-a'
    >>> Widget.spawn(name="custom").name
    'custom'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypeVar

from typing_extensions import Self

from floe_exemplar.generators import UNSET, GeneratorEntry
from floe_exemplar.synthesizer import get_synthesizer

F = TypeVar("F", bound=Callable[..., Any])


class Exemplar:
    """Mixin adding generator registration and spawn() to a class."""

    @classmethod
    def generator_for(
        cls,
        attribute: Any = UNSET,
        value: Any = UNSET,
        /,
        *,
        block: Callable[..., Any] | None = None,
        producer: Any = None,
        method: Any = None,
        start: Any = UNSET,
    ) -> GeneratorEntry:
        """Register a generator for one attribute of this class.

        See GeneratorRegistry.register for the accepted forms.
        """
        return get_synthesizer().registry.register(
            cls,
            attribute,
            value,
            block=block,
            producer=producer,
            method=method,
            start=start,
        )

    @classmethod
    def generator(cls, attribute: Any, *, start: Any = UNSET) -> Callable[[F], F]:
        """Decorator registering the decorated function as a block generator."""
        return get_synthesizer().registry.generator(cls, attribute, start=start)

    @classmethod
    def exemplar_path(cls) -> Path | None:
        """Directory holding this class's exemplar file.

        Override to keep a class's exemplar somewhere specific. None, the
        default, uses the directory configured for the synthesizer.
        """
        return None

    @classmethod
    def spawn(cls, overrides: Mapping[Any, Any] | None = None, /, **attributes: Any) -> Self:
        """Build an unsaved instance with generated attribute values."""
        return get_synthesizer().spawn(cls, overrides, **attributes)


class PersistentExemplar(Exemplar):
    """Exemplar for classes that can be saved."""

    @classmethod
    def generate(cls, overrides: Mapping[Any, Any] | None = None, /, **attributes: Any) -> Self:
        """Spawn and save; a failed save returns the unsaved instance."""
        return get_synthesizer().generate(cls, overrides, **attributes)

    @classmethod
    def generate_strict(
        cls, overrides: Mapping[Any, Any] | None = None, /, **attributes: Any
    ) -> Self:
        """Spawn and save; a failed save raises ValidationError."""
        return get_synthesizer().generate_strict(cls, overrides, **attributes)
