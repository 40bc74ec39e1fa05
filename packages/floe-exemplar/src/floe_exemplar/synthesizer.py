"""Object synthesis: spawn, generate and generate_strict.

Synthesizing an instance of a type:
1. Load the exemplar files of the type and its ancestors (once per type).
2. Generate every required association the caller did not supply, through the
   associated type's own generate(), so associations are persisted.
3. Invoke the generator of every other attribute that was not overridden.
4. Apply overrides last. Overridden attributes never invoke their generator.
5. Construct the instance; generate() and generate_strict() then save it.

Example:
    >>> synthesizer = get_synthesizer()
    >>> widget = synthesizer.spawn(Widget, color="blue")
    >>> order = synthesizer.generate_strict(Order)
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from floe_exemplar.associations import (
    AssociationResolver,
    PydanticAssociationResolver,
    RequiredAssociation,
)
from floe_exemplar.config import ExemplarSettings, get_settings
from floe_exemplar.errors import ExemplarError, ValidationError
from floe_exemplar.generators import invoke
from floe_exemplar.loader import ExemplarLoader
from floe_exemplar.observability import get_logger, synthesis_operation
from floe_exemplar.registry import (
    GeneratorRegistry,
    ancestry,
    get_registry,
    normalize_attribute,
)

T = TypeVar("T")

# Packages whose classes never carry exemplar files of their own
_LIBRARY_PACKAGES = frozenset(sys.stdlib_module_names | {"floe_exemplar", "pydantic"})


def exemplar_candidates(target_type: type) -> tuple[type, ...]:
    """Types whose exemplars are loaded for target_type, ancestors first.

    Bases from the standard library, pydantic and floe_exemplar's own mixins
    are skipped. target_type itself is always included.
    """
    return tuple(
        candidate
        for candidate in reversed(ancestry(target_type))
        if candidate is target_type
        or candidate.__module__.partition(".")[0] not in _LIBRARY_PACKAGES
    )


class ObjectSynthesizer:
    """Build instances of arbitrary types from their registered generators.

    Args:
        registry: Generator registry. Defaults to the process-wide registry.
        loader: Exemplar loader bound to the same registry.
        resolver: Source of required associations. Defaults to
            PydanticAssociationResolver.
        settings: Settings, defaults to the process-wide settings.
    """

    def __init__(
        self,
        registry: GeneratorRegistry | None = None,
        loader: ExemplarLoader | None = None,
        resolver: AssociationResolver | None = None,
        settings: ExemplarSettings | None = None,
    ) -> None:
        self.registry = registry if registry is not None else get_registry()
        self.loader = loader if loader is not None else ExemplarLoader(self.registry, settings)
        self.resolver = resolver if resolver is not None else PydanticAssociationResolver()
        self._settings = settings

    @property
    def settings(self) -> ExemplarSettings:
        return self._settings if self._settings is not None else get_settings()

    def ensure_exemplars(self, target_type: type) -> None:
        """Load exemplars of target_type, and of its ancestors when configured.

        Ancestors are loaded first so a subclass's own generators are in place
        no matter which type in the hierarchy was synthesized first; lookup
        then prefers the subclass table.
        """
        if self.settings.load_ancestor_exemplars:
            for candidate in exemplar_candidates(target_type):
                self.loader.ensure_loaded(candidate)
        else:
            self.loader.ensure_loaded(target_type)

    def attributes_for(
        self,
        target_type: type,
        overrides: Mapping[Any, Any] | None = None,
        /,
        **attributes: Any,
    ) -> dict[str, Any]:
        """Compute the attributes spawn() would construct target_type with.

        Args:
            target_type: Type to synthesize.
            overrides: Attribute values that win over generators.
            **attributes: More overrides, merged over ``overrides``.

        Returns:
            Mapping of attribute name to value.
        """
        supplied = {
            normalize_attribute(name): value
            for name, value in {**dict(overrides or {}), **attributes}.items()
        }
        self.ensure_exemplars(target_type)

        values: dict[str, Any] = {}
        for association in self.resolver.required_associations(target_type):
            if association.name in supplied or association.foreign_key in supplied:
                continue
            instance = self._generate_association(target_type, association)
            values[association.name] = instance
            key = getattr(instance, "id", None)
            if association.foreign_key != association.name and key is not None:
                values[association.foreign_key] = key

        for name in self.registry.attributes(target_type):
            if name in supplied or name in values:
                continue
            entry = self.registry.lookup(name, target_type)
            if entry is not None:
                values[name] = invoke(entry, target_type)

        values.update(supplied)
        return values

    def spawn(
        self,
        target_type: type[T],
        overrides: Mapping[Any, Any] | None = None,
        /,
        **attributes: Any,
    ) -> T:
        """Construct an unsaved instance of target_type.

        Attributes with neither an override nor a generator are left to the
        type's own defaults.
        """
        supplied = len(overrides or {}) + len(attributes)
        with synthesis_operation("spawn", target_type, overrides=supplied):
            values = self.attributes_for(target_type, overrides, **attributes)
            return construct(target_type, values)

    def generate(
        self,
        target_type: type[T],
        overrides: Mapping[Any, Any] | None = None,
        /,
        **attributes: Any,
    ) -> T:
        """Spawn an instance and try to save it.

        A failed save is logged and otherwise ignored: the unsaved, possibly
        invalid instance is returned so tests can assert on its invalidity.
        """
        with synthesis_operation("generate", target_type):
            instance = self.spawn(target_type, overrides, **attributes)
            save = _save_method(instance)
            try:
                saved = save()
            except Exception as exc:
                get_logger().info(
                    "persistence_failed",
                    target=target_type.__qualname__,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                return instance
            if not saved:
                get_logger().info(
                    "persistence_failed",
                    target=target_type.__qualname__,
                    errors=_errors_of(instance),
                )
            return instance

    def generate_strict(
        self,
        target_type: type[T],
        overrides: Mapping[Any, Any] | None = None,
        /,
        **attributes: Any,
    ) -> T:
        """Spawn an instance and save it, raising if the save fails.

        Raises:
            ValidationError: If save() reports failure.
        """
        with synthesis_operation("generate_strict", target_type):
            instance = self.spawn(target_type, overrides, **attributes)
            if not _save_method(instance)():
                raise ValidationError(instance, errors=_errors_of(instance))
            return instance

    def _generate_association(self, target_type: type, association: RequiredAssociation) -> Any:
        associated_type = association.associated_type
        generate = getattr(associated_type, "generate", None)
        instance = generate() if callable(generate) else self.generate(associated_type)
        get_logger().debug(
            "association_generated",
            target=target_type.__qualname__,
            association=association.name,
            associated=associated_type.__qualname__,
        )
        return instance


def construct(target_type: type[T], values: dict[str, Any]) -> T:
    """Build an instance through the type's constructor contract.

    Types may define ``from_exemplar_attributes(values)`` to construct without
    validation; anything else is called with the values as keyword arguments.
    """
    factory = getattr(target_type, "from_exemplar_attributes", None)
    if callable(factory):
        return factory(values)
    return target_type(**values)


def _save_method(instance: Any) -> Callable[[], Any]:
    save = getattr(instance, "save", None)
    if not callable(save):
        raise ExemplarError(f"{type(instance).__name__} instances cannot be saved")
    return save


def _errors_of(instance: Any) -> list[Any]:
    errors = getattr(instance, "errors", None)
    if callable(errors):
        errors = errors()
    return list(errors or [])


_synthesizer: ObjectSynthesizer | None = None


def get_synthesizer() -> ObjectSynthesizer:
    """Get the process-wide synthesizer, creating it if necessary."""
    global _synthesizer
    if _synthesizer is None:
        _synthesizer = ObjectSynthesizer()
    return _synthesizer
