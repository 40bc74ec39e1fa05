"""floe-exemplar: test instances of arbitrary classes without hand-written factories.

This package provides:
- Exemplar / PersistentExemplar: class mixins adding generator_for, spawn,
  generate and generate_strict
- GeneratorRegistry: per-class generator tables with inheritance-aware lookup
- ExemplarLoader: one-shot loading of per-class exemplar files
- ObjectSynthesizer: the spawn / generate / generate_strict workflow
- ExemplarModel: pydantic models as synthesis targets, with required
  associations generated automatically
- Producers (Sequence, Cycle, FakerValue, Weighted) and succ() for sequences

Example:
    >>> from types import SimpleNamespace
    >>> from floe_exemplar import Exemplar, succ
    >>>
    >>> class Widget(Exemplar, SimpleNamespace):
    ...     pass
    >>>
    >>> Widget.generator_for("name", block=lambda prev: succ(prev) if prev else "test")
    >>> Widget.spawn().name, Widget.spawn().name
    ('test', 'tesu')
"""

from __future__ import annotations

__version__ = "0.1.0"

from floe_exemplar.associations import (
    AssociationResolver,
    NullAssociationResolver,
    PydanticAssociationResolver,
    RequiredAssociation,
)
from floe_exemplar.config import ExemplarSettings, get_settings, reset_settings
from floe_exemplar.errors import (
    BlockArityError,
    DuplicateGeneratorError,
    ExemplarError,
    GeneratorRegistrationError,
    InvalidGeneratorSpecification,
    UnresolvableGeneratorClass,
    UnresolvableGeneratorMethod,
    ValidationError,
)
from floe_exemplar.generators import (
    UNSET,
    BlockGenerator,
    GeneratorEntry,
    LiteralGenerator,
    MethodGenerator,
    ProducerGenerator,
    invoke,
)
from floe_exemplar.loader import ExemplarLoader
from floe_exemplar.mixins import Exemplar, PersistentExemplar
from floe_exemplar.models import ExemplarModel
from floe_exemplar.observability import configure_logging
from floe_exemplar.producers import Cycle, FakerValue, Producer, Sequence, Weighted
from floe_exemplar.registry import GeneratorRegistry, ancestry, get_registry
from floe_exemplar.sequences import succ
from floe_exemplar.synthesizer import ObjectSynthesizer, get_synthesizer

__all__ = [
    "__version__",
    # Class API
    "Exemplar",
    "PersistentExemplar",
    "ExemplarModel",
    # Engine
    "GeneratorRegistry",
    "ExemplarLoader",
    "ObjectSynthesizer",
    "get_registry",
    "get_synthesizer",
    "ancestry",
    # Generators
    "UNSET",
    "BlockGenerator",
    "ProducerGenerator",
    "MethodGenerator",
    "LiteralGenerator",
    "GeneratorEntry",
    "invoke",
    "succ",
    # Producers
    "Producer",
    "Sequence",
    "Cycle",
    "FakerValue",
    "Weighted",
    # Associations
    "AssociationResolver",
    "RequiredAssociation",
    "NullAssociationResolver",
    "PydanticAssociationResolver",
    # Configuration
    "ExemplarSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
    # Errors
    "ExemplarError",
    "GeneratorRegistrationError",
    "InvalidGeneratorSpecification",
    "DuplicateGeneratorError",
    "UnresolvableGeneratorClass",
    "UnresolvableGeneratorMethod",
    "BlockArityError",
    "ValidationError",
]
