"""Unit tests for ObjectSynthesizer."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import Mock, patch

import pytest

from floe_exemplar.associations import RequiredAssociation
from floe_exemplar.config import ExemplarSettings
from floe_exemplar.errors import ExemplarError, ValidationError
from floe_exemplar.mixins import Exemplar, PersistentExemplar
from floe_exemplar.registry import GeneratorRegistry
from floe_exemplar.sequences import succ
from floe_exemplar.synthesizer import (
    ObjectSynthesizer,
    construct,
    exemplar_candidates,
    get_synthesizer,
)


class StaticResolver:
    """Resolver returning a fixed list of required associations per type."""

    def __init__(self, associations: dict[type, Sequence[RequiredAssociation]]) -> None:
        self.associations = associations

    def required_associations(self, target_type: type) -> Sequence[RequiredAssociation]:
        return self.associations.get(target_type, ())

    def is_attribute_required(self, target_type: type, attribute: str) -> bool:
        return any(a.name == attribute for a in self.required_associations(target_type))


class Record(PersistentExemplar, SimpleNamespace):
    """Persistable target whose save() succeeds when the record is valid."""

    next_id = 0

    def is_valid(self) -> bool:
        return getattr(self, "title", "").isdigit()

    @property
    def errors(self) -> list[str]:
        return [] if self.is_valid() else ["title is invalid"]

    def save(self) -> bool:
        if not self.is_valid():
            return False
        Record.next_id += 1
        self.id = Record.next_id
        return True


class Widget(SimpleNamespace):
    pass


@pytest.fixture
def synthesizer(isolated_engine: ObjectSynthesizer) -> ObjectSynthesizer:
    return isolated_engine


@pytest.fixture
def registry(synthesizer: ObjectSynthesizer) -> GeneratorRegistry:
    return synthesizer.registry


class TestSpawn:
    """Tests for spawn()."""

    def test_constructs_with_type_constructor(self, synthesizer: ObjectSynthesizer) -> None:
        widget = synthesizer.spawn(Widget)

        assert type(widget) is Widget
        assert vars(widget) == {}

    def test_uses_generators(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        registry.register(Widget, "foo", block=lambda prev: "foo")
        assert synthesizer.spawn(Widget).foo == "foo"

    def test_overrides_win_and_skip_generators(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        block = Mock(return_value="foo")
        registry.register(Widget, "foo", block=block)

        widget = synthesizer.spawn(Widget, {"foo": "xyzzy"})

        assert widget.foo == "xyzzy"
        block.assert_not_called()

    def test_keyword_overrides(self, synthesizer: ObjectSynthesizer) -> None:
        widget = synthesizer.spawn(Widget, {"foo": 1, "bar": 2}, bar=3)

        assert (widget.foo, widget.bar) == (1, 3)

    def test_chained_block_across_spawns(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        registry.register(Widget, "a", block=lambda prev: succ(prev) if prev else "test")

        assert synthesizer.spawn(Widget).a == "test"
        assert synthesizer.spawn(Widget).a == "tesu"

    def test_start_value_across_spawns(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        registry.register(Widget, "a", start="frobnitz", block=succ)

        assert synthesizer.spawn(Widget).a == "frobnitz"
        assert synthesizer.spawn(Widget).a == "frobniua"

    def test_overridden_spawn_does_not_advance_sequence(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        registry.register(Widget, "a", start="a", block=succ)

        synthesizer.spawn(Widget)
        synthesizer.spawn(Widget, a="override")

        assert synthesizer.spawn(Widget).a == "b"

    def test_uses_from_exemplar_attributes(self, synthesizer: ObjectSynthesizer) -> None:
        class Gadget:
            @classmethod
            def from_exemplar_attributes(cls, values: dict[str, Any]) -> Gadget:
                instance = cls()
                instance.values = values
                return instance

        gadget = synthesizer.spawn(Gadget, name="g")

        assert gadget.values == {"name": "g"}

    def test_loads_exemplar_before_synthesis(self, synthesizer: ObjectSynthesizer) -> None:
        ensure_loaded = synthesizer.loader.ensure_loaded
        with patch.object(synthesizer.loader, "ensure_loaded", wraps=ensure_loaded) as spy:
            synthesizer.spawn(Widget)

        spy.assert_any_call(Widget)
        assert synthesizer.loader.is_loaded(Widget)

    def test_attributes_for(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        registry.register(Widget, "foo", "generated")

        assert synthesizer.attributes_for(Widget, bar=1) == {"foo": "generated", "bar": 1}


class TestAncestorExemplars:
    """Tests for ancestor exemplar loading and subclass precedence."""

    def write(self, directory: Path, name: str, value: str) -> None:
        (directory / name).write_text(f'generator_for("blah", block=lambda prev: "{value}")\n')

    def test_subclass_sees_parent_exemplar_loaded_first(
        self, synthesizer: ObjectSynthesizer, exemplar_dir: Path
    ) -> None:
        class Widget(SimpleNamespace):
            pass

        class SubWidget(Widget):
            pass

        self.write(exemplar_dir, "widget_exemplar.py", "blah")

        assert synthesizer.spawn(SubWidget).blah == "blah"

    def test_subclass_exemplar_wins_regardless_of_order(
        self, synthesizer: ObjectSynthesizer, exemplar_dir: Path
    ) -> None:
        class Widget(SimpleNamespace):
            pass

        class SubWidget(Widget):
            pass

        self.write(exemplar_dir, "widget_exemplar.py", "blah")
        self.write(exemplar_dir, "sub_widget_exemplar.py", "blip")

        assert synthesizer.spawn(SubWidget).blah == "blip"
        assert synthesizer.spawn(Widget).blah == "blah"

    def test_library_bases_are_not_loaded(self, synthesizer: ObjectSynthesizer) -> None:
        class Widget(Record):
            pass

        synthesizer.spawn(Widget)

        assert synthesizer.loader.is_loaded(Widget)
        assert synthesizer.loader.is_loaded(Record)
        for base in (SimpleNamespace, PersistentExemplar, Exemplar):
            assert not synthesizer.loader.is_loaded(base)

    def test_exemplar_candidates(self) -> None:
        class SubRecord(Record):
            pass

        assert exemplar_candidates(SubRecord) == (Record, SubRecord)
        assert exemplar_candidates(SimpleNamespace) == (SimpleNamespace,)

    def test_ancestor_loading_can_be_disabled(self, exemplar_dir: Path) -> None:
        class Widget(SimpleNamespace):
            pass

        class SubWidget(Widget):
            pass

        self.write(exemplar_dir, "widget_exemplar.py", "blah")
        synthesizer = ObjectSynthesizer(
            registry=GeneratorRegistry(),
            settings=ExemplarSettings(exemplar_path=exemplar_dir, load_ancestor_exemplars=False),
        )

        assert not hasattr(synthesizer.spawn(SubWidget), "blah")
        assert synthesizer.spawn(Widget).blah == "blah"
        assert synthesizer.spawn(SubWidget).blah == "blah"


class TestRequiredAssociations:
    """Tests for automatic generation of required associations."""

    def make_types(self) -> tuple[type, type, type]:
        class Foo(Record):
            pass

        class Bar(Record):
            pass

        class Frobnitz(Record):
            pass

        return Foo, Bar, Frobnitz

    def test_generates_required_association(self, synthesizer: ObjectSynthesizer) -> None:
        Foo, _, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )
        foo = Foo(title="1", id=99)

        with patch.object(Foo, "generate", return_value=foo) as generate:
            frobnitz = synthesizer.spawn(Frobnitz)

        generate.assert_called_once_with()
        assert frobnitz.foo is foo
        assert frobnitz.foo_id == 99

    def test_overridden_association_is_not_generated(self, synthesizer: ObjectSynthesizer) -> None:
        Foo, _, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )
        foo = Foo()

        with patch.object(Foo, "generate") as generate:
            frobnitz = synthesizer.spawn(Frobnitz, foo=foo)

        generate.assert_not_called()
        assert frobnitz.foo is foo

    def test_overridden_foreign_key_is_not_generated(self, synthesizer: ObjectSynthesizer) -> None:
        Foo, _, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )

        with patch.object(Foo, "generate") as generate:
            frobnitz = synthesizer.spawn(Frobnitz, foo_id=5)

        generate.assert_not_called()
        assert frobnitz.foo_id == 5

    def test_optional_association_is_not_generated(self, synthesizer: ObjectSynthesizer) -> None:
        Foo, Bar, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )

        with (
            patch.object(Foo, "generate", return_value=Foo()),
            patch.object(Bar, "generate") as bar,
        ):
            synthesizer.spawn(Frobnitz)

        bar.assert_not_called()

    def test_association_generator_not_invoked(
        self, synthesizer: ObjectSynthesizer, registry: GeneratorRegistry
    ) -> None:
        Foo, _, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )
        block = Mock()
        registry.register(Frobnitz, "foo", block=block)

        with patch.object(Foo, "generate", return_value=Foo()):
            synthesizer.spawn(Frobnitz)

        block.assert_not_called()

    def test_associated_type_without_generate(self, synthesizer: ObjectSynthesizer) -> None:
        class Owner(SimpleNamespace):
            def save(self) -> bool:
                self.saved = True
                return True

        synthesizer.resolver = StaticResolver(
            {Widget: [RequiredAssociation("owner", "owner_id", Owner)]}
        )

        widget = synthesizer.spawn(Widget)

        assert widget.owner.saved is True
        assert not hasattr(widget, "owner_id")

    def test_generated_association_is_persisted(self, synthesizer: ObjectSynthesizer) -> None:
        Foo, _, Frobnitz = self.make_types()
        synthesizer.resolver = StaticResolver(
            {Frobnitz: [RequiredAssociation("foo", "foo_id", Foo)]}
        )
        synthesizer.registry.register(Foo, "title", "7")

        frobnitz = synthesizer.spawn(Frobnitz)

        assert frobnitz.foo.id == frobnitz.foo_id
        assert not hasattr(frobnitz, "id")


class TestGenerate:
    """Tests for generate() and generate_strict()."""

    def test_generate_saves(self, synthesizer: ObjectSynthesizer) -> None:
        record = synthesizer.generate(Record, title="5")

        assert record.is_valid()
        assert hasattr(record, "id")

    def test_spawn_does_not_save(self, synthesizer: ObjectSynthesizer) -> None:
        assert not hasattr(synthesizer.spawn(Record, title="5"), "id")

    def test_generate_returns_invalid_instance(self, synthesizer: ObjectSynthesizer) -> None:
        record = synthesizer.generate(Record, title="bob")

        assert not record.is_valid()
        assert not hasattr(record, "id")

    def test_generate_swallows_save_exceptions(self, synthesizer: ObjectSynthesizer) -> None:
        class Exploding(SimpleNamespace):
            def save(self) -> bool:
                raise RuntimeError("database is down")

        instance = synthesizer.generate(Exploding, name="x")

        assert instance.name == "x"

    def test_generate_strict_saves(self, synthesizer: ObjectSynthesizer) -> None:
        assert hasattr(synthesizer.generate_strict(Record, title="5"), "id")

    def test_generate_strict_raises_validation_error(self, synthesizer: ObjectSynthesizer) -> None:
        with pytest.raises(ValidationError) as exc_info:
            synthesizer.generate_strict(Record, title="bob")

        assert exc_info.value.instance.title == "bob"
        assert exc_info.value.errors == ["title is invalid"]

    def test_generate_strict_propagates_save_exceptions(
        self, synthesizer: ObjectSynthesizer
    ) -> None:
        class Exploding(SimpleNamespace):
            def save(self) -> bool:
                raise RuntimeError("database is down")

        with pytest.raises(RuntimeError, match="database is down"):
            synthesizer.generate_strict(Exploding)

    def test_generate_requires_save(self, synthesizer: ObjectSynthesizer) -> None:
        with pytest.raises(ExemplarError, match="cannot be saved"):
            synthesizer.generate(Widget)

    def test_generate_logs_failure(
        self, synthesizer: ObjectSynthesizer, capsys: pytest.CaptureFixture[str]
    ) -> None:
        synthesizer.generate(Record, title="bob")

        assert "persistence_failed" in capsys.readouterr().out


class TestModuleHelpers:
    """Tests for construct() and the process-wide synthesizer."""

    def test_construct_uses_keyword_arguments(self) -> None:
        assert construct(Widget, {"a": 1}) == Widget(a=1)

    def test_get_synthesizer_returns_isolated_engine(
        self, isolated_engine: ObjectSynthesizer
    ) -> None:
        assert get_synthesizer() is isolated_engine
