"""Unit tests for ExemplarSettings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from floe_exemplar.config import ExemplarSettings, get_settings, reset_settings


class TestExemplarSettings:
    """Tests for settings defaults and environment loading."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FLOE_EXEMPLAR_EXEMPLAR_PATH", raising=False)

        settings = ExemplarSettings(_env_file=None)

        assert settings.exemplar_path == Path("tests/exemplars")
        assert settings.exemplar_suffix == "_exemplar.py"
        assert settings.load_ancestor_exemplars is True

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FLOE_EXEMPLAR_EXEMPLAR_PATH", "spec/exemplars")
        monkeypatch.setenv("FLOE_EXEMPLAR_EXEMPLAR_SUFFIX", "_factory.py")
        monkeypatch.setenv("FLOE_EXEMPLAR_LOAD_ANCESTOR_EXEMPLARS", "false")

        settings = ExemplarSettings(_env_file=None)

        assert settings.exemplar_path == Path("spec/exemplars")
        assert settings.exemplar_suffix == "_factory.py"
        assert settings.load_ancestor_exemplars is False

    def test_suffix_must_be_python_file(self) -> None:
        with pytest.raises(ValidationError, match="must end with '.py'"):
            ExemplarSettings(exemplar_suffix="_exemplar.rb")


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_reset_rereads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("FLOE_EXEMPLAR_EXEMPLAR_PATH", "elsewhere")

        reset_settings()

        assert get_settings() is not first
        assert get_settings().exemplar_path == Path("elsewhere")
