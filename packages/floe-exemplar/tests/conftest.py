"""Shared pytest fixtures for floe-exemplar tests.

Every test gets its own registry, loader and synthesizer, and an empty
exemplar directory, so generators registered in one test never leak into
another.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from floe_exemplar import registry as registry_module
from floe_exemplar import synthesizer as synthesizer_module
from floe_exemplar.config import reset_settings
from floe_exemplar.registry import GeneratorRegistry
from floe_exemplar.synthesizer import ObjectSynthesizer


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),  # Resolves sys.stdout per logger
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def exemplar_dir(tmp_path: Path) -> Path:
    """Return an empty directory used as the default exemplar path."""
    path = tmp_path / "exemplars"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolated_engine(
    monkeypatch: pytest.MonkeyPatch, exemplar_dir: Path
) -> Iterator[ObjectSynthesizer]:
    """Replace the process-wide registry and synthesizer with fresh ones."""
    monkeypatch.setenv("FLOE_EXEMPLAR_EXEMPLAR_PATH", str(exemplar_dir))
    reset_settings()

    registry = GeneratorRegistry()
    synthesizer = ObjectSynthesizer(registry=registry)
    monkeypatch.setattr(registry_module, "_registry", registry)
    monkeypatch.setattr(synthesizer_module, "_synthesizer", synthesizer)

    yield synthesizer

    reset_settings()
