"""One-shot loading of exemplar files.

An exemplar file declares the generators of one type. It is looked up the
first time that type is synthesized, in the type's exemplar directory, under a
name derived from the class name:

    tests/exemplars/widget_exemplar.py      -> Widget
    tests/exemplars/sub_widget_exemplar.py  -> SubWidget

The file is plain Python run with the registration API already bound to the
type, so it needs no imports:

    generator_for("name", start="widget-a", block=succ)
    generator_for({"color": "red"})

    @generator("serial")
    def next_serial(previous):
        return (previous or 0) + 1

Each exact type gets a single attempt; the guard is never inherited, and a
missing file simply means the type has no exemplar.
"""

from __future__ import annotations

import re
import runpy
from functools import partial
from pathlib import Path
from typing import Any

from floe_exemplar.config import ExemplarSettings, get_settings
from floe_exemplar.generators import UNSET
from floe_exemplar.observability import get_logger
from floe_exemplar.registry import GeneratorRegistry, get_registry
from floe_exemplar.sequences import succ

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def underscore(name: str) -> str:
    """Convert a CamelCase class name to snake_case.

    Example:
        >>> underscore("SubWidget"), underscore("HTMLParser")
        ('sub_widget', 'html_parser')
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    name = _WORD_BOUNDARY.sub(r"\1_\2", name)
    return name.replace("-", "_").lower()


class ExemplarLoader:
    """Load each type's exemplar file at most once.

    Args:
        registry: Registry the exemplar files register into.
        settings: Settings providing the default directory and file suffix.
            Defaults to the process-wide settings.
    """

    def __init__(
        self,
        registry: GeneratorRegistry | None = None,
        settings: ExemplarSettings | None = None,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        self._settings = settings
        self._attempted: set[type] = set()

    @property
    def settings(self) -> ExemplarSettings:
        return self._settings if self._settings is not None else get_settings()

    def ensure_loaded(self, target_type: type) -> bool:
        """Load the exemplar file of target_type unless already attempted.

        Args:
            target_type: Type whose exemplar file should be loaded.

        Returns:
            True if a file was found and executed by this call.
        """
        if target_type in self._attempted:
            return False
        self._attempted.add(target_type)

        logger = get_logger()
        path = self.exemplar_file(target_type)
        if not path.is_file():
            logger.debug("exemplar_missing", target=target_type.__qualname__, path=str(path))
            return False

        runpy.run_path(
            str(path),
            init_globals=self.namespace(target_type),
            run_name=f"floe_exemplar.exemplars.{path.stem}",
        )
        logger.info(
            "exemplar_loaded",
            target=target_type.__qualname__,
            path=str(path),
            generators=len(self._registry.generators_for(target_type)),
        )
        return True

    def is_loaded(self, target_type: type) -> bool:
        """Return True if target_type's exemplar has already been attempted."""
        return target_type in self._attempted

    def exemplar_directory(self, target_type: type) -> Path:
        """Directory holding target_type's exemplar.

        Uses the type's own ``exemplar_path`` (a classmethod or plain
        attribute) when it gives one, otherwise the configured default.
        """
        query = getattr(target_type, "exemplar_path", None)
        directory = query() if callable(query) else query
        if directory is None:
            return self.settings.exemplar_path
        return Path(directory)

    def exemplar_file_name(self, target_type: type) -> str:
        return f"{underscore(target_type.__name__)}{self.settings.exemplar_suffix}"

    def exemplar_file(self, target_type: type) -> Path:
        return self.exemplar_directory(target_type) / self.exemplar_file_name(target_type)

    def namespace(self, target_type: type) -> dict[str, Any]:
        """Globals available to an exemplar file of target_type."""
        return {
            "generator_for": partial(self._registry.register, target_type),
            "generator": partial(self._registry.generator, target_type),
            "succ": succ,
            "UNSET": UNSET,
            "target": target_type,
            target_type.__name__: target_type,
        }

    def reset(self, target_type: type | None = None) -> None:
        """Forget load attempts so exemplars are looked up again."""
        if target_type is None:
            self._attempted.clear()
        else:
            self._attempted.discard(target_type)
