"""Settings for floe-exemplar.

Settings can be loaded from environment variables with the FLOE_EXEMPLAR_
prefix or from a .env file.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExemplarSettings(BaseSettings):
    """Configuration for exemplar discovery.

    Example:
        >>> # From environment (FLOE_EXEMPLAR_EXEMPLAR_PATH=spec/exemplars)
        >>> settings = ExemplarSettings()
        >>>
        >>> # Explicit
        >>> settings = ExemplarSettings(exemplar_path=Path("tests/exemplars"))
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOE_EXEMPLAR_",
        env_file=".env",
        extra="ignore",
    )

    exemplar_path: Path = Field(
        default=Path("tests/exemplars"),
        description="Directory searched for exemplar files when a type has no exemplar_path",
    )
    exemplar_suffix: str = Field(
        default="_exemplar.py",
        description="Suffix appended to the snake-cased class name",
    )
    load_ancestor_exemplars: bool = Field(
        default=True,
        description="Load exemplars of every ancestor before synthesizing a subclass",
    )

    @field_validator("exemplar_suffix")
    @classmethod
    def suffix_must_be_python_file(cls, v: str) -> str:
        """Validate that exemplar files are Python modules."""
        if not v.endswith(".py"):
            msg = f"exemplar_suffix must end with '.py', got '{v}'"
            raise ValueError(msg)
        return v


@lru_cache(maxsize=1)
def get_settings() -> ExemplarSettings:
    """Return the process-wide settings, read once from the environment."""
    return ExemplarSettings()


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
