"""Configuration models for home-semantics."""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseModel):
    """Tag catalog configuration."""

    path: Path | None = None
    """YAML catalog file. The packaged default catalog is used when unset."""

    fail_on_collisions: bool = False
    """Refuse to start when two tags share an id suffix."""


class ItemsConfig(BaseModel):
    """Item model source configuration."""

    model_file: Path = Path("./config/items.yaml")
    """YAML file describing the items and their groups."""

    watch: bool = True
    """Reload the model file when it changes."""

    debounce_seconds: float = 1.0
    """Debounce interval for rapid file changes."""


class SemanticsConfig(BaseModel):
    """Metadata derivation settings."""

    refresh_neighbors: bool = True
    """Recompute parents and members of a changed item."""

    preferred_locale: str = "en"
    """Locale used for label and synonym lookups."""


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"
    metrics_port: int = 9090
    health_port: int = 8080


class SemanticsAppConfig(BaseModel):
    """Root configuration for the semantics service."""

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    items: ItemsConfig = Field(default_factory=ItemsConfig)
    semantics: SemanticsConfig = Field(default_factory=SemanticsConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "SemanticsAppConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})


class SemanticsSettings(BaseSettings):
    """Environment-based settings that override config file values."""

    model_config = SettingsConfigDict(
        env_prefix="HOME_SEMANTICS_",
        env_nested_delimiter="__",
    )

    config_file: Path = Path("config/config.yaml")


def load_config(settings: SemanticsSettings | None = None) -> SemanticsAppConfig:
    """Load configuration from file, falling back to defaults."""
    if settings is None:
        settings = SemanticsSettings()

    if settings.config_file.exists():
        return SemanticsAppConfig.from_yaml(settings.config_file)
    return SemanticsAppConfig()
