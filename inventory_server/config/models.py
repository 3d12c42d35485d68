"""
Pydantic-based configuration models for the inventory server.

Each section reads its own environment prefix; ``AppConfig`` aggregates them
and also reads a ``.env`` file from the working directory.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    log_base: str = Field(default="logs", description="Base log directory")
    rotation_max_size: str = Field(default="10MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, description="Number of backup log files")
    console: bool = Field(default=True, description="Mirror log records to stdout")
    disable_logging: bool = Field(default=False, description="Disable file logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "production"]
        if v not in valid_environments:
            logger.error("Invalid logging environment", environment=v, valid_environments=valid_environments)
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to the dict shape consumed by ``setup_enhanced_logging``."""
        return self.model_dump()

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}


class CatalogConfig(BaseSettings):
    """Item catalog configuration."""

    config_path: str = Field(
        default=str(PACKAGE_DATA_DIR / "items.json"),
        description="Path to the JSON file describing every item",
    )

    model_config = {"env_prefix": "CATALOG_", "case_sensitive": False, "extra": "ignore"}


class PersistenceConfig(BaseSettings):
    """Persisted snapshot configuration."""

    backend: str = Field(default="json", description="Data store backend: 'memory' or 'json'")
    data_path: str = Field(default="data/items_state.json", description="Snapshot file for the json backend")

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate the data store backend name."""
        valid_backends = ["memory", "json"]
        v_lower = v.lower()
        if v_lower not in valid_backends:
            raise ValueError(f"Persistence backend must be one of {valid_backends}, got '{v}'")
        return v_lower

    model_config = {"env_prefix": "PERSISTENCE_", "case_sensitive": False, "extra": "ignore"}


class NotificationConfig(BaseSettings):
    """Outbound client notification configuration."""

    timeout_seconds: float = Field(default=5.0, description="Upper bound on a single notification attempt")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate the notification timeout is positive."""
        if v <= 0:
            raise ValueError("Notification timeout must be greater than zero")
        return v

    model_config = {"env_prefix": "NOTIFICATION_", "case_sensitive": False, "extra": "ignore"}


class MapDimensions(BaseModel):
    """Width and height of a single map, in cells."""

    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


class WorldConfig(BaseSettings):
    """Maps known to the bundled static world map."""

    maps: dict[str, MapDimensions] = Field(
        default_factory=lambda: {"world1": MapDimensions(width=64, height=64)},
        description="Map name to dimensions, e.g. WORLD_MAPS='{\"world1\": {\"width\": 64, \"height\": 64}}'",
    )

    @field_validator("maps")
    @classmethod
    def validate_maps(cls, v: dict[str, MapDimensions]) -> dict[str, MapDimensions]:
        """At least one map must be configured."""
        if not v:
            raise ValueError("At least one map must be configured")
        return v

    model_config = {"env_prefix": "WORLD_", "case_sensitive": False, "extra": "ignore"}


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Access via the ``get_config()`` function.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    notification: NotificationConfig = Field(default_factory=NotificationConfig)
    world: WorldConfig = Field(default_factory=WorldConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}

    def to_legacy_dict(self) -> dict[str, Any]:
        """Convert to the nested dict format used by logging setup."""
        return {
            "logging": self.logging.to_legacy_dict(),
            "catalog": {"config_path": self.catalog.config_path},
            "persistence": {"backend": self.persistence.backend, "data_path": self.persistence.data_path},
            "notification": {"timeout_seconds": self.notification.timeout_seconds},
            "world": {name: dims.model_dump() for name, dims in self.world.maps.items()},
        }
