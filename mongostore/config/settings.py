"""Root settings model for mongostore configuration."""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mongostore.config.loader import load_config
from mongostore.config.models.observability import ObservabilityConfig
from mongostore.config.models.storage import StorageConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LayeredTomlSource(PydanticBaseSettingsSource):
    """Settings source over config/default.toml with the environment overlay.

    The files are read once, when the source is built, so every Settings
    instance carries its own snapshot of the configuration directory.
    """

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        super().__init__(settings_cls)
        self._values = load_config(config_dir, environment)

    def get_field_value(
        self, field: FieldInfo, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = self._values.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return dict(self._values)


class Settings(BaseSettings):
    """Process configuration for the cache and session stores.

    Precedence, highest first: constructor arguments, ``MONGOSTORE_*``
    environment variables (``__`` separates nested keys), the
    ``{MONGOSTORE_ENV}.toml`` overlay, ``default.toml``, field defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONGOSTORE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="mongostore", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default="INFO", description="Logging level")

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Cache and session backend configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Logging and metrics configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, LayeredTomlSource(settings_cls))
