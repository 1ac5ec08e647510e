"""Settings for the storage middleware.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Settings are read when a middleware instance is created, never per action.
Pass `diagnostics=` / `attach_origin=` to `create_middleware` to bypass them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PRODUCTION = "production"


class StorageSettings(BaseSettings):
    """Settings for the storage middleware.

    Environment variables:
    - STORAGE_ENV            (optional, diagnostics are silent in "production")
    - LOG_LEVEL              (optional)
    - STORAGE_ATTACH_ORIGIN  (optional, defaults to following diagnostics)
    - STORAGE_STATE_FILE     (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `StorageSettings(_env_file=path_to_env)`.
    """

    environment: str = Field(
        default="development",
        validation_alias="STORAGE_ENV",
        description="Execution mode; diagnostics are emitted unless this is 'production'",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    attach_origin: bool | None = Field(
        default=None,
        validation_alias="STORAGE_ATTACH_ORIGIN",
        description=(
            "Attach the originating action as meta.origin on SAVE actions. "
            "When unset, origin is attached whenever diagnostics are enabled."
        ),
    )

    state_file: Path = Field(
        default=Path("state/state.json"),
        validation_alias="STORAGE_STATE_FILE",
        description="Path used by the JSON file engine",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def _normalise_environment(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def diagnostics_enabled(self) -> bool:
        """Whether the diagnostic channel emits warnings."""

        return self.environment != PRODUCTION

    @property
    def origin_enabled(self) -> bool:
        if self.attach_origin is None:
            return self.diagnostics_enabled
        return self.attach_origin
