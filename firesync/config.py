"""Run configuration read from the environment."""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .loaders.base import DEFAULT_BATCH_SIZE

# Environment variable -> settings field
ENV_VARS = {
    "SUPABASE_URL": "supabase_url",
    "SUPABASE_SERVICE_KEY": "supabase_service_key",
    "FIREBASE_CREDENTIALS": "firebase_credentials",
    "FIRESYNC_BATCH_SIZE": "batch_size",
    "FIRESYNC_TIMEOUT": "timeout",
}


class SyncSettings(BaseModel):
    """Connection settings and tuning for a sync run."""
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    firebase_credentials: str = "serviceAccountKey.json"
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("supabase_url")
    @classmethod
    def check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return value.rstrip("/")

    @property
    def has_destination(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dry_run: bool = False
    ) -> "SyncSettings":
        """
        Build settings from environment variables.

        Empty variables count as unset.

        Args:
            environ: Environment to read, defaults to os.environ
            dry_run: Destination credentials are optional for dry runs

        Returns:
            Validated SyncSettings

        Raises:
            ConfigurationError: If a value is invalid or credentials are missing
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[name]
            for name, field in ENV_VARS.items()
            if environ.get(name)
        }

        try:
            settings = cls(**values)
        except ValidationError as e:
            problems = "; ".join(
                f"{_env_name(err['loc'][0])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e

        if not dry_run and not settings.has_destination:
            raise ConfigurationError(
                "Missing SUPABASE_URL or SUPABASE_SERVICE_KEY environment variables"
            )
        return settings


def _env_name(field: str) -> str:
    for name, candidate in ENV_VARS.items():
        if candidate == field:
            return name
    return field
