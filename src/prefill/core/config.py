# src/prefill/core/config.py
"""
Configuration schema and loading for prefill.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

# Values the global provider resolves profile sources to when no profile is
# configured. Keys match the global source catalog ids.
DEFAULT_GLOBAL_PROFILE: dict[str, str] = {
    "user_email": "patient@example.com",
    "user_name": "John Smith",
    "org_name": "City Medical Center",
}


class GraphSourceSettings(BaseModel):
    """Where the intake graph is loaded from.

    A configured file wins over the HTTP endpoint.

    Example YAML:
        graph:
          base_url: http://localhost:3001
          endpoint: /api/v1/clinic/intake/workflow/graph
          timeout_seconds: 10
    """

    model_config = {"frozen": True}

    base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL of the graph API",
    )
    endpoint: str = Field(
        default="/api/v1/clinic/intake/workflow/graph",
        description="Path of the blueprint graph endpoint",
    )
    file: Path | None = Field(
        default=None,
        description="Read the graph payload from this JSON file instead of HTTP",
    )
    timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout for the graph fetch",
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers (e.g., authorization for a gateway)",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {v!r}")
        return v.rstrip("/")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"endpoint must start with '/', got {v!r}")
        return v

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.endpoint}"


class StorageSettings(BaseModel):
    """Where the mapping document is persisted."""

    model_config = {"frozen": True}

    path: Path = Field(
        default=Path(".prefill/mappings.json"),
        description="JSON file holding the mapping document",
    )


class PrefillSettings(BaseModel):
    """Top-level prefill configuration.

    All settings are validated and frozen after construction.
    """

    model_config = {"frozen": True}

    graph: GraphSourceSettings = Field(
        default_factory=GraphSourceSettings,
        description="Graph supply configuration",
    )
    storage: StorageSettings = Field(
        default_factory=StorageSettings,
        description="Mapping persistence configuration",
    )
    global_profile: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_GLOBAL_PROFILE),
        description="Literal values the global provider resolves to, keyed by global id",
    )
    request_url: str | None = Field(
        default=None,
        description="Request URL whose query parameters feed the URL-parameter provider",
    )


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            if match.group(2) is not None:
                return match.group(2)
            # No env var and no default - keep original (validation will likely flag it)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Dynaconf uppercases nested keys too; Pydantic fields are lowercase."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def default_settings() -> PrefillSettings:
    """Settings used when no configuration file is given."""
    return PrefillSettings()


def load_settings(config_path: Path) -> PrefillSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (PREFILL_*) - highest priority
    2. Config file (prefill.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: PREFILL_GRAPH__BASE_URL for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PREFILL",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return PrefillSettings(**raw_config)
