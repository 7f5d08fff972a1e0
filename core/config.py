"""
Centralized configuration for the Sales Dashboard API.

Configuration is loaded from environment variables (optionally via a .env
file) with sensible defaults.

Per-environment OCAPI credentials:
    API_BASE_URL_<ENV>, CLIENT_ID_<ENV>, AUTH_HEADER_<ENV>

Dynamic filter fields (NAME is upper snake case, e.g. ORDER_TYPE -> orderType):
    FILTER_<NAME>_FIELD    remote OCAPI field, e.g. c_smartOrderType
    FILTER_<NAME>_VALUES   comma-separated permitted values (required)
    FILTER_<NAME>_LABEL    display label (optional)
    FILTER_<NAME>_DEFAULT  value applied when the request omits the field (optional)

Usage:
    from core.config import config, get_environment_config, get_filter_fields

    env_config = get_environment_config("prd")
    fields = get_filter_fields()
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from core.observability import get_logger

# Load environment variables
load_dotenv()

logger = get_logger(__name__)

DEFAULT_ENVIRONMENT = "DEV"

_FILTER_FIELD_RE = re.compile(r"^FILTER_([A-Z0-9_]+?)_FIELD$")


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class APIConfig:
    """OCAPI configuration."""

    version: str = field(default_factory=lambda: os.getenv("OCAPI_VERSION", "v24_5"))
    page_size: int = 200
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "30"))
    )
    token_expiry_margin_seconds: int = 60
    grant_type: str = "urn:demandware:params:oauth:grant-type:client-id:dwsid:dwsecuretoken"


@dataclass(frozen=True)
class CacheConfig:
    """Response cache configuration."""

    ttl_seconds: int = field(
        default_factory=lambda: int(os.getenv("CACHE_TTL_SECONDS", "1800"))  # 30 minutes
    )
    sweep_interval_seconds: int = field(
        default_factory=lambda: int(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", "60"))
    )


@dataclass(frozen=True)
class WebConfig:
    """Web server configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    default_environment: str = field(
        default_factory=lambda: os.getenv("DEFAULT_ENVIRONMENT", DEFAULT_ENVIRONMENT).upper()
    )
    environments: List[str] = field(
        default_factory=lambda: [e.upper() for e in _env_list("SUPPORTED_ENVIRONMENTS", "DEV,PRD")]
    )
    api: APIConfig = field(default_factory=APIConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


# ─── Environments ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EnvironmentConfig:
    """Connection settings for one OCAPI environment (DEV, PRD, ...)."""

    name: str
    base_url: str = ""
    client_id: str = ""
    auth_header: str = ""

    @property
    def is_complete(self) -> bool:
        """Whether the token refresh has what it needs."""
        return bool(self.base_url and self.client_id)

    def describe(self) -> dict:
        """Configuration status without secrets."""
        return {
            "environment": self.name,
            "baseUrl": "SET" if self.base_url else "NOT SET",
            "clientId": "SET" if self.client_id else "NOT SET",
            "authHeader": "SET" if self.auth_header else "NOT SET",
        }


def normalize_environment(environment: Optional[str]) -> str:
    """Upper-case environment name, falling back to the default."""
    if environment is None or not str(environment).strip():
        return config.default_environment
    return str(environment).strip().upper()


def get_environment_config(
    environment: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EnvironmentConfig:
    """
    Resolve connection settings for a named environment.

    Never raises: unknown environments yield a config with empty fields.
    Callers must check ``is_complete`` before talking to the API.
    """
    environ = os.environ if environ is None else environ
    name = normalize_environment(environment)

    env_config = EnvironmentConfig(
        name=name,
        base_url=environ.get(f"API_BASE_URL_{name}", "").rstrip("/"),
        client_id=environ.get(f"CLIENT_ID_{name}", ""),
        auth_header=environ.get(f"AUTH_HEADER_{name}", ""),
    )
    logger.debug(f"Environment config resolved for {name}", extra=env_config.describe())
    return env_config


# ─── Filter fields ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class FilterField:
    """A filter exposed to the dashboard and forwarded as a term query."""

    name: str
    remote_field: str
    values: List[str]
    label: str = ""
    default: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "field": self.remote_field,
            "label": self.label or self.name,
            "values": list(self.values),
            "default": self.default or None,
        }


def env_key_to_field_name(key: str) -> str:
    """ORDER_TYPE -> orderType"""
    head, *rest = key.lower().split("_")
    return head + "".join(part.capitalize() for part in rest if part)


def get_filter_fields(environ: Optional[Mapping[str, str]] = None) -> List[FilterField]:
    """
    Scan the environment for dynamically declared filter fields.

    A field without a FILTER_<NAME>_VALUES list is left out entirely: the
    dashboard can only offer fields it can populate a selector for.

    Returns:
        Fields sorted by name (this order is also the term query order)
    """
    environ = os.environ if environ is None else environ
    fields = []

    for env_key in sorted(environ):
        match = _FILTER_FIELD_RE.match(env_key)
        if not match:
            continue

        key = match.group(1)
        remote_field = environ[env_key].strip()
        values = [
            v.strip() for v in environ.get(f"FILTER_{key}_VALUES", "").split(",") if v.strip()
        ]
        if not remote_field or not values:
            logger.debug(f"Filter field {key} skipped: no remote field or values list")
            continue

        fields.append(FilterField(
            name=env_key_to_field_name(key),
            remote_field=remote_field,
            values=values,
            label=environ.get(f"FILTER_{key}_LABEL", "").strip(),
            default=environ.get(f"FILTER_{key}_DEFAULT", "").strip(),
        ))

    return sorted(fields, key=lambda f: f.name)


def validate_config(environ: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Check that the default environment is usable.

    Call this on application startup. Unlike token refresh, a missing
    configuration only produces warnings here, since other environments may
    still work.

    Raises:
        ConfigurationError: If numeric settings are out of range
    """
    errors = []
    if config.cache.ttl_seconds <= 0:
        errors.append("CACHE_TTL_SECONDS must be positive")
    if config.cache.sweep_interval_seconds <= 0:
        errors.append("CACHE_SWEEP_INTERVAL_SECONDS must be positive")
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    warnings = []
    for name in config.environments:
        env_config = get_environment_config(name, environ)
        if not env_config.is_complete:
            warnings.append(f"{name}: API_BASE_URL_{name} / CLIENT_ID_{name} not set")
    return warnings
