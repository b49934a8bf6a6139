"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamsnare.domain.entities.provider import DEFAULT_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
CacheBackendName = Literal["memory", "diskcache", "redis"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class BrowserConfig(BaseModel):
    """Headless browser settings (YAML section: browser.*)."""

    headless: bool = Field(default=True, description="Run Chromium headless.")
    stealth: bool = Field(
        default=False,
        description="Apply playwright-stealth evasions to every browser context.",
    )
    executable_path: Optional[Path] = Field(
        default=None,
        description=(
            "Explicit Chrome/Chromium binary. When unset, CHROME_EXECUTABLE, "
            "CHROME_PATH and platform default locations are tried."
        ),
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent presented by every browser session.",
    )
    navigation_timeout_ms: int = Field(
        default=15_000,
        description="Timeout for the primary page navigation.",
    )
    probe_navigation_timeout_ms: int = Field(
        default=20_000,
        description="Timeout for each deep-probe navigation.",
    )
    launch_args: list[str] = Field(
        default=[
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ],
        description="Extra Chromium command-line flags.",
    )

    @field_validator("executable_path", mode="before")
    @classmethod
    def _validate_executable(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return _normalize_path(v)

    @field_validator("navigation_timeout_ms", "probe_navigation_timeout_ms")
    @classmethod
    def _validate_timeouts(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("navigation timeouts must be > 0")
        return v


class ResolutionConfig(BaseModel):
    """Resolution pipeline tuning (YAML section: resolution.*)."""

    intercept_wait_seconds: float = Field(
        default=10.0,
        description="Passive interception window for single-stream resolution.",
    )
    intercept_wait_seconds_multi: float = Field(
        default=5.0,
        description="Passive interception window per page for sports scraping.",
    )
    poll_interval_ms: int = Field(
        default=250,
        description="Polling interval while waiting for an intercepted stream.",
    )
    overall_timeout_seconds: float = Field(
        default=45.0,
        description="Hard budget for one single-stream resolution run.",
    )
    overall_timeout_seconds_multi: float = Field(
        default=90.0,
        description="Budget for one event page including deep probing; "
        "probing stops at the deadline and keeps what it found.",
    )
    stream_validity_seconds: int = Field(
        default=600,
        description="Assumed validity of a resolved stream URL (expiresAt).",
    )
    max_probe_depth: int = Field(
        default=2,
        description="Nesting levels deep-probed beyond the event page.",
    )
    max_probe_navigations: int = Field(
        default=12,
        description="Upper bound on deep-probe navigations per event page.",
    )

    @field_validator("intercept_wait_seconds", "intercept_wait_seconds_multi")
    @classmethod
    def _validate_waits(cls, v: float) -> float:
        if v < 0:
            raise ValueError("interception waits must be >= 0")
        return v

    @field_validator("overall_timeout_seconds", "overall_timeout_seconds_multi")
    @classmethod
    def _validate_overall_budgets(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("overall budgets must be > 0")
        return v

    @field_validator("max_probe_depth", "max_probe_navigations")
    @classmethod
    def _validate_probe_bounds(cls, v: int) -> int:
        if v < 0:
            raise ValueError("probe bounds must be >= 0")
        return v


class CacheConfig(BaseSettings):
    """Result cache configuration (backend-agnostic)."""

    backend: CacheBackendName = Field(
        default="memory",
        description="Cache backend: 'memory' (LRU), 'diskcache' (SQLite) or 'redis'",
    )

    # Diskcache settings
    directory: Path = Field(
        default=Path("./.cache/streamsnare"),
        alias="dir",
        description="Diskcache root directory (one sub-directory per result kind)",
    )

    # Redis settings
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )

    # Per-kind TTLs
    stream_ttl_seconds: int = Field(
        default=420,
        description="TTL for resolved single streams (time-limited upstream grants).",
    )
    categories_ttl_seconds: int = Field(
        default=3600,
        description="TTL for sports category listings.",
    )
    events_ttl_seconds: int = Field(
        default=900,
        description="TTL for sports event listings.",
    )
    event_streams_ttl_seconds: int = Field(
        default=300,
        description="TTL for extracted event stream candidates.",
    )
    sports_all_ttl_seconds: int = Field(
        default=900,
        description="TTL for full sports crawls.",
    )

    # Capacities
    stream_max_entries: int = Field(
        default=500,
        description="Max entries in the resolved-stream cache (LRU eviction).",
    )
    listing_max_entries: int = Field(
        default=100,
        description="Max entries per listing cache (LRU eviction).",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit, diskcache/redis)",
    )

    model_config = SettingsConfigDict(
        env_prefix="STREAMSNARE_CACHE_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator(
        "stream_ttl_seconds",
        "categories_ttl_seconds",
        "events_ttl_seconds",
        "event_streams_ttl_seconds",
        "sports_all_ttl_seconds",
    )
    @classmethod
    def _validate_ttl(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache TTLs must be >= 0")
        return v

    @field_validator("stream_max_entries", "listing_max_entries")
    @classmethod
    def _validate_capacity(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("cache capacities must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (browser/resolution/logging/cache).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    model_config = ConfigDict(populate_by_name=True)

    # General
    app_name: str = Field(default="streamsnare", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    cache: CacheConfig = Field(default_factory=CacheConfig)

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        browser = self.browser.model_dump()
        if browser["executable_path"] is not None:
            browser["executable_path"] = str(browser["executable_path"])
        cache = self.cache.model_dump(by_alias=True)
        cache["dir"] = str(self.cache.directory)
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "browser": browser,
            "resolution": self.resolution.model_dump(),
            "logging": {"level": self.log_level, "format": self.log_format},
            "cache": cache,
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read STREAMSNARE_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - STREAMSNARE_BROWSER_HEADLESS
    - STREAMSNARE_BROWSER_EXECUTABLE_PATH
    - STREAMSNARE_NAVIGATION_TIMEOUT_MS
    - STREAMSNARE_LOG_LEVEL
    - STREAMSNARE_CACHE_BACKEND
    """

    model_config = SettingsConfigDict(
        env_prefix="STREAMSNARE_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    browser_headless: Optional[bool] = None
    browser_executable_path: Optional[Path] = None
    navigation_timeout_ms: Optional[int] = None

    intercept_wait_seconds: Optional[float] = None
    overall_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    cache_backend: Optional[CacheBackendName] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """Return only explicitly-set values (flat keys)."""
        return self.model_dump(exclude_none=True)
