"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .defaults import (
    DEFAULT_GENERIC_EMBED_PATTERNS,
    DEFAULT_INTERNAL_INDIRECTION_PATTERNS,
    DEFAULT_PLACEHOLDER_PATTERNS,
    DEFAULT_VIDEO_HOSTS,
)

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]
FetcherBackend = Literal["httpx", "playwright"]


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


class LinkClassificationConfig(BaseModel):
    """Allow/deny lists consumed by the link classifier.

    All values configurable via YAML (links section). Site changes should
    only ever need an edit here, never a code change.
    """

    video_hosts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_VIDEO_HOSTS),
        description="Substrings identifying known video-hosting providers.",
    )
    placeholder_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_PATTERNS),
        description="Substrings identifying tutorial/trailer/ad-skip embeds.",
    )
    generic_embed_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GENERIC_EMBED_PATTERNS),
        description="Generic video-platform embed markers.",
    )
    treat_generic_embeds_as_placeholders: bool = Field(
        default=True,
        description=(
            "Treat generic platform embeds without an allow-listed host as "
            "filler (site-specific policy)."
        ),
    )
    internal_indirection_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_INTERNAL_INDIRECTION_PATTERNS),
        description="Substrings identifying the site's own embed/redirect pages.",
    )

    @field_validator(
        "video_hosts",
        "placeholder_patterns",
        "generic_embed_patterns",
        "internal_indirection_patterns",
    )
    @classmethod
    def _strip_empty(cls, v: list[str]) -> list[str]:
        # An empty pattern would match every URL.
        return [p for p in (s.strip() for s in v) if p]


class ExportConfig(BaseModel):
    """Courtesy delays and limits for the SQL export drivers."""

    episode_delay_seconds: float = Field(
        default=0.5,
        description="Pause between two episode link resolutions.",
    )
    anime_delay_seconds: float = Field(
        default=1.0,
        description="Pause between two anime in bulk/daily exports.",
    )
    page_delay_seconds: float = Field(
        default=0.3,
        description="Pause between two catalog pages while crawling.",
    )
    max_category_pages: int = Field(
        default=50,
        description="Upper bound of pages crawled per catalog category.",
    )
    output_dir: Path = Field(
        default=Path("."),
        description="Directory for daily export files.",
    )

    @field_validator("output_dir", mode="before")
    @classmethod
    def _validate_output_dir(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator(
        "episode_delay_seconds", "anime_delay_seconds", "page_delay_seconds"
    )
    @classmethod
    def _validate_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("delays must be >= 0")
        return v

    @field_validator("max_category_pages")
    @classmethod
    def _validate_max_pages(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_category_pages must be > 0")
        return v



class DatabaseConfig(BaseModel):
    """MySQL connection used by ``db-import``."""

    host: str = Field(default="localhost", description="MySQL server host.")
    port: int = Field(default=3306, description="MySQL server port.")
    user: str = Field(default="root", description="MySQL user.")
    password: str = Field(default="", description="MySQL password.")
    name: str = Field(default="animedekho", description="Database (schema) name.")
    pool_size: int = Field(default=5, description="Maximum pooled connections.")
    connect_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for opening a connection.",
    )

    @field_validator("port")
    @classmethod
    def _validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError("database port must be between 1 and 65535")
        return v

    @field_validator("pool_size")
    @classmethod
    def _validate_pool_size(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("database pool_size must be > 0")
        return v

class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (site/http/fetcher/playwright/logging/
      links/export/database).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow
      strict precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="animedekho", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Site (YAML section: site.*)
    site_base_url: str = Field(
        default="https://animedekho.app",
        validation_alias=AliasChoices(
            "site_base_url",
            AliasPath("site", "base_url"),
        ),
        description="Origin of the scraped site (no trailing slash).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )
    http_server_cookie: str = Field(
        default="toronites_server=vidstream",
        validation_alias=AliasChoices(
            "http_server_cookie",
            AliasPath("http", "server_cookie"),
        ),
        description="Cookie header selecting the site's preferred mirror server.",
    )
    http_max_retries: int = Field(
        default=3,
        validation_alias=AliasChoices(
            "http_max_retries",
            AliasPath("http", "max_retries"),
        ),
        description="Retries on 429/5xx and transport errors.",
    )
    http_backoff_base_seconds: float = Field(
        default=1.0,
        validation_alias=AliasChoices(
            "http_backoff_base_seconds",
            AliasPath("http", "backoff_base_seconds"),
        ),
        description="Base delay for exponential retry backoff.",
    )
    http_max_backoff_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_max_backoff_seconds",
            AliasPath("http", "max_backoff_seconds"),
        ),
        description="Upper bound for a single retry delay.",
    )
    http_rate_limit_rps: float = Field(
        default=2.0,
        validation_alias=AliasChoices(
            "http_rate_limit_rps",
            AliasPath("http", "rate_limit_rps"),
        ),
        description="Per-domain requests per second (0 = unlimited).",
    )

    # Fetcher backend (YAML section: fetcher.*)
    fetcher_backend: FetcherBackend = Field(
        default="httpx",
        validation_alias=AliasChoices(
            "fetcher_backend",
            AliasPath("fetcher", "backend"),
        ),
        description="Page fetcher: plain HTTP (httpx) or rendered (playwright).",
    )

    # Playwright (YAML section: playwright.*)
    playwright_headless: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "playwright_headless",
            AliasPath("playwright", "headless"),
        ),
        description="Run Playwright headless.",
    )
    playwright_timeout_ms: int = Field(
        default=30_000,
        validation_alias=AliasChoices(
            "playwright_timeout_ms",
            AliasPath("playwright", "timeout_ms"),
        ),
        description="Playwright navigation timeout in milliseconds.",
    )

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

    # Link classification lists (YAML section: links.*)
    links: LinkClassificationConfig = Field(default_factory=LinkClassificationConfig)

    # Export drivers (YAML section: export.*)
    export: ExportConfig = Field(default_factory=ExportConfig)

    # Direct database import (YAML section: database.*)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @field_validator("site_base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("site_base_url must be an http(s) URL")
        return v.rstrip("/")

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @field_validator("http_max_retries")
    @classmethod
    def _validate_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("http_max_retries must be >= 0")
        return v

    @field_validator("playwright_timeout_ms")
    @classmethod
    def _validate_playwright_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("playwright_timeout_ms must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Supported env var examples (flat, explicit):
    - ANIMEDEKHO_SITE_BASE_URL
    - ANIMEDEKHO_HTTP_TIMEOUT_SECONDS
    - ANIMEDEKHO_FETCHER_BACKEND
    - ANIMEDEKHO_LOG_LEVEL
    - ANIMEDEKHO_DB_HOST / ANIMEDEKHO_DB_PASSWORD
    """

    model_config = SettingsConfigDict(
        env_prefix="ANIMEDEKHO_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    site_base_url: Optional[str] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    http_server_cookie: Optional[str] = None
    http_max_retries: Optional[int] = None
    http_rate_limit_rps: Optional[float] = None

    fetcher_backend: Optional[FetcherBackend] = None

    playwright_headless: Optional[bool] = None
    playwright_timeout_ms: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    db_host: Optional[str] = None
    db_port: Optional[int] = None
    db_user: Optional[str] = None
    db_password: Optional[str] = None
    db_name: Optional[str] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
