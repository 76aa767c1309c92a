"""Schedule proxy configuration loaded from environment variables."""

from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings


class ScheduleProxyConfig(BaseSettings):
    """Schedule proxy configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Portal settings (schedule is only rendered client-side, no API exists)
    portal_url: str = Field(
        default="https://portal.psuti.ru",
        description="Portal base URL",
    )
    schedule_path: str = Field(
        default="/psuti/schedule-open/list",
        description="Path of the public schedule page",
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Listen address")
    port: int = Field(default=3000, description="Listen port")
    allowed_origins: list[str] = Field(
        default=["*"],
        description="CORS allowed origins",
    )

    # Cache
    cache_ttl_seconds: float = Field(
        default=60.0,
        description="How long a fetched schedule is served from cache",
    )
    cache_max_entries: int = Field(
        default=1024,
        description="Maximum cached queries before LRU eviction (0 = unbounded)",
    )
    cache_sweep_interval_seconds: float = Field(
        default=300.0,
        description="Interval of the expired-entry sweep (0 disables it)",
    )

    # Browser
    navigation_timeout_ms: int = Field(
        default=10000,
        description="Timeout for a single page navigation",
    )
    headless: bool = Field(default=True, description="Run Chromium headless")
    relaunch_on_crash: bool = Field(
        default=True,
        description="Relaunch the browser when it is found dead before a fetch",
    )
    launch_attempts: int = Field(
        default=2,
        description="Attempts at relaunching a crashed browser",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = {
        "env_prefix": "",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def portal_domain(self) -> str:
        """Host name the portal cookies are scoped to."""
        return urlparse(self.portal_url).hostname or ""

    @property
    def schedule_url(self) -> str:
        return f"{self.portal_url.rstrip('/')}{self.schedule_path}"


# Singleton pattern
_config: ScheduleProxyConfig | None = None


def get_config() -> ScheduleProxyConfig:
    """Get the schedule proxy configuration singleton.

    Returns:
        ScheduleProxyConfig: Configuration instance
    """
    global _config
    if _config is None:
        _config = ScheduleProxyConfig()
    return _config
