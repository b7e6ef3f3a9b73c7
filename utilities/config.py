"""
Configuration management using environment variables.
Handles all checker settings with proper validation and defaults.
"""

from pathlib import Path
from typing import Optional

from apscheduler.triggers.cron import CronTrigger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from checker.errors import ConfigError


DEFAULT_PAGE_URL = "https://www.ucd.ie/japan/exams/"
DEFAULT_TARGET_KEYWORD = "2026"
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; JLPT-Checker/1.0)"


class CheckerConfig(BaseSettings):
    """
    Configuration class for checker settings.
    Uses pydantic BaseSettings for environment variable management.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Notification Configuration
    ntfy_topic: str = Field(..., min_length=1, description="ntfy topic identifier")
    ntfy_base_url: str = Field(default="https://ntfy.sh")

    # Page Configuration
    page_url: str = Field(default=DEFAULT_PAGE_URL)
    target_keyword: str = Field(default=DEFAULT_TARGET_KEYWORD)
    content_region: Optional[str] = Field(default=None, description="Tag to narrow the page to, e.g. main")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    request_timeout: int = Field(default=30)

    # State Store Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="jlpt_checker")
    state_collection: str = Field(default="page_state")
    write_debug_metadata: bool = Field(default=True)

    # Scheduler Configuration
    schedule_cron: str = Field(default="0 */6 * * *")
    timezone: str = Field(default="UTC")

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)
    debug: bool = Field(default=False)

    @field_validator('request_timeout')
    @classmethod
    def validate_timeout(cls, v):
        """Ensure timeout is reasonable."""
        if v < 5 or v > 300:
            raise ValueError('request_timeout must be between 5 and 300 seconds')
        return v

    @field_validator('page_url', 'ntfy_base_url')
    @classmethod
    def validate_http_url(cls, v):
        """Ensure URLs are absolute http(s) URLs."""
        if not v.startswith(("http://", "https://")):
            raise ValueError('URL must start with http:// or https://')
        return v

    @field_validator('content_region')
    @classmethod
    def validate_content_region(cls, v):
        """Treat a blank region as unset."""
        if v is not None and not v.strip():
            return None
        return v

    @field_validator('schedule_cron')
    @classmethod
    def validate_schedule_cron(cls, v):
        """Ensure the schedule is a valid five-field crontab expression."""
        try:
            CronTrigger.from_crontab(v)
        except ValueError as e:
            raise ValueError(f'schedule_cron is not a valid crontab expression: {e}')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def get_ntfy_url(self) -> str:
        """Get the ntfy publish URL for the configured topic."""
        return f"{self.ntfy_base_url.rstrip('/')}/{self.ntfy_topic}"

    def get_headers(self) -> dict:
        """Get default headers for page requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }


def load_config(**overrides) -> CheckerConfig:
    """
    Load configuration from the environment.

    Args:
        **overrides: Explicit values taking precedence over the environment

    Raises:
        ConfigError: If a required variable is missing or a value is invalid
    """
    try:
        return CheckerConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
