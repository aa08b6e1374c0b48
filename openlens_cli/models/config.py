"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DOWNLOAD_FILENAME = "openlens_download.mp4"
DEFAULT_POLL_INTERVAL = 2.0


class ClientConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Job service
    service_url: str
    request_timeout: float = 30.0

    # Polling
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_poll_attempts: int = 0  # 0 means poll until the job settles

    # Storage
    download_dir: Path
    download_filename: str = DEFAULT_DOWNLOAD_FILENAME
    media_dir: Path

    # Internal fields not loaded from INI file
    config_path: str = Field(..., repr=False)

    @field_validator("service_url")
    @classmethod
    def validate_service_url(cls, v: str) -> str:
        """Requires an absolute http(s) base URL and drops any trailing slash."""
        if not v:
            raise ValueError(
                "Service URL is not configured. Run 'openlens init' first."
            )
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Service URL must start with http:// or https://: {v}")
        return v.rstrip("/")

    @field_validator("poll_interval", "request_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Intervals and timeouts must be greater than zero.")
        return v

    @field_validator("max_poll_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Max poll attempts cannot be negative (0 = unlimited).")
        return v

    @field_validator("download_filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """The download slot is a single file name, never a path."""
        if not v:
            raise ValueError("Download filename cannot be empty.")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("Download filename cannot contain path separators.")
        return v

    @property
    def download_path(self) -> Path:
        """The one fixed local slot every download is written to."""
        return self.download_dir.expanduser() / self.download_filename

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
