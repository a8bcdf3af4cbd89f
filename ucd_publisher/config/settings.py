#ucd_publisher\config\settings.py

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PublisherSettings(BaseSettings):
    """Publisher configuration from environment variables (UCD_*)."""

    model_config = SettingsConfigDict(
        env_prefix="UCD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Default site profile. Ignored when sites_file is set.
    profile_name: str = "default"
    url: Optional[str] = None
    user: Optional[str] = None
    password: SecretStr = SecretStr("")
    admin_user: bool = False
    trust_all_certs: bool = False

    # YAML file with a list of site profiles
    sites_file: Optional[str] = None

    # HTTP
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # Deployment polling. No timeout and no attempt limit by default.
    poll_interval_seconds: float = Field(default=3.0, ge=0)
    poll_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    poll_max_attempts: Optional[int] = Field(default=None, ge=1)
