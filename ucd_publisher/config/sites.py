"""Site profiles and the immutable global configuration."""

import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError

from ucd_publisher.client.http import UCDHttpClient
from ucd_publisher.config.settings import PublisherSettings
from ucd_publisher.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollConfig:
    interval_seconds: float = 3.0
    timeout_seconds: Optional[float] = None
    max_attempts: Optional[int] = None


@dataclass(frozen=True)
class Site:
    """
    Connection profile for one deployment server.

    The HTTP client is created on first use and reused afterwards.
    Not meant to be shared between threads.
    """

    profile_name: str
    url: str
    user: str
    password: SecretStr
    trust_all_certs: bool = False
    admin_user: bool = False
    timeout: Optional[float] = None

    @property
    def display_name(self) -> str:
        return self.profile_name or self.url

    @cached_property
    def client(self) -> UCDHttpClient:
        return UCDHttpClient(
            self.url,
            self.user,
            self.password.get_secret_value(),
            trust_all_certs=self.trust_all_certs,
            timeout=self.timeout,
        )

    def verify_connection(self) -> None:
        self.client.request("GET", "/rest/state")


@dataclass(frozen=True)
class GlobalConfig:
    """Loaded once at start-up and passed to every workflow."""

    sites: Tuple[Site, ...]
    poll: PollConfig = PollConfig()

    def get_site(self, name: Optional[str] = None) -> Site:
        if not self.sites:
            raise ConfigurationError("No deployment server sites are configured")

        if not name:
            return self.sites[0]

        for site in self.sites:
            if site.display_name == name:
                return site

        raise ConfigurationError(f"Unknown site profile '{name}'")


class SiteProfile(BaseModel):
    """One entry of a sites file."""

    profile_name: str
    url: str
    user: str
    password: SecretStr
    trust_all_certs: bool = False
    admin_user: bool = False

    model_config = ConfigDict(extra="forbid")


def _validate_url(profile: str, url: Optional[str]) -> str:
    if not url:
        raise ConfigurationError(f"Site '{profile}' has no URL")
    if not url.startswith(("http://", "https://")):
        raise ConfigurationError(f"URL {url} is malformed: expected http:// or https://")
    return url.rstrip("/")


def load_sites_file(path: str, timeout: Optional[float] = None) -> Tuple[Site, ...]:
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read sites file {path}: {e}") from e

    entries = raw.get("sites", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ConfigurationError(f"Sites file {path} must contain a list of sites")

    sites = []
    for entry in entries:
        try:
            profile = SiteProfile.model_validate(entry)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid site profile in {path}: {e}") from e

        sites.append(
            Site(
                profile_name=profile.profile_name,
                url=_validate_url(profile.profile_name, profile.url),
                user=profile.user,
                password=profile.password,
                trust_all_certs=profile.trust_all_certs,
                admin_user=profile.admin_user,
                timeout=timeout,
            )
        )

    return tuple(sites)


def load_global_config(settings: Optional[PublisherSettings] = None) -> GlobalConfig:
    settings = settings or PublisherSettings()

    if settings.sites_file:
        sites = load_sites_file(settings.sites_file, timeout=settings.request_timeout_seconds)
    elif settings.url:
        sites = (
            Site(
                profile_name=settings.profile_name,
                url=_validate_url(settings.profile_name, settings.url),
                user=settings.user or "",
                password=settings.password,
                trust_all_certs=settings.trust_all_certs,
                admin_user=settings.admin_user,
                timeout=settings.request_timeout_seconds,
            ),
        )
    else:
        sites = ()

    logger.info(f"Loaded {len(sites)} site profile(s)")

    return GlobalConfig(
        sites=sites,
        poll=PollConfig(
            interval_seconds=settings.poll_interval_seconds,
            timeout_seconds=settings.poll_timeout_seconds,
            max_attempts=settings.poll_max_attempts,
        ),
    )
