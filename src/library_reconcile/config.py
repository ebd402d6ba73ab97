"""Configuration management for the library reconciliation tool."""

import os
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()

DEFAULT_TRIALS = 500
DEFAULT_SKIP_COUNT = 10
DEFAULT_CONFIRM_DELAY = 0.4
DEFAULT_SIGNIFICANCE_PERCENT = 90


class ConfigurationError(Exception):
    """Raised when required credentials or identifiers are missing."""

    pass


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Destination Subsonic credentials
        self.subsonic_user = os.getenv("SUBSONIC_USER", "")
        self.subsonic_pass = os.getenv("SUBSONIC_PASS", "")

        # Source Subsonic credentials (subsonic2subsonic only)
        self.subsonic_src_user = os.getenv("SUBSONIC_SRC_USER", "")
        self.subsonic_src_pass = os.getenv("SUBSONIC_SRC_PASS", "")

        # Ampache credentials
        self.ampache_user = os.getenv("AMPACHE_USER", "")
        self.ampache_pass = os.getenv("AMPACHE_PASS", "")
        self.ampache_verbose = self._int_env("AMPACHE_VERBOSE", 0)

        # HTTP settings
        self.http_timeout = float(os.getenv("LIBRARY_RECONCILE_HTTP_TIMEOUT", "30"))

    @staticmethod
    def _int_env(name: str, default: int) -> int:
        value = os.getenv(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def subsonic_credentials(
        self, url: Optional[str], required: bool = False
    ) -> Tuple[str, str]:
        """Return destination Subsonic credentials.

        Args:
            url: Destination URL, if one was given
            required: Both user and password must be set

        Raises:
            ConfigurationError: If a user or URL is given without a password,
                or a required value is missing
        """
        missing_user = required and not self.subsonic_user
        if missing_user or ((self.subsonic_user or url) and not self.subsonic_pass):
            raise ConfigurationError(
                "If connecting to Subsonic, you must set the SUBSONIC_USER and "
                "SUBSONIC_PASS environment variables."
            )
        return self.subsonic_user, self.subsonic_pass

    def subsonic_src_credentials(self) -> Tuple[str, str]:
        """Return source Subsonic credentials.

        Raises:
            ConfigurationError: If either value is missing
        """
        if not self.subsonic_src_user or not self.subsonic_src_pass:
            raise ConfigurationError(
                "You must set the SUBSONIC_SRC_USER and SUBSONIC_SRC_PASS "
                "environment variables."
            )
        return self.subsonic_src_user, self.subsonic_src_pass

    def ampache_credentials(self, url: Optional[str]) -> Tuple[str, str]:
        """Return Ampache credentials.

        Raises:
            ConfigurationError: If a user or URL is given without a password
        """
        if (self.ampache_user or url) and not self.ampache_pass:
            raise ConfigurationError(
                "If connecting to Ampache, you must set the AMPACHE_USER and "
                "AMPACHE_PASS environment variables."
            )
        return self.ampache_user, self.ampache_pass


class ReconcileOptions(BaseModel):
    """Options for a single reconciliation run.

    Attributes:
        src_root: Source library root; inferred when both roots are omitted
        dst_root: Destination library root
        dry_run: Report only, never call the rating mutator
        skip_count: Tolerated skips and failures (<= 0 means unlimited)
        copy_unrated: Clear destination ratings when the source is unrated
        trials: Number of random samples used to infer library roots
        confirm_delay: Pause in seconds before the first write
        significance_percent: Missing ratio that triggers the root warning
    """

    src_root: Optional[str] = None
    dst_root: Optional[str] = None
    dry_run: bool = True
    skip_count: int = DEFAULT_SKIP_COUNT
    copy_unrated: bool = False
    trials: int = Field(default=DEFAULT_TRIALS, gt=0)
    confirm_delay: float = Field(default=DEFAULT_CONFIRM_DELAY, ge=0)
    significance_percent: int = Field(
        default=DEFAULT_SIGNIFICANCE_PERCENT, ge=0, le=100
    )

    model_config = ConfigDict(frozen=True)

    @property
    def roots_configured(self) -> bool:
        """Whether the caller supplied at least one root explicitly."""
        return self.src_root is not None or self.dst_root is not None


def get_config() -> Config:
    """Get application configuration."""
    return Config()
