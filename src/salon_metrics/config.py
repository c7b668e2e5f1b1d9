"""Configuration for salon metrics.

This module provides the record source connection settings and the
constants shared by every reporting facet.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from salon_metrics.exceptions import ConfigError

# Clients with no service for more than this many days are inactive
DEFAULT_INACTIVE_DAYS_THRESHOLD = 20

# Clients approaching inactivity (client list "attention" badge)
DEFAULT_ATTENTION_DAYS = 10

# Timezone used for window boundaries, "today" and hour-of-day grouping
DEFAULT_TIMEZONE = os.environ.get("SALON_TZ", "America/Sao_Paulo")

# Cap for top-client and birthday lists
TOP_N = 10

# Number of hours reported in busy_hours
BUSY_HOURS_N = 5

# Display name for ids that do not resolve to a roster/catalog row
PLACEHOLDER_NAME = "-"


@dataclass
class SourceConfig:
    """Connection settings for the hosted record source.

    Attributes:
        url: Base URL of the backend project (e.g. https://xyz.supabase.co).
        api_key: API key sent as both ``apikey`` and bearer token.
        schema: Database schema exposed by the REST endpoint.
        timeout: Default timeout in seconds for every request.
        retries: Retry attempts for transient HTTP failures.
    """

    url: str
    api_key: str
    schema: str = "public"
    timeout: float = 30.0
    retries: int = 3

    @classmethod
    def from_env(cls) -> SourceConfig:
        """Build a SourceConfig from SALON_SOURCE_* environment variables.

        Raises:
            ConfigError: If the URL or key is missing, or a numeric
                setting cannot be parsed.

        Examples:
            >>> os.environ["SALON_SOURCE_URL"] = "https://demo.supabase.co"
            >>> os.environ["SALON_SOURCE_KEY"] = "anon-key"
            >>> SourceConfig.from_env().timeout
            30.0
        """
        url = os.environ.get("SALON_SOURCE_URL", "").strip().strip('"').strip("'")
        api_key = os.environ.get("SALON_SOURCE_KEY", "").strip().strip('"').strip("'")
        if not url or not api_key:
            raise ConfigError("SALON_SOURCE_URL and SALON_SOURCE_KEY must both be set")

        try:
            timeout = float(os.environ.get("SALON_SOURCE_TIMEOUT", "30"))
            retries = int(os.environ.get("SALON_SOURCE_RETRIES", "3"))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric source setting: {e}") from e

        return cls(
            url=url.rstrip("/"),
            api_key=api_key,
            schema=os.environ.get("SALON_SOURCE_SCHEMA", "public"),
            timeout=timeout,
            retries=retries,
        )

    @property
    def rest_url(self) -> str:
        """Base URL of the REST (table and rpc) endpoint."""
        return f"{self.url.rstrip('/')}/rest/v1"
