"""
=============================================================================
HELPER CONFIGURATION
=============================================================================

Settings for the helper server and its logging.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m nowhelpers app:handler event.json --log-level DEBUG
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── HTTP_LOG_FORMAT=json python -m nowhelpers ...              │
    │                                                                     │
    │   3. Default values (in this dataclass)                             │
    └─────────────────────────────────────────────────────────────────────┘

Configuration is validated once, when the server is created, so a typo in
an environment variable fails at startup instead of on the first request.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class HelperConfig:
    """
    Configuration for the helper server.

    Development:
        HelperConfig(log_level="DEBUG")

    Behind a bridge in production:
        HelperConfig(port=3000, log_format="json")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Interface to bind. The bridge talks to the server locally."""

    port: int = 0
    """Port to listen on. 0 lets the OS pick a free one."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    access_log: bool = True
    """Emit one access log record per request."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "nowhelpers/1.0"
    """Value of the Server header."""

    @classmethod
    def from_env(cls) -> "HelperConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Bind address     (default: 127.0.0.1)
        HTTP_PORT        Port             (default: 0)
        HTTP_LOG_LEVEL   Logging level    (default: INFO)
        HTTP_LOG_FORMAT  text or json     (default: text)
        HTTP_ACCESS_LOG  1/0, true/false  (default: true)
        """
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "0")),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text").lower(),
            access_log=os.getenv("HTTP_ACCESS_LOG", "true").lower() in _TRUTHY,
        )

    def validate(self) -> None:
        """Raise ValueError for out-of-range settings."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


def configure_logging(config: HelperConfig) -> None:
    """Configure the root logger and the nowhelpers logger from config."""
    logging.basicConfig(
        level=config.level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("nowhelpers").setLevel(config.level)
