"""
=============================================================================
ROUTER CONFIGURATION
=============================================================================

Settings shared by the request reader, the response writer and logging.

A CGI script has no startup phase of its own: the web server spawns one
process per request and the script runs top to bottom. Configuration is
therefore read from the environment on first use:

    CGIROUTE_MAX_BODY_SIZE   Largest request body parsed as JSON (bytes)
    CGIROUTE_LOG_LEVEL       Level for the "cgiroute" logger (WARNING)
    CGIROUTE_JSON_INDENT     Indent for JSON responses (compact when unset)

Logging always goes to stderr. Under CGI, stdout IS the response, so a
stray log line on stdout would corrupt the headers.

=============================================================================
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional


_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RouterConfig:
    """
    Configuration for request handling.

    Development:
        RouterConfig(log_level="DEBUG", json_indent=2)

    Production:
        RouterConfig()  # compact JSON, WARNING and above only
    """

    max_body_size: int = 1024 * 1024  # 1 MiB
    """
    Bodies larger than this are not read. The request behaves as if it
    had no JSON input at all.
    """

    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    json_indent: Optional[int] = None
    """Indent passed to json.dumps for response bodies. None = compact."""

    @classmethod
    def from_env(cls, environ=None) -> "RouterConfig":
        """
        Create configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
        """
        env = os.environ if environ is None else environ
        indent = env.get("CGIROUTE_JSON_INDENT")
        return cls(
            max_body_size=int(env.get("CGIROUTE_MAX_BODY_SIZE", 1024 * 1024)),
            log_level=env.get("CGIROUTE_LOG_LEVEL", "WARNING").upper(),
            json_indent=int(indent) if indent else None,
        )

    def validate(self) -> None:
        """Raise ValueError on settings that can never work."""
        if self.max_body_size <= 0:
            raise ValueError(f"max_body_size must be > 0, got {self.max_body_size}")
        if self.log_level.upper() not in _LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Must be one of {', '.join(_LEVELS)}."
            )
        if self.json_indent is not None and self.json_indent < 0:
            raise ValueError("json_indent must be >= 0")


_config: Optional[RouterConfig] = None


def get_config() -> RouterConfig:
    """Return the active configuration, reading the environment on first use."""
    global _config
    if _config is None:
        _config = RouterConfig.from_env()
        _config.validate()
    return _config


def set_config(config: Optional[RouterConfig]) -> None:
    """
    Replace the active configuration.

    Passing None makes the next get_config() re-read the environment.
    """
    global _config
    if config is not None:
        config.validate()
    _config = config


def configure_logging(config: Optional[RouterConfig] = None) -> None:
    """Send log records to stderr at the configured level."""
    config = config or get_config()
    level = getattr(logging, config.log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format=config.log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    logging.getLogger("cgiroute").setLevel(level)
