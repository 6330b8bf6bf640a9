"""
Harness configuration, read from the environment.

A .env file in the working directory is loaded first; variables already set
in the environment win over it.

Variables:
    ROSA_BINARY:          CLI executable to run (default: rosa)
    CLUSTER_ID:           cluster the scenarios target
    ROSA_LOG_LEVEL:       INFO, DEBUG, WARN, ERROR or FATAL (default: INFO)
    ROSA_LOG_FILE:        optional file the redacted log is appended to
    ROSA_COMMAND_TIMEOUT: seconds before a CLI call is killed (default: 300)
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from .log import LEVELS, parse_level

DEFAULT_BINARY = "rosa"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TIMEOUT = 300.0


class ConfigurationError(ValueError):
    """An environment setting is missing or malformed."""


@dataclass(frozen=True)
class HarnessConfig:
    binary: str = DEFAULT_BINARY
    cluster_id: str = ""
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "HarnessConfig":
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        log_level = os.getenv("ROSA_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        try:
            parse_level(log_level)
        except ValueError:
            raise ConfigurationError(
                f"ROSA_LOG_LEVEL must be one of {', '.join(LEVELS)}, got '{log_level}'"
            ) from None

        raw_timeout = os.getenv("ROSA_COMMAND_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigurationError(
                f"ROSA_COMMAND_TIMEOUT must be a number of seconds, got '{raw_timeout}'"
            ) from None
        if timeout <= 0:
            raise ConfigurationError(f"ROSA_COMMAND_TIMEOUT must be positive, got {timeout}")

        return cls(
            binary=os.getenv("ROSA_BINARY", DEFAULT_BINARY) or DEFAULT_BINARY,
            cluster_id=os.getenv("CLUSTER_ID", "").strip(),
            log_level=log_level,
            log_file=os.getenv("ROSA_LOG_FILE") or None,
            timeout=timeout,
        )


def get_cluster_id(config: Optional[HarnessConfig] = None) -> str:
    """Return the target cluster ID, failing when it was not exported."""
    config = config or HarnessConfig.from_env()
    if not config.cluster_id:
        raise ConfigurationError("ClusterID is required. Please export CLUSTER_ID")
    return config.cluster_id
