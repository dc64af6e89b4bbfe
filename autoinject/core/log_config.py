"""Configuration for logging.

Module code logs through ``logging.getLogger(__name__)`` and passes
structured fields with ``extra=``. LoggingConfig installs a single root
handler rendering records either for a terminal or as JSON Lines for log
aggregators.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import ClassVar, Literal, TextIO

from .exceptions import ConfigError

# Keys accepted through ``extra=`` and rendered by the formatters
STRUCTURED_FIELDS = ("runtime", "pod", "container", "env_var")

HANDLER_NAME = "autoinject"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


def _structured_fields(record: logging.LogRecord) -> dict[str, str]:
    return {
        key: getattr(record, key)
        for key in STRUCTURED_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONLinesFormatter(logging.Formatter):
    """One JSON object per record.

    Suitable for:
    - Elasticsearch / Loki ingestion
    - Analysis with jq
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_structured_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable, optionally colored, output for development.

    Format: TIMESTAMP LEVEL LOGGER - MESSAGE key=value ...
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET: ClassVar[str] = "\033[0m"
    DIM: ClassVar[str] = "\033[2m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "") if self.color else ""
        reset = self.RESET if self.color else ""
        dim = self.DIM if self.color else ""

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        line = (
            f"{dim}{timestamp}{reset} "
            f"{color}{record.levelname:8}{reset} "
            f"{record.name} - {record.getMessage()}"
        )

        fields = _structured_fields(record)
        if fields:
            pairs = " ".join(f"{k}={v}" for k, v in fields.items())
            line += f" {dim}{pairs}{reset}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


@dataclass
class LoggingConfig:
    """Configuration for the logging system.

    Logs go to stderr by default so stdout stays free for the mutated
    manifest.
    """

    min_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    color: bool = True
    stream: TextIO | None = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Load from environment variables.

        Environment Variables:
            LOG_LEVEL: Minimum level (default: INFO)
            LOG_FORMAT: console or json (default: console)
            LOG_COLOR: Enable colored console (default: true)

        Raises:
            ConfigError: If LOG_LEVEL or LOG_FORMAT is not a known value.
        """
        min_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        if min_level not in LOG_LEVELS:
            raise ConfigError(
                f"invalid log level: {min_level}. Expected one of {list(LOG_LEVELS)}",
                config_key="LOG_LEVEL",
            )
        log_format = os.environ.get("LOG_FORMAT", "console").lower()
        if log_format not in LOG_FORMATS:
            raise ConfigError(
                f"invalid log format: {log_format}. Expected one of {list(LOG_FORMATS)}",
                config_key="LOG_FORMAT",
            )
        return cls(
            min_level=min_level,
            format=log_format,
            color=os.environ.get("LOG_COLOR", "true").lower() == "true",
        )

    def create_formatter(self) -> logging.Formatter:
        if self.format == "json":
            return JSONLinesFormatter()
        if self.format == "console":
            return ConsoleFormatter(color=self.color)
        raise ValueError(f"invalid log format: {self.format}")

    def configure(self) -> logging.Logger:
        """Install the handler on the root logger and return it.

        Replaces the handler installed by an earlier call; other handlers
        are left alone.
        """
        handler = logging.StreamHandler(self.stream or sys.stderr)
        handler.setFormatter(self.create_formatter())
        handler.set_name(HANDLER_NAME)

        root = logging.getLogger()
        for existing in list(root.handlers):
            if existing.get_name() == HANDLER_NAME:
                root.removeHandler(existing)
        root.addHandler(handler)
        root.setLevel(getattr(logging, self.min_level.upper()))
        return root
