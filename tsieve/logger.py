import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv


load_dotenv()

# Workflow-command output instead of colors when running in GitHub Actions
GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] %(message)s"


def resolve_level(value: Optional[str], default: str = "INFO") -> int:
    """Numeric level for a level name; unknown or missing names give the default."""
    name = (value or default).strip().upper()
    if name not in VALID_LOG_LEVELS:
        name = default
    return getattr(logging, name)


LOG_LEVEL = resolve_level(os.getenv("LOG_LEVEL"))


class ANSIColors:
    """Terminal colors per log level."""

    DEBUG = "\033[36m"    # Cyan
    INFO = "\033[32m"     # Green
    WARNING = "\033[33m"  # Yellow
    ERROR = "\033[31m"    # Red
    CRITICAL = "\033[1;31m"  # Bold Red
    RESET = "\033[0m"

    BY_LEVEL = {
        logging.DEBUG: DEBUG,
        logging.INFO: INFO,
        logging.WARNING: WARNING,
        logging.ERROR: ERROR,
        logging.CRITICAL: CRITICAL,
    }


class SieveLogFormatter(logging.Formatter):
    """Formatter that colors sieve output locally and emits workflow commands on CI."""

    def format(self, record):
        log_message = super().format(record)

        if GITHUB_ACTIONS:
            if record.levelno == logging.DEBUG:
                return f"::debug::{log_message}"
            elif record.levelno == logging.WARNING:
                return f"::warning::{log_message}"
            elif record.levelno >= logging.ERROR:
                return f"::error::{log_message}"
            return log_message

        log_color = ANSIColors.BY_LEVEL.get(record.levelno, ANSIColors.RESET)
        return f"{log_color}{log_message}{ANSIColors.RESET}"


console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(SieveLogFormatter(LOG_FORMAT))

logging.basicConfig(level=LOG_LEVEL, handlers=[console_handler])


def set_log_level(level: str):
    """Override the level from the environment, e.g. for a --verbose flag."""
    logging.getLogger().setLevel(resolve_level(level))


def get_logger(name: str) -> logging.Logger:
    """Return a logger named after the last component of a module path."""
    return logging.getLogger(name.split(".")[-1])
