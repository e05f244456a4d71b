"""Logging from config and env.

Configure via config.yaml (logging.level, logging.format) or env
(LOGGING_LEVEL, LOGGING_FORMAT). Under GitHub Actions, warnings and errors
are also written as workflow commands (::warning::, ::error::) so they show
up as annotations on the run; an ::error:: alone does not fail the step,
the exit code does.
"""

import logging
import os
import sys
from typing import Mapping

from forkwatch.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def escape_command_data(message: str) -> str:
    """Escape a workflow command payload (%, CR and LF)."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsAnnotationHandler(logging.Handler):
    """Writes WARNING and ERROR records as workflow commands to stdout."""

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            command = "error" if record.levelno >= logging.ERROR else "warning"
            stream = sys.stdout  # looked up per record
            stream.write(f"::{command}::{escape_command_data(record.getMessage())}\n")
            stream.flush()
        except Exception:
            self.handleError(record)


def running_in_actions(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return env.get("GITHUB_ACTIONS") == "true"


def setup_logging(config: LoggingConfig, annotations: bool | None = None) -> None:
    """Configure the root logger from LoggingConfig.

    Unknown level names fall back to INFO. annotations defaults to whether
    the process runs under GitHub Actions.
    """
    level = LEVELS.get(config.level.upper().strip(), logging.INFO)
    logging.basicConfig(level=level, format=config.format, force=True)
    # urllib3 logs every request URL at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    if annotations is None:
        annotations = running_in_actions()
    if annotations:
        logging.getLogger().addHandler(ActionsAnnotationHandler())
