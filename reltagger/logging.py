"""Logging for the reltagger.* namespace.

Levels (inclusive):
- ERROR: failed release steps
- WARNING: cache problems, rejected webhooks, and ERROR
- INFO: step progress, skipped events, WARNING, and ERROR
- DEBUG: git/cargo command output and all levels above

logging.level applies to loggers under ``reltagger``. Everything else
(requests, urllib3) stays at WARNING unless the level is DEBUG.

Raw git and cargo output is logged at DEBUG to ``reltagger.commands.git``
and ``reltagger.commands.cargo``. Set logging.commands to DEBUG to see it
without turning on DEBUG for the whole app.

Configure via config.yaml (logging.level, logging.format, logging.commands)
or env (LOGGING_LEVEL, LOGGING_FORMAT, LOGGING_COMMANDS).
"""

import logging

from reltagger.config import LoggingConfig

NAMESPACE = "reltagger"
COMMANDS_NAMESPACE = "reltagger.commands"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}
DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """Map a level name to a logging level; unknown names give INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


def command_logger(tool: str) -> logging.Logger:
    """Logger for raw output of an external command (git, cargo)."""
    return logging.getLogger(f"{COMMANDS_NAMESPACE}.{tool}")


class ReltaggerLogging:
    """Apply LoggingConfig to the reltagger namespace."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._commands_level = _resolve_level(config.commands) if config.commands.strip() else logging.NOTSET

    @property
    def level(self) -> int:
        return self._level

    @property
    def library_level(self) -> int:
        """Level of the root logger, which every non-reltagger logger inherits."""
        return logging.DEBUG if self._level <= logging.DEBUG else logging.WARNING

    def setup(self) -> None:
        """Install one stderr handler on the root logger and set namespace levels.

        Records from reltagger.* propagate to the root handler regardless of
        the root level, so library noise is cut without hiding our INFO lines.
        """
        logging.basicConfig(level=self.library_level, format=self._format, force=True)
        logging.getLogger(NAMESPACE).setLevel(self._level)
        # NOTSET: inherit the namespace level
        logging.getLogger(COMMANDS_NAMESPACE).setLevel(self._commands_level)

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger under the reltagger namespace (prefix added if missing)."""
        if name != NAMESPACE and not name.startswith(NAMESPACE + "."):
            name = f"{NAMESPACE}.{name}"
        return logging.getLogger(name)
