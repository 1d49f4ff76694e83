from __future__ import annotations

import logging
import sys
import warnings
from logging import Formatter, NullHandler, StreamHandler
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, ClassVar, Final, Literal, NamedTuple, Self, TextIO, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

__all__: list[str] = ["LogLevel", "LoggerUtils"]

LevelType: TypeAlias = Literal[
    "NOTSET",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

_LOG_FILE_SIZE: Final[int] = 2 * 1024 * 1024  # 2MB
_LOG_BACKUP_COUNT: Final[int] = 2

DEFAULT_LOG_LEVEL: Final[int] = logging.INFO
DEFAULT_NAMESPACE: Final[str] = "deepl"


class LogLevel(NamedTuple):
    """Logging level as both name and numeric value."""

    name: str
    value: int


class LoggerUtils:
    """Singleton that wires the 'deepl' logger namespace to its handlers.

    The library modules only ever call ``LoggerUtils.get_logger(__name__)``; they never configure handlers.
    Handlers are attached once, by the command-line front end, when it constructs this class.

    Console output goes to stderr (WARNING and above unless verbose) so that it never mixes with
    translated text on stdout.
    File output is optional and records everything from DEBUG upwards.
    """

    _LOGGER_NAMESPACE: ClassVar[str] = DEFAULT_NAMESPACE
    _configured: ClassVar[bool] = False
    _instance: ClassVar[Self | None] = None
    _saved_showwarning: ClassVar[Callable[..., None] | None] = None

    def __new__(cls, *args, **kwargs) -> Self:
        _ = args, kwargs
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, filename: str | Path = "", *, use_null_console: bool = False, verbose: bool = False) -> None:
        """Attach console and (optionally) file handlers to the namespace logger.

        Args:
            filename (str | Path): Log file path. If empty, no file logging is performed.
            use_null_console (bool): If True, a NullHandler replaces the stderr console handler.
            verbose (bool): If True, the console handler also shows DEBUG and INFO messages.
        """
        if LoggerUtils._configured:
            return

        self.root_logger: logging.Logger = logging.getLogger(self._LOGGER_NAMESPACE)
        self._use_null_console: bool = bool(use_null_console) or sys.stderr is None
        self._console_level: int = logging.DEBUG if verbose else logging.WARNING
        # must be lower than the handler levels, otherwise nothing reaches the file handler
        self.root_logger.setLevel(DEFAULT_LOG_LEVEL)

        self._console_logging()
        filename = str(filename)
        if filename.strip():
            self._file_logging(filename)

        LoggerUtils._saved_showwarning = warnings.showwarning
        warnings.showwarning = self.warning_to_log
        LoggerUtils._configured = True

    def warning_to_log(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        """Redirect ``warnings.warn`` output into the log (signature of ``warnings.showwarning``)."""
        _ = file, line
        self.root_logger.warning("%s:%d: %s: %s", filename, lineno, category.__name__, message)

    @classmethod
    def reset(cls) -> None:
        """Detach all handlers so the next construction configures the logger again."""
        root_logger: logging.Logger = logging.getLogger(cls._LOGGER_NAMESPACE)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()
        root_logger.setLevel(logging.NOTSET)
        if cls._saved_showwarning is not None:
            warnings.showwarning = cls._saved_showwarning
            cls._saved_showwarning = None
        cls._configured = False
        cls._instance = None

    def _console_logging(self) -> None:
        if self._use_null_console:
            if not self._has_handler(NullHandler):
                self.root_logger.addHandler(NullHandler())
            return

        if self._has_handler(StreamHandler):
            self.root_logger.warning("Console logging is already configured.")
            return

        console_handler: StreamHandler[TextIO] = StreamHandler(sys.stderr)
        console_handler.setLevel(self._console_level)
        console_handler.setFormatter(Formatter("%(levelname)s: %(message)s"))
        self.root_logger.addHandler(console_handler)

    def _file_logging(self, filename: str) -> None:
        if self._has_handler(RotatingFileHandler):
            self.root_logger.warning("File logging is already configured.")
            return

        try:
            file_handler = RotatingFileHandler(
                filename=filename,
                maxBytes=_LOG_FILE_SIZE,
                backupCount=_LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        except (FileNotFoundError, PermissionError):
            self.root_logger.error("Incorrect log file name: %s. Logging to the file is not performed.", filename)
            return

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            Formatter("%(asctime)s %(levelname)-8s %(process)5d %(lineno)4d %(name)-28s\t%(funcName)s\t%(message)s")
        )
        self.root_logger.addHandler(file_handler)

    def _has_handler(self, handler_type: type) -> bool:
        # RotatingFileHandler is a StreamHandler subclass; compare exact types.
        return any(type(h) is handler_type for h in self.root_logger.handlers)

    def set_level(self, level: LevelType | str) -> None:
        """Set the namespace logging level.

        An unknown level name falls back to INFO and logs a warning.

        Args:
            level (LevelType | str): Level name, case-insensitive.
        """
        level_map: dict[str, int] = logging.getLevelNamesMapping()
        try:
            self.root_logger.setLevel(level_map[level.upper()])
        except KeyError:
            self.root_logger.setLevel(DEFAULT_LOG_LEVEL)
            self.root_logger.warning("Unknown logging level '%s' specified. Logging level set to 'INFO'.", level)

    def get_level(self) -> LogLevel:
        level_value: int = self.root_logger.getEffectiveLevel()
        return LogLevel(name=logging.getLevelName(level_value), value=level_value)

    @staticmethod
    def get_logger(name: str | None = None) -> logging.Logger:
        """Get a logger below the 'deepl' namespace.

        Args:
            name (str | None): Module name. If None, the namespace logger itself is returned.

        Returns:
            logging.Logger: The logger instance.
        """
        if LoggerUtils._LOGGER_NAMESPACE:
            full_name: str = f"{LoggerUtils._LOGGER_NAMESPACE}.{name}" if name else LoggerUtils._LOGGER_NAMESPACE
            return logging.getLogger(full_name)
        return logging.getLogger(name)
