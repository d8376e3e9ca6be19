"""Logging utilities module."""

import logging
import re
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import ClassVar

import colorama
from colorama import Fore, Style

__all__ = ["Logger", "get_logger"]

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


class MarkerFormatter(logging.Formatter):
    """Base formatter for messages carrying `$$'quoted'$$` and `$${braced}$$` markers.

    Quoted markers wrap names meant to stand out (list names, titles) and braced
    markers wrap secondary details (ids, counters). Subclasses decide how each
    marker is rendered; the record itself is restored after formatting.
    """

    QUOTED: ClassVar[re.Pattern[str]] = re.compile(r"\$\$'((?:[^']|'(?!\$\$))*)'\$\$")
    BRACED: ClassVar[re.Pattern[str]] = re.compile(r"\$\$\{(.*?)\}\$\$")

    quoted_template: ClassVar[str] = "'\\1'"
    braced_template: ClassVar[str] = "{\\1}"

    def render_message(self, msg: str) -> str:
        """Replace the markers of a message with their rendered form."""
        msg = self.QUOTED.sub(self.quoted_template, msg)
        return self.BRACED.sub(self.braced_template, msg)

    def render_levelname(self, levelname: str) -> str:
        return levelname

    def format(self, record: logging.LogRecord) -> str:
        saved = record.msg, record.levelname
        if isinstance(record.msg, str):
            record.msg = self.render_message(record.msg)
        record.levelname = self.render_levelname(record.levelname)
        try:
            return super().format(record)
        finally:
            record.msg, record.levelname = saved


class ColorFormatter(MarkerFormatter):
    """Console formatter coloring levels by severity and highlighting markers."""

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "SUCCESS": Fore.GREEN + Style.BRIGHT,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    quoted_template = f"{Fore.LIGHTBLUE_EX}'\\1'{Style.RESET_ALL}"
    braced_template = f"{Style.DIM}{{\\1}}{Style.RESET_ALL}"

    def render_levelname(self, levelname: str) -> str:
        color = self.LEVEL_COLORS.get(levelname, "")
        return f"{color}{levelname}{Style.RESET_ALL}"


class CleanFormatter(MarkerFormatter):
    """Plain formatter keeping marker contents, for log files and plain consoles."""


def _enable_color() -> bool:
    """Initialize colorama when the terminal can show colors.

    Returns:
        bool: Whether console output should be colored
    """
    from listseerr.utils import terminal

    try:
        if not terminal.supports_color():
            return False
        if sys.platform == "win32":
            colorama.just_fix_windows_console()
        else:
            colorama.init()
    except (AttributeError, ImportError, OSError):
        return False
    return True


def _log_format(level: int) -> str:
    if level <= logging.DEBUG:
        return (
            "%(asctime)s - %(name)s - %(levelname)s\t%(filename)s:%(lineno)d\t"
            "%(message)s"
        )
    return "%(asctime)s - %(name)s - %(levelname)s\t%(message)s"


class Logger(logging.Logger):
    """Logger with a SUCCESS level that prefixes messages with the caller's class.

    A call made from a method or classmethod is logged as `ClassName: message`,
    so orchestrator and client logs read as `BatchOrchestrator: [alice] ...`.
    """

    SUCCESS = logging.INFO + 5

    def __init__(self, name, level=logging.NOTSET):
        super().__init__(name, level)
        if logging.getLevelName(self.SUCCESS) != "SUCCESS":
            logging.addLevelName(self.SUCCESS, "SUCCESS")

    @staticmethod
    def _caller_class(depth: int) -> str | None:
        """Get the class name of the first method above the logger's own frames."""
        try:
            frame = sys._getframe(depth + 1)
        except ValueError:
            return None
        while frame is not None and isinstance(
            frame.f_locals.get("self"), logging.Logger
        ):
            frame = frame.f_back
        if frame is None:
            return None

        caller_locals = frame.f_locals
        instance = caller_locals.get("self")
        if instance is not None:
            return type(instance).__name__
        owner = caller_locals.get("cls")
        if isinstance(owner, type):
            return owner.__name__
        return None

    def _log(
        self,
        level,
        msg,
        args,
        exc_info=None,
        extra=None,
        stack_info=False,
        stacklevel=1,
    ):
        # Skip _log and the public method that called it
        owner = self._caller_class(2)
        if owner and isinstance(msg, str):
            msg = f"{owner}: {msg}"

        super()._log(
            level,
            msg,
            args,
            exc_info=exc_info,
            extra=extra,
            stack_info=stack_info,
            stacklevel=stacklevel + 1,
        )

    def success(self, msg, *args, **kwargs):
        """Log a message with SUCCESS level."""
        self.log(self.SUCCESS, msg, *args, **kwargs)

    def setup(self, log_level: str, log_dir: str | None = None) -> None:
        """Replace the handlers with a console handler and, optionally, a log file.

        The log file is `{name}.{log_level}.log` inside `log_dir` and rotates at
        10MB, keeping five backups. At DEBUG level records also show their
        source location.

        Args:
            log_level (str): Logging level ('DEBUG', 'INFO', 'SUCCESS', etc.)
            log_dir (str | None, optional): Directory where log files will be stored.
        """
        level = self.SUCCESS if log_level == "SUCCESS" else getattr(logging, log_level)
        log_format = _log_format(level)
        self.setLevel(level)

        for handler in list(self.handlers):
            self.removeHandler(handler)

        handlers: list[logging.Handler] = []
        if log_dir is not None:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_path / f"{self.name}.{log_level}.log",
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
            )
            file_handler.setFormatter(CleanFormatter(log_format, datefmt=DATE_FORMAT))
            handlers.append(file_handler)

        console_formatter = ColorFormatter if _enable_color() else CleanFormatter
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(console_formatter(log_format, datefmt=DATE_FORMAT))
        handlers.append(console_handler)

        for handler in handlers:
            handler.setLevel(level)
            self.addHandler(handler)


logging.setLoggerClass(Logger)


def _get_logger(
    log_name: str, log_level: str = "INFO", log_dir: str | Path | None = None
) -> Logger:
    """Get a logger set up with the given level and log directory."""
    logger = logging.getLogger(log_name)
    if not isinstance(logger, Logger):
        logger = Logger(log_name)

    logger.setup(log_level, None if log_dir is None else str(log_dir))
    return logger


@lru_cache(maxsize=1)
def get_logger() -> Logger:
    """Get the application logger, writing to `logs/` under the data path.

    Returns:
        Logger: Main application logger instance
    """
    from listseerr.config.settings import get_config

    config = get_config()
    return _get_logger("ListSeerr", config.log_level, config.data_path / "logs")
