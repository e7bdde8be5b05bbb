from __future__ import annotations

import logging
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.logging import RichHandler

# Rich style tags like [#2E7D32], [bold red], [/bold] or [/].
# Bracketed chemistry ([NH4+]) and level names ([INFO]) are left alone.
_RICH_STYLE_WORDS = "bold|dim|italic|underline|red|green|yellow|blue|cyan|magenta|white"
_RICH_MARKUP_RE = re.compile(
    rf"\[/?(?:#[0-9A-Fa-f]{{6}}|(?:{_RICH_STYLE_WORDS})(?: (?:{_RICH_STYLE_WORDS}))*)?\]"
)

LOGGER_NAME = "simreport"
LOG_FILE_STEM = "report"
CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"


class LoggerSingleton:
    """Owns the ``simreport`` logger, its Rich console and the optional log file."""

    _instance: LoggerSingleton | None = None
    _logger: logging.Logger | None = None
    _console: Console | None = None
    _console_handler: RichHandler | None = None
    _file_handler: logging.Handler | None = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create or reuse singleton instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._console = Console()
        return cls._instance

    @property
    def console(self) -> Console:
        return self._console

    @property
    def log_file(self) -> Path | None:
        """Path of the active plain-text log, if any."""
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    def get_logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = self._create_logger()
        return self._logger

    def _create_logger(self) -> logging.Logger:
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.INFO)
        logger.handlers = []

        self._console_handler = RichHandler(
            rich_tracebacks=True,
            markup=True,
            show_time=True,
            show_level=True,
            show_path=False,
            console=self._console,
        )
        self._console_handler.setLevel(logging.INFO)
        logger.addHandler(self._console_handler)
        return logger

    def set_console_verbose(self, verbose: bool) -> None:
        """Show progress lines on the console, or only warnings and errors."""
        self.get_logger()
        self._console_handler.setLevel(logging.INFO if verbose else logging.WARNING)

    def configure_log_directory(self, folder: str | Path, stem: str = LOG_FILE_STEM) -> Path:
        """Write a plain-text copy of the log to ``<folder>/<stem>_<utc time>.log``.

        Any previous log file is closed first, so each report built by a
        long-lived process gets its own file.

        Returns:
            Path of the new log file.
        """
        logger = self.get_logger()
        self.close_log_file()

        folder = Path(folder).resolve()
        folder.mkdir(parents=True, exist_ok=True)
        current_time = datetime.now(tz=timezone.utc).strftime("%Y%m%d_%H%M%S")
        log_file = folder / f"{stem}_{current_time}.log"

        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(_PlainTextFormatter())
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)
        self._file_handler = handler
        return log_file

    def close_log_file(self) -> None:
        if self._file_handler is None:
            return
        self.get_logger().removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None


class _PlainTextFormatter(logging.Formatter):
    """Formatter that strips Rich markup tags for plain text log files."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        return _RICH_MARKUP_RE.sub("", super().format(record))


def get_logger() -> logging.Logger:
    """Return the shared logger instance."""
    return LoggerSingleton().get_logger()


class LazyLogger:
    """Proxy that creates the shared logger on first use."""

    def __getattr__(self, name):
        return getattr(get_logger(), name)


logger = LazyLogger()


def load_config(config_path: str | Path = CONFIG_PATH) -> dict[str, Any]:
    """Read a YAML settings file.

    Parameters:
        config_path: Path to the YAML file; the bundled defaults by default.

    Returns:
        dict[str, Any]: Parsed mapping, empty for an empty file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    config_path = Path(config_path)
    log = logging.getLogger(__name__)
    try:
        with config_path.open(encoding="utf-8") as file:
            return yaml.safe_load(file) or {}
    except FileNotFoundError:
        log.error("Configuration file not found: %s", config_path)
        raise
    except yaml.YAMLError:
        log.exception("Error parsing YAML configuration for %s", config_path)
        raise
