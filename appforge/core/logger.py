"""Console and file logging for Appforge runs."""
import logging
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

ROOT_LOGGER = "appforge"
LOG_FILE = Path.home() / ".appforge" / "appforge.log"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

_log_path: Optional[Path] = None


def _writable_log_path(requested: Optional[str]) -> Path:
    path = Path(requested) if requested else LOG_FILE
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        path = Path(tempfile.gettempdir()) / "appforge.log"
    return path


def setup_file_logging(log_file: str = None, verbose: bool = False) -> Path:
    """Mirror everything logged under ``appforge`` into a log file.

    Only the first call attaches a handler; later calls return the path
    already in use. The home directory falls back to the system temp dir
    when it can't be written.

    Returns:
        Path of the log file
    """
    global _log_path

    if _log_path is not None:
        return _log_path

    path = _writable_log_path(log_file)
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger(ROOT_LOGGER)
    root.addHandler(handler)
    root.setLevel(level)

    _log_path = path
    root.info(f"Writing run log to {path}")
    return path


def set_verbose(verbose: bool) -> None:
    """Switch every appforge logger to DEBUG, or back to INFO."""
    level = logging.DEBUG if verbose else logging.INFO
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith(ROOT_LOGGER) and isinstance(logger, logging.Logger):
            logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger that prints through the shared Rich console."""
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger
