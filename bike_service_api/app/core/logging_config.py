"""
Logging setup shared by the HTTP and RPC surfaces.

``setup_logging`` attaches a console handler and, when ``LOG_FILE`` is
set, a file handler to the root logger.  Handlers installed here are
tagged, so calling it again (a second ``create_app``, or ``run.py``
building both surfaces) only adjusts the level instead of duplicating
output.  Handlers installed by someone else, such as pytest's capture
handler, are left alone.

Uvicorn's own loggers are routed through the root logger so server and
application lines share one format; ``run.py`` starts uvicorn with
``log_config=None`` for that reason.
"""

import logging
from pathlib import Path
from typing import List

from .config import Settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# Chatty at INFO/DEBUG; only their warnings are interesting here.
QUIET_LOGGERS = ("urllib3", "redis")

_HANDLER_TAG = "_bike_service_handler"


def resolve_level(name: str) -> int:
    """Map a level name to its number; unknown names give ``INFO``."""
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def installed_handlers() -> List[logging.Handler]:
    """Return the root handlers previously installed by ``setup_logging``."""
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_TAG, False)]


def setup_logging(settings: Settings) -> None:
    """Configure the root logger from ``settings``.

    Parameters
    ----------
    settings : Settings
        ``log_level`` selects the root level; ``log_file``, when not
        empty, adds a UTF-8 file handler.  The file's parent directory
        is created if missing.
    """
    root = logging.getLogger()
    level = resolve_level(settings.log_level)
    root.setLevel(level)

    if not installed_handlers():
        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if settings.log_file:
            log_path = Path(settings.log_file).resolve()
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
        for handler in handlers:
            handler.setFormatter(formatter)
            setattr(handler, _HANDLER_TAG, True)
            root.addHandler(handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
        server_logger.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
