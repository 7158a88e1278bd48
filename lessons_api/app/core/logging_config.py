"""
Logging setup for the Lessons API.

``setup_logging`` attaches a console handler (and a file handler when
``LOG_FILE`` is set) to the root logger.  Store writes log at INFO and
recoveries from malformed persisted tables at WARNING, so the default
level shows both; ``DEBUG=true`` additionally shows unit-of-work
commits and outgoing client requests.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .config import settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> None:
    """Configure the root logger once per process.

    Parameters
    ----------
    level : Optional[str]
        Level name, case insensitive.  Defaults to ``DEBUG`` when
        ``settings.debug`` is on, otherwise ``settings.log_level``.
    logfile : Optional[str]
        File to log to in addition to the console.  Its directory is
        created if missing.
    """
    root = logging.getLogger()
    if root.handlers:
        # Already configured (repeated ``create_app`` calls, pytest).
        return

    if level is None:
        level = "DEBUG" if settings.debug else settings.log_level
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
