"""
Logging setup for the billing backend.

All application modules log through ``logging.getLogger(__name__)``;
``setup_logging`` decides where those records go.  Console output is
always enabled, a log file is added when ``LOG_FILE`` is set, and the
uvicorn loggers are brought to the same level so server and
application messages interleave in one stream.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Marks handlers installed here so a second call does not duplicate them.
_HANDLER_FLAG = "_billing_backend_handler"


def _build_handlers(logfile: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_FLAG, True)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Route application logs to the console and an optional file.

    ``level`` is a level name such as ``"debug"``; unknown names mean
    ``INFO``.  The level is applied on every call, handlers only once.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    for name in UVICORN_LOGGERS:
        logging.getLogger(name).setLevel(numeric_level)

    if any(getattr(handler, _HANDLER_FLAG, False) for handler in root.handlers):
        return
    for handler in _build_handlers(logfile):
        root.addHandler(handler)
