"""
Logging into the host's message log.

Modules log through the standard ``logging`` package. Attaching a
:class:`HostListingHandler` additionally copies records to the host
document's listing window as ``[INFO] ...`` / ``[ERROR] ...`` lines.

Logging must never be the reason an operation fails: handler failures are
dropped, and :func:`log_info` / :func:`log_error` never raise.
"""

import logging
from typing import Any, Dict, Optional

PACKAGE_LOGGER = "cadassist"

# One handler per attached document
_attached: Dict[int, "HostListingHandler"] = {}
# Level of the package logger before the first listing was attached
_saved_level: Optional[int] = None


class HostListingHandler(logging.Handler):
    """Forward log records to ``document.write_listing``."""

    def __init__(self, document: Any, level: int = logging.INFO):
        super().__init__(level)
        self.document = document

    def format(self, record: logging.LogRecord) -> str:
        tag = "ERROR" if record.levelno >= logging.ERROR else record.levelname
        return f"[{tag}] {record.getMessage()}"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.document.write_listing(self.format(record))
        except Exception:
            # The listing window is best-effort
            pass

    def handleError(self, record: logging.LogRecord) -> None:
        pass


def attach_listing(document: Any, level: int = logging.INFO) -> HostListingHandler:
    """Copy cadassist log records to the document's listing window.

    Calling it twice for the same document returns the existing handler.
    The ``cadassist`` logger level is lowered to ``level`` if needed and
    put back once the last listing is detached.
    """
    global _saved_level
    key = id(document)
    handler = _attached.get(key)
    if handler is None:
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        if not _attached:
            _saved_level = package_logger.level
        handler = HostListingHandler(document, level)
        _attached[key] = handler
        package_logger.addHandler(handler)
        if package_logger.level == logging.NOTSET or package_logger.level > level:
            package_logger.setLevel(level)
    return handler


def detach_listing(document: Any) -> None:
    """Stop copying log records to the document's listing window."""
    global _saved_level
    handler = _attached.pop(id(document), None)
    if handler is None:
        return
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.removeHandler(handler)
    if not _attached and _saved_level is not None:
        package_logger.setLevel(_saved_level)
        _saved_level = None


def log_info(log: logging.Logger, message: str) -> None:
    try:
        log.info(message)
    except Exception:
        pass


def log_error(log: logging.Logger, operation: str, exc: BaseException) -> None:
    """Log ``operation: message`` at error level, never raising."""
    try:
        log.error(f"{operation}: {exc}")
    except Exception:
        pass
