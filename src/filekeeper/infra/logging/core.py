from __future__ import annotations

"""
Logging Core Orchestrator.

Sets up the root logger once. Records go through a QueueHandler to a
QueueListener thread that owns the real handlers (stderr and an optional
rotating file), so a slow disk never stalls the filesystem operations of
the caller. Only handlers tagged by this package are ever replaced.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from filekeeper.infra.fs import get_user_data_dir
from filekeeper.infra.logging.config import _LEVEL_MAP, LoggingConfig
from filekeeper.infra.logging.handlers import (
    _create_rotating_file_handler,
    _is_our_handler,
    _tag_handler,
)

# Attributes stored on the root logger
_CONFIGURED_FLAG_ATTR: str = "_filekeeper_configured"
_QUEUE_LISTENER_ATTR: str = "_filekeeper_queue_listener"

DEFAULT_LOG_FILENAME = "filekeeper.log"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = DEFAULT_LOG_FILENAME) -> str:
    """Path of the rotating diagnostic log: `<user data dir>/logs/<file_name>`."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger behind a QueueHandler.

    Repeated calls are no-ops unless `force` is set. If the queue pipeline
    cannot be built, a plain stderr handler is attached instead.

    Args:
        cfg: Level, destinations and formats.
        force: Replace a previous configuration made by this module.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_FLAG_ATTR, False) and not force:
        return root

    _reset(root)
    level = _parse_level(cfg.level)
    root.setLevel(level)

    try:
        handlers = _build_handlers(cfg, level)
        if handlers:
            _start_queue(root, handlers)
    except Exception:
        _reset(root)
        _attach_emergency_console(root)
        root.warning("Logging: Queue pipeline failed, using a plain console handler.")
        return root

    setattr(root, _CONFIGURED_FLAG_ATTR, True)
    return root


def get_logger(name: str) -> logging.Logger:
    """Acquire a named logger instance (usually `__name__`)."""
    return logging.getLogger(name)


# ==============================================================================
# PIPELINE CONSTRUCTION
# ==============================================================================

def _build_handlers(cfg: LoggingConfig, level: int) -> List[logging.Handler]:
    """Create the destination handlers the listener thread will drive."""
    handlers: List[logging.Handler] = []

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        _tag_handler(console)
        handlers.append(console)

    if cfg.log_file:
        rotating = _create_rotating_file_handler(
            cfg.log_file,
            level,
            logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt),
            cfg.max_bytes,
            cfg.backup_count,
        )
        if rotating is not None:
            handlers.append(rotating)

    return handlers


def _start_queue(root: logging.Logger, handlers: List[logging.Handler]) -> None:
    """Route the root logger through a queue to a listener owning `handlers`."""
    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)

    listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
    listener.start()
    atexit.register(_safe_stop_listener, listener)

    queue_handler = QueueHandler(log_queue)
    _tag_handler(queue_handler)
    root.addHandler(queue_handler)
    setattr(root, _QUEUE_LISTENER_ATTR, listener)


def _attach_emergency_console(root: logging.Logger) -> None:
    fallback = logging.StreamHandler(sys.stderr)
    fallback.setFormatter(logging.Formatter("CRITICAL FALLBACK | %(levelname)s | %(message)s"))
    _tag_handler(fallback)
    root.addHandler(fallback)


# ==============================================================================
# TEARDOWN
# ==============================================================================

def _reset(root: logging.Logger) -> None:
    """Stop our listener and detach every handler this module attached."""
    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener is not None:
        _safe_stop_listener(listener)
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        if _is_our_handler(h):
            root.removeHandler(h)
            h.close()


def _safe_stop_listener(listener: Optional[QueueListener]) -> None:
    """Stop a QueueListener, tolerating one that was already stopped."""
    if listener is not None and getattr(listener, "_thread", None) is not None:
        listener.stop()


def _parse_level(level: str) -> int:
    if not level:
        return logging.INFO
    return _LEVEL_MAP.get(str(level).strip().upper(), logging.INFO)
