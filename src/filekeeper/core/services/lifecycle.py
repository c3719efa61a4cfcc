from __future__ import annotations

"""
Temporary File Lifecycle Hook.

Purges every temporary record of a registry when the process shuts down.
The sweep is registered with atexit and, when installed from the main
thread, with SIGTERM. Every hook shares one SIGTERM handler that sweeps all
live hooks, chains to the handler that was in place before the first
subscription and exits with status 128 + signum. A sweep runs synchronously
and at most once; files that are already gone are logged and skipped.
"""

import atexit
import logging
import signal
import sys
import threading
from types import FrameType
from typing import Any, Dict, Optional

from filekeeper.core.services.registry import KeyRegistry
from filekeeper.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


def purge_temporary(registry: KeyRegistry) -> int:
    """
    Remove every temporary record of `registry` and its file.

    Returns:
        int: Number of files deleted.
    """
    deleted = 0
    for key in sorted(registry.temporary_keys()):
        try:
            registry.remove(key)
            deleted += 1
        except NotFoundError:
            logger.debug(f"Lifecycle: Temporary file '{key}' already removed.")
        except OSError as e:
            logger.warning(f"Lifecycle: Could not delete temporary file '{key}': {e}")
    return deleted

# -----------------------------------------------------------------------------
# SIGTERM DISPATCH
# -----------------------------------------------------------------------------

# A single process-wide SIGTERM handler sweeps every subscribed hook.
_dispatch_lock = threading.RLock()
_signal_hooks: Dict[int, "LifecycleHook"] = {}
_previous_sigterm: Any = None


def _subscribe(hook: "LifecycleHook") -> None:
    global _previous_sigterm
    with _dispatch_lock:
        if not _signal_hooks:
            _previous_sigterm = signal.signal(signal.SIGTERM, _on_sigterm)
        _signal_hooks[id(hook)] = hook


def _unsubscribe(hook: "LifecycleHook") -> None:
    global _previous_sigterm
    with _dispatch_lock:
        if _signal_hooks.pop(id(hook), None) is None or _signal_hooks:
            return
        # Only restore while the installed handler is still ours
        if signal.getsignal(signal.SIGTERM) == _on_sigterm:
            restored = _previous_sigterm if _previous_sigterm is not None else signal.SIG_DFL
            signal.signal(signal.SIGTERM, restored)
        _previous_sigterm = None


def _on_sigterm(signum: int, frame: Optional[FrameType]) -> None:
    with _dispatch_lock:
        hooks = list(_signal_hooks.values())
        previous = _previous_sigterm

    logger.info(f"Lifecycle: Signal {signum} received, sweeping {len(hooks)} registry(ies).")
    for hook in hooks:
        hook.sweep()
    if callable(previous):
        previous(signum, frame)
    sys.exit(128 + signum)

# -----------------------------------------------------------------------------
# LIFECYCLE HOOK
# -----------------------------------------------------------------------------

class LifecycleHook:
    """Disposal handle bound to one KeyRegistry."""

    def __init__(self, registry: KeyRegistry) -> None:
        self._registry = registry
        self._lock = threading.Lock()
        self._swept = False
        self._installed = False
        self._subscribed = False

    @property
    def swept(self) -> bool:
        return self._swept

    def install(self, handle_signals: bool = True) -> "LifecycleHook":
        """
        Register the sweep with the interpreter shutdown sequence.

        Args:
            handle_signals: Also sweep on SIGTERM. Ignored outside the main thread.

        Returns:
            LifecycleHook: self, for chaining.
        """
        if self._installed:
            return self

        atexit.register(self.sweep)
        if handle_signals and threading.current_thread() is threading.main_thread():
            _subscribe(self)
            self._subscribed = True
        self._installed = True
        logger.debug("Lifecycle: Shutdown sweep installed.")
        return self

    def uninstall(self) -> None:
        """Undo install(). The sweep itself is not run."""
        if not self._installed:
            return

        atexit.unregister(self.sweep)
        if self._subscribed:
            _unsubscribe(self)
            self._subscribed = False
        self._installed = False

    def sweep(self) -> int:
        """
        Delete every temporary file of the registry, once.

        Returns:
            int: Number of files deleted by this call (0 on repeated calls).
        """
        with self._lock:
            if self._swept:
                return 0
            self._swept = True

        deleted = purge_temporary(self._registry)
        logger.debug(f"Lifecycle: Swept {deleted} temporary file(s).")
        return deleted
