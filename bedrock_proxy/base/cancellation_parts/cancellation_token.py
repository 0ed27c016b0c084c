"""Cooperative cancellation token for stream decodes.

The HTTP layer cancels a token when its client disconnects. A running
``StreamDecoder`` observes it in two ways: it polls ``raise_if_cancelled``
around every pull, and it registers a close callback so a source blocked on
the network is closed as soon as ``cancel`` is called from another thread.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List, Optional

from .state import State
from .cancelled_error import CancelledError

DEFAULT_REASON = "decode cancelled"


class CancellationToken:
    """Thread-safe cancel flag with cascading children and close callbacks."""

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._state.cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._state.reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Mark the token cancelled, run callbacks, then cascade to children.

        Only the first call has any effect. Callback failures are ignored so
        one broken stream cannot keep the others open.
        """
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            callbacks, self._callbacks = self._callbacks, []
            children = list(self._children)
        for callback in callbacks:
            try:
                callback()
            except Exception:  # noqa: BLE001 - closing is best effort
                continue
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Cascade cancellation to ``token``; a late link cancels it at once."""
        with self._lock:
            self._children.append(token)
            already, reason = self._state.cancelled, self._state.reason
        if already:
            token.cancel(reason)
        return token

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancel (immediately if already cancelled).

        Returns a function that unregisters the callback.
        """
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` carrying the cancel reason."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or DEFAULT_REASON)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken", "DEFAULT_REASON"]
