"""Cooperative cancellation tokens.

Extractors poll a token at well-defined points (before opening a document,
around each page) instead of being interrupted mid-call.
"""

from __future__ import annotations


class CancellationToken:
    """A flag that can be raised once and observed by any number of readers.

    A token may be linked to a parent; it then reports cancelled as soon as
    either itself or the parent is cancelled.
    """

    def __init__(self, parent: CancellationToken | None = None):
        self._parent = parent
        self._cancelled = False
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._cancelled:
            self._cancelled = True
            self.reason = reason

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._parent is not None and self._parent.cancelled

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"


def is_cancelled(token: CancellationToken | None) -> bool:
    return token is not None and token.cancelled
