"""Flash messages: a session-backed, one-request lookahead store.

The flash keeps two buffers. ``current`` holds what the previous request
wrote and is what reads see. ``next`` collects this request's writes and
becomes ``current`` on the following request. :meth:`Flash.sweep` performs
that rotation; the lifecycle controller calls it once at finalization and
stores the result in the session.

Examples:
    Request A writes a notice::

        flash = Flash()
        flash["notice"] = "Saved"
        flash["notice"]            # None, not visible yet
        session[FLASH_KEY] = flash.sweep().now

    Request B reads it::

        flash = Flash(session[FLASH_KEY])
        flash["notice"]            # "Saved"
"""

from collections.abc import Iterator, Mapping
from typing import Any

FLASH_KEY = "_flash"

_ALL = object()


class Flash:
    """Double-buffered flash store.

    Args:
        current: Messages written by the previous request.
    """

    def __init__(self, current: Mapping[str, Any] | None = None) -> None:
        self._current: dict[str, Any] = dict(current or {})
        self._next: dict[str, Any] = {}

    @property
    def now(self) -> dict[str, Any]:
        """Messages visible during this request.

        Writes to this mapping are visible immediately and do not survive
        to the next request.
        """
        return self._current

    @property
    def next(self) -> dict[str, Any]:
        """Messages that will be visible on the next request."""
        return self._next

    def __getitem__(self, key: str) -> Any:
        return self._current.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._next[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._current.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._current

    def __iter__(self) -> Iterator[str]:
        return iter(self._current)

    def __len__(self) -> int:
        return len(self._current)

    def items(self):  # type: ignore[no-untyped-def]
        return self._current.items()

    def keep(self, key: Any = _ALL) -> None:
        """Carry current messages over to the next request.

        Without a key every current message is kept.
        """
        if key is _ALL:
            self._next.update(self._current)
        elif key in self._current:
            self._next[key] = self._current[key]

    def discard(self, key: Any = _ALL) -> None:
        """Drop messages scheduled for the next request.

        Without a key every scheduled message is dropped.
        """
        if key is _ALL:
            self._next.clear()
        else:
            self._next.pop(key, None)

    def sweep(self) -> "Flash":
        """Rotate the buffers: ``next`` becomes ``current`` and ``next`` empties."""
        self._current = dict(self._next)
        self._next.clear()
        return self

    def to_dict(self) -> dict[str, Any]:
        return dict(self._current)

    def __repr__(self) -> str:
        return f"Flash(now={self._current!r}, next={self._next!r})"
