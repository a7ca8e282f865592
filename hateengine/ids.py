"""Process-wide sequential identifiers for engine objects."""

from __future__ import annotations

import itertools
import threading

_counter = itertools.count()
_counter_lock = threading.Lock()


def _next_id() -> int:
    with _counter_lock:
        return next(_counter)


class UUID:
    """A 64-bit identifier, either taken from a global counter or given explicitly."""

    __slots__ = ("_id",)

    def __init__(self, id: int | None = None) -> None:
        self._id = _next_id() if id is None else int(id) & 0xFFFF_FFFF_FFFF_FFFF

    @property
    def u64(self) -> int:
        """The identifier as an unsigned 64-bit integer."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UUID):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __int__(self) -> int:
        return self._id

    def __repr__(self) -> str:
        return f"UUID({self._id})"