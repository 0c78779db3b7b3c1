"""Process-wide unique identity values."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass


_counter = itertools.count(1)
_counter_lock = threading.Lock()


@dataclass(frozen=True)
class UniqueID:
    """Opaque identity value. Comparable for equality only, never ordered."""

    value: int

    def __repr__(self) -> str:
        return f"UniqueID({self.value})"


def next_unique_id() -> UniqueID:
    with _counter_lock:
        return UniqueID(next(_counter))
