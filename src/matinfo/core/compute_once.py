"""Thread-safe build-once value holder."""

from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar


T = TypeVar("T")


class ComputeOnce(Generic[T]):
    """Runs ``builder`` on first ``get()`` and caches the result for the lifetime of the holder.

    Concurrent first callers are serialized on a per-instance lock, so the
    builder runs at most once per successful build. If the builder raises, the
    exception reaches the caller that triggered it and nothing is cached; a
    later ``get()`` tries again. Once built, ``get()`` returns without locking.
    """

    __slots__ = ("_builder", "_lock", "_value", "_done")

    def __init__(self, builder: Callable[[], T]) -> None:
        if not callable(builder):
            raise TypeError("builder must be callable.")
        self._builder = builder
        self._lock = threading.Lock()
        self._value: T | None = None
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def get(self) -> T:
        if self._done:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._done:
                self._value = self._builder()
                self._done = True
        return self._value  # type: ignore[return-value]
