"""Triple store collaborator.

The graph builder only needs ``add`` and ``count``; query engines and
persistent stores implement the same protocol. ``MemoryTripleStore`` is the
default in-process implementation used by the builder and the CLI.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class TripleStore(Protocol):
    """Minimal write interface consumed by the graph builder."""

    def add(self, subject: str, predicate: str, object: str) -> None: ...

    def count(self) -> int: ...


class MemoryTripleStore:
    """Thread-safe, de-duplicating in-memory triple store.

    Triples are kept in insertion order; adding an existing triple is a no-op.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._triples: dict[tuple[str, str, str], None] = {}

    def add(self, subject: str, predicate: str, object: str) -> None:
        if not subject or not predicate:
            msg = "subject and predicate must be non-empty"
            raise ValueError(msg)
        with self._lock:
            self._triples[(subject, predicate, object)] = None

    def count(self) -> int:
        with self._lock:
            return len(self._triples)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, triple: object) -> bool:
        with self._lock:
            return triple in self._triples

    def __iter__(self) -> Iterator[tuple[str, str, str]]:
        with self._lock:
            return iter(list(self._triples))

    def find(
        self,
        subject: str | None = None,
        predicate: str | None = None,
        object: str | None = None,
    ) -> list[tuple[str, str, str]]:
        """Return triples matching every non-None component."""
        return [
            t
            for t in self
            if (subject is None or t[0] == subject)
            and (predicate is None or t[1] == predicate)
            and (object is None or t[2] == object)
        ]
