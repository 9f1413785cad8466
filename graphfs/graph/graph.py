"""
Knowledge graph of modules.

The Graph holds the Modules produced by one build, keyed by root-relative
path, plus aggregate statistics and a handle on the triple store that
received every ingested triple.

Dependency references are resolved with a fixed, first-match-wins order:
1. exact path key
2. declared module URI
3. module name, or a path that ends with the reference
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field

from graphfs.graph.module import Module
from graphfs.graph.store import MemoryTripleStore, TripleStore
from graphfs.scanner.errors import ErrorCollector


@dataclass
class GraphStats:
    """Aggregate numbers describing a built graph."""

    total_modules: int = 0
    total_triples: int = 0
    total_relationships: int = 0
    modules_by_language: Counter[str] = field(default_factory=Counter)
    modules_by_layer: Counter[str] = field(default_factory=Counter)
    build_duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_modules": self.total_modules,
            "total_triples": self.total_triples,
            "total_relationships": self.total_relationships,
            "modules_by_language": dict(self.modules_by_language),
            "modules_by_layer": dict(self.modules_by_layer),
            "build_duration": self.build_duration,
        }


class Graph:
    """Modules keyed by path, their statistics and the backing triple store."""

    def __init__(self, root: str, store: TripleStore | None = None) -> None:
        self.root = root
        self.store: TripleStore = store if store is not None else MemoryTripleStore()
        self.modules: dict[str, Module] = {}
        self.statistics = GraphStats()
        # (module path, reference) pairs that matched no module
        self.unresolved: list[tuple[str, str]] = []
        # Per-file read and grammar failures from ingestion
        self.errors = ErrorCollector()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.modules)

    def __contains__(self, path: object) -> bool:
        return path in self.modules

    def __repr__(self) -> str:
        return f"Graph(root={self.root!r}, modules={len(self.modules)})"

    # ─── Module management ─────────────────────────────────────────────────

    def get_module(self, path: str) -> Module | None:
        return self.modules.get(path)

    def add_module(self, module: Module) -> None:
        """Add (or replace) a module and update the histograms."""
        with self._lock:
            if module.path in self.modules:
                self._forget(self.modules[module.path])
            self.modules[module.path] = module
            stats = self.statistics
            stats.total_modules += 1
            if module.language:
                stats.modules_by_language[module.language] += 1
            if module.layer:
                stats.modules_by_layer[module.layer] += 1

    def remove_module(self, path: str) -> None:
        with self._lock:
            module = self.modules.pop(path, None)
            if module is not None:
                self._forget(module)

    def _forget(self, module: Module) -> None:
        stats = self.statistics
        stats.total_modules -= 1
        for counter, key in (
            (stats.modules_by_language, module.language),
            (stats.modules_by_layer, module.layer),
        ):
            if key:
                counter[key] -= 1
                if counter[key] <= 0:
                    del counter[key]

    def modules_by_language(self, language: str) -> list[Module]:
        return [m for m in self.modules.values() if m.language == language]

    def modules_by_layer(self, layer: str) -> list[Module]:
        return [m for m in self.modules.values() if m.layer == layer]

    def modules_by_tag(self, tag: str) -> list[Module]:
        return [m for m in self.modules.values() if tag in m.tags]

    # ─── Dependency queries ────────────────────────────────────────────────

    def find_module(self, ref: str) -> Module | None:
        """Resolve a dependency reference to a module, or None."""
        if not ref:
            return None
        module = self.modules.get(ref)
        if module is not None:
            return module
        for module in self.modules.values():
            if module.uri == ref:
                return module
        for module in self.modules.values():
            if module.name == ref or module.path.endswith(ref):
                return module
        return None

    def direct_dependencies(self, path: str) -> list[str]:
        module = self.get_module(path)
        if module is None:
            return []
        return list(module.dependencies)

    def dependents(self, path: str) -> list[str]:
        """Paths of modules that declare a dependency on *path*.

        Files without metadata have no Module; for those the forward edges
        of every module are searched instead.
        """
        module = self.get_module(path)
        if module is not None:
            return list(module.dependents)
        return [m.path for m in self.modules.values() if path in m.dependencies]

    def transitive_dependencies(self, path: str) -> list[str]:
        """All module paths reachable from *path*, in discovery order.

        Each path appears once. On a cycle the starting module itself is
        included because it is reachable from its own dependencies.
        """
        start = self.get_module(path)
        if start is None:
            return []

        visited = {start.uri}
        seen: set[str] = set()
        result: list[str] = []
        # Depth-first with an explicit stack of dependency iterators
        stack = [iter(start.dependencies)]
        while stack:
            dep = next(stack[-1], None)
            if dep is None:
                stack.pop()
                continue
            target = self.find_module(dep)
            if target is None:
                continue
            if target.path not in seen:
                seen.add(target.path)
                result.append(target.path)
            if target.uri not in visited:
                visited.add(target.uri)
                stack.append(iter(target.dependencies))
        return result

    def has_circular_dependency(self, path: str, target: str) -> bool:
        """Whether *target* (path or URI) is reachable from *path*'s dependencies.

        ``has_circular_dependency(p, p)`` is True when *p* sits on a cycle.
        """
        start = self.get_module(path)
        if start is None:
            return False

        visited: set[str] = set()
        stack = [start]
        while stack:
            module = stack.pop()
            if module.uri in visited:
                continue
            visited.add(module.uri)
            for dep in module.dependencies:
                dep_module = self.find_module(dep)
                if dep_module is None:
                    continue
                if target in (dep_module.path, dep_module.uri):
                    return True
                stack.append(dep_module)
        return False

    def count_relationships(self) -> int:
        return sum(len(m.dependencies) + len(m.calls) for m in self.modules.values())
