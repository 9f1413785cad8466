"""Module entity synthesized from a file's LinkedDoc triples."""

from __future__ import annotations

import posixpath
from collections.abc import Callable
from dataclasses import dataclass, field

from graphfs.parser.triple import local_name


def resolve_dependency_path(dep: str, module_path: str) -> str:
    """Resolve a declared dependency relative to the declaring module.

    Values containing ``..`` or starting with ``./`` are joined onto the
    module's directory and normalized; anything else is kept as written.

    Examples:
        >>> resolve_dependency_path("../x.go", "pkg/a/a.go")
        'pkg/x.go'
        >>> resolve_dependency_path("#Helper", "pkg/a/a.go")
        '#Helper'
    """
    dep = dep.strip()
    if dep.startswith("<") and dep.endswith(">"):
        dep = dep[1:-1]
    if ".." not in dep and not dep.startswith("./"):
        return dep
    module_dir = posixpath.dirname(module_path)
    return posixpath.normpath(posixpath.join(module_dir, dep))


def _append_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


@dataclass
class Module:
    """A source file described by a LinkedDoc block.

    ``path`` is relative to the graph root and is the module's key.
    ``dependents`` is filled in by the builder's second pass only.
    """

    path: str
    uri: str
    name: str = ""
    description: str = ""
    language: str = ""
    layer: str = ""
    tags: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    dependents: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    properties: dict[str, list[str]] = field(default_factory=dict)

    def add_dependency(self, dep: str) -> None:
        _append_unique(self.dependencies, dep)

    def add_dependent(self, dep: str) -> None:
        _append_unique(self.dependents, dep)

    def add_export(self, export: str) -> None:
        _append_unique(self.exports, export)

    def add_call(self, call: str) -> None:
        _append_unique(self.calls, call)

    def add_tag(self, tag: str) -> None:
        _append_unique(self.tags, tag)

    def add_property(self, predicate: str, value: str) -> None:
        self.properties.setdefault(predicate, []).append(value)

    def apply(self, predicate: str, value: str) -> None:
        """Route a predicate/value pair to its field via ``PREDICATE_FIELDS``."""
        setter = PREDICATE_FIELDS.get(local_name(predicate))
        if setter is None:
            self.add_property(predicate, value)
        else:
            setter(self, value)


def _set(attr: str) -> Callable[[Module, str], None]:
    def setter(module: Module, value: str) -> None:
        setattr(module, attr, value)

    return setter


def _link(module: Module, value: str) -> None:
    module.add_dependency(resolve_dependency_path(value, module.path))


# Predicate local name -> field setter. Unlisted predicates go to properties.
PREDICATE_FIELDS: dict[str, Callable[[Module, str], None]] = {
    "name": _set("name"),
    "description": _set("description"),
    "language": _set("language"),
    "layer": _set("layer"),
    "tags": Module.add_tag,
    "tag": Module.add_tag,
    "linksTo": _link,
    "dependsOn": _link,
    "exports": Module.add_export,
    "calls": Module.add_call,
}

# Predicates whose values are dependency references
DEPENDENCY_PREDICATES = frozenset(
    key for key, setter in PREDICATE_FIELDS.items() if setter is _link
)
