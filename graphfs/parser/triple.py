"""RDF triple data structures.

A triple's object is a tagged variant: Literal, URI or BlankNode. Blank
nodes carry their nested triples (whose subject is the blank node label)
in declaration order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Literal:
    """A literal value (quoted string or bare token)."""

    value: str
    kind = "literal"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class URI:
    """A URI reference, prefix-expanded where a prefix was declared."""

    value: str
    kind = "uri"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BlankNode:
    """An anonymous node: ``[ pred obj ; pred obj ]``."""

    label: str
    triples: tuple[Triple, ...] = ()
    kind = "bnode"

    def __str__(self) -> str:
        return self.label

    def values(self, local_name: str) -> list[TripleObject]:
        """Objects of inner triples whose predicate has *local_name*."""
        return [t.object for t in self.triples if t.local_name == local_name]


TripleObject = Union[Literal, URI, BlankNode]


def local_name(uri: str) -> str:
    """Return the part of *uri* after the last ``#``, ``/`` or ``:``."""
    for sep in ("#", "/", ":"):
        uri = uri.rsplit(sep, 1)[-1]
    return uri


@dataclass(frozen=True)
class Triple:
    """An RDF Subject-Predicate-Object statement."""

    subject: str
    predicate: str
    object: TripleObject

    @property
    def local_name(self) -> str:
        return local_name(self.predicate)

    def flatten(self, scope: str = "") -> list[tuple[str, str, str]]:
        """Flatten to string triples, expanding blank nodes depth-first.

        Blank-node labels restart at ``_:b0`` for every parsed block. A
        non-empty *scope* qualifies them (``_:b0`` -> ``_:<scope>#b0``) so
        nodes from different blocks stay distinct in a shared store.
        """
        return self._flatten(self.subject, scope)

    def _flatten(self, subject: str, scope: str) -> list[tuple[str, str, str]]:
        obj = self.object
        if not isinstance(obj, BlankNode):
            return [(subject, self.predicate, str(obj))]
        label = scoped_label(obj.label, scope)
        rows = [(subject, self.predicate, label)]
        for inner in obj.triples:
            rows.extend(inner._flatten(label, scope))
        return rows


def scoped_label(label: str, scope: str) -> str:
    """Qualify a ``_:`` blank-node label with *scope*."""
    if not scope:
        return label
    return f"_:{scope}#{label.removeprefix('_:')}"
