"""Module dependency graph built from LinkedDoc triples."""

from graphfs.graph.builder import BuildOptions, GraphBuilder, find_module_subject
from graphfs.graph.graph import Graph, GraphStats
from graphfs.graph.module import PREDICATE_FIELDS, Module, resolve_dependency_path
from graphfs.graph.store import MemoryTripleStore, TripleStore
from graphfs.graph.validator import (
    ValidationFailedError,
    ValidationIssue,
    ValidationResult,
    Validator,
)

__all__ = [
    "PREDICATE_FIELDS",
    "BuildOptions",
    "Graph",
    "GraphBuilder",
    "GraphStats",
    "MemoryTripleStore",
    "Module",
    "TripleStore",
    "ValidationFailedError",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
    "find_module_subject",
    "resolve_dependency_path",
]
