"""GraphFS - knowledge graphs from LinkedDoc metadata embedded in source files.

The ingestion pipeline has three stages:

    scanner  - walk a source tree, prune ignored directories, classify files
    parser   - extract the LinkedDoc RDF block and parse it into triples
    graph    - build the Module dependency graph from the parsed triples

Typical usage:
    from graphfs import GraphBuilder, BuildOptions

    graph = GraphBuilder().build("path/to/repo", BuildOptions(validate_graph=True))
    graph.dependents("pkg/b.go")
"""

from graphfs.graph import (
    BuildOptions,
    Graph,
    GraphBuilder,
    GraphStats,
    MemoryTripleStore,
    Module,
    ValidationFailedError,
    Validator,
)
from graphfs.parser import (
    URI,
    BlankNode,
    GrammarError,
    LinkedDocParser,
    Literal,
    Triple,
)
from graphfs.scanner import (
    ErrorCollector,
    FileRecord,
    Scanner,
    ScanOptions,
    ScanResult,
)

__version__ = "0.4.0"

__all__ = [
    "BlankNode",
    "BuildOptions",
    "ErrorCollector",
    "FileRecord",
    "GrammarError",
    "Graph",
    "GraphBuilder",
    "GraphStats",
    "LinkedDocParser",
    "Literal",
    "MemoryTripleStore",
    "Module",
    "ScanOptions",
    "ScanResult",
    "Scanner",
    "Triple",
    "URI",
    "ValidationFailedError",
    "Validator",
    "__version__",
]
