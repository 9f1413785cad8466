"""
Graph builder.

Orchestrates the scanner, the LinkedDoc parser and a triple store:

Pass 1 (ingestion), for every scanned file carrying a LinkedDoc block:
- parse the block; read and grammar failures are recorded on
  ``graph.errors`` and the file is skipped
- add every triple to the store, blank nodes flattened under labels
  qualified by the file's relative path (``_:pkg/a.go#b0``)
- synthesize one Module from the triples of the ``code:Module`` subject

Pass 2 (derived relationships): resolve each forward dependency to a
module and append the declaring module to the target's dependents.

Both passes run on the calling thread over the scanner's inventory.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from graphfs.graph.graph import Graph
from graphfs.graph.module import DEPENDENCY_PREDICATES, Module
from graphfs.graph.store import MemoryTripleStore, TripleStore
from graphfs.graph.validator import ValidationFailedError, Validator
from graphfs.parser.parser import RDF_TYPE, GrammarError, LinkedDocParser
from graphfs.parser.triple import BlankNode, Triple, local_name
from graphfs.scanner.ignore import relative_posix
from graphfs.scanner.scanner import FileRecord, Scanner, ScanOptions, ScanResult

logger = logging.getLogger(__name__)

MODULE_TYPE = "Module"


class BuildOptions(BaseModel):
    """Options for one GraphBuilder.build() call."""

    model_config = ConfigDict(extra="forbid")

    scan_options: ScanOptions = Field(default_factory=ScanOptions)
    validate_graph: bool = Field(
        default=False, description="Run the validator; errors fail the build"
    )
    report_progress: bool = Field(
        default=False, description="Print progress to the builder's console"
    )


def find_module_subject(triples: list[Triple]) -> str | None:
    """Subject of the first ``rdf:type`` triple naming the Module type."""
    for triple in triples:
        if (
            triple.predicate == RDF_TYPE
            and local_name(str(triple.object)) == MODULE_TYPE
        ):
            return triple.subject
    return None


def _dependency_value(triple: Triple) -> str:
    """Reference carried by a dependency triple.

    A blank node contributes its inner ``path`` literal, else its ``name``.
    """
    obj = triple.object
    if isinstance(obj, BlankNode):
        for key in ("path", "name"):
            values = obj.values(key)
            if values:
                return str(values[0])
    return str(obj)


class GraphBuilder:
    """Builds a fresh Graph from a source tree per build() call."""

    def __init__(
        self,
        scanner: Scanner | None = None,
        parser: LinkedDocParser | None = None,
        validator: Validator | None = None,
        store_factory: Callable[[], TripleStore] = MemoryTripleStore,
        console: Console | None = None,
    ) -> None:
        self.scanner = scanner or Scanner()
        self.parser = parser or LinkedDocParser()
        self.validator = validator or Validator()
        self.store_factory = store_factory
        self.console = console or Console()

    def build(self, root_path: str | Path, options: BuildOptions | None = None) -> Graph:
        """Scan, parse and link the tree under *root_path*.

        Raises:
            FileNotFoundError: The root does not exist.
            ScanAbortedError: Strict mode or the max-error threshold stopped
                the scan.
            ValidationFailedError: Validation was requested and reported
                errors. The partially built graph is attached.
        """
        options = options or BuildOptions()
        progress = options.report_progress
        start = time.monotonic()

        root = Path(root_path).resolve()
        graph = Graph(str(root), self.store_factory())

        if progress:
            self.console.print("Scanning codebase...")
        scan_result = self.scanner.scan(root, options.scan_options)
        if progress:
            self._report_scan(scan_result)

        linked = sorted(scan_result.linked_doc_files(), key=lambda f: f.path)
        if progress:
            self.console.print(
                f"Found {len(linked)} files with LinkedDoc metadata\n"
                "Parsing LinkedDoc metadata..."
            )

        for record in linked:
            self._ingest(record, root, graph)
        self._link_dependents(graph)

        stats = graph.statistics
        stats.total_triples = graph.store.count()
        stats.total_relationships = graph.count_relationships()
        stats.build_duration = time.monotonic() - start

        if graph.errors.has_errors() and progress:
            self.console.print(graph.errors.report(), style="yellow", markup=False)

        if options.validate_graph:
            if progress:
                self.console.print("Validating graph...")
            result = self.validator.validate(graph)
            if not result.is_valid:
                raise ValidationFailedError(graph, result)
            if progress and result.warnings:
                self.console.print(
                    f"Validation completed with {len(result.warnings)} warnings"
                )

        logger.info(
            "Graph built: %d modules, %d triples, %d relationships in %.2fs",
            stats.total_modules,
            stats.total_triples,
            stats.total_relationships,
            stats.build_duration,
        )
        if progress:
            self.console.print(
                f"[green]Graph built:[/green] {stats.total_modules} modules, "
                f"{stats.total_triples} triples, "
                f"{stats.total_relationships} relationships "
                f"in {stats.build_duration:.2f}s"
            )
        return graph

    def rebuild(self, root_path: str | Path, options: BuildOptions | None = None) -> Graph:
        """Discard and reconstruct; every build already starts from scratch."""
        return self.build(root_path, options)

    def _report_scan(self, scan_result: ScanResult) -> None:
        if not scan_result.errors.has_errors():
            return
        self.console.print(scan_result.errors.report(), style="yellow", markup=False)
        self.console.print(
            f"Partial scan results: {scan_result.files_scanned} files scanned, "
            f"{scan_result.files_failed} files failed"
        )

    # ─── Pass 1: ingestion ─────────────────────────────────────────────────

    def _ingest(self, record: FileRecord, root: Path, graph: Graph) -> Module | None:
        """Parse one file into the store and the module map."""
        try:
            triples = self.parser.parse_file(record.path)
        except GrammarError as e:
            if e.line:
                graph.errors.add_with_line(record.path, e.line, e)
            else:
                graph.errors.add(record.path, e)
            logger.warning("Skipping %s: %s", record.path, e)
            return None
        except OSError as e:
            graph.errors.add(record.path, e)
            logger.warning("Skipping %s: %s", record.path, e)
            return None

        rel_path = relative_posix(Path(record.path), root)
        for triple in triples:
            for subject, predicate, obj in triple.flatten(scope=rel_path):
                graph.store.add(subject, predicate, obj)

        subject = find_module_subject(triples)
        if subject is None:
            logger.debug("No %s subject in %s", MODULE_TYPE, record.path)
            return None

        module = Module(path=rel_path, uri=subject)
        for triple in triples:
            if triple.subject != subject or triple.predicate == RDF_TYPE:
                continue
            if triple.local_name in DEPENDENCY_PREDICATES:
                module.apply(triple.predicate, _dependency_value(triple))
            else:
                module.apply(triple.predicate, str(triple.object))

        graph.add_module(module)
        return module

    # ─── Pass 2: derived relationships ─────────────────────────────────────

    @staticmethod
    def _link_dependents(graph: Graph) -> None:
        for module in graph.modules.values():
            for dep in module.dependencies:
                target = graph.find_module(dep)
                if target is None:
                    graph.unresolved.append((module.path, dep))
                    logger.debug("Unresolved dependency %s -> %s", module.path, dep)
                    continue
                target.add_dependent(module.path)
