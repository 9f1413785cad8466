"""Graph consistency checks.

Errors make a validating build fail; warnings are advisory.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from graphfs.graph.graph import Graph
    from graphfs.graph.module import Module

logger = logging.getLogger(__name__)

# More dependencies than this is flagged as a refactoring hint
MAX_DEPENDENCIES = 10


@dataclass(frozen=True)
class ValidationIssue:
    module: str
    message: str

    def __str__(self) -> str:
        return f"{self.module}: {self.message}"


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, module: str, message: str) -> None:
        self.errors.append(ValidationIssue(module, message))

    def warn(self, module: str, message: str) -> None:
        self.warnings.append(ValidationIssue(module, message))


class ValidationFailedError(RuntimeError):
    """Raised by a validating build; carries the graph and the result."""

    def __init__(self, graph: Graph, result: ValidationResult) -> None:
        self.graph = graph
        self.result = result
        lines = [f"validation failed with {len(result.errors)} error(s):"]
        lines.extend(f"  - {issue}" for issue in result.errors)
        super().__init__("\n".join(lines))


class Validator:
    """Runs every check over a graph and collects the findings."""

    def validate(self, graph: Graph) -> ValidationResult:
        result = ValidationResult()
        modules = sorted(graph.modules.items())

        self._check_required_fields(modules, result)
        self._check_dependencies(graph, modules, result)
        self._check_cycles(graph, modules, result)
        self._check_duplicate_uris(modules, result)
        self._check_best_practices(modules, result)

        logger.debug(
            "Validated %d modules: %d errors, %d warnings",
            len(modules),
            len(result.errors),
            len(result.warnings),
        )
        return result

    @staticmethod
    def _check_required_fields(
        modules: list[tuple[str, Module]], result: ValidationResult
    ) -> None:
        for path, module in modules:
            if not module.uri:
                result.error(path, "missing URI")
            if not module.name:
                result.error(path, "missing required field: name")
            if not module.description:
                result.warn(path, "missing description")
            if not module.language:
                result.warn(path, "missing language")

    @staticmethod
    def _check_dependencies(
        graph: Graph, modules: list[tuple[str, Module]], result: ValidationResult
    ) -> None:
        for path, module in modules:
            for dep in module.dependencies:
                if graph.find_module(dep) is None:
                    result.warn(path, f"dependency not found: {dep}")

    @staticmethod
    def _check_cycles(
        graph: Graph, modules: list[tuple[str, Module]], result: ValidationResult
    ) -> None:
        visited: set[str] = set()

        def has_cycle(root: Module) -> bool:
            visited.add(root.uri)
            on_stack = {root.uri}
            stack = [(root, iter(root.dependencies))]
            while stack:
                module, deps = stack[-1]
                for dep in deps:
                    target = graph.find_module(dep)
                    if target is None:
                        continue
                    if target.uri in on_stack:
                        return True
                    if target.uri not in visited:
                        visited.add(target.uri)
                        on_stack.add(target.uri)
                        stack.append((target, iter(target.dependencies)))
                        break
                else:
                    on_stack.discard(module.uri)
                    stack.pop()
            return False

        for path, module in modules:
            if module.uri in visited:
                continue
            if has_cycle(module):
                result.error(path, "circular dependency detected")

    @staticmethod
    def _check_duplicate_uris(
        modules: list[tuple[str, Module]], result: ValidationResult
    ) -> None:
        by_uri: dict[str, list[str]] = defaultdict(list)
        for path, module in modules:
            if module.uri:
                by_uri[module.uri].append(path)
        for uri, paths in by_uri.items():
            if len(paths) > 1:
                for path in paths:
                    result.error(path, f"duplicate URI {uri} found in: {paths}")

    @staticmethod
    def _check_best_practices(
        modules: list[tuple[str, Module]], result: ValidationResult
    ) -> None:
        for path, module in modules:
            if not module.tags:
                result.warn(path, "no tags specified")
            if not module.exports:
                result.warn(path, "no exports specified")
            if len(module.dependencies) > MAX_DEPENDENCIES:
                result.warn(
                    path,
                    f"high number of dependencies ({len(module.dependencies)})"
                    " - consider refactoring",
                )
