"""Tests for the graph builder end to end over real source trees."""

from __future__ import annotations

import io

import pytest
from pydantic import ValidationError
from rich.console import Console

from graphfs.graph.builder import BuildOptions, GraphBuilder, find_module_subject
from graphfs.graph.store import MemoryTripleStore
from graphfs.graph.validator import ValidationFailedError
from graphfs.parser.parser import RDF_TYPE
from graphfs.parser.triple import URI, Literal, Triple
from graphfs.scanner.scanner import ScanOptions

CODE = "https://schema.codedoc.org/"


def sequential() -> BuildOptions:
    return BuildOptions(scan_options=ScanOptions(concurrent=False))


def quiet_builder(**kwargs) -> GraphBuilder:
    return GraphBuilder(console=Console(file=io.StringIO()), **kwargs)


class TestFindModuleSubject:
    def test_first_module_typed_subject(self):
        triples = [
            Triple("#x", CODE + "name", Literal("x")),
            Triple("#m", RDF_TYPE, URI(CODE + "Module")),
            Triple("#n", RDF_TYPE, URI(CODE + "Module")),
        ]
        assert find_module_subject(triples) == "#m"

    def test_no_module_type(self):
        triples = [Triple("#x", RDF_TYPE, URI(CODE + "Function"))]
        assert find_module_subject(triples) is None


class TestBuild:
    def test_single_module(self, make_tree, linked_doc):
        root = make_tree(
            {"m.go": linked_doc('<#m> a code:Module ;\n    code:name "m.go" .')}
        )

        graph = quiet_builder().build(root, sequential())

        assert list(graph.modules) == ["m.go"]
        module = graph.get_module("m.go")
        assert module.uri == "#m"
        assert module.name == "m.go"
        assert module.dependencies == []
        assert graph.store.count() == 2
        assert graph.statistics.total_triples == 2

    def test_dependents_of_undocumented_file(self, make_tree, linked_doc):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a.go" ;\n'
                    "    code:linksTo <./b.go> ."
                ),
                "b.go": "package main\n",
            }
        )

        graph = quiet_builder().build(root, sequential())

        assert "b.go" not in graph
        assert graph.get_module("a.go").dependencies == ["b.go"]
        assert graph.dependents("b.go") == ["a.go"]
        assert graph.unresolved == [("a.go", "b.go")]

    def test_parent_relative_dependency(self, make_tree, linked_doc):
        root = make_tree(
            {
                "pkg/a/a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    "    code:dependsOn <../x.go> ."
                ),
                "pkg/x.go": linked_doc('<#x> a code:Module ;\n    code:name "x" .'),
            }
        )

        graph = quiet_builder().build(root, sequential())

        assert graph.direct_dependencies("pkg/a/a.go") == ["pkg/x.go"]
        assert graph.dependents("pkg/x.go") == ["pkg/a/a.go"]
        assert graph.unresolved == []

    def test_every_resolved_edge_has_a_reverse_edge(self, make_tree, linked_doc):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    "    code:linksTo <./b.go>, <./c.go> ."
                ),
                "b.go": linked_doc(
                    '<#b> a code:Module ;\n    code:name "b" ;\n'
                    "    code:linksTo <./c.go> ."
                ),
                "c.go": linked_doc('<#c> a code:Module ;\n    code:name "c" .'),
            }
        )

        graph = quiet_builder().build(root, sequential())

        for module in graph.modules.values():
            for dep in module.dependencies:
                target = graph.find_module(dep)
                assert module.path in target.dependents
        assert graph.dependents("c.go") == ["a.go", "b.go"]
        assert graph.transitive_dependencies("a.go") == ["b.go", "c.go"]

    def test_cycle_builds_without_validation(self, make_tree, linked_doc):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    "    code:linksTo <./b.go> ."
                ),
                "b.go": linked_doc(
                    '<#b> a code:Module ;\n    code:name "b" ;\n'
                    "    code:linksTo <./a.go> ."
                ),
            }
        )

        graph = quiet_builder().build(root, sequential())

        assert graph.transitive_dependencies("a.go") == ["b.go", "a.go"]
        assert graph.has_circular_dependency("a.go", "a.go")

    def test_blank_node_dependency(self, make_tree, linked_doc):
        root = make_tree(
            {
                "main.go": linked_doc(
                    '<#main> a code:Module ;\n    code:name "main" ;\n'
                    "    code:linksTo [\n"
                    '        code:name "helpers" ;\n'
                    '        code:path "./util/helpers.go"\n'
                    "    ] ."
                ),
                "util/helpers.go": linked_doc(
                    '<#helpers> a code:Module ;\n    code:name "helpers" .'
                ),
            }
        )

        graph = quiet_builder().build(root, sequential())

        assert graph.direct_dependencies("main.go") == ["util/helpers.go"]
        assert graph.dependents("util/helpers.go") == ["main.go"]
        # Blank-node contents are flattened into the store
        blank = graph.store.find(subject="#main", predicate=CODE + "linksTo")
        assert len(blank) == 1
        label = blank[0][2]
        assert graph.store.find(subject=label, predicate=CODE + "path") == [
            (label, CODE + "path", "./util/helpers.go")
        ]

    def test_blank_nodes_from_different_files_stay_distinct(
        self, make_tree, linked_doc
    ):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    '    code:config [ code:name "alpha" ] .'
                ),
                "b.go": linked_doc(
                    '<#b> a code:Module ;\n    code:name "b" ;\n'
                    '    code:config [ code:name "beta" ] .'
                ),
            }
        )

        store = quiet_builder().build(root, sequential()).store

        assert store.find(subject="#a", predicate=CODE + "config") == [
            ("#a", CODE + "config", "_:a.go#b0")
        ]
        assert store.find(subject="#b", predicate=CODE + "config") == [
            ("#b", CODE + "config", "_:b.go#b0")
        ]
        assert store.find(subject="_:a.go#b0") == [
            ("_:a.go#b0", CODE + "name", "alpha")
        ]
        assert store.find(subject="_:b.go#b0") == [
            ("_:b.go#b0", CODE + "name", "beta")
        ]
        assert store.count() == 8

    def test_unmapped_predicates_become_properties(self, make_tree, linked_doc):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    '    code:owner "platform" ;\n'
                    '    code:tags "cli", "io" .'
                )
            }
        )

        module = quiet_builder().build(root, sequential()).get_module("a.go")

        assert module.tags == ["cli", "io"]
        assert module.properties == {CODE + "owner": ["platform"]}

    def test_grammar_error_is_recorded_and_build_continues(self, make_tree, linked_doc):
        root = make_tree(
            {
                "bad.go": linked_doc('<#bad> a code:Module ;\n    code:name "oops .'),
                "good.go": linked_doc('<#good> a code:Module ;\n    code:name "g" .'),
            }
        )

        graph = quiet_builder().build(root, sequential())

        assert list(graph.modules) == ["good.go"]
        assert graph.errors.count() == 1
        error = graph.errors.errors()[0]
        assert error.file.endswith("bad.go")
        # Line of the unterminated literal within the file
        assert error.line == 5

    def test_file_without_module_subject(self, make_tree, linked_doc):
        root = make_tree({"f.go": linked_doc('<#f> code:name "f" .')})

        graph = quiet_builder().build(root, sequential())

        assert len(graph) == 0
        assert graph.store.count() == 1

    def test_statistics(self, make_tree, linked_doc):
        root = make_tree(
            {
                "a.go": linked_doc(
                    '<#a> a code:Module ;\n    code:name "a" ;\n'
                    '    code:language "go" ;\n    code:layer "core" ;\n'
                    "    code:linksTo <./b.go> ;\n    code:calls <#Helper> ."
                ),
                "b.go": linked_doc(
                    '<#b> a code:Module ;\n    code:name "b" ;\n'
                    '    code:language "go" .'
                ),
            }
        )

        stats = quiet_builder().build(root, sequential()).statistics

        assert stats.total_modules == 2
        assert stats.total_triples == 9
        assert stats.total_relationships == 2
        assert stats.modules_by_language == {"go": 2}
        assert stats.modules_by_layer == {"core": 1}
        assert stats.build_duration >= 0

    def test_missing_root(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            quiet_builder().build(tmp_path / "nope")


class TestBuilderOptions:
    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError, match="validate"):
            BuildOptions(validate=True)

    def test_validation_failure_carries_graph(self, make_tree, linked_doc):
        root = make_tree({"a.go": linked_doc("<#a> a code:Module .")})
        options = sequential()
        options.validate_graph = True

        with pytest.raises(ValidationFailedError) as exc_info:
            quiet_builder().build(root, options)

        assert "a.go" in exc_info.value.graph
        assert "missing required field: name" in str(exc_info.value)

    def test_validation_warnings_do_not_fail(self, make_tree, linked_doc):
        root = make_tree({"a.go": linked_doc('<#a> a code:Module ;\n    code:name "a" .')})
        options = sequential()
        options.validate_graph = True

        graph = quiet_builder().build(root, options)

        assert "a.go" in graph

    def test_progress_output(self, make_tree, linked_doc):
        root = make_tree({"a.go": linked_doc('<#a> a code:Module ;\n    code:name "a" .')})
        out = io.StringIO()
        builder = GraphBuilder(console=Console(file=out, width=200))
        options = sequential()
        options.report_progress = True

        builder.build(root, options)

        text = out.getvalue()
        assert "Scanning codebase..." in text
        assert "Found 1 files with LinkedDoc metadata" in text
        assert "Graph built:" in text

    def test_no_output_without_progress(self, make_tree, linked_doc):
        root = make_tree({"a.go": linked_doc('<#a> a code:Module ;\n    code:name "a" .')})
        out = io.StringIO()

        GraphBuilder(console=Console(file=out)).build(root, sequential())

        assert out.getvalue() == ""

    def test_store_factory(self, make_tree, linked_doc):
        root = make_tree({"a.go": linked_doc('<#a> a code:Module ;\n    code:name "a" .')})
        stores: list[MemoryTripleStore] = []

        def factory() -> MemoryTripleStore:
            stores.append(MemoryTripleStore())
            return stores[-1]

        builder = quiet_builder(store_factory=factory)
        first = builder.build(root, sequential())
        second = builder.rebuild(root, sequential())

        assert len(stores) == 2
        assert first.store is stores[0]
        assert second.store is stores[1]
        assert first is not second
        assert list(second.modules) == ["a.go"]
