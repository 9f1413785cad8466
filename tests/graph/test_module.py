"""Tests for the Module entity and predicate mapping."""

from __future__ import annotations

import pytest

from graphfs.graph.module import PREDICATE_FIELDS, Module, resolve_dependency_path

CODE = "https://schema.codedoc.org/"


class TestResolveDependencyPath:
    @pytest.mark.parametrize(
        "dep,module_path,expected",
        [
            ("../x.go", "pkg/a/a.go", "pkg/x.go"),
            ("./b.go", "a.go", "b.go"),
            ("./util/db.go", "cmd/main.go", "cmd/util/db.go"),
            ("../../lib.go", "a/b/c.go", "lib.go"),
            ("<../x.go>", "pkg/a/a.go", "pkg/x.go"),
            ("#Helper", "pkg/a/a.go", "#Helper"),
            ("pkg/b.go", "pkg/a/a.go", "pkg/b.go"),
            ("fmt", "main.go", "fmt"),
        ],
    )
    def test_resolution(self, dep, module_path, expected):
        assert resolve_dependency_path(dep, module_path) == expected


class TestModule:
    def test_add_methods_deduplicate(self):
        module = Module(path="a.go", uri="#a")
        for _ in range(2):
            module.add_dependency("b.go")
            module.add_dependent("c.go")
            module.add_export("#Run")
            module.add_call("fmt.Println")
            module.add_tag("cli")

        assert module.dependencies == ["b.go"]
        assert module.dependents == ["c.go"]
        assert module.exports == ["#Run"]
        assert module.calls == ["fmt.Println"]
        assert module.tags == ["cli"]

    def test_properties_keep_repeats(self):
        module = Module(path="a.go", uri="#a")
        module.add_property(CODE + "owner", "x")
        module.add_property(CODE + "owner", "x")
        assert module.properties == {CODE + "owner": ["x", "x"]}

    def test_apply_routes_by_local_name(self):
        module = Module(path="pkg/a/a.go", uri="#a")
        module.apply(CODE + "name", "a.go")
        module.apply(CODE + "description", "A module")
        module.apply(CODE + "language", "go")
        module.apply(CODE + "layer", "core")
        module.apply(CODE + "tags", "t1")
        module.apply("http://other.example/ns#tag", "t2")
        module.apply(CODE + "linksTo", "../x.go")
        module.apply(CODE + "dependsOn", "./y.go")
        module.apply(CODE + "exports", "#Run")
        module.apply(CODE + "calls", "#Helper")
        module.apply(CODE + "owner", "team")

        assert module.name == "a.go"
        assert module.description == "A module"
        assert module.language == "go"
        assert module.layer == "core"
        assert module.tags == ["t1", "t2"]
        assert module.dependencies == ["pkg/x.go", "pkg/a/y.go"]
        assert module.exports == ["#Run"]
        assert module.calls == ["#Helper"]
        assert module.properties == {CODE + "owner": ["team"]}

    def test_predicate_table_is_extensible(self, monkeypatch):
        monkeypatch.setitem(
            PREDICATE_FIELDS, "owner", lambda m, v: m.add_tag(f"owner:{v}")
        )
        module = Module(path="a.go", uri="#a")
        module.apply(CODE + "owner", "team")
        assert module.tags == ["owner:team"]
        assert module.properties == {}
