"""Tests for the in-memory build graph."""

import json
from pathlib import Path

import pytest

from coregen.build.build_graph import BuildGraph, BuildGraphError, Executable, StaticLibrary


class TestBuildGraph:
    """Test target declaration, visibility and export."""

    @pytest.fixture
    def graph(self):
        return BuildGraph()

    def test_create_static_library(self, graph):
        """Test library declaration."""
        lib = graph.create_static_library("core_lib", [Path("a.c"), Path("b.c")])
        assert isinstance(lib, StaticLibrary)
        assert lib.sources == [Path("a.c"), Path("b.c")]
        assert graph.get_target("core_lib") is lib
        assert "core_lib" in graph
        assert len(graph) == 1

    def test_duplicate_library(self, graph):
        """Test a target name can only be used once."""
        graph.create_static_library("core_lib", [])
        with pytest.raises(BuildGraphError, match="already exists"):
            graph.create_static_library("core_lib", [])

    def test_create_executable_returns_existing(self, graph):
        """Test executables are declared once and then reused."""
        first = graph.create_executable("blink", [Path("main.cpp")], board_id="uno")
        second = graph.create_executable("blink")
        assert first is second
        assert isinstance(first, Executable)
        assert first.board_id == "uno"

    def test_executable_name_taken_by_library(self, graph):
        """Test an executable cannot reuse a library's name."""
        graph.create_static_library("blink", [])
        with pytest.raises(BuildGraphError, match="not an executable"):
            graph.create_executable("blink")

    def test_unknown_target(self, graph):
        """Test lookup of an undeclared target."""
        with pytest.raises(BuildGraphError, match="Unknown target"):
            graph.get_target("nope")

    def test_foreign_target_rejected(self, graph):
        """Test primitives refuse targets of another graph."""
        other = BuildGraph().create_static_library("lib", [])
        with pytest.raises(BuildGraphError, match="not part of this graph"):
            graph.set_link_flags(other, "-Os")

    def test_add_dependency_idempotent(self, graph):
        """Test a dependency edge is only added once."""
        lib = graph.create_static_library("lib", [])
        app = graph.create_executable("app")
        assert graph.add_dependency(app, lib) is True
        assert graph.add_dependency(app, lib) is False
        assert app.dependencies == ["lib"]

    def test_self_dependency(self, graph):
        """Test a target cannot depend on itself."""
        lib = graph.create_static_library("lib", [])
        with pytest.raises(BuildGraphError):
            graph.add_dependency(lib, lib)

    def test_public_includes_propagate(self, graph):
        """Test public include directories reach consumers transitively."""
        base = graph.create_static_library("base", [])
        core = graph.create_static_library("core", [])
        app = graph.create_executable("app")
        graph.add_public_include_dir(base, Path("/base"))
        graph.add_public_include_dir(core, Path("/core"))
        graph.add_public_include_dir(core, Path("/core"))
        graph.add_dependency(core, base)
        graph.add_dependency(app, core)

        assert core.public_include_dirs == [Path("/core")]
        assert graph.interface_include_dirs(app) == [Path("/core"), Path("/base")]
        assert graph.interface_include_dirs(base) == []

    def test_flags_are_private(self, graph):
        """Test compile flags stay on the declaring target."""
        lib = graph.create_static_library("lib", [])
        app = graph.create_executable("app")
        graph.set_compile_flags(lib, "CXX", "-Os")
        graph.add_dependency(app, lib)
        assert lib.compile_flags == {"CXX": "-Os"}
        assert app.compile_flags == {}

    def test_write_json(self, graph, tmp_path):
        """Test JSON export of targets, edges and resolved includes."""
        lib = graph.create_static_library("lib", [Path("/src/a.c")])
        graph.add_public_include_dir(lib, Path("/inc"))
        graph.set_compile_flags(lib, "C", "-Os")
        graph.set_link_flags(lib, "-Wl,--gc-sections")
        app = graph.create_executable("app", [Path("/app/main.cpp")], board_id="uno")
        app.core_library = "lib"
        graph.add_dependency(app, lib)

        path = graph.write_json(tmp_path / "out" / "graph.json")
        data = json.loads(path.read_text())

        lib_data, app_data = data["targets"]
        assert lib_data["kind"] == "static_library"
        assert lib_data["sources"] == [str(Path("/src/a.c"))]
        assert lib_data["compile_flags"] == {"C": "-Os"}
        assert lib_data["link_flags"] == "-Wl,--gc-sections"
        assert lib_data["link_args"] == ["-Wl,--gc-sections"]
        assert app_data["kind"] == "executable"
        assert app_data["board_id"] == "uno"
        assert app_data["core_library"] == "lib"
        assert app_data["dependencies"] == ["lib"]
        assert app_data["interface_include_dirs"] == [str(Path("/inc"))]

    def test_export_splits_quoted_flags(self, graph):
        """Test exported argument lists keep quoted values together."""
        lib = graph.create_static_library("lib", [Path("/src/a.c")])
        graph.set_compile_flags(lib, "CXX", '-Os -DNAME="a  b" -DX')

        data = graph.to_dict()["targets"][0]

        assert data["compile_flags"]["CXX"] == '-Os -DNAME="a  b" -DX'
        assert data["compile_args"]["CXX"] == ["-Os", "-DNAME=a  b", "-DX"]
        assert data["link_args"] == []
