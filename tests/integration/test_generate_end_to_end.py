"""
End-to-end generation against an on-disk platform.

Runs the CLI in-process on a two-environment project and inspects the
exported build graph.
"""

import json

import pytest

from coregen.cli import main


@pytest.mark.integration
class TestGenerateEndToEnd:
    """Generate a build graph for a project with two boards sharing a core."""

    @pytest.fixture
    def project_dir(self, tmp_path, make_platform):
        platform_dir = make_platform(tmp_path / "sdk")
        project = tmp_path / "blink"
        (project / "src").mkdir(parents=True)
        (project / "src" / "blink.ino").write_text(
            "void setup() {}\nvoid loop() {}\n"
        )
        (project / "platformio.ini").write_text(
            "[env]\n"
            f"platform = {platform_dir.as_posix()}\n"
            "\n"
            "[env:uno]\n"
            "board = uno\n"
            "\n"
            "[env:clone]\n"
            "board = uno_clone\n"
            "\n"
            "[env:mega]\n"
            "board = mega\n"
        )
        return project

    def test_generate_writes_graph(self, project_dir, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["generate", str(project_dir)])

        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "uno: linked" in out
        assert "clone: linked" in out

        graph = json.loads((project_dir / ".coregen" / "build" / "graph.json").read_text())
        targets = {target["name"]: target for target in graph["targets"]}

        assert set(targets) == {
            "uno",
            "clone",
            "mega",
            "arduino_standard_core_lib",
            "arduino_mega_core_lib",
        }
        assert targets["uno"]["dependencies"] == ["arduino_standard_core_lib"]
        assert targets["clone"]["dependencies"] == ["arduino_standard_core_lib"]
        assert targets["mega"]["dependencies"] == ["arduino_mega_core_lib"]
        assert "-DMEGA_EXTRA" in targets["arduino_mega_core_lib"]["compile_flags"]["CXX"]
        assert targets["uno"]["sources"][0].endswith("sketch.cpp")
