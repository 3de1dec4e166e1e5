"""
Unit tests for GenerationOrchestrator.

Tests the complete generation run including:
- platformio.ini parsing
- Platform lookup
- Firmware target declaration and core library linking
- Build graph export
- Failure reporting
"""

import json

import pytest

from coregen.build.orchestrator import GenerationOrchestrator
from coregen.build.target_linker import LinkStatus
from coregen.packages import Cache


@pytest.fixture
def project_dir(tmp_path, make_platform):
    """Project with two environments sharing a core library and one for the Mega."""
    make_platform(tmp_path)
    src = tmp_path / "src"
    src.mkdir()
    (src / "main.cpp").write_text("#include <Arduino.h>\nvoid setup() {}\nvoid loop() {}\n")
    (tmp_path / "platformio.ini").write_text(
        """
[env]
platform = hardware/arduino/avr

[env:uno]
board = uno

[env:clone]
board = uno_clone

[env:mega]
board = mega
"""
    )
    return tmp_path


@pytest.fixture
def orchestrator(project_dir, generic_host):
    return GenerationOrchestrator(cache=Cache(project_dir), host_context=generic_host)


class TestGenerationOrchestrator:
    """Test whole-project generation."""

    def test_generate(self, orchestrator, project_dir):
        """Test all environments are generated and the graph is written."""
        result = orchestrator.generate(project_dir)

        assert result.success, result.message
        assert result.link_status == {
            "uno": LinkStatus.LINKED,
            "clone": LinkStatus.LINKED,
            "mega": LinkStatus.LINKED,
        }
        assert result.core_libraries == ["arduino_standard_core_lib", "arduino_mega_core_lib"]
        assert result.graph_path == project_dir / ".coregen" / "build" / "graph.json"

        targets = {t["name"]: t for t in json.loads(result.graph_path.read_text())["targets"]}
        assert targets["uno"]["dependencies"] == ["arduino_standard_core_lib"]
        assert targets["clone"]["dependencies"] == ["arduino_standard_core_lib"]
        assert targets["clone"]["board_id"] == "uno_clone"
        assert targets["mega"]["core_library"] == "arduino_mega_core_lib"
        assert targets["uno"]["sources"][0].endswith("main.cpp")
        assert len(targets["uno"]["interface_include_dirs"]) == 2

    def test_selected_environments(self, orchestrator, project_dir):
        """Test only the requested environments are generated."""
        result = orchestrator.generate(project_dir, env_names=["mega"])
        assert result.success
        assert list(result.link_status) == ["mega"]
        assert result.core_libraries == ["arduino_mega_core_lib"]

    def test_invalid_board_fails(self, orchestrator, project_dir):
        """Test an unknown core stops generation with the board and value."""
        (project_dir / "platformio.ini").write_text(
            "[env:haunted]\nplatform = hardware/arduino/avr\nboard = ghost\n"
        )
        result = orchestrator.generate(project_dir)

        assert not result.success
        assert result.graph_path is None
        assert "ghost" in result.message
        assert "phantom" in result.message
        assert not (project_dir / ".coregen" / "build" / "graph.json").exists()

    def test_unknown_environment_fails(self, orchestrator, project_dir):
        """Test an unknown environment is reported."""
        result = orchestrator.generate(project_dir, env_names=["nano"])
        assert not result.success
        assert "nano" in result.message

    def test_missing_platform_fails(self, orchestrator, project_dir):
        """Test a platform path without boards.txt is reported."""
        (project_dir / "platformio.ini").write_text("[env:uno]\nplatform = nowhere\nboard = uno\n")
        result = orchestrator.generate(project_dir)
        assert not result.success
        assert "boards.txt" in result.message

    def test_no_environments(self, orchestrator, project_dir):
        """Test a platformio.ini without environments."""
        (project_dir / "platformio.ini").write_text("[platformio]\n")
        result = orchestrator.generate(project_dir)
        assert not result.success
        assert "No environments" in result.message

    def test_board_overrides(self, orchestrator, project_dir):
        """Test board_build.* options reach the composed flags."""
        (project_dir / "platformio.ini").write_text(
            "[env:slow]\nplatform = hardware/arduino/avr\nboard = uno\n"
            "board_build.f_cpu = 8000000L\n"
        )
        result = orchestrator.generate(project_dir)
        assert result.success, result.message

        targets = {t["name"]: t for t in json.loads(result.graph_path.read_text())["targets"]}
        assert "-DF_CPU=8000000L" in targets["arduino_standard_core_lib"]["compile_flags"]["CXX"]

    def test_clean_removes_generated_files(self, orchestrator, project_dir):
        """Test --clean removes stale generated files first."""
        stale = project_dir / ".coregen" / "build" / "old" / "sketch.cpp"
        stale.parent.mkdir(parents=True)
        stale.write_text("")

        result = orchestrator.generate(project_dir, clean=True)

        assert result.success
        assert not stale.exists()

    def test_verbose_output(self, orchestrator, project_dir, capsys):
        """Test verbose mode prints the phases."""
        orchestrator.generate(project_dir, verbose=True)
        output = capsys.readouterr().out
        assert "[1/4] Parsing platformio.ini..." in output
        assert "uno -> arduino_standard_core_lib (linked)" in output
        assert "[4/4] Writing build graph..." in output

    def test_overrides_stay_with_their_environment(self, orchestrator, project_dir):
        """Test a later environment on the same board ignores earlier overrides."""
        (project_dir / "platformio.ini").write_text(
            "[env]\nplatform = hardware/arduino/avr\n\n"
            "[env:a]\nboard = uno\nboard_build.variant = mega\n\n"
            "[env:b]\nboard = uno\n"
        )
        result = orchestrator.generate(project_dir)
        assert result.success, result.message

        targets = {t["name"]: t for t in json.loads(result.graph_path.read_text())["targets"]}
        assert targets["a"]["dependencies"] == ["arduino_mega_core_lib"]
        assert targets["b"]["dependencies"] == ["arduino_standard_core_lib"]

    def test_override_gets_own_library(self, orchestrator, project_dir):
        """Test an overridden flag never leaks into the shared library."""
        (project_dir / "platformio.ini").write_text(
            "[env]\nplatform = hardware/arduino/avr\n\n"
            "[env:fast]\nboard = uno\n\n"
            "[env:slow]\nboard = uno\nboard_build.f_cpu = 8000000L\n\n"
            "[env:clone]\nboard = uno_clone\n"
        )
        result = orchestrator.generate(project_dir)
        assert result.success, result.message

        targets = {t["name"]: t for t in json.loads(result.graph_path.read_text())["targets"]}
        shared = targets["fast"]["dependencies"][0]
        own = targets["slow"]["dependencies"][0]

        assert shared == "arduino_standard_core_lib"
        assert targets["clone"]["dependencies"] == [shared]
        assert own != shared
        assert own.startswith("arduino_standard_") and own.endswith("_core_lib")
        assert "-DF_CPU=16000000L" in targets[shared]["compile_flags"]["CXX"]
        assert "-DF_CPU=8000000L" in targets[own]["compile_flags"]["CXX"]
        assert len(result.core_libraries) == 2

    def test_two_platforms_with_same_core(self, orchestrator, project_dir, tmp_path, make_platform):
        """Test platforms sharing core and variant names get separate libraries."""
        second_platform = make_platform(tmp_path / "vendor")
        (project_dir / "platformio.ini").write_text(
            "[env:first]\nplatform = hardware/arduino/avr\nboard = uno\n\n"
            f"[env:second]\nplatform = {second_platform.as_posix()}\nboard = uno\n"
        )
        result = orchestrator.generate(project_dir)
        assert result.success, result.message

        targets = {t["name"]: t for t in json.loads(result.graph_path.read_text())["targets"]}
        first = targets["first"]["dependencies"][0]
        second = targets["second"]["dependencies"][0]

        assert first == "arduino_standard_core_lib"
        assert second != first
        assert str(second_platform.resolve()) in targets[second]["sources"][0]
        assert len(result.core_libraries) == 2
