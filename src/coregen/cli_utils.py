"""CLI utility functions for coregen.

This module provides common utilities used across CLI commands including:
- Environment detection from platformio.ini
- Error handling and formatting
- Project path validation
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from coregen.config import ProjectConfig


class EnvironmentDetector:
    """Handles environment detection from platformio.ini."""

    @staticmethod
    def detect_environment(project_dir: Path, env_name: Optional[str] = None) -> str:
        """Detect or validate environment name from platformio.ini.

        Args:
            project_dir: Project directory containing platformio.ini
            env_name: Optional explicit environment name

        Returns:
            Environment name to use

        Raises:
            FileNotFoundError: If platformio.ini doesn't exist
            ValueError: If no environments found in platformio.ini
        """
        if env_name:
            return env_name

        ini_path = project_dir / "platformio.ini"
        if not ini_path.exists():
            raise FileNotFoundError(f"platformio.ini not found in {project_dir}")

        detected_env = ProjectConfig(ini_path).get_default_environment()
        if not detected_env:
            raise ValueError("No environments found in platformio.ini")

        return detected_env


class ErrorFormatter:
    """Formats and displays messages with ANSI color codes."""

    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        """Report a missing file and exit with status 1."""
        ErrorFormatter.print_error("Error: File not found", str(error))
        print("Make sure you're in a coregen project directory with a platformio.ini file.")
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        ErrorFormatter.print_warning("Generation interrupted")
        sys.exit(130)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Report an unexpected error (with traceback when verbose) and exit."""
        ErrorFormatter.print_error("Unexpected error", f"{type(error).__name__}: {error}")

        if verbose:
            import traceback

            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class PathValidator:
    """Validates project paths and directories."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Exit with status 2 unless project_dir is an existing directory."""
        if not project_dir.exists():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path does not exist: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)
        if not project_dir.is_dir():
            print(
                f"{ErrorFormatter.RED}✗ Error: Path is not a directory: {project_dir}{ErrorFormatter.RESET}"
            )
            sys.exit(2)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
