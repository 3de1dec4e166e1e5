"""
Command-line interface for coregen.

This module provides the `coregen` CLI tool for generating core library and
firmware build targets.
"""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from coregen import __version__
from coregen.build import BoardResolver, ConfigurationError, GenerationOrchestrator
from coregen.cli_utils import (
    EnvironmentDetector,
    ErrorFormatter,
    PathValidator,
    configure_logging,
)
from coregen.config import BoardProperties, ProjectConfig, discover_platform
from coregen.packages import Cache, PlatformPackage


@dataclass
class GenerateArgs:
    """Arguments for the generate command."""

    project_dir: Path
    environments: List[str] = field(default_factory=list)
    clean: bool = False
    verbose: bool = False


@dataclass
class BoardsArgs:
    """Arguments for the boards command."""

    project_dir: Path
    environment: Optional[str] = None
    verbose: bool = False


def generate_command(args: GenerateArgs) -> None:
    """Generate the build graph for a project.

    Examples:
        coregen generate                   # All environments
        coregen generate examples/blink    # Specific project
        coregen generate -e blink          # Only the 'blink' environment
        coregen generate --clean           # Drop previously generated files
    """
    print(f"coregen v{__version__}")
    print()

    try:
        orchestrator = GenerationOrchestrator(verbose=args.verbose)
        result = orchestrator.generate(
            project_dir=args.project_dir,
            env_names=args.environments or None,
            clean=args.clean,
        )

        if result.success:
            ErrorFormatter.print_success("Generation successful!")
            print()
            for env_name, status in result.link_status.items():
                print(f"  {env_name}: {status.value}")
            print()
            print(f"Core libraries: {', '.join(result.core_libraries)}")
            print(f"Build graph: {result.graph_path}")
            print(f"Generation time: {result.generation_time:.2f}s")
            sys.exit(0)
        else:
            ErrorFormatter.print_error("Generation failed!", result.message)
            sys.exit(1)

    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def boards_command(args: BoardsArgs) -> None:
    """List the boards of an environment's platform with their core and variant.

    Examples:
        coregen boards                 # Platform of the default environment
        coregen boards -e blink        # Platform of the 'blink' environment
    """
    try:
        env_name = EnvironmentDetector.detect_environment(
            args.project_dir, args.environment
        )
        config = ProjectConfig(args.project_dir / "platformio.ini")
        env_config = config.get_env_config(env_name)

        platform_package = PlatformPackage(Cache(args.project_dir), show_progress=args.verbose)
        platform_dir = platform_package.ensure_platform(
            env_config["platform"], base_dir=args.project_dir
        )
        descriptor = discover_platform(platform_dir)
        properties = BoardProperties.from_platform_dir(
            platform_dir, architecture=descriptor.architecture
        )
        resolver = BoardResolver(properties, descriptor)

        print(f"Platform: {descriptor.name} ({descriptor.architecture})")
        print()
        invalid = 0
        for board_id in properties.board_ids():
            try:
                core, variant = resolver.resolve(board_id)
                print(f"  {board_id:<24} core={core:<12} variant={variant}")
            except ConfigurationError as e:
                invalid += 1
                print(f"  {board_id:<24} {ErrorFormatter.RED}invalid: {e}{ErrorFormatter.RESET}")

        sys.exit(1 if invalid else 0)

    except FileNotFoundError as e:
        ErrorFormatter.handle_file_not_found(e)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main(argv: Optional[List[str]] = None) -> None:
    """coregen - core library and firmware target generator."""
    parser = argparse.ArgumentParser(
        prog="coregen",
        description="coregen - core library and firmware target generator",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"coregen {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the build graph for a project",
    )
    generate_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    generate_parser.add_argument(
        "-e",
        "--environment",
        action="append",
        default=[],
        help="Environment to generate (repeatable, default: all)",
    )
    generate_parser.add_argument(
        "-c",
        "--clean",
        action="store_true",
        help="Remove previously generated files first",
    )
    generate_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    boards_parser = subparsers.add_parser(
        "boards",
        help="List boards of an environment's platform",
    )
    boards_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    boards_parser.add_argument(
        "-e",
        "--environment",
        default=None,
        help="Environment (default: auto-detect from platformio.ini)",
    )
    boards_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args(argv)

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    PathValidator.validate_project_dir(parsed_args.project_dir)
    configure_logging(parsed_args.verbose)

    if parsed_args.command == "generate":
        generate_command(
            GenerateArgs(
                project_dir=parsed_args.project_dir,
                environments=parsed_args.environment,
                clean=parsed_args.clean,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "boards":
        boards_command(
            BoardsArgs(
                project_dir=parsed_args.project_dir,
                environment=parsed_args.environment,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()
