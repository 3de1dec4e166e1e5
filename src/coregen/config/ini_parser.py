"""
Project configuration parser.

This module parses PlatformIO-style ``platformio.ini`` files and extracts the
environments coregen generates firmware targets for.
"""

import configparser
from pathlib import Path
from typing import Dict, List, Optional


class ProjectConfigError(Exception):
    """Exception raised for platformio.ini configuration errors."""

    pass


class ProjectConfig:
    """
    Parser for platformio.ini configuration files.

    Example platformio.ini:
        [platformio]
        default_envs = blink

        [env]
        platform = hardware/arduino/avr

        [env:blink]
        board = uno
        src_dir = blink

        [env:blink_clone]
        board = uno_clone
        src_dir = blink
        board_build.f_cpu = 8000000L

    Usage:
        config = ProjectConfig(Path("platformio.ini"))
        envs = config.get_environments()
        blink = config.get_env_config("blink")
    """

    REQUIRED_FIELDS = {"platform", "board"}
    BOARD_OVERRIDE_PREFIX = "board_build."

    def __init__(self, ini_path: Path):
        """
        Initialize the parser with a platformio.ini file.

        Args:
            ini_path: Path to the platformio.ini file

        Raises:
            ProjectConfigError: If the file doesn't exist or cannot be parsed
        """
        self.ini_path = Path(ini_path)

        if not self.ini_path.exists():
            raise ProjectConfigError(f"Configuration file not found: {self.ini_path}")

        self.config = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )

        try:
            self.config.read(self.ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ProjectConfigError(f"Failed to parse {self.ini_path}: {e}") from e

    def get_environments(self) -> List[str]:
        """
        Get list of all environment names defined in the config.

        Returns:
            List of environment names (e.g., ['blink', 'blink_clone'])
        """
        envs = []
        for section in self.config.sections():
            if section.startswith("env:"):
                envs.append(section.split(":", 1)[1])
        return envs

    def has_environment(self, env_name: str) -> bool:
        return f"env:{env_name}" in self.config

    def get_env_config(self, env_name: str) -> Dict[str, str]:
        """
        Get configuration for a specific environment.

        Values from a shared ``[env]`` section are inherited and overridden by
        the environment's own values.

        Args:
            env_name: Name of the environment

        Returns:
            Dictionary of configuration key-value pairs

        Raises:
            ProjectConfigError: If environment not found or missing required fields
        """
        section = f"env:{env_name}"

        if section not in self.config:
            available = ", ".join(self.get_environments())
            raise ProjectConfigError(
                f"Environment '{env_name}' not found. "
                + f"Available environments: {available or 'none'}"
            )

        try:
            env_config = {
                key: (value or "").strip() for key, value in self.config[section].items()
            }
            if "env" in self.config:
                base_config = {
                    key: (value or "").strip()
                    for key, value in self.config["env"].items()
                }
                env_config = {**base_config, **env_config}
        except configparser.Error as e:
            raise ProjectConfigError(
                f"Failed to read environment '{env_name}': {e}"
            ) from e

        missing_fields = self.REQUIRED_FIELDS - {
            key for key, value in env_config.items() if value
        }
        if missing_fields:
            raise ProjectConfigError(
                f"Environment '{env_name}' is missing required fields: "
                + f"{', '.join(sorted(missing_fields))}"
            )

        return env_config

    def get_board_overrides(self, env_name: str) -> Dict[str, str]:
        """
        Get board property overrides for an environment.

        Example:
            board_build.f_cpu = 8000000L  ->  {'build.f_cpu': '8000000L'}
        """
        env_config = self.get_env_config(env_name)
        overrides = {}
        for key, value in env_config.items():
            if key.startswith(self.BOARD_OVERRIDE_PREFIX):
                overrides["build." + key[len(self.BOARD_OVERRIDE_PREFIX):]] = value
        return overrides

    def get_src_dir(self, env_name: str) -> Path:
        """Get the application source directory, relative to the project."""
        env_config = self.get_env_config(env_name)
        src_dir = Path(env_config.get("src_dir") or "src")
        if not src_dir.is_absolute():
            src_dir = self.ini_path.parent / src_dir
        return src_dir

    def get_default_environment(self) -> Optional[str]:
        """
        Get the default environment.

        Returns:
            First of ``[platformio] default_envs``, else the first environment,
            else None
        """
        if "platformio" in self.config:
            default_envs = (self.config["platformio"].get("default_envs") or "").strip()
            if default_envs:
                return default_envs.split(",")[0].strip()

        envs = self.get_environments()
        return envs[0] if envs else None
