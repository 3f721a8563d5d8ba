"""Configuration loader for supipi.

This module handles loading and validating the optional TOML configuration
file. Without a file, the built-in defaults apply.
"""

import tomllib
from pathlib import Path
from typing import Any, ClassVar

from .models import AppConfig
from .models import DeviceConfig
from .models import LauncherConfig


class ConfigLoader:
    """Load and validate TOML configuration files."""

    DEFAULT_PATHS: ClassVar[list[Path]] = [
        Path.home() / '.config/supipi/config.toml',
        Path('/etc/supipi/config.toml'),
    ]

    @staticmethod
    def load(config_path: Path | None = None) -> tuple[AppConfig, Path | None]:
        """Load configuration from a TOML file.

        Args:
            config_path: Path to config file. If None, tries default paths.

        Returns:
            tuple[AppConfig, Path | None]: Parsed configuration and the path it
            was loaded from (None when the built-in defaults are used)

        Raises:
            FileNotFoundError: If an explicit config_path does not exist
            ValueError: If configuration is invalid
            tomllib.TOMLDecodeError: If TOML syntax is invalid
        """
        if config_path:
            if not config_path.exists():
                raise FileNotFoundError(f'Config file not found: {config_path}')  # noqa: TRY003
            return (ConfigLoader._load_from_path(config_path), config_path.resolve())

        for path in ConfigLoader.DEFAULT_PATHS:
            if path.exists():
                return (ConfigLoader._load_from_path(path), path.resolve())

        return (AppConfig(), None)

    @staticmethod
    def _load_from_path(path: Path) -> AppConfig:
        with path.open('rb') as f:
            data = tomllib.load(f)

        return ConfigLoader.parse(data)

    @staticmethod
    def parse(data: dict[str, Any]) -> AppConfig:
        """Parse TOML data into AppConfig.

        Raises:
            ValueError: If configuration is invalid
            TypeError: If a value has the wrong type
        """
        app_data = data.get('app', {})
        defaults = AppConfig()

        log_file = None
        log_file_str = app_data.get('log_file')
        if log_file_str:
            log_file = Path(log_file_str).expanduser()

        try:
            return AppConfig(
                tap_timeout_ms=app_data.get('tap_timeout_ms', defaults.tap_timeout_ms),
                retry_delay_ms=app_data.get('retry_delay_ms', defaults.retry_delay_ms),
                poll_interval_ms=app_data.get('poll_interval_ms', defaults.poll_interval_ms),
                log_level=str(app_data.get('log_level', defaults.log_level)).upper(),
                log_file=log_file,
                device=ConfigLoader._parse_device(data.get('device', {})),
                launcher=ConfigLoader._parse_launcher(data.get('launcher', {})),
            )
        except ValueError as e:
            raise ValueError(f'Invalid configuration: {e}') from e  # noqa: TRY003

    @staticmethod
    def _parse_device(data: dict[str, Any]) -> DeviceConfig:
        name = data.get('name', DeviceConfig.name)
        if not isinstance(name, str):
            raise TypeError("'device.name' must be a string")  # noqa: TRY003

        path = data.get('path')
        if path is not None and not isinstance(path, str):
            raise TypeError("'device.path' must be a string")  # noqa: TRY003

        return DeviceConfig(name=name, path=path or None)

    @staticmethod
    def _parse_launcher(data: dict[str, Any]) -> LauncherConfig:
        defaults = LauncherConfig()

        command = data.get('command', defaults.command)
        if not isinstance(command, str):
            raise TypeError("'launcher.command' must be a string")  # noqa: TRY003

        args = data.get('args', defaults.args)
        if not isinstance(args, list):
            raise TypeError("'launcher.args' must be a list")  # noqa: TRY003

        return LauncherConfig(command=command, args=args)
