"""Data models for supipi configuration."""

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from common.backends.device_resolver import DEFAULT_DEVICE_NAME

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


@dataclass
class LauncherConfig:
    """External application started on a double-tap.

    Attributes:
        command: Executable name or path
        args: Command-line arguments for the command
    """
    command: str = 'wofi'
    args: list[str] = field(default_factory=lambda: ['--show', 'drun'])

    def argv(self) -> list[str]:
        return [self.command, *self.args]

    def __post_init__(self) -> None:
        if not self.command:
            raise ValueError('Launcher must have a command')  # noqa: TRY003
        if not all(isinstance(arg, str) for arg in self.args):
            raise ValueError('All launcher args must be strings')  # noqa: TRY003


@dataclass
class DeviceConfig:
    """Keyboard device selection.

    Attributes:
        name: Reported device name to match (exact match preferred, then partial)
        path: Fixed device path. When set, name-based discovery is skipped.
    """
    name: str = DEFAULT_DEVICE_NAME
    path: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError('Device name must not be empty')  # noqa: TRY003


@dataclass
class AppConfig:
    """Application configuration.

    Attributes:
        tap_timeout_ms: Window within which a second press counts as a double-tap
        retry_delay_ms: Wait after a failed event fetch before retrying
        poll_interval_ms: Longest single wait for events before re-checking shutdown
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file used in background mode (None for no file logging)
        device: Keyboard device selection
        launcher: Command to run on a double-tap
    """
    tap_timeout_ms: int = 240
    retry_delay_ms: int = 100
    poll_interval_ms: int = 500
    log_level: str = 'INFO'
    log_file: Path | None = None
    device: DeviceConfig = field(default_factory=DeviceConfig)
    launcher: LauncherConfig = field(default_factory=LauncherConfig)

    @property
    def tap_timeout(self) -> float:
        return self.tap_timeout_ms / 1000

    @property
    def retry_delay(self) -> float:
        return self.retry_delay_ms / 1000

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000

    def __post_init__(self) -> None:
        """Validate the application configuration."""
        for name in ('tap_timeout_ms', 'retry_delay_ms', 'poll_interval_ms'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int | float):
                raise TypeError(f'{name} must be a number, got {value!r}')  # noqa: TRY003
            if value <= 0:
                raise ValueError(f'{name} must be positive, got {value}')  # noqa: TRY003

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f'Invalid log_level: {self.log_level}')  # noqa: TRY003
