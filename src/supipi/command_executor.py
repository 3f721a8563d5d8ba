"""Launcher execution for supipi.

This module starts the external launcher when a double-tap is detected.
"""

import os
import shutil
import subprocess
from pathlib import Path

from common.logging_utils import get_logger

from .models import LauncherConfig


class CommandExecutor:
    """Start the launcher as a detached, fire-and-forget process.

    Spawn failures are logged and reported through the return value; they
    never raise, so the main loop keeps running.
    """

    def __init__(self, log_commands: bool = True):
        """Initialize the command executor.

        Args:
            log_commands: Whether to log each launch
        """
        self.log_commands = log_commands
        self.logger = get_logger('supipi.executor')

    def execute(self, launcher: LauncherConfig) -> bool:
        """Spawn the launcher command.

        The process is started in a new session with stdio redirected to
        DEVNULL, so it outlives supipi and never blocks it. Its exit status is
        not collected.

        Args:
            launcher: Launcher configuration containing the command to run

        Returns:
            bool: True if the process was spawned, False on error
        """
        cmd = launcher.argv()

        try:
            subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError:
            self.logger.error(
                f'Failed to launch {launcher.command}: command not found. '
                f'Make sure it is installed and in PATH'
            )
            return False
        except PermissionError:
            self.logger.error(
                f'Failed to launch {launcher.command}: permission denied'
            )
            return False
        except OSError as e:
            self.logger.error(f'Failed to launch {launcher.command}: {e}')
            return False

        if self.log_commands:
            self.logger.info(f'Launched {" ".join(cmd)}')
        return True

    def check_command_exists(self, command: str) -> bool:
        """Check if a command exists and is executable.

        Args:
            command: Command name or path

        Returns:
            bool: True if command exists and is executable
        """
        if Path(command).is_absolute():
            path = Path(command)
            return path.is_file() and os.access(path, os.X_OK)

        return shutil.which(command) is not None
