"""Keyboard device discovery by name.

Scans /dev/input/event0 .. event31 and picks the node whose reported name
matches the target keyboard. An exact name match always wins (lowest index
first); otherwise the first node whose name merely contains the target is
used.
"""

from __future__ import annotations

import os
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, Callable, Iterator

import evdev

from common.logging_utils import get_logger

from .base import NoKeyboardError

DEFAULT_DEVICE_NAME = 'KB USB KB'
DEFAULT_PATH_TEMPLATE = '/dev/input/event{}'
MAX_EVENT_DEVICES = 32


@dataclass(slots=True, frozen=True)
class Candidate:
    index: int
    path: str
    name: str | None


class DeviceResolver:
    """Select one input device path by matching device names.

    Args:
        target_name: Name the keyboard is expected to report
        max_devices: Number of event nodes to check, starting at index 0
        path_template: Format string turning an index into a device path
        opener: Callable opening a path as an input device (evdev.InputDevice)
        path_exists: Callable checking whether a path exists
    """

    def __init__(
        self,
        target_name: str = DEFAULT_DEVICE_NAME,
        max_devices: int = MAX_EVENT_DEVICES,
        path_template: str = DEFAULT_PATH_TEMPLATE,
        opener: Callable[[str], Any] = evdev.InputDevice,
        path_exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self.target_name = target_name
        self.max_devices = max_devices
        self.path_template = path_template
        self._open = opener
        self._exists = path_exists
        self.logger = get_logger('common.backend.resolver')

    def candidate_paths(self) -> Iterator[tuple[int, str]]:
        for index in range(self.max_devices):
            yield index, self.path_template.format(index)

    def _read_name(self, path: str) -> str | None:
        """Open path, return the reported name and close it again.

        Returns None when the node cannot be opened.
        """
        try:
            device = self._open(path)
        except OSError as e:
            self.logger.debug(f'Skipping {path}: {e}')
            return None
        try:
            return device.name or None
        finally:
            with suppress(OSError):
                device.close()

    def scan(self) -> Iterator[Candidate]:
        """Yield every existing, openable candidate in ascending index order."""
        for index, path in self.candidate_paths():
            if not self._exists(path):
                continue
            name = self._read_name(path)
            if name is None:
                continue
            yield Candidate(index, path, name)

    def resolve(self) -> str:
        """Return the path of the target keyboard.

        Raises:
            NoKeyboardError: If no candidate matches the target name.
        """
        exact: Candidate | None = None
        first_partial: Candidate | None = None

        for candidate in self.scan():
            if candidate.name == self.target_name:
                self.logger.info(f'Found exact match keyboard: {candidate.name} at {candidate.path}')
                exact = candidate
                break
            if first_partial is None and self.target_name in candidate.name:
                self.logger.debug(f'Found partial match keyboard: {candidate.name} at {candidate.path}')
                first_partial = candidate

        if exact is not None:
            self.logger.info(f'Using exact match keyboard: {exact.name} at {exact.path}')
            return exact.path
        if first_partial is not None:
            self.logger.info(f'Using first found keyboard: {first_partial.name} at {first_partial.path}')
            return first_partial.path

        raise NoKeyboardError(self.target_name, self.max_devices)
