"""Evdev-backed event source for a single keyboard device."""

from __future__ import annotations

import select
from contextlib import suppress
from typing import Any, Callable

import evdev

from common.logging_utils import get_logger

from .base import DeviceOpenError


class EvdevEventSource:
    """Blocking batch reader over one evdev.InputDevice.

    The source owns the device handle and closes it in close() or when used
    as a context manager.
    """

    def __init__(self, device: Any) -> None:
        self.device = device
        self.path: str = device.path
        self.logger = get_logger('common.backend.evdev')

    @classmethod
    def open(
        cls,
        path: str,
        opener: Callable[[str], Any] = evdev.InputDevice,
    ) -> EvdevEventSource:
        """Open the device at path.

        Raises:
            DeviceOpenError: If the device node cannot be opened.
        """
        try:
            device = opener(path)
        except OSError as e:
            raise DeviceOpenError(path, e) from e
        return cls(device)

    @property
    def name(self) -> str | None:
        return getattr(self.device, 'name', None)

    def fetch_batch(self, timeout: float | None = None) -> list[Any]:
        """Wait until the device is readable and return the pending events.

        Args:
            timeout: Maximum wait in seconds, None to wait indefinitely.

        Returns:
            list of evdev.InputEvent in delivery order; empty on timeout.

        Raises:
            OSError: If polling or reading the device fails.
        """
        ready, _, _ = select.select([self.device.fd], [], [], timeout)
        if not ready:
            return []
        try:
            return list(self.device.read())
        except BlockingIOError:
            # Readable but drained by the time read() ran
            return []

    def close(self) -> None:
        with suppress(OSError):
            self.device.close()
        self.logger.debug(f'Closed device {self.path}')

    def __enter__(self) -> EvdevEventSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
