"""Event source abstraction and the startup error taxonomy.

EventSource is a Protocol so that the main loop can be driven by any object
with a compatible fetch_batch() (the evdev-backed source in production, a
scripted fake in tests) without requiring explicit inheritance.
"""

from typing import Any, Protocol, Sequence


class EventSource(Protocol):
    """Protocol for blocking keyboard event sources.

    Example:
        class ScriptedSource:  # No inheritance needed!
            def fetch_batch(self, timeout=None): ...
            def close(self): ...
    """

    path: str

    def fetch_batch(self, timeout: float | None = None) -> Sequence[Any]:
        """Block until at least one event is ready and return all ready events.

        Args:
            timeout: Maximum wait in seconds. None waits indefinitely.

        Returns:
            Events in delivery order. Empty if the timeout elapsed first.

        Raises:
            OSError: If reading from the device fails.
        """
        ...

    def close(self) -> None:
        """Release the underlying device."""
        ...


class SupipiError(Exception):
    """Base class for errors that abort supipi at startup."""


class BackendNotAvailableError(SupipiError):
    """Raised when no usable input device can be obtained.

    The message should give the operator something actionable
    (missing device, permissions on /dev/input/, ...).
    """


class NoKeyboardError(BackendNotAvailableError):
    """No candidate device reported the target keyboard name."""

    def __init__(self, target_name: str, scanned: int) -> None:
        self.target_name = target_name
        self.scanned = scanned
        super().__init__(
            f'No suitable "{target_name}" keyboard found '
            f'(checked {scanned} candidate device(s))'
        )


class DeviceOpenError(BackendNotAvailableError):
    """The selected device node could not be opened."""

    def __init__(self, path: str, reason: Exception) -> None:
        self.path = path
        super().__init__(f'Cannot open device {path}: {reason}')
