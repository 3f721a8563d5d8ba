"""Signal-driven graceful shutdown.

SIGINT and SIGTERM handlers only set a shared threading.Event. The main loop
polls that event; nothing else happens inside the handler.
"""

import signal
import threading
from types import FrameType
from typing import Any

from common.backends.base import SupipiError
from common.logging_utils import get_logger

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalSetupError(SupipiError):
    """Signal handlers could not be registered."""


class ShutdownCoordinator:
    """Register termination signal handlers that set a one-way stop flag.

    Args:
        stop_event: Flag shared with the main loop; set means "stop".
            It is never cleared by this class.
        signals: Signals to handle
    """

    def __init__(
        self,
        stop_event: threading.Event,
        signals: tuple[signal.Signals, ...] = SHUTDOWN_SIGNALS,
    ) -> None:
        self.stop_event = stop_event
        self.signals = signals
        self._previous: dict[signal.Signals, Any] = {}
        self.logger = get_logger('supipi.shutdown')

    def handle_signal(self, signum: int, _frame: FrameType | None) -> None:
        self.stop_event.set()
        self.logger.info(f'Received {signal.Signals(signum).name}, shutting down...')

    def install(self) -> None:
        """Register handle_signal for every configured signal.

        Raises:
            SignalSetupError: If a handler cannot be registered (for example
                when called outside the main thread).
        """
        for signum in self.signals:
            try:
                self._previous[signum] = signal.signal(signum, self.handle_signal)
            except (ValueError, OSError, RuntimeError) as e:
                self.restore()
                raise SignalSetupError(
                    f'Failed to register handler for {signum.name}: {e}'
                ) from e

    def restore(self) -> None:
        """Reinstate the handlers that were active before install()."""
        for signum, previous in self._previous.items():
            # None means the old handler was not installed from Python
            if previous is not None:
                signal.signal(signum, previous)
        self._previous.clear()

    @property
    def stop_requested(self) -> bool:
        return self.stop_event.is_set()
