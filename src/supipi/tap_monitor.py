"""Main event loop: fetch event batches and feed the double-tap detector."""

import threading
from dataclasses import dataclass

from common.backends.base import EventSource
from common.logging_utils import get_logger

from .tap_detector import DoubleTapDetector


@dataclass
class MonitorStats:
    batches: int = 0
    events: int = 0
    fetch_errors: int = 0
    double_taps: int = 0


class TapMonitor:
    """Poll an event source until the stop flag is set.

    Fetch failures are logged and retried after a fixed delay; they never
    end the loop. The stop flag is checked before every fetch and before
    every event of a batch, so nothing is processed once it is set.

    Args:
        source: Event source for the selected keyboard
        detector: Double-tap state machine fed with every event
        stop_event: Shared one-way shutdown flag
        retry_delay: Seconds to wait after a failed fetch
        poll_interval: Longest single wait for events, in seconds
            (None blocks until an event arrives)
    """

    def __init__(
        self,
        source: EventSource,
        detector: DoubleTapDetector,
        stop_event: threading.Event,
        retry_delay: float = 0.1,
        poll_interval: float | None = 0.5,
    ) -> None:
        self.source = source
        self.detector = detector
        self.stop_event = stop_event
        self.retry_delay = retry_delay
        self.poll_interval = poll_interval
        self.stats = MonitorStats()
        self.logger = get_logger('supipi.monitor')

    def run(self) -> MonitorStats:
        """Run the loop (blocking) and return counters once stopped."""
        self.logger.info(f'Supipi started, listening on {self.source.path}...')

        while not self.stop_event.is_set():
            try:
                events = self.source.fetch_batch(self.poll_interval)
            except OSError as e:
                self.stats.fetch_errors += 1
                self.logger.error(f'Event fetch error: {e}')
                # Event.wait so a shutdown request cuts the delay short
                self.stop_event.wait(self.retry_delay)
                continue

            if not events:
                continue
            self.stats.batches += 1

            for event in events:
                if self.stop_event.is_set():
                    break
                self.stats.events += 1
                if self.stats.events == 1:
                    self.logger.debug('First event received - event loop is working')
                if self.detector.process(event):
                    self.stats.double_taps += 1

        self.logger.info('Event loop stopped')
        return self.stats
