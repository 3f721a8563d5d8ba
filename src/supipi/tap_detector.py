"""Double-tap detection for the left SUPER key.

A double-tap is two key-down events of KEY_LEFTMETA less than `timeout`
seconds apart. Releases, auto-repeats and every other key are ignored.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from evdev import ecodes

from common.logging_utils import get_logger

KEY_PRESS = 1


@dataclass
class TapState:
    """State of the current tap sequence.

    Attributes:
        last_press: Monotonic timestamp of the most recent qualifying press
            (None before the first one)
        tap_count: Presses counted in the current sequence (0 or 1 between events)
    """
    last_press: float | None = None
    tap_count: int = 0


class DoubleTapDetector:
    """Count qualifying presses and fire a callback on a double-tap.

    Tap semantics:
    - press with gap < timeout: count it; on the second press fire
      on_double_tap and reset the count to 0
    - press with gap >= timeout (or the very first press): start a new
      sequence with count 1
    - the press time is recorded after every qualifying press, so a third
      quick press starts a new sequence instead of firing again

    Args:
        timeout: Double-tap window in seconds
        on_double_tap: Callback invoked once per detected double-tap
        key_code: evdev key code to watch
        clock: Monotonic clock returning seconds
    """

    def __init__(
        self,
        timeout: float,
        on_double_tap: Callable[[], Any],
        key_code: int = ecodes.KEY_LEFTMETA,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self.on_double_tap = on_double_tap
        self.key_code = key_code
        self.clock = clock
        self.state = TapState()
        self.logger = get_logger('supipi.detector')

    def is_qualifying(self, event: Any) -> bool:
        return (
            event.type == ecodes.EV_KEY
            and event.code == self.key_code
            and event.value == KEY_PRESS
        )

    def process(self, event: Any) -> bool:
        """Feed one input event to the detector.

        Returns:
            bool: True if this event completed a double-tap
        """
        if not self.is_qualifying(event):
            return False
        return self.register_press(self.clock())

    def register_press(self, now: float) -> bool:
        """Apply one qualifying press observed at `now`.

        Returns:
            bool: True if the press completed a double-tap
        """
        state = self.state
        fired = False

        if state.last_press is not None and now - state.last_press < self.timeout:
            state.tap_count += 1
            if state.tap_count == 2:
                self.logger.debug(f'Double-tap detected, gap {now - state.last_press:.3f}s')
                self.on_double_tap()
                state.tap_count = 0
                fired = True
        else:
            state.tap_count = 1

        state.last_press = now
        return fired
