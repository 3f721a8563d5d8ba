import logging
from collections.abc import Iterable

import pytest
from evdev import InputEvent, ecodes

from common.backends.device_resolver import DeviceResolver
from common.logging_utils import LOGGER_ROOTS

TARGET = 'KB USB KB'


class FakeDevice:
    """Stand-in for evdev.InputDevice."""

    def __init__(self, path: str, name: str, events: Iterable[InputEvent] = ()) -> None:
        self.path = path
        self.name = name
        self.fd = -1
        self.closed = False
        self._events = list(events)

    def read(self):
        return iter(self._events)

    def close(self) -> None:
        self.closed = True


class FakeOpener:
    """Opens FakeDevices by path; raises for paths mapped to an exception."""

    def __init__(self, devices: dict[str, object]) -> None:
        self.devices = devices
        self.opened: list[FakeDevice] = []

    def __call__(self, path: str) -> FakeDevice:
        entry = self.devices[path]
        if isinstance(entry, Exception):
            raise entry
        device = FakeDevice(path, entry)
        self.opened.append(device)
        return device


@pytest.fixture
def make_resolver():
    """Build a DeviceResolver over {index: name-or-exception}."""

    def _make(devices: dict[int, object], target: str = TARGET) -> tuple[DeviceResolver, FakeOpener]:
        by_path = {f'/dev/input/event{i}': entry for i, entry in devices.items()}
        opener = FakeOpener(by_path)
        resolver = DeviceResolver(
            target,
            opener=opener,
            path_exists=lambda path: path in by_path,
        )
        return resolver, opener

    return _make


def key_event(value: int, code: int = ecodes.KEY_LEFTMETA, type_: int = ecodes.EV_KEY) -> InputEvent:
    return InputEvent(0, 0, type_, code, value)


@pytest.fixture(autouse=True)
def reset_project_loggers():
    yield
    for root in LOGGER_ROOTS:
        logger = logging.getLogger(root)
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
