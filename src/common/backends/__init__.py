"""Keyboard device backend built on evdev.

Provides device discovery by name and a blocking event source for the
selected device.
"""

from .base import (
    BackendNotAvailableError,
    DeviceOpenError,
    EventSource,
    NoKeyboardError,
    SupipiError,
)
from .device_listing import list_candidate_devices
from .device_resolver import DeviceResolver
from .event_source import EvdevEventSource

__all__ = [
    'BackendNotAvailableError',
    'DeviceOpenError',
    'DeviceResolver',
    'EvdevEventSource',
    'EventSource',
    'NoKeyboardError',
    'SupipiError',
    'list_candidate_devices',
]
