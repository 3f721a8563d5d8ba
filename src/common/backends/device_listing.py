"""Public API for listing candidate keyboard devices.

The CLI uses this module instead of touching the resolver internals.
"""

from __future__ import annotations

from .device_resolver import DeviceResolver


def list_candidate_devices(resolver: DeviceResolver) -> list[dict[str, object]]:
    """List every openable input device node.

    Returns:
        list[dict]: One dict per device with keys:
            - 'index': Event node index (int)
            - 'path': Device path (str)
            - 'name': Reported device name (str)
            - 'match': 'exact', 'partial' or '' against resolver.target_name
            - 'selected': Whether resolver.resolve() would pick it (bool)

    Example:
        >>> for dev in list_candidate_devices(DeviceResolver()):
        ...     print(f"{dev['name']} at {dev['path']}")
    """
    devices = []
    for candidate in resolver.scan():
        if candidate.name == resolver.target_name:
            match = 'exact'
        elif resolver.target_name in candidate.name:
            match = 'partial'
        else:
            match = ''
        devices.append({
            'index': candidate.index,
            'path': candidate.path,
            'name': candidate.name,
            'match': match,
            'selected': False,
        })

    # Exact match wins over any partial match, otherwise the first partial
    for tier in ('exact', 'partial'):
        selected = next((d for d in devices if d['match'] == tier), None)
        if selected is not None:
            selected['selected'] = True
            break
    return devices
