import pytest

from common.backends import NoKeyboardError
from common.backends.device_listing import list_candidate_devices
from conftest import TARGET


def test_exact_match_wins_over_lower_partial_match(make_resolver):
    resolver, _ = make_resolver({
        2: f'{TARGET} Consumer Control',
        5: TARGET,
    })

    assert resolver.resolve() == '/dev/input/event5'


def test_first_partial_match_is_kept(make_resolver):
    resolver, _ = make_resolver({
        10: f'{TARGET} System Control',
        20: f'{TARGET} Consumer Control',
    })

    assert resolver.resolve() == '/dev/input/event10'


def test_lowest_exact_match_stops_the_scan(make_resolver):
    resolver, opener = make_resolver({
        3: TARGET,
        7: TARGET,
        9: 'Other Keyboard',
    })

    assert resolver.resolve() == '/dev/input/event3'
    assert [dev.path for dev in opener.opened] == ['/dev/input/event3']


def test_no_matching_device_raises(make_resolver):
    resolver, _ = make_resolver({i: f'Device {i}' for i in range(32)})

    with pytest.raises(NoKeyboardError) as exc_info:
        resolver.resolve()

    assert exc_info.value.target_name == TARGET
    assert exc_info.value.scanned == 32


def test_no_devices_at_all_raises(make_resolver):
    resolver, _ = make_resolver({})

    with pytest.raises(NoKeyboardError):
        resolver.resolve()


def test_open_failures_are_skipped(make_resolver):
    resolver, _ = make_resolver({
        0: PermissionError(13, 'Permission denied'),
        1: OSError(19, 'No such device'),
        4: f'{TARGET} Keyboard',
    })

    assert resolver.resolve() == '/dev/input/event4'


def test_nameless_devices_are_skipped(make_resolver):
    resolver, _ = make_resolver({0: '', 1: TARGET})

    assert [c.index for c in resolver.scan()] == [1]


def test_only_indices_below_32_are_checked(make_resolver):
    resolver, _ = make_resolver({32: TARGET})

    with pytest.raises(NoKeyboardError):
        resolver.resolve()


def test_scanned_devices_are_closed(make_resolver):
    resolver, opener = make_resolver({1: 'Mouse', 2: f'{TARGET} Keyboard'})

    resolver.resolve()

    assert opener.opened
    assert all(dev.closed for dev in opener.opened)


def test_device_listing_marks_selected_device(make_resolver):
    resolver, _ = make_resolver({
        0: 'Power Button',
        2: f'{TARGET} Consumer Control',
        5: TARGET,
    })

    devices = list_candidate_devices(resolver)

    assert [(d['index'], d['match'], d['selected']) for d in devices] == [
        (0, '', False),
        (2, 'partial', False),
        (5, 'exact', True),
    ]


def test_device_listing_without_match_selects_nothing(make_resolver):
    resolver, _ = make_resolver({0: 'Power Button'})

    devices = list_candidate_devices(resolver)

    assert len(devices) == 1
    assert not devices[0]['selected']


def test_device_listing_opens_each_node_once(make_resolver):
    resolver, opener = make_resolver({
        1: f'{TARGET} Consumer Control',
        3: 'Power Button',
        6: TARGET,
    })

    devices = list_candidate_devices(resolver)

    assert sorted(dev.path for dev in opener.opened) == [
        '/dev/input/event1', '/dev/input/event3', '/dev/input/event6',
    ]
    assert [d['index'] for d in devices if d['selected']] == [6]


def test_device_listing_falls_back_to_first_partial(make_resolver):
    resolver, _ = make_resolver({
        4: f'{TARGET} System Control',
        9: f'{TARGET} Consumer Control',
    })

    devices = list_candidate_devices(resolver)

    assert [d['index'] for d in devices if d['selected']] == [4]
