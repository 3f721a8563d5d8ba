import logging
import os
import re

from common.logging_utils import ISOFormatter
from common.logging_utils import configure_logging
from supipi.daemon_manager import DaemonManager


def test_lock_is_exclusive(tmp_path):
    pid_file = tmp_path / 'supipi.pid'
    first = DaemonManager(pid_file)
    second = DaemonManager(pid_file)

    assert first.acquire_lock()
    assert first.get_pid() == os.getpid()
    assert second.is_running()
    assert not second.acquire_lock()

    first.cleanup()

    assert not pid_file.exists()
    assert not second.is_running()
    assert second.acquire_lock()
    second.cleanup()


def test_stop_without_pid_file(tmp_path):
    assert not DaemonManager(tmp_path / 'supipi.pid').stop()


def test_iso_formatter_layout():
    record = logging.LogRecord('supipi.monitor', logging.INFO, __file__, 42, 'Launched %s', ('wofi',), None)

    line = ISOFormatter().format(record)

    assert re.fullmatch(
        r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3} INFO \[test_daemon_and_logging:42\]: Launched wofi',
        line,
    )


def test_background_logging_writes_to_file(tmp_path):
    log_file = tmp_path / 'logs' / 'supipi.log'

    configure_logging('DEBUG', foreground=False, log_file=log_file)
    logging.getLogger('supipi.monitor').info('loop started')
    logging.getLogger('common.backend.resolver').debug('scanning')
    for root in ('supipi', 'common'):
        for handler in logging.getLogger(root).handlers:
            handler.flush()

    text = log_file.read_text()
    assert 'INFO' in text and 'loop started' in text
    assert 'scanning' in text


def test_launch_failures_reach_the_configured_log_file(tmp_path, monkeypatch):
    import subprocess

    from supipi.command_executor import CommandExecutor
    from supipi.models import LauncherConfig

    def fail(cmd, **kwargs):
        raise FileNotFoundError(2, 'No such file or directory')

    monkeypatch.setattr(subprocess, 'Popen', fail)
    log_file = tmp_path / 'supipi.log'
    configure_logging('INFO', foreground=False, log_file=log_file)

    CommandExecutor().execute(LauncherConfig())
    for handler in logging.getLogger('supipi').handlers:
        handler.flush()

    assert 'ERROR [command_executor:' in log_file.read_text()
