"""Daemon process management for supipi.

A PID file doubles as the single-instance lock: the running process holds an
exclusive fcntl.flock on it for its whole lifetime.
"""

import errno
import fcntl
import os
import signal
import sys
import time
from pathlib import Path

DEFAULT_PID_FILE = Path.home() / '.local/share/supipi/supipi.pid'
LOCK_HELD_ERRNOS = (errno.EACCES, errno.EAGAIN, errno.EWOULDBLOCK)


class DaemonManager:
    """Manage the background process through a locked PID file.

    Args:
        pid_file: Path to PID file (also used for locking)
        stop_timeout: Seconds to wait after SIGTERM before sending SIGKILL
    """

    def __init__(self, pid_file: Path | None = None, stop_timeout: float = 5.0) -> None:
        self.pid_file = pid_file or DEFAULT_PID_FILE
        self.stop_timeout = stop_timeout
        self.pid_fd: int | None = None

        self.pid_file.parent.mkdir(parents=True, exist_ok=True)

    def _write_pid(self) -> None:
        assert self.pid_fd is not None
        os.ftruncate(self.pid_fd, 0)
        os.lseek(self.pid_fd, 0, os.SEEK_SET)
        os.write(self.pid_fd, f'{os.getpid()}\n'.encode())
        os.fsync(self.pid_fd)

    def acquire_lock(self) -> bool:
        """Take the exclusive lock and record the current PID.

        The file descriptor stays open to keep the lock; the kernel releases
        it when the process exits.

        Returns:
            bool: False if another instance already holds the lock
        """
        try:
            self.pid_fd = os.open(self.pid_file, os.O_CREAT | os.O_RDWR, 0o600)
            fcntl.flock(self.pid_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            if self.pid_fd is not None:
                os.close(self.pid_fd)
                self.pid_fd = None
            if e.errno in LOCK_HELD_ERRNOS:
                return False
            raise

        self._write_pid()
        return True

    def update_pid(self) -> None:
        """Rewrite the PID after daemonize() forked; the lock fd is inherited."""
        if self.pid_fd is None and not self.acquire_lock():
            raise RuntimeError('Failed to re-acquire lock in daemon process')  # noqa: TRY003
        self._write_pid()

    def is_running(self) -> bool:
        """Check whether another process holds the lock."""
        try:
            test_fd = os.open(self.pid_file, os.O_RDWR)
        except OSError:
            return False

        try:
            fcntl.flock(test_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            if e.errno in LOCK_HELD_ERRNOS:
                return True
            raise
        else:
            fcntl.flock(test_fd, fcntl.LOCK_UN)
            return False
        finally:
            os.close(test_fd)

    def get_pid(self) -> int | None:
        try:
            return int(self.pid_file.read_text().strip())
        except (ValueError, OSError):
            return None

    def stop(self) -> bool:
        """Stop the daemon: SIGTERM, then SIGKILL after stop_timeout.

        Returns:
            bool: True if a process was stopped
        """
        pid = self.get_pid()
        if pid is None:
            return False

        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            self.pid_file.unlink(missing_ok=True)
            return False
        except PermissionError:
            return False

        deadline = time.monotonic() + self.stop_timeout
        while time.monotonic() < deadline:
            try:
                os.kill(pid, 0)
            except ProcessLookupError:
                self.pid_file.unlink(missing_ok=True)
                return True
            time.sleep(0.1)

        try:
            os.kill(pid, signal.SIGKILL)
            time.sleep(0.5)
        except ProcessLookupError:
            pass
        self.pid_file.unlink(missing_ok=True)
        return True

    def cleanup(self) -> None:
        """Release the lock and remove the PID file on graceful shutdown."""
        if self.pid_fd is not None:
            try:
                fcntl.flock(self.pid_fd, fcntl.LOCK_UN)
                os.close(self.pid_fd)
            except OSError:
                pass  # already released
            finally:
                self.pid_fd = None

        self.pid_file.unlink(missing_ok=True)


def daemonize() -> None:
    """Detach the current process with the classic double fork.

    Reference: https://www.python.org/dev/peps/pep-3143/
    """
    try:
        if os.fork() > 0:
            sys.exit(0)
    except OSError as e:
        sys.stderr.write(f'Fork #1 failed: {e}\n')
        sys.exit(1)

    os.chdir('/')
    os.setsid()
    os.umask(0o022)

    try:
        if os.fork() > 0:
            sys.exit(0)
    except OSError as e:
        sys.stderr.write(f'Fork #2 failed: {e}\n')
        sys.exit(1)

    sys.stdout.flush()
    sys.stderr.flush()

    # Logging goes to the log file from here on
    with Path('/dev/null').open() as devnull:
        os.dup2(devnull.fileno(), sys.stdin.fileno())
    with Path('/dev/null').open('w') as devnull:
        os.dup2(devnull.fileno(), sys.stdout.fileno())
        os.dup2(devnull.fileno(), sys.stderr.fileno())
