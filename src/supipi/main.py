"""Main entry point for the supipi CLI application."""

import threading
from pathlib import Path

import typer

from common.backends import DeviceResolver
from common.backends import EvdevEventSource
from common.backends import list_candidate_devices
from common.backends.base import DeviceOpenError
from common.backends.base import EventSource
from common.backends.base import NoKeyboardError
from common.backends.base import SupipiError
from common.logging_utils import configure_logging
from common.logging_utils import get_logger
from common.version import get_version_info

from .command_executor import CommandExecutor
from .config_loader import ConfigLoader
from .daemon_manager import DaemonManager
from .daemon_manager import daemonize
from .models import AppConfig
from .shutdown import ShutdownCoordinator
from .shutdown import SignalSetupError
from .tap_detector import DoubleTapDetector
from .tap_monitor import MonitorStats
from .tap_monitor import TapMonitor

DEFAULT_LOG_FILE = Path.home() / '.local/share/supipi/supipi.log'

ERROR_LABELS: dict[type[SupipiError], str] = {
    NoKeyboardError: 'Keyboard not found',
    DeviceOpenError: 'Device open failed',
    SignalSetupError: 'Signal setup failed',
}

app = typer.Typer(
    help='⌨️  Supipi - double-tap SUPER to open the application launcher',
    no_args_is_help=True,
)

logger = get_logger('supipi.main')


def error_label(error: SupipiError) -> str:
    for error_type, label in ERROR_LABELS.items():
        if isinstance(error, error_type):
            return label
    return 'Startup failed'


def build_event_source(config: AppConfig) -> EvdevEventSource:
    """Resolve the keyboard device and open it.

    A fixed [device] path skips name-based discovery.

    Raises:
        NoKeyboardError: If discovery finds no matching device
        DeviceOpenError: If the selected device cannot be opened
    """
    if config.device.path:
        path = config.device.path
        logger.info(f'Using configured device path: {path}')
    else:
        path = DeviceResolver(config.device.name).resolve()

    source = EvdevEventSource.open(path)
    logger.info(f'Using device: {source.name} ({source.path})')
    return source


def prepare_supipi(
    config: AppConfig,
    stop_event: threading.Event,
) -> tuple[ShutdownCoordinator, EvdevEventSource]:
    """Install signal handlers and open the keyboard.

    Everything that can fail at startup happens here, so `start` can report
    it on the terminal before detaching.

    Raises:
        SupipiError: On any startup-fatal condition
    """
    coordinator = ShutdownCoordinator(stop_event)
    coordinator.install()
    try:
        source = build_event_source(config)
    except SupipiError:
        coordinator.restore()
        raise
    return coordinator, source


def run_supipi(
    config: AppConfig,
    stop_event: threading.Event | None = None,
    prepared: tuple[ShutdownCoordinator, EventSource] | None = None,
) -> MonitorStats:
    """Run the tap loop until SIGINT/SIGTERM (or another writer of stop_event).

    Args:
        config: Application configuration
        stop_event: Shared shutdown flag; must be the one `prepared` was built with
        prepared: Result of prepare_supipi(). Built here when None.

    Raises:
        SupipiError: On any startup-fatal condition
    """
    if stop_event is None:
        stop_event = threading.Event()
    coordinator, source = prepared or prepare_supipi(config, stop_event)

    try:
        executor = CommandExecutor(log_commands=True)
        detector = DoubleTapDetector(
            timeout=config.tap_timeout,
            on_double_tap=lambda: executor.execute(config.launcher),
        )
        try:
            monitor = TapMonitor(
                source,
                detector,
                stop_event,
                retry_delay=config.retry_delay,
                poll_interval=config.poll_interval,
            )
            stats = monitor.run()
            logger.info('Closing device...')
        finally:
            source.close()
        return stats
    finally:
        coordinator.restore()


def _load_config(config: Path | None, debug: bool = False) -> AppConfig:
    """Load configuration or exit with status 1."""
    try:
        app_config, _config_path = ConfigLoader.load(config)
    except FileNotFoundError as e:
        typer.echo(f'❌ Config file not found: {e}', err=True)
        raise typer.Exit(1) from e
    except Exception as e:
        typer.echo(f'❌ Failed to load config: {e}', err=True)
        raise typer.Exit(1) from e

    if debug:
        app_config.log_level = 'DEBUG'

    executor = CommandExecutor(log_commands=False)
    if not executor.check_command_exists(app_config.launcher.command):
        typer.echo(
            f'⚠️  Warning: Launcher command not found: {app_config.launcher.command}',
            err=True,
        )

    return app_config


@app.command()
def start(
    config: Path | None = typer.Option(None, help='Path to config file'),
    foreground: bool = typer.Option(False, '--foreground', help='Run in foreground'),
    debug: bool = typer.Option(False, '--debug', help='Enable debug logging'),
) -> None:
    """Start watching the keyboard for SUPER double-taps.

    By default supipi detaches into the background. Use --foreground to run
    in the current terminal.

    Examples:
        supipi start
        supipi start --foreground --debug
        supipi start --config /path/to/config.toml
    """
    daemon = DaemonManager()

    if not daemon.acquire_lock():
        typer.echo('❌ Another instance of supipi is already running', err=True)
        pid = daemon.get_pid()
        if pid:
            typer.echo(f'   PID: {pid}', err=True)
        typer.echo("   Use 'supipi stop' to stop it first", err=True)
        raise typer.Exit(1)

    try:
        app_config = _load_config(config, debug)
    except typer.Exit:
        daemon.cleanup()
        raise

    # Log files are opened before the fork; the handlers survive daemonize()
    configure_logging(
        app_config.log_level,
        foreground=foreground,
        log_file=None if foreground else app_config.log_file or DEFAULT_LOG_FILE,
    )

    stop_event = threading.Event()
    try:
        prepared = prepare_supipi(app_config, stop_event)
    except SupipiError as e:
        label = error_label(e)
        logger.error(f'{label}: {e}')
        typer.echo(f'❌ {label}: {e}', err=True)
        daemon.cleanup()
        raise typer.Exit(1) from e

    if foreground:
        typer.echo('✓ Starting supipi in foreground...')
        typer.echo('   Press Ctrl+C to stop')
    else:
        typer.echo('✓ Starting supipi in background...')
        daemonize()
        daemon.update_pid()

    try:
        run_supipi(app_config, stop_event, prepared)
    except Exception as e:
        logger.error(f'Fatal error: {e}', exc_info=True)
        raise typer.Exit(1) from e
    finally:
        daemon.cleanup()

    if foreground:
        typer.echo('\n👋 Supipi stopped')


@app.command()
def stop() -> None:
    """Stop the background supipi process.

    Examples:
        supipi stop
    """
    daemon = DaemonManager()

    if not daemon.is_running():
        typer.echo('❌ Supipi is not running', err=True)
        raise typer.Exit(1)

    pid = daemon.get_pid()
    typer.echo(f'Stopping supipi (PID: {pid})...')

    if daemon.stop():
        typer.echo('✓ Supipi stopped')
    else:
        typer.echo('❌ Failed to stop supipi', err=True)
        typer.echo('   The process may have already exited', err=True)
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """Show whether supipi is running.

    Examples:
        supipi status
    """
    daemon = DaemonManager()

    if not daemon.is_running():
        typer.echo('❌ Supipi is not running')
        raise typer.Exit(1)

    typer.echo('✓ Supipi is running')
    pid = daemon.get_pid()
    if pid:
        typer.echo(f'   PID: {pid}')


@app.command(name='device-list')
def device_list(
    config: Path | None = typer.Option(None, help='Path to config file'),
) -> None:
    """List input devices and show which one would be used.

    Examples:
        supipi device-list
    """
    app_config = _load_config(config)
    resolver = DeviceResolver(app_config.device.name)

    devices = list_candidate_devices(resolver)
    if not devices:
        typer.echo('❌ No readable input devices found in /dev/input/', err=True)
        typer.echo(
            '   Add your user to the "input" group:\n'
            '   sudo usermod -a -G input $USER',
            err=True,
        )
        raise typer.Exit(1)

    typer.echo(f'📱 Input devices (target name: "{resolver.target_name}"):\n')
    for dev in devices:
        marker = '→' if dev['selected'] else ' '
        match = f' [{dev["match"]} match]' if dev['match'] else ''
        typer.echo(f' {marker} {dev["path"]}: {dev["name"]}{match}')

    if app_config.device.path:
        typer.echo(f'\n💡 Configured fixed path overrides discovery: {app_config.device.path}')
    elif not any(dev['selected'] for dev in devices):
        typer.echo(f'\n⚠️  No device matches "{resolver.target_name}"')


@app.command(name='check-config')
def check_config(
    config: Path | None = typer.Option(None, help='Path to config file'),
) -> None:
    """Validate the configuration file and print the effective settings.

    Examples:
        supipi check-config
        supipi check-config --config /path/to/config.toml
    """
    try:
        app_config, config_path = ConfigLoader.load(config)
    except FileNotFoundError as e:
        typer.echo(f'❌ Config file not found: {e}', err=True)
        raise typer.Exit(1) from e
    except Exception as e:
        typer.echo(f'❌ Configuration error: {e}', err=True)
        raise typer.Exit(1) from e

    typer.echo('✓ Configuration is valid\n')
    typer.echo(f'Config file: {config_path or "(built-in defaults)"}')
    typer.echo(f'Tap timeout: {app_config.tap_timeout_ms}ms')
    typer.echo(f'Retry delay: {app_config.retry_delay_ms}ms')
    typer.echo(f'Poll interval: {app_config.poll_interval_ms}ms')
    typer.echo(f'Log level: {app_config.log_level}')
    if app_config.log_file:
        typer.echo(f'Log file: {app_config.log_file}')
    if app_config.device.path:
        typer.echo(f'Device path: {app_config.device.path}')
    else:
        typer.echo(f'Device name: {app_config.device.name}')
    typer.echo(f'Launcher: {" ".join(app_config.launcher.argv())}')

    if not CommandExecutor(log_commands=False).check_command_exists(app_config.launcher.command):
        typer.echo('   ⚠️  Warning: Launcher command not found')


@app.command()
def version() -> None:
    """Print the supipi version."""
    typer.echo(f'supipi {get_version_info()}')


if __name__ == '__main__':
    app()
