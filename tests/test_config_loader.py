import tomllib
from pathlib import Path

import pytest

from supipi.config_loader import ConfigLoader
from supipi.models import AppConfig


def write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / 'config.toml'
    path.write_text(text)
    return path


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.setattr(ConfigLoader, 'DEFAULT_PATHS', [tmp_path / 'missing.toml'])

    config, path = ConfigLoader.load()

    assert path is None
    assert config.tap_timeout == pytest.approx(0.24)
    assert config.retry_delay == pytest.approx(0.1)
    assert config.device.name == 'KB USB KB'
    assert config.device.path is None
    assert config.launcher.argv() == ['wofi', '--show', 'drun']


def test_default_path_is_used(tmp_path, monkeypatch):
    path = write_config(tmp_path, '[app]\ntap_timeout_ms = 300\n')
    monkeypatch.setattr(ConfigLoader, 'DEFAULT_PATHS', [tmp_path / 'missing.toml', path])

    config, loaded_from = ConfigLoader.load()

    assert loaded_from == path.resolve()
    assert config.tap_timeout_ms == 300


def test_full_config(tmp_path):
    path = write_config(tmp_path, '''
[app]
tap_timeout_ms = 200
retry_delay_ms = 50
poll_interval_ms = 1000
log_level = "debug"
log_file = "~/supipi.log"

[device]
name = "My Keyboard"
path = "/dev/input/event7"

[launcher]
command = "rofi"
args = ["-show", "drun"]
''')

    config, _ = ConfigLoader.load(path)

    assert config.tap_timeout == pytest.approx(0.2)
    assert config.poll_interval == pytest.approx(1.0)
    assert config.log_level == 'DEBUG'
    assert config.log_file == Path('~/supipi.log').expanduser()
    assert config.device.name == 'My Keyboard'
    assert config.device.path == '/dev/input/event7'
    assert config.launcher.argv() == ['rofi', '-show', 'drun']


def test_explicit_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigLoader.load(tmp_path / 'nope.toml')


def test_invalid_toml_raises(tmp_path):
    path = write_config(tmp_path, '[app\n')

    with pytest.raises(tomllib.TOMLDecodeError):
        ConfigLoader.load(path)


@pytest.mark.parametrize('text', [
    '[app]\ntap_timeout_ms = 0\n',
    '[app]\nretry_delay_ms = -5\n',
    '[app]\nlog_level = "LOUD"\n',
    '[device]\nname = ""\n',
    '[launcher]\ncommand = ""\n',
    '[launcher]\ncommand = "wofi"\nargs = [1, 2]\n',
])
def test_invalid_values_raise_value_error(tmp_path, text):
    with pytest.raises(ValueError):
        ConfigLoader.load(write_config(tmp_path, text))


@pytest.mark.parametrize('text', [
    '[app]\ntap_timeout_ms = "fast"\n',
    '[device]\npath = 3\n',
    '[launcher]\ncommand = "wofi"\nargs = "--show drun"\n',
])
def test_wrong_types_raise_type_error(tmp_path, text):
    with pytest.raises(TypeError):
        ConfigLoader.load(write_config(tmp_path, text))


def test_app_config_rejects_bool_timeout():
    with pytest.raises(TypeError):
        AppConfig(tap_timeout_ms=True)


def test_launcher_keys_fall_back_to_defaults(tmp_path):
    config, _ = ConfigLoader.load(write_config(tmp_path, '[launcher]\nargs = ["--show", "run"]\n'))

    assert config.launcher.argv() == ['wofi', '--show', 'run']


def test_launcher_command_alone_keeps_default_args(tmp_path):
    config, _ = ConfigLoader.load(write_config(tmp_path, '[launcher]\ncommand = "fuzzel"\n'))

    assert config.launcher.argv() == ['fuzzel', '--show', 'drun']
