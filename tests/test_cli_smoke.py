"""Smoke tests for CLI commands.

Tests that CLI commands parse correctly and don't crash. Uses Click's
CliRunner with the application, audio and MIDI layers mocked out.
"""

import json
import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from beatsampler.cli.main import cli
from beatsampler.exceptions import MidiPortNotFoundError, SetupError


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    """setup_logging adds root handlers; drop them after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def app_class():
    with patch("beatsampler.core.SamplerApplication") as app_class:
        app_class.return_value.run.return_value = 0
        yield app_class


@pytest.fixture
def config_file(temp_dir):
    path = temp_dir / "config.json"
    path.write_text(json.dumps({"random_seed": 5}))
    return path


@pytest.mark.integration
class TestCLIHelp:
    """Test that all commands have working help text."""

    def test_main_help(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        assert '--shared-stream' in result.output
        assert '--sounds-dir' in result.output

    def test_version_flag(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.1.0' in result.output

    @pytest.mark.parametrize("command", [['audio', '--help'], ['midi', '--help'], ['midi', 'ping', '--help']])
    def test_group_help(self, runner, command):
        result = runner.invoke(cli, command)
        assert result.exit_code == 0


@pytest.mark.integration
class TestRunCommand:
    """Test the default run command."""

    def test_run_applies_overrides(self, runner, app_class, config_file, temp_dir):
        result = runner.invoke(cli, [
            '--config', str(config_file),
            '--sounds-dir', str(temp_dir),
            '--dedicated-streams',
            '--seed', '9',
        ])

        assert result.exit_code == 0
        config = app_class.call_args.args[0]
        assert config.sounds_dir == temp_dir
        assert config.random_seed == 9
        assert config.shared_stream is False
        app = app_class.return_value
        app.setup.assert_called_once_with()
        app.run.assert_called_once_with()
        app.close.assert_called_once_with()

    def test_config_values_kept_without_overrides(self, runner, app_class, config_file):
        result = runner.invoke(cli, ['--config', str(config_file)])

        assert result.exit_code == 0
        assert app_class.call_args.args[0].random_seed == 5

    def test_setup_error_exits_1(self, runner, app_class, config_file):
        app_class.return_value.setup.side_effect = SetupError("Failed to load samples: 1 of 7 failed")

        result = runner.invoke(cli, ['--config', str(config_file)])

        assert result.exit_code == 1
        assert "ERROR: Failed to load samples" in result.output
        app_class.return_value.close.assert_called_once_with()

    def test_invalid_config_exits_1(self, runner, app_class, temp_dir):
        path = temp_dir / "config.json"
        path.write_text('{"pad_map": {"44": ["unknown"]}}')

        result = runner.invoke(cli, ['--config', str(path)])

        assert result.exit_code == 1
        assert "ERROR" in result.output
        app_class.assert_not_called()


@pytest.mark.integration
class TestUtilityCommands:
    """Test audio and MIDI utility commands."""

    def test_midi_list(self, runner):
        with patch("mido.get_input_names", return_value=["Arturia BeatStep"]), \
                patch("mido.get_output_names", return_value=[]):
            result = runner.invoke(cli, ['midi', 'list'])

        assert result.exit_code == 0
        assert "[0] Arturia BeatStep" in result.output
        assert "No MIDI output ports found." in result.output

    def test_audio_list(self, runner):
        devices = [(3, "Speakers", "ALSA", {'max_output_channels': 2, 'default_samplerate': 48000.0})]
        with patch("beatsampler.cli.commands.audio.AudioDevice") as audio_device:
            audio_device.list_output_devices.return_value = devices
            audio_device.get_default_device.return_value = 3
            result = runner.invoke(cli, ['audio', 'list'])

        assert result.exit_code == 0
        assert "[3] Speakers  [Default]" in result.output

    def test_midi_ping(self, runner):
        with patch("beatsampler.cli.commands.midi.MidiOutputManager") as manager_class:
            manager = manager_class.return_value
            manager.send.return_value = True
            result = runner.invoke(cli, [
                'midi', 'ping', '--port', 'Pads', '--first-key', '36', '--last-key', '39', '--dwell-ms', '1',
            ])

        assert result.exit_code == 0
        assert "Swept 4 pads on Pads" in result.output
        manager.stop.assert_called_once_with()

    def test_midi_ping_missing_port(self, runner):
        with patch("beatsampler.cli.commands.midi.MidiOutputManager") as manager_class:
            manager_class.return_value.start.side_effect = MidiPortNotFoundError("Pads", "output", [])
            result = runner.invoke(cli, ['midi', 'ping', '--port', 'Pads'])

        assert result.exit_code == 1
        assert "Can't find MIDI output port 'Pads'" in result.output

    def test_midi_ping_bad_range(self, runner):
        result = runner.invoke(cli, ['midi', 'ping', '--first-key', '50', '--last-key', '40'])

        assert result.exit_code == 2
