"""
Unit tests for the command-line entry point.
"""

import logging
from unittest.mock import patch

import pytest

from opendex_launcher.cli import entry as cli_main
from opendex_launcher.core.exceptions import ConfigError, NotFoundError, error_stage


@pytest.fixture
def restore_root_logger():
    """basicConfig(force=True) replaces root handlers; put pytest's back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def no_logging_setup():
    with patch.object(cli_main, "configure_logging") as mock_configure:
        yield mock_configure


@pytest.fixture
def home(tmp_path):
    home = tmp_path / ".opendex-docker"
    with patch.object(cli_main, "get_home_dir", return_value=home):
        yield home


class TestConfigureLogging:
    def test_debug(self, restore_root_logger):
        cli_main.configure_logging(True)
        assert restore_root_logger.level == logging.DEBUG

    def test_quiet(self, restore_root_logger):
        cli_main.configure_logging(False)
        assert restore_root_logger.level == logging.WARNING


class TestRun:
    def test_returns_child_exit_code(self, home, no_logging_setup):
        with patch.object(cli_main, "Launcher") as mock_launcher:
            mock_launcher.return_value.start.return_value = 5

            assert cli_main.run(["status"], environ={}) == 5

        config = mock_launcher.call_args[0][0]
        assert mock_launcher.call_args[0][1] == home
        assert config.branch == "master"
        mock_launcher.return_value.start.assert_called_once_with(["status"])

    def test_environment_reaches_launcher(self, home, no_logging_setup):
        with patch.object(cli_main, "Launcher") as mock_launcher:
            mock_launcher.return_value.start.return_value = 0

            cli_main.run([], environ={"BRANCH": "develop", "DEBUG": "1"})

        config = mock_launcher.call_args[0][0]
        assert config.branch == "develop"
        assert config.debug is True
        no_logging_setup.assert_called_with(True)

    def test_launcher_error_exit_code(self, home, no_logging_setup, caplog):
        with patch.object(cli_main, "Launcher") as mock_launcher:
            error = NotFoundError("Not Found")
            error.stage = "get branch head"
            mock_launcher.return_value.start.side_effect = error

            assert cli_main.run([], environ={}) == 1

        assert "Error: get branch head: Not Found" in caplog.text

    def test_debug_prints_traceback(self, home, no_logging_setup, capsys):
        def fail(args):
            with error_stage("download launcher"):
                raise NotFoundError("gone")

        with patch.object(cli_main, "Launcher") as mock_launcher:
            mock_launcher.return_value.start.side_effect = fail

            assert cli_main.run([], environ={"DEBUG": "true"}) == 1

        assert "Traceback" in capsys.readouterr().err

    def test_config_error(self, home, no_logging_setup, caplog):
        home.mkdir()
        (home / "launcher.yaml").write_text("debug: [\n")

        with patch.object(cli_main, "Launcher") as mock_launcher:
            assert cli_main.run([], environ={}) == 1

        mock_launcher.assert_not_called()
        assert "Invalid YAML" in caplog.text

    def test_home_lookup_failure(self, no_logging_setup, caplog):
        with patch.object(
            cli_main,
            "get_home_dir",
            side_effect=ConfigError("cannot determine user home directory"),
        ):
            assert cli_main.run([], environ={}) == 1

        assert "cannot determine user home directory" in caplog.text

    def test_unexpected_error_exit_code(self, home, no_logging_setup, caplog, capsys):
        with patch.object(cli_main, "Launcher") as mock_launcher:
            mock_launcher.return_value.start.side_effect = PermissionError(
                13, "Permission denied"
            )

            assert cli_main.run([], environ={}) == 1

        assert "Error: [Errno 13] Permission denied" in caplog.text
        assert "Traceback" not in capsys.readouterr().err

    def test_keyboard_interrupt(self, home, no_logging_setup):
        with patch.object(cli_main, "Launcher") as mock_launcher:
            mock_launcher.return_value.start.side_effect = KeyboardInterrupt

            assert cli_main.run([], environ={}) == 130

    def test_main_exits_with_code(self):
        with patch.object(cli_main, "run", return_value=3):
            with pytest.raises(SystemExit) as exc_info:
                cli_main.main()

        assert exc_info.value.code == 3
