from typing import get_args
from unittest.mock import patch

import pytest

from tibber_exporter import cli
from tibber_exporter.config import LogLevel
from tibber_exporter.domain.configuration import HostConfig


@pytest.fixture
def password_file(tmp_path):
    path = tmp_path / "tibber_password"
    path.write_text("ABCD-1234\n")
    return str(path)


class TestParser:
    def test_defaults(self):
        args = cli.setup_parser().parse_args(["-t", "bridge", "-p", "pw.txt"])
        assert args.tibber_host == "bridge"
        assert args.password_file == "pw.txt"
        assert args.node == 1
        assert args.bind_address == "127.0.0.1:8080"

    def test_long_options(self):
        args = cli.setup_parser().parse_args(
            ["--tibber-host", "bridge", "--node", "2", "--password-file", "pw.txt", "--bind-address", "0.0.0.0:9100"]
        )
        assert args.node == 2
        assert args.bind_address == "0.0.0.0:9100"

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit):
            cli.setup_parser().parse_args(["--log-level", "LOUD"])


class TestBuildConfig:
    def test_reads_password_once(self, password_file):
        args = cli.setup_parser().parse_args(["-t", "bridge", "-n", "3", "-p", password_file])

        config = cli.build_config(args)

        assert isinstance(config, HostConfig)
        assert config.host == "bridge"
        assert config.node_id == 3
        assert config.password.get_secret_value() == "ABCD-1234"

    def test_missing_host(self, password_file):
        args = cli.setup_parser().parse_args(["-t", "", "-p", password_file])
        with pytest.raises(cli.ConfigurationError, match="Tibber host"):
            cli.build_config(args)

    def test_missing_password_file(self):
        args = cli.setup_parser().parse_args(["-t", "bridge", "-p", ""])
        with pytest.raises(cli.ConfigurationError, match="password file"):
            cli.build_config(args)

    def test_negative_node(self, password_file):
        args = cli.setup_parser().parse_args(["-t", "bridge", "-n", "-1", "-p", password_file])
        with pytest.raises(cli.ConfigurationError, match="node ID"):
            cli.build_config(args)


class TestMain:
    def test_runs_server(self, password_file):
        with patch("tibber_exporter.cli.uvicorn.run") as mock_run:
            cli.main(["-t", "bridge", "-p", password_file, "-b", "0.0.0.0:9100"])

        mock_run.assert_called_once()
        app = mock_run.call_args.args[0]
        assert app.state.host_config.host == "bridge"
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"
        assert mock_run.call_args.kwargs["port"] == 9100

    def test_missing_password_file_exits(self, tmp_path):
        with patch("tibber_exporter.cli.uvicorn.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["-t", "bridge", "-p", str(tmp_path / "missing")])

        assert exc_info.value.code == 1
        mock_run.assert_not_called()

    def test_invalid_bind_address_exits(self, password_file):
        with patch("tibber_exporter.cli.uvicorn.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                cli.main(["-t", "bridge", "-p", password_file, "-b", "nowhere"])

        assert exc_info.value.code == 1
        mock_run.assert_not_called()


def test_log_level_choices_match_settings():
    assert cli.LOG_LEVELS == list(get_args(LogLevel))
    assert "DEBUG" in cli.LOG_LEVELS
