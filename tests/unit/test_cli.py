"""Unit tests for the command-line entry point."""

from unittest.mock import patch

import pytest

from mailcatcher import cli
from mailcatcher.config import Settings
from mailcatcher.exceptions import ServerStartError, ServerStopError
from mailcatcher.version import __version__


@pytest.fixture(autouse=True)
def _no_logging_setup():
    """main() reconfigures the root logger; keep pytest's handlers intact."""
    with patch.object(cli, "configure_logging"):
        yield


def _resolve(argv):
    args = cli.build_parser().parse_args(argv)
    return cli.resolve_settings(args, Settings(_env_file=None))


class TestPortPrecedence:

    def test_defaults(self):
        settings = _resolve([])
        assert (settings.SMTP_PORT, settings.HTTP_PORT) == (1025, 8025)

    def test_environment_overrides_default(self, monkeypatch):
        monkeypatch.setenv("MAILCATCHER_SMTP_PORT", "2525")
        monkeypatch.setenv("MAILCATCHER_HTTP_PORT", "9025")

        settings = _resolve([])

        assert (settings.SMTP_PORT, settings.HTTP_PORT) == (2525, 9025)

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("MAILCATCHER_SMTP_PORT", "2525")
        monkeypatch.setenv("MAILCATCHER_HTTP_PORT", "9025")

        settings = _resolve(["--smtp-port", "3525", "--http-port", "10025"])

        assert (settings.SMTP_PORT, settings.HTTP_PORT) == (3525, 10025)

    def test_one_flag_leaves_other_port_to_environment(self, monkeypatch):
        monkeypatch.setenv("MAILCATCHER_HTTP_PORT", "9025")

        settings = _resolve(["--smtp-port", "3525"])

        assert (settings.SMTP_PORT, settings.HTTP_PORT) == (3525, 9025)

    def test_verbose_sets_debug(self):
        assert _resolve(["--verbose"]).LOG_LEVEL == "DEBUG"


class TestMain:

    def test_version_exits_without_listening(self, capsys):
        with patch.object(cli, "MailCatcher") as server_cls:
            assert cli.main(["--version"]) == 0

        server_cls.assert_not_called()
        assert capsys.readouterr().out.strip() == f"mailcatcher {__version__}"

    def test_bind_failure_exits_nonzero(self):
        with patch.object(cli, "MailCatcher") as server_cls, \
                patch.object(cli, "wait_for_shutdown_signal") as wait:
            server_cls.from_settings.return_value.start.side_effect = ServerStartError("in use")

            assert cli.main(["--smtp-port", "2525"]) == 1

        wait.assert_not_called()

    def test_runs_until_signal_then_stops(self):
        with patch.object(cli, "MailCatcher") as server_cls, \
                patch.object(cli, "wait_for_shutdown_signal") as wait:
            server = server_cls.from_settings.return_value

            assert cli.main([]) == 0

        server.start.assert_called_once()
        wait.assert_called_once()
        server.stop.assert_called_once_with(timeout=cli.SHUTDOWN_TIMEOUT)

    def test_stop_failure_exits_nonzero(self):
        with patch.object(cli, "MailCatcher") as server_cls, \
                patch.object(cli, "wait_for_shutdown_signal"):
            server_cls.from_settings.return_value.stop.side_effect = ServerStopError("slow")

            assert cli.main([]) == 1

    @pytest.mark.parametrize("argv", [["--smtp-port", "abc"], ["--bogus"]])
    def test_bad_arguments(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(argv)
        assert exc_info.value.code == 2
