"""Tests for the command-line entry point."""

from __future__ import annotations

import pytest

import runjob.main as cli


class RecordingSupervisor:
    """Stands in for JobSupervisor and records which operation ran."""

    calls: list[str] = []

    def __init__(self, config=None):
        self.config = config

    def start(self):
        self.calls.append("start")
        return False

    def stop(self):
        self.calls.append("stop")
        return False

    def status(self):
        self.calls.append("status")
        return {}

    def cycle(self):
        self.calls.append("cycle")
        return 0

    def restart(self):
        self.calls.append("restart")
        return False


@pytest.fixture
def recorder(monkeypatch):
    RecordingSupervisor.calls = []
    monkeypatch.setattr(cli, "JobSupervisor", RecordingSupervisor)
    monkeypatch.setattr(cli.setproctitle, "setproctitle", lambda title: None)
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)
    return RecordingSupervisor


@pytest.mark.parametrize("argv", [[], ["bogus"], ["start", "stop"], ["--verbose"]])
def test_usage_error_exits_non_zero(recorder, capsys, argv):
    assert cli.main(argv) == 1
    assert "Usage: runjob {start|stop|status|cycle|restart}" in capsys.readouterr().out
    assert recorder.calls == []


@pytest.mark.parametrize("command", ["start", "stop", "status", "cycle", "restart"])
def test_commands_exit_zero_regardless_of_outcome(recorder, command):
    assert cli.main([command]) == 0
    assert recorder.calls == [command]


@pytest.mark.parametrize("argv", [["STATUS"], ["Start"], ["STOP", "--verbose"]])
def test_commands_are_case_sensitive(recorder, capsys, argv):
    assert cli.main(argv) == 1
    assert "Usage:" in capsys.readouterr().out
    assert recorder.calls == []


def test_verbose_flag_is_accepted(recorder):
    assert cli.main(["status", "--verbose"]) == 0
    assert recorder.calls == ["status"]


def test_execute_command_rejects_unknown(recorder):
    assert cli.execute_command(RecordingSupervisor(), "explode") is False
    assert cli.execute_command(RecordingSupervisor(), "stop") is True
    assert recorder.calls == ["stop"]
