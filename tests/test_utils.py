"""Tests for the command executor."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import sh

from virtink_e2e import utils
from virtink_e2e.errors import CommandError
from virtink_e2e.utils import Command, get_command_output, run_command


class TestCommand:
    """Test the Command value type."""

    def test_str_is_the_full_command_line(self):
        cmd = Command("./bin/kubectl", ("wait", "--for", "condition=Available"))
        assert str(cmd) == "./bin/kubectl wait --for condition=Available"

    def test_str_quotes_arguments_with_spaces(self):
        cmd = Command("echo", ("hello world",))
        assert str(cmd) == "echo 'hello world'"

    def test_environment_overlays_parent(self, monkeypatch):
        monkeypatch.setenv("PARENT_ONLY", "1")
        monkeypatch.setenv("KUBECONFIG", "/old")
        cmd = Command("kubectl", env={"KUBECONFIG": "/new"})

        env = cmd.environment()

        assert env["PARENT_ONLY"] == "1"
        assert env["KUBECONFIG"] == "/new"


class TestGetCommandOutput:
    """Test capturing mode."""

    def test_combines_stdout_and_stderr(self):
        output = get_command_output(Command("sh", ("-c", "echo out; echo err 1>&2")))
        assert "out" in output
        assert "err" in output

    def test_non_zero_exit_embeds_command_and_output(self):
        with pytest.raises(CommandError) as exc_info:
            get_command_output(Command("sh", ("-c", "echo broken; exit 3")))

        err = exc_info.value
        assert "exit status 3" in str(err)
        assert "broken" in str(err)
        assert "echo broken; exit 3" in err.cmdline
        assert err.output.strip() == "broken"

    def test_missing_program_raises_command_error(self, tmp_path):
        missing = tmp_path / "no-such-binary"
        with pytest.raises(CommandError) as exc_info:
            get_command_output(Command(str(missing), ("version",)))
        assert str(missing) in exc_info.value.cmdline

    def test_env_overlay_reaches_child(self):
        output = get_command_output(Command("sh", ("-c", "echo $VIRTINK_E2E_PROBE"), env={"VIRTINK_E2E_PROBE": "bar"}))
        assert output.strip() == "bar"

    def test_runs_in_working_directory(self, tmp_path):
        output = get_command_output(Command("pwd", cwd=tmp_path))
        assert output.strip() == str(tmp_path.resolve())

    def test_echoes_command_before_running(self, capsys):
        get_command_output(Command("sh", ("-c", "true")))
        assert "sh -c true" in capsys.readouterr().err


class TestRunCommand:
    """Test streaming mode."""

    @pytest.fixture
    def fake_sh(self, monkeypatch):
        program = MagicMock()
        fake = SimpleNamespace(
            Command=MagicMock(return_value=program),
            CommandNotFound=sh.CommandNotFound,
            ErrorReturnCode=sh.ErrorReturnCode,
        )
        monkeypatch.setattr(utils, "sh", fake)
        return fake, program

    def test_runs_in_foreground_with_overlay(self, fake_sh, tmp_path):
        fake, program = fake_sh
        run_command(Command("./bin/kuttl", ("test",), env={"KUBECONFIG": "/k"}, cwd=tmp_path))

        fake.Command.assert_called_once_with("./bin/kuttl")
        args, kwargs = program.call_args
        assert args == ("test",)
        assert kwargs["_fg"] is True
        assert kwargs["_cwd"] == str(tmp_path)
        assert kwargs["_env"]["KUBECONFIG"] == "/k"

    def test_non_zero_exit_raises_command_error(self, fake_sh):
        _, program = fake_sh
        program.side_effect = sh.ErrorReturnCode_1("./bin/kuttl test", b"", b"")

        with pytest.raises(CommandError) as exc_info:
            run_command(Command("./bin/kuttl", ("test",)))

        assert exc_info.value.cmdline == "./bin/kuttl test"
        assert "exit status 1" in str(exc_info.value)
        assert exc_info.value.output is None

    def test_missing_program_raises_command_error(self, fake_sh):
        fake, _ = fake_sh
        fake.Command.side_effect = sh.CommandNotFound("./bin/kind")

        with pytest.raises(CommandError, match="executable file not found"):
            run_command(Command("./bin/kind", ("get", "clusters")))
