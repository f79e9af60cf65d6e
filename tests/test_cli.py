"""Tests for the typer command line."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from virtink_e2e.cli import app
from virtink_e2e.errors import DeploymentError

runner = CliRunner()


@pytest.fixture
def pipeline():
    with patch("virtink_e2e.commands.pipeline_cmd.run_pipeline") as mock_run:
        yield mock_run


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CLUSTER_NAME", "E2E_CLUSTER_NAME", "E2E_KUBECONFIG", "FORCE_CREATE_CLUSTER"):
        monkeypatch.delenv(name, raising=False)


class TestRunCommand:
    """Test the run subcommand."""

    def test_success_exits_zero(self, pipeline):
        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        cfg, options = pipeline.call_args.args
        assert cfg.cluster_name == "virtink-e2e"
        assert options.kubeconfig is None
        assert options.force_create_cluster is False

    def test_stage_failure_exits_one(self, pipeline):
        pipeline.side_effect = DeploymentError("calico: run command 'kubectl wait': exit status 1")

        result = runner.invoke(app, ["run", "--cluster-name", "e2e-test"])

        assert result.exit_code == 1

    def test_flags_reach_pipeline(self, pipeline, tmp_path):
        kubeconfig = tmp_path / "kubeconfig"

        result = runner.invoke(app, [
            "run", "--cluster-name", "e2e-test", "--kubeconfig", str(kubeconfig), "--force-create-cluster",
        ])

        assert result.exit_code == 0
        cfg, options = pipeline.call_args.args
        assert cfg.cluster_name == "e2e-test"
        assert options.kubeconfig == kubeconfig.resolve()
        assert options.force_create_cluster is True

    def test_flags_from_environment(self, pipeline):
        result = runner.invoke(app, ["run"], env={
            "CLUSTER_NAME": "from-env",
            "E2E_KUBECONFIG": "/tmp/cluster.kubeconfig",
        })

        assert result.exit_code == 0
        cfg, options = pipeline.call_args.args
        assert cfg.cluster_name == "from-env"
        assert options.kubeconfig == Path("/tmp/cluster.kubeconfig").resolve()

    def test_relative_kubeconfig_is_resolved(self, pipeline, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["run", "--kubeconfig", "kc"])

        assert result.exit_code == 0
        _, options = pipeline.call_args.args
        assert options.kubeconfig.is_absolute()
        assert options.kubeconfig == tmp_path.resolve() / "kc"

    def test_invalid_setting_is_a_usage_error(self, pipeline):
        result = runner.invoke(app, ["run"], env={"E2E_WAIT_TIMEOUT": "forever"})

        assert result.exit_code == 2
        pipeline.assert_not_called()


class TestSubcommands:
    """Test the single-stage subcommands."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "run" in result.output
        assert "cluster" in result.output

    def test_test_requires_kubeconfig(self):
        result = runner.invoke(app, ["test"])
        assert result.exit_code == 2

    def test_cluster_create_forwards_force(self, tmp_path):
        with patch("virtink_e2e.commands.cluster_cmd.ensure_cluster", return_value=tmp_path / "kc") as ensure:
            result = runner.invoke(app, ["cluster", "create", "--cluster-name", "e2e-test", "--force"])

        assert result.exit_code == 0
        cfg = ensure.call_args.args[0]
        assert cfg.cluster_name == "e2e-test"
        assert ensure.call_args.kwargs == {"force_recreate": True}
