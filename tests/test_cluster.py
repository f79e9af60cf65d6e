"""Tests for the kind cluster lifecycle."""

from __future__ import annotations

import pytest

from conftest import invokes
from virtink_e2e.cluster import ensure_cluster
from virtink_e2e.errors import ClusterError


class TestEnsureCluster:
    """Test reuse, creation and forced recreation of the cluster."""

    def test_existing_cluster_is_reused(self, cfg, executor):
        executor.respond(invokes("kind", "get", "clusters"), "kind\ne2e-test\n")

        kubeconfig = ensure_cluster(cfg)

        assert kubeconfig == cfg.project_dir / "tmp" / "virtink-e2e-cluster.kubeconfig"
        assert executor.matching(invokes("kind", "create")) == []
        assert executor.matching(invokes("kind", "delete")) == []

    @pytest.mark.parametrize("listing", [
        "No kind clusters found.\n",
        "",
        "e2e-test-old\nmy-e2e-test\n",
    ])
    def test_absent_cluster_is_created_once(self, cfg, executor, listing):
        executor.respond(invokes("kind", "get", "clusters"), listing)

        kubeconfig = ensure_cluster(cfg)

        creates = executor.matching(invokes("kind", "create", "cluster"))
        assert len(creates) == 1
        assert creates[0].args == (
            "create", "cluster",
            "--config", str(cfg.project_dir / "test/e2e/config/kind/config.yaml"),
            "--name", "e2e-test",
            "--kubeconfig", str(kubeconfig),
        )
        assert kubeconfig.parent.is_dir()

    def test_force_recreate_deletes_first(self, cfg, executor):
        executor.respond(invokes("kind", "get", "clusters"), "e2e-test\n")

        ensure_cluster(cfg, force_recreate=True)

        assert [cmd.args[:2] for cmd in executor.commands] == [
            ("get", "clusters"),
            ("delete", "cluster"),
            ("create", "cluster"),
        ]
        assert executor.commands[1].args == ("delete", "cluster", "--name", "e2e-test")

    def test_force_recreate_of_absent_cluster_only_creates(self, cfg, executor):
        ensure_cluster(cfg, force_recreate=True)
        assert executor.matching(invokes("kind", "delete")) == []
        assert len(executor.matching(invokes("kind", "create"))) == 1

    def test_list_failure(self, cfg, executor):
        executor.fail_when(invokes("kind", "get", "clusters"))

        with pytest.raises(ClusterError, match="list clusters") as exc_info:
            ensure_cluster(cfg)
        assert exc_info.value.stage == "create kind cluster"
        assert executor.matching(invokes("kind", "create")) == []

    def test_create_failure_carries_output(self, cfg, executor):
        executor.fail_when(invokes("kind", "create"))

        with pytest.raises(ClusterError, match="simulated failure"):
            ensure_cluster(cfg)
