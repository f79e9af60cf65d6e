# /*
# Copyright 2026 The Virtink Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""kind cluster lifecycle."""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from virtink_e2e import console, logger
from virtink_e2e.config import E2EConfig
from virtink_e2e.constants import TOOL_KIND
from virtink_e2e.errors import ClusterError, CommandError
from virtink_e2e.utils import Command, get_command_output


def _kind(cfg: E2EConfig, *args: str) -> Command:
    return Command(str(cfg.tool_path(TOOL_KIND)), args, cwd=cfg.project_dir)


def list_clusters(cfg: E2EConfig) -> list[str]:
    """Return the names of the kind clusters on this host.

    Args:
        cfg: E2E configuration with the tool directory.

    Raises:
        CommandError: If ``kind get clusters`` fails.
    """
    output = get_command_output(_kind(cfg, "get", "clusters"))
    return [line.strip() for line in output.splitlines() if line.strip()]


def delete_cluster(cfg: E2EConfig) -> None:
    """Delete the kind cluster.

    Args:
        cfg: E2E configuration with the cluster name.

    Raises:
        ClusterError: If kind fails to delete the cluster.
    """
    console.print(f"[yellow]\u2139\ufe0f  Deleting kind cluster '{cfg.cluster_name}'...[/yellow]")
    try:
        get_command_output(_kind(cfg, "delete", "cluster", "--name", cfg.cluster_name))
    except CommandError as err:
        raise ClusterError(f"delete cluster {cfg.cluster_name}: {err}") from err
    console.print(f"[green]\u2705 Cluster '{cfg.cluster_name}' deleted[/green]")


def create_cluster(cfg: E2EConfig) -> Path:
    """Create the kind cluster from the fixed kind configuration.

    Args:
        cfg: E2E configuration with the cluster name and paths.

    Returns:
        Path of the kubeconfig written by kind.

    Raises:
        ClusterError: If kind fails to create the cluster.
    """
    kubeconfig = cfg.resolve(cfg.kubeconfig_path)
    try:
        kubeconfig.parent.mkdir(parents=True, exist_ok=True)
        get_command_output(_kind(
            cfg,
            "create", "cluster",
            "--config", str(cfg.resolve(cfg.kind_config)),
            "--name", cfg.cluster_name,
            "--kubeconfig", str(kubeconfig),
        ))
    except (OSError, CommandError) as err:
        raise ClusterError(f"create cluster {cfg.cluster_name}: {err}") from err
    console.print(f"[green]\u2705 Cluster '{cfg.cluster_name}' created[/green]")
    return kubeconfig


def ensure_cluster(cfg: E2EConfig, force_recreate: bool = False) -> Path:
    """Return a kubeconfig for the named cluster, creating the cluster if needed.

    An existing cluster is reused as-is without any health check unless
    *force_recreate* is set, in which case it is deleted and created again.

    Args:
        cfg: E2E configuration with the cluster name and paths.
        force_recreate: Delete and recreate an existing cluster.

    Returns:
        Path of the cluster's kubeconfig.

    Raises:
        ClusterError: If listing, deleting or creating the cluster fails.
    """
    console.print(Panel.fit(f"Ensuring kind cluster '{cfg.cluster_name}'", style="bold blue"))
    try:
        exists = cfg.cluster_name in list_clusters(cfg)
    except CommandError as err:
        raise ClusterError(f"list clusters: {err}") from err

    if exists and not force_recreate:
        kubeconfig = cfg.resolve(cfg.kubeconfig_path)
        if not kubeconfig.exists():
            logger.warning("cluster %s exists but %s is missing", cfg.cluster_name, kubeconfig)
        console.print(f"[green]\u2713 Reusing existing cluster '{cfg.cluster_name}'[/green]")
        return kubeconfig

    if exists:
        delete_cluster(cfg)
    return create_cluster(cfg)
