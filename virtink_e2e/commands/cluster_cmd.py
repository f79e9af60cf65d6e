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

"""Cluster subcommands (create, delete)."""

from __future__ import annotations

import typer

from virtink_e2e import console
from virtink_e2e.cluster import delete_cluster, ensure_cluster
from virtink_e2e.commands import fatal_on_stage_error, load_config

app = typer.Typer(help="Manage the kind cluster.")


@app.command()
def create(
    cluster_name: str | None = typer.Option(None, "--cluster-name", envvar="CLUSTER_NAME", help="kind cluster name"),
    force: bool = typer.Option(False, "--force", help="Delete and recreate an existing cluster"),
) -> None:
    """Ensure the kind cluster exists and print its kubeconfig path."""
    cfg = load_config(cluster_name)
    with fatal_on_stage_error():
        kubeconfig = ensure_cluster(cfg, force_recreate=force)
    console.print(f"kubeconfig: {kubeconfig}")


@app.command()
def delete(
    cluster_name: str | None = typer.Option(None, "--cluster-name", envvar="CLUSTER_NAME", help="kind cluster name"),
) -> None:
    """Delete the kind cluster."""
    cfg = load_config(cluster_name)
    with fatal_on_stage_error():
        delete_cluster(cfg)
