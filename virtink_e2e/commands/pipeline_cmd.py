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

"""Pipeline subcommands (run, tools, build, deploy, test)."""

from __future__ import annotations

from pathlib import Path

import typer

from virtink_e2e import console
from virtink_e2e.commands import fatal_on_stage_error, load_config
from virtink_e2e.components import deploy_components
from virtink_e2e.config import PipelineOptions, display_config, load_images, load_tools
from virtink_e2e.images import build_images
from virtink_e2e.kuttl import run_test_cases
from virtink_e2e.orchestrator import run as run_pipeline
from virtink_e2e.tools import provision_tools


def run(
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", envvar="CLUSTER_NAME", help="KinD cluster name for running E2E tests"),
    kubeconfig: Path | None = typer.Option(
        None, "--kubeconfig", envvar="E2E_KUBECONFIG", resolve_path=True,
        help="kubeconfig of cluster for running E2E tests (skips cluster provisioning)"),
    force_create_cluster: bool = typer.Option(
        False, "--force-create-cluster", envvar="FORCE_CREATE_CLUSTER",
        help="Delete and recreate the kind cluster if it already exists"),
) -> None:
    """Full E2E run: tools + images + cluster + components + kuttl tests."""
    cfg = load_config(cluster_name)
    options = PipelineOptions(kubeconfig=kubeconfig, force_create_cluster=force_create_cluster)
    display_config(cfg, options)
    with fatal_on_stage_error():
        run_pipeline(cfg, options)
    console.print("[green]\u2705 E2E tests passed[/green]")


def tools() -> None:
    """Download the pinned kind, skaffold, kuttl and kubectl binaries."""
    cfg = load_config()
    with fatal_on_stage_error():
        provision_tools(load_tools(), cfg)


def build() -> None:
    """Build the images under test into the local Docker image store."""
    cfg = load_config()
    with fatal_on_stage_error():
        build_images(load_images(), cfg)


def deploy(
    kubeconfig: Path = typer.Option(
        ..., "--kubeconfig", envvar="E2E_KUBECONFIG", resolve_path=True, help="kubeconfig of the target cluster"),
) -> None:
    """Deploy add-ons and Virtink onto an existing cluster."""
    cfg = load_config()
    with fatal_on_stage_error():
        deploy_components(cfg, kubeconfig, load_images())


def kuttl_test(
    kubeconfig: Path = typer.Option(
        ..., "--kubeconfig", envvar="E2E_KUBECONFIG", resolve_path=True, help="kubeconfig of the target cluster"),
) -> None:
    """Run the kuttl suite against a cluster with Virtink deployed."""
    cfg = load_config()
    with fatal_on_stage_error():
        run_test_cases(cfg, kubeconfig)
