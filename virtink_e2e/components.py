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

"""Calico, cert-manager, CDI, rook-nfs and Virtink deployment."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

from rich.panel import Panel

from virtink_e2e import console
from virtink_e2e.config import DeploymentStep, E2EConfig, Image, ReadinessWait
from virtink_e2e.constants import (
    CALICO_CONTROLLER,
    CDI_OPERATOR,
    CDI_RESOURCE,
    CONDITION_AVAILABLE,
    CONDITION_ESTABLISHED,
    ENV_KUBECONFIG,
    ENV_PATH,
    NFS_SERVER_CRD,
    NS_CDI,
    NS_KUBE_SYSTEM,
    NS_VIRTINK,
    REL_ROOK_NFS_CRDS,
    TOOL_KUBECTL,
    TOOL_SKAFFOLD,
    VIRT_CONTROLLER,
    dep_value,
)
from virtink_e2e.errors import CommandError, DeploymentError
from virtink_e2e.utils import Command, get_command_output, run_command

T = TypeVar("T")


# ============================================================================
# Deployment plan
# ============================================================================

def addon_steps(cfg: E2EConfig) -> list[DeploymentStep]:
    """Return the cluster add-on steps in the order they must be applied.

    Args:
        cfg: E2E configuration with the rook-nfs directory and wait timeouts.

    Returns:
        Ordered list of add-on deployment steps.
    """
    rook_nfs_dir = cfg.resolve(cfg.rook_nfs_dir)
    return [
        DeploymentStep(
            name="calico",
            target=dep_value("calico", "manifest"),
            wait=ReadinessWait(CALICO_CONTROLLER, CONDITION_AVAILABLE, NS_KUBE_SYSTEM,
                               cfg.network_wait_timeout, capture=True),
        ),
        # cert-manager readiness is not gated
        DeploymentStep(name="cert-manager", target=dep_value("cert_manager", "manifest")),
        DeploymentStep(
            name="cdi-operator",
            target=dep_value("cdi", "operator_manifest"),
            wait=ReadinessWait(CDI_OPERATOR, CONDITION_AVAILABLE, NS_CDI, cfg.wait_timeout),
        ),
        DeploymentStep(
            name="cdi-cr",
            target=dep_value("cdi", "cr_manifest"),
            wait=ReadinessWait(CDI_RESOURCE, CONDITION_AVAILABLE, timeout=cfg.wait_timeout),
        ),
        DeploymentStep(
            name="rook-nfs-crds",
            target=str(rook_nfs_dir / REL_ROOK_NFS_CRDS),
            wait=ReadinessWait(NFS_SERVER_CRD, CONDITION_ESTABLISHED),
        ),
        DeploymentStep(name="rook-nfs", target=f"{rook_nfs_dir}{os.sep}"),
    ]


def virtink_step(cfg: E2EConfig, manifest: Path) -> DeploymentStep:
    """Return the step applying the rendered Virtink manifest.

    Args:
        cfg: E2E configuration with the wait timeout.
        manifest: Path of the rendered manifest.
    """
    return DeploymentStep(
        name="virtink",
        target=str(manifest),
        wait=ReadinessWait(VIRT_CONTROLLER, CONDITION_AVAILABLE, NS_VIRTINK, cfg.wait_timeout),
    )


# ============================================================================
# kubectl helpers
# ============================================================================

def kubectl(cfg: E2EConfig, kubeconfig: Path, *args: str) -> Command:
    """Build a kubectl command addressing the cluster behind *kubeconfig*."""
    return Command(
        str(cfg.tool_path(TOOL_KUBECTL)),
        args,
        env={ENV_KUBECONFIG: str(kubeconfig)},
        cwd=cfg.project_dir,
    )


def wait_args(wait: ReadinessWait) -> tuple[str, ...]:
    """Return the ``kubectl wait`` arguments for a readiness gate."""
    args = ["wait"]
    if wait.namespace:
        args += ["-n", wait.namespace]
    args += [wait.resource, "--for", f"condition={wait.condition}"]
    if wait.timeout:
        args += ["--timeout", wait.timeout]
    return tuple(args)


def apply_step(step: DeploymentStep, cfg: E2EConfig, kubeconfig: Path) -> None:
    """Apply one step and block on its readiness gate.

    Args:
        step: Deployment step to execute.
        cfg: E2E configuration with the tool directory.
        kubeconfig: Kubeconfig of the target cluster.

    Raises:
        CommandError: If the apply or the wait fails.
    """
    console.print(f"[yellow]\u2139\ufe0f  Applying {step.name}...[/yellow]")
    run_command(kubectl(cfg, kubeconfig, "apply", "-f", step.target))
    if step.wait is None:
        return

    console.print(f"[yellow]\u2139\ufe0f  Waiting for {step.wait.resource} to be {step.wait.condition}...[/yellow]")
    wait_cmd = kubectl(cfg, kubeconfig, *wait_args(step.wait))
    if step.wait.capture:
        get_command_output(wait_cmd)
    else:
        run_command(wait_cmd)
    console.print(f"[green]\u2713 {step.name} is ready[/green]")


# ============================================================================
# Virtink manifest
# ============================================================================

def render_manifest(cfg: E2EConfig, images: Iterable[Image]) -> Path:
    """Render the Virtink manifest offline with the freshly built image tags.

    Args:
        cfg: E2E configuration with the tool directory and output path.
        images: Built images; those marked for rendering are substituted by tag.

    Returns:
        Path of the rendered manifest.

    Raises:
        CommandError: If skaffold fails.
        OSError: If the output directory cannot be created.
    """
    output = cfg.resolve(cfg.rendered_manifest)
    output.parent.mkdir(parents=True, exist_ok=True)
    tags = ",".join(image.tag for image in images if image.render)

    console.print(f"[yellow]\u2139\ufe0f  Rendering Virtink manifest with images: {tags}[/yellow]")
    search_path = f"{cfg.resolve(cfg.bin_dir)}{os.pathsep}{os.environ.get(ENV_PATH, '')}"
    get_command_output(Command(
        str(cfg.tool_path(TOOL_SKAFFOLD)),
        (
            "render",
            "--offline=true",
            "--default-repo=",
            "--digest-source=tag",
            "--images", tags,
            "--output", str(output),
        ),
        env={ENV_PATH: search_path},
        cwd=cfg.project_dir,
    ))
    return output


def _in_step(name: str, fn: Callable[..., T], *args: Any) -> T:
    try:
        return fn(*args)
    except (CommandError, OSError) as err:
        raise DeploymentError(f"{name}: {err}") from err


def deploy_components(cfg: E2EConfig, kubeconfig: Path, images: Iterable[Image]) -> None:
    """Deploy cluster add-ons and Virtink, strictly in order.

    Nothing is rolled back on failure; the cluster keeps whatever the
    earlier steps applied.

    Args:
        cfg: E2E configuration.
        kubeconfig: Kubeconfig of the target cluster.
        images: Built images to substitute into the Virtink manifest.

    Raises:
        DeploymentError: If any apply, wait or render fails.
    """
    console.print(Panel.fit("Deploying components", style="bold blue"))
    for step in addon_steps(cfg):
        _in_step(step.name, apply_step, step, cfg, kubeconfig)
    manifest = _in_step("render virtink", render_manifest, cfg, images)
    _in_step("virtink", apply_step, virtink_step(cfg, manifest), cfg, kubeconfig)
    console.print("[green]\u2705 Virtink deployed[/green]")
