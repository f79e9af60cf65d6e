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

"""Configuration classes, pipeline data model, and config display."""

from __future__ import annotations

import platform
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from virtink_e2e import console
from virtink_e2e.constants import (
    DEFAULT_BIN_DIR,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_KIND_CONFIG,
    DEFAULT_KUBECONFIG_PATH,
    DEFAULT_KUTTL_CONFIG,
    DEFAULT_NETWORK_WAIT_TIMEOUT,
    DEFAULT_RENDERED_MANIFEST,
    DEFAULT_ROOK_NFS_DIR,
    DEFAULT_VERSION_ARGS,
    DEFAULT_WAIT_TIMEOUT,
    DEPENDENCIES,
    ENV_GOARCH,
    ENV_GOOS,
    GOARCH_BY_MACHINE,
)

_TIMEOUT_PATTERN = r"^-?(\d+(ms|s|m|h))+$"


def detect_goos() -> str:
    """Return the Go OS identifier of the running host."""
    return platform.system().lower()


def detect_goarch() -> str:
    """Return the Go architecture identifier of the running host."""
    machine = platform.machine().lower()
    return GOARCH_BY_MACHINE.get(machine, machine)


# ============================================================================
# Configuration classes
# ============================================================================

class E2EConfig(BaseSettings):
    """E2E pipeline configuration, auto-loaded from E2E_* env vars.

    Relative paths are resolved against ``project_dir``.

    Attributes:
        cluster_name: Name of the kind cluster.
        project_dir: Virtink source tree; build context and base for relative paths.
        bin_dir: Directory holding provisioned tool binaries.
        kubeconfig_path: Where kind writes the kubeconfig of a created cluster.
        kind_config: kind cluster configuration file.
        rook_nfs_dir: Directory with the rook-nfs manifests and CRDs.
        rendered_manifest: Output path for the rendered Virtink manifest.
        kuttl_config: kuttl test-suite configuration file.
        network_wait_timeout: Timeout for the calico controller readiness wait.
        wait_timeout: Timeout for the remaining readiness waits (``-1s`` waits forever).
        goos: Target OS for tool downloads (``GOOS``).
        goarch: Target architecture for tool downloads (``GOARCH``).
    """

    model_config = SettingsConfigDict(env_prefix="E2E_", extra="ignore", populate_by_name=True)

    cluster_name: str = Field(default=DEFAULT_CLUSTER_NAME, min_length=1)
    project_dir: Path = Field(default_factory=Path.cwd)
    bin_dir: Path = Path(DEFAULT_BIN_DIR)
    kubeconfig_path: Path = Path(DEFAULT_KUBECONFIG_PATH)
    kind_config: Path = Path(DEFAULT_KIND_CONFIG)
    rook_nfs_dir: Path = Path(DEFAULT_ROOK_NFS_DIR)
    rendered_manifest: Path = Path(DEFAULT_RENDERED_MANIFEST)
    kuttl_config: Path = Path(DEFAULT_KUTTL_CONFIG)
    network_wait_timeout: str = Field(default=DEFAULT_NETWORK_WAIT_TIMEOUT, pattern=_TIMEOUT_PATTERN)
    wait_timeout: str = Field(default=DEFAULT_WAIT_TIMEOUT, pattern=_TIMEOUT_PATTERN)
    goos: str = Field(default_factory=detect_goos, validation_alias=AliasChoices(ENV_GOOS, "goos"))
    goarch: str = Field(default_factory=detect_goarch, validation_alias=AliasChoices(ENV_GOARCH, "goarch"))

    @field_validator("project_dir")
    @classmethod
    def _absolute_project_dir(cls, value: Path) -> Path:
        # Commands run with cwd=project_dir, so paths built from it must not be relative.
        return value.expanduser().resolve()

    def resolve(self, path: Path) -> Path:
        """Resolve *path* against the project directory unless it is absolute."""
        return path if path.is_absolute() else self.project_dir / path

    def tool_path(self, name: str) -> Path:
        """Return the local binary path of the tool called *name*."""
        return self.resolve(self.bin_dir) / name


# ============================================================================
# Pipeline data model
# ============================================================================

@dataclass(frozen=True)
class Tool:
    """An external binary pinned to a version.

    Attributes:
        name: Binary name inside the tool directory.
        version: Pinned version; must appear in the ``version`` output.
        url: Download URL template with ``$(version)``/``$(GOOS)``/``$(GOARCH)``/``$(ARCH)``.
        version_args: Arguments that make the binary print its version.
    """

    name: str
    version: str
    url: str
    version_args: tuple[str, ...] = DEFAULT_VERSION_ARGS


@dataclass(frozen=True)
class Image:
    """A container image under test.

    Attributes:
        tag: Local tag, also the reference handed to the manifest renderer.
        dockerfile: Dockerfile path relative to the build context.
        build_args: Extra ``KEY=VALUE`` build arguments.
        render: Whether the renderer substitutes this tag into the manifest.
    """

    tag: str
    dockerfile: str
    build_args: tuple[str, ...] = ()
    render: bool = True


@dataclass(frozen=True)
class ReadinessWait:
    """A ``kubectl wait`` readiness gate.

    Attributes:
        resource: Resource reference, e.g. ``deployment/cdi-operator``.
        condition: Condition type to wait for.
        namespace: Namespace of the resource, or None for cluster-scoped.
        timeout: kubectl timeout string, or None for kubectl's default.
        capture: Capture the output instead of streaming it.
    """

    resource: str
    condition: str
    namespace: str | None = None
    timeout: str | None = None
    capture: bool = False


@dataclass(frozen=True)
class DeploymentStep:
    """One ordered ``kubectl apply`` with an optional readiness gate.

    Attributes:
        name: Human readable step name.
        target: URL, file or directory passed to ``kubectl apply -f``.
        wait: Readiness gate to block on after the apply, or None.
    """

    name: str
    target: str
    wait: ReadinessWait | None = None


def load_tools(deps: dict | None = None) -> tuple[Tool, ...]:
    """Build the immutable tool table from dependencies.yaml.

    Args:
        deps: Parsed dependencies mapping, defaults to the packaged file.

    Returns:
        Tuple of pinned tools in declaration order.
    """
    deps = DEPENDENCIES if deps is None else deps
    return tuple(
        Tool(
            name=entry["name"],
            version=str(entry["version"]),
            url=entry["url"],
            version_args=tuple(entry.get("version_args", DEFAULT_VERSION_ARGS)),
        )
        for entry in deps.get("tools", [])
    )


def load_images(deps: dict | None = None) -> tuple[Image, ...]:
    """Build the immutable image table from dependencies.yaml.

    Args:
        deps: Parsed dependencies mapping, defaults to the packaged file.

    Returns:
        Tuple of images in build order.
    """
    deps = DEPENDENCIES if deps is None else deps
    return tuple(
        Image(
            tag=entry["tag"],
            dockerfile=entry["dockerfile"],
            build_args=tuple(entry.get("build_args", ())),
            render=entry.get("render", True),
        )
        for entry in deps.get("images", [])
    )


@dataclass(frozen=True)
class PipelineOptions:
    """Options given on the command line for a full pipeline run.

    Attributes:
        kubeconfig: Existing kubeconfig; cluster provisioning is skipped when set.
        force_create_cluster: Delete and recreate an existing cluster.
        tools: Tool table to provision.
        images: Images to build.
    """

    kubeconfig: Path | None = None
    force_create_cluster: bool = False
    tools: tuple[Tool, ...] = field(default_factory=load_tools)
    images: tuple[Image, ...] = field(default_factory=load_images)


# ============================================================================
# Display
# ============================================================================

def display_config(cfg: E2EConfig, options: PipelineOptions) -> None:
    """Print the resolved configuration of a pipeline run.

    Args:
        cfg: Resolved E2E configuration.
        options: Command line options for this run.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print("[yellow]Cluster:[/yellow]")
    if options.kubeconfig is not None:
        console.print(f"  kubeconfig          : {options.kubeconfig} (provisioning skipped)")
    else:
        console.print(f"  cluster_name        : {cfg.cluster_name}")
        console.print(f"  force_create        : {options.force_create_cluster}")
        console.print(f"  kubeconfig          : {cfg.resolve(cfg.kubeconfig_path)}")
    console.print("[yellow]Tools:[/yellow]")
    console.print(f"  bin_dir             : {cfg.resolve(cfg.bin_dir)}")
    console.print(f"  platform            : {cfg.goos}/{cfg.goarch}")
    for tool in options.tools:
        console.print(f"  {tool.name:<20}: {tool.version}")
    console.print("[yellow]Images:[/yellow]")
    for image in options.images:
        console.print(f"  {image.tag}")
    console.print("[yellow]Deployment:[/yellow]")
    console.print(f"  network_wait_timeout: {cfg.network_wait_timeout}")
    console.print(f"  wait_timeout        : {cfg.wait_timeout}")
    console.print(f"  rendered_manifest   : {cfg.resolve(cfg.rendered_manifest)}")


# ============================================================================
# Config resolution
# ============================================================================

def resolve_config(cluster_name: str | None = None) -> E2EConfig:
    """Merge CLI overrides, environment variables, and defaults.

    Resolution priority: CLI arguments > E2E_* environment variables > defaults.

    Args:
        cluster_name: CLI override for the cluster name, or None.

    Returns:
        The resolved E2E configuration.
    """
    cfg = E2EConfig()
    if cluster_name:
        cfg = cfg.model_copy(update={"cluster_name": cluster_name})
    return cfg
