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

"""Download and version pinning of the kind, skaffold, kuttl and kubectl binaries."""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from rich.panel import Panel

from virtink_e2e import console, logger
from virtink_e2e.config import E2EConfig, Tool
from virtink_e2e.constants import (
    PLACEHOLDER_ARCH,
    PLACEHOLDER_GOARCH,
    PLACEHOLDER_GOOS,
    PLACEHOLDER_VERSION,
    PROG_CURL,
    UNAME_ARCH,
)
from virtink_e2e.errors import CommandError, ProvisioningError
from virtink_e2e.utils import Command, get_command_output


def tool_download_url(tool: Tool, goos: str, goarch: str) -> str:
    """Substitute version and platform into the tool's URL template.

    Args:
        tool: Tool whose URL template is expanded.
        goos: Go OS identifier (e.g. ``linux``).
        goarch: Go architecture identifier (e.g. ``amd64``).

    Returns:
        The concrete download URL.
    """
    replacements = {
        PLACEHOLDER_VERSION: tool.version,
        PLACEHOLDER_GOOS: goos,
        PLACEHOLDER_GOARCH: goarch,
        PLACEHOLDER_ARCH: UNAME_ARCH.get(goarch, goarch),
    }
    url = tool.url
    for placeholder, value in replacements.items():
        url = url.replace(placeholder, value)
    return url


def is_tool_installed(tool: Tool, binary: Path) -> bool:
    """Check that *binary* exists and reports the pinned version.

    A binary that cannot be run counts as not installed.

    Args:
        tool: Tool with the pinned version and version arguments.
        binary: Local path of the binary.

    Returns:
        True if the binary's version output contains ``tool.version``.

    Raises:
        ProvisioningError: If the binary path cannot be inspected.
    """
    try:
        if not binary.is_file():
            return False
    except OSError as err:
        raise ProvisioningError(f"stat {binary}: {err}") from err

    try:
        output = get_command_output(Command(str(binary), tool.version_args))
    except CommandError as err:
        logger.warning("%s is not usable, reinstalling: %s", binary, err)
        return False
    return tool.version in output


def _remove_stale(binary: Path) -> None:
    if binary.is_dir() and not binary.is_symlink():
        shutil.rmtree(binary)
    else:
        binary.unlink(missing_ok=True)


def install_tool(tool: Tool, cfg: E2EConfig) -> Path:
    """Ensure the pinned version of *tool* is present in the tool directory.

    Args:
        tool: Tool to provision.
        cfg: E2E configuration with the tool directory and target platform.

    Returns:
        Path of the provisioned binary.

    Raises:
        ProvisioningError: If any filesystem, download or version check fails.
    """
    binary = cfg.tool_path(tool.name)
    if is_tool_installed(tool, binary):
        console.print(f"[green]\u2713 {tool.name} {tool.version} already installed[/green]")
        return binary

    url = tool_download_url(tool, cfg.goos, cfg.goarch)
    console.print(f"[yellow]\u2139\ufe0f  Installing {tool.name} {tool.version}...[/yellow]")
    try:
        binary.parent.mkdir(parents=True, exist_ok=True)
        _remove_stale(binary)
    except OSError as err:
        raise ProvisioningError(f"prepare {binary}: {err}") from err

    try:
        get_command_output(Command(PROG_CURL, ("-sSfLo", str(binary), url)))
    except CommandError as err:
        raise ProvisioningError(f"download {tool.name} {tool.version}: {err}") from err

    try:
        binary.chmod(binary.stat().st_mode | 0o755)
    except OSError as err:
        raise ProvisioningError(f"chmod {binary}: {err}") from err

    if not is_tool_installed(tool, binary):
        raise ProvisioningError(
            f"{tool.name} downloaded from {url} does not report version {tool.version}"
        )
    console.print(f"[green]\u2713 {tool.name} {tool.version} installed to {binary}[/green]")
    return binary


def provision_tools(tools: Iterable[Tool], cfg: E2EConfig) -> dict[str, Path]:
    """Provision every tool, stopping at the first failure.

    Args:
        tools: Pinned tools to provision.
        cfg: E2E configuration with the tool directory and target platform.

    Returns:
        Mapping of tool name to binary path.

    Raises:
        ProvisioningError: If any tool cannot be provisioned.
    """
    console.print(Panel.fit("Installing tools", style="bold blue"))
    binaries = {tool.name: install_tool(tool, cfg) for tool in tools}
    console.print(f"[green]\u2705 {len(binaries)} tools ready[/green]")
    return binaries
