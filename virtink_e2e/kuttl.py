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

"""kuttl test-suite execution."""

from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from virtink_e2e import console
from virtink_e2e.config import E2EConfig
from virtink_e2e.constants import ENV_KUBECONFIG, TOOL_KUTTL
from virtink_e2e.errors import CommandError, TestFailure
from virtink_e2e.utils import Command, run_command


def run_test_cases(cfg: E2EConfig, kubeconfig: Path) -> None:
    """Run the kuttl suite against the cluster, streaming its output.

    Args:
        cfg: E2E configuration with the tool directory and suite config.
        kubeconfig: Kubeconfig of the cluster under test.

    Raises:
        TestFailure: If kuttl exits non-zero.
    """
    console.print(Panel.fit("Running kuttl tests", style="bold blue"))
    cmd = Command(
        str(cfg.tool_path(TOOL_KUTTL)),
        ("test", "--config", str(cfg.resolve(cfg.kuttl_config))),
        env={ENV_KUBECONFIG: str(kubeconfig)},
        cwd=cfg.project_dir,
    )
    try:
        run_command(cmd)
    except CommandError as err:
        raise TestFailure(str(err)) from err
    console.print("[green]\u2705 All kuttl tests passed[/green]")
