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

"""
cli.py - Virtink E2E test harness.

Subcommands:
    run       Full pipeline: tools, images, kind cluster, components, kuttl tests
    tools     Download the pinned tool binaries
    build     Build the images under test
    cluster   Create or delete the kind cluster
    deploy    Deploy add-ons and Virtink onto an existing cluster
    test      Run the kuttl suite

Environment Variables:
    All paths and timeouts can be overridden via E2E_* environment variables:
    - E2E_CLUSTER_NAME (default: virtink-e2e)
    - E2E_BIN_DIR (default: bin)
    - E2E_KUBECONFIG_PATH (default: tmp/virtink-e2e-cluster.kubeconfig)
    - E2E_WAIT_TIMEOUT (default: -1s, waits forever)
    - GOOS / GOARCH (default: detected from the host)
    - And more (see E2EConfig for the full list)

Examples:
    # Full E2E run against a fresh or reused kind cluster
    virtink-e2e run --cluster-name e2e-test

    # Recreate the cluster before running
    virtink-e2e run --cluster-name e2e-test --force-create-cluster

    # Run against an existing cluster
    virtink-e2e run --kubeconfig ~/.kube/config

    # Tear the cluster down
    virtink-e2e cluster delete --cluster-name e2e-test
"""

from __future__ import annotations

import logging

import typer

from virtink_e2e.commands import cluster_cmd, pipeline_cmd

app = typer.Typer(
    help="Virtink E2E test harness.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("run")(pipeline_cmd.run)
app.command("tools")(pipeline_cmd.tools)
app.command("build")(pipeline_cmd.build)
app.command("deploy")(pipeline_cmd.deploy)
app.command("test")(pipeline_cmd.kuttl_test)
app.add_typer(cluster_cmd.app, name="cluster")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
