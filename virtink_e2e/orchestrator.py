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

"""Orchestration of the E2E stages into one linear pipeline."""

from __future__ import annotations

from pathlib import Path

from virtink_e2e import logger
from virtink_e2e.cluster import ensure_cluster
from virtink_e2e.components import deploy_components
from virtink_e2e.config import E2EConfig, PipelineOptions
from virtink_e2e.images import build_images
from virtink_e2e.kuttl import run_test_cases
from virtink_e2e.tools import provision_tools


def resolve_kubeconfig(cfg: E2EConfig, options: PipelineOptions) -> Path:
    """Return the kubeconfig to deploy against.

    A kubeconfig given on the command line skips cluster provisioning.

    Args:
        cfg: E2E configuration with the cluster name.
        options: Command line options.

    Raises:
        ClusterError: If the cluster cannot be listed or created.
    """
    if options.kubeconfig is not None:
        logger.info("Using kubeconfig %s, skipping cluster provisioning", options.kubeconfig)
        return options.kubeconfig
    return ensure_cluster(cfg, force_recreate=options.force_create_cluster)


def run(cfg: E2EConfig, options: PipelineOptions) -> None:
    """Run tools, build, cluster, deploy and test, stopping at the first failure.

    Args:
        cfg: E2E configuration.
        options: Command line options for this run.

    Raises:
        StageError: The error of the first stage that failed.
    """
    provision_tools(options.tools, cfg)
    build_images(options.images, cfg)
    kubeconfig = resolve_kubeconfig(cfg, options)
    deploy_components(cfg, kubeconfig, options.images)
    run_test_cases(cfg, kubeconfig)
