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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# -- Resolved paths --
PACKAGE_DIR = Path(__file__).resolve().parent
DEPENDENCIES_FILE = PACKAGE_DIR / "dependencies.yaml"


def load_dependencies(path: Path = DEPENDENCIES_FILE) -> dict:
    """Load pinned tools, images and add-on manifests from dependencies.yaml.

    Args:
        path: YAML file to load, defaults to the packaged dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    with open(path) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- URL template placeholders --
PLACEHOLDER_VERSION = "$(version)"
PLACEHOLDER_GOOS = "$(GOOS)"
PLACEHOLDER_GOARCH = "$(GOARCH)"
PLACEHOLDER_ARCH = "$(ARCH)"

# uname-style names for the Go architecture identifiers
UNAME_ARCH = {
    "amd64": "x86_64",
    "arm64": "arm64",
    "386": "i386",
}

# platform.machine() values mapped back to Go architecture identifiers
GOARCH_BY_MACHINE = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}

# -- Environment variables --
ENV_KUBECONFIG = "KUBECONFIG"
ENV_PATH = "PATH"
ENV_GOOS = "GOOS"
ENV_GOARCH = "GOARCH"

# -- External programs --
PROG_CURL = "curl"
PROG_DOCKER = "docker"
TOOL_KIND = "kind"
TOOL_SKAFFOLD = "skaffold"
TOOL_KUTTL = "kuttl"
TOOL_KUBECTL = "kubectl"
DEFAULT_VERSION_ARGS = ("version",)

# -- Namespaces --
NS_KUBE_SYSTEM = "kube-system"
NS_CDI = "cdi"
NS_VIRTINK = "virtink-system"

# -- Readiness targets --
CALICO_CONTROLLER = "deployment/calico-kube-controllers"
CDI_OPERATOR = "deployment/cdi-operator"
CDI_RESOURCE = "cdi.cdi.kubevirt.io/cdi"
NFS_SERVER_CRD = "crd/nfsservers.nfs.rook.io"
VIRT_CONTROLLER = "deployment/virt-controller"
CONDITION_AVAILABLE = "Available"
CONDITION_ESTABLISHED = "Established"

# -- Relative paths --
REL_ROOK_NFS_CRDS = "crds.yaml"

# -- Defaults --
DEFAULT_CLUSTER_NAME = "virtink-e2e"
DEFAULT_BIN_DIR = "bin"
DEFAULT_KUBECONFIG_PATH = "tmp/virtink-e2e-cluster.kubeconfig"
DEFAULT_KIND_CONFIG = "test/e2e/config/kind/config.yaml"
DEFAULT_ROOK_NFS_DIR = "test/e2e/config/rook-nfs"
DEFAULT_RENDERED_MANIFEST = "/tmp/virtink-e2e.yaml"
DEFAULT_KUTTL_CONFIG = "test/e2e/kuttl-test.yaml"
DEFAULT_NETWORK_WAIT_TIMEOUT = "60s"
DEFAULT_WAIT_TIMEOUT = "-1s"

# -- Stage names --
STAGE_TOOLS = "install tools"
STAGE_BUILD = "build images"
STAGE_CLUSTER = "create kind cluster"
STAGE_DEPLOY = "deploy components"
STAGE_TEST = "kuttl test"
