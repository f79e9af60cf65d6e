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

"""Error types raised by the E2E pipeline."""

from __future__ import annotations

from virtink_e2e.constants import (
    STAGE_BUILD,
    STAGE_CLUSTER,
    STAGE_DEPLOY,
    STAGE_TEST,
    STAGE_TOOLS,
)


class CommandError(RuntimeError):
    """An external command could not be run or exited non-zero.

    Attributes:
        cmdline: The full command line that was executed.
        cause: Description of the underlying execution error.
        output: Captured combined output, or None in streaming mode.
    """

    def __init__(self, cmdline: str, cause: str, output: str | None = None) -> None:
        self.cmdline = cmdline
        self.cause = cause
        self.output = output
        message = f"run command {cmdline!r}: {cause}"
        if output:
            message = f"{message}: {output.rstrip()}"
        super().__init__(message)


class StageError(RuntimeError):
    """Base class for failures that abort a pipeline stage."""

    stage = "e2e"


class ProvisioningError(StageError):
    """Fetching or validating a tool binary failed."""

    stage = STAGE_TOOLS


class BuildError(StageError):
    """Building an image under test failed."""

    stage = STAGE_BUILD


class ClusterError(StageError):
    """Listing, creating or deleting the kind cluster failed."""

    stage = STAGE_CLUSTER


class DeploymentError(StageError):
    """Applying a manifest or waiting for readiness failed."""

    stage = STAGE_DEPLOY


class TestFailure(StageError):
    """The kuttl test suite reported failures."""

    __test__ = False
    stage = STAGE_TEST
