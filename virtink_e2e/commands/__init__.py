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

"""typer subcommands and their shared fatal-error handling."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from pydantic import ValidationError
from rich.markup import escape

from virtink_e2e import console, logger
from virtink_e2e.config import E2EConfig, resolve_config
from virtink_e2e.errors import StageError


@contextmanager
def fatal_on_stage_error() -> Iterator[None]:
    """Turn a stage failure into a fatal log line and exit status 1."""
    try:
        yield
    except StageError as err:
        logger.critical("%s: %s", err.stage, err)
        console.print(f"[red]\u274c {err.stage}: {escape(str(err))}[/red]")
        raise typer.Exit(code=1) from err


def load_config(cluster_name: str | None = None) -> E2EConfig:
    """Resolve the configuration, reporting invalid settings as a usage error."""
    try:
        return resolve_config(cluster_name)
    except ValidationError as err:
        raise typer.BadParameter(str(err)) from err
