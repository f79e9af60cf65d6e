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

"""External command execution shared by every pipeline stage."""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import sh
from rich.markup import escape

from virtink_e2e import console, logger
from virtink_e2e.errors import CommandError


@dataclass(frozen=True)
class Command:
    """A single external process invocation.

    Attributes:
        program: Executable name or path.
        args: Arguments passed to the program.
        env: Variables overlaid on the parent environment.
        cwd: Working directory, or None for the current one.
    """

    program: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: Path | None = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def environment(self) -> dict[str, str]:
        """Return the parent environment with the overlay applied."""
        return {**os.environ, **self.env}

    def __str__(self) -> str:
        return shlex.join(self.argv)


def _echo(cmd: Command) -> None:
    console.print(f"[dim]$ {escape(str(cmd))}[/dim]")
    if cmd.env:
        logger.debug("env overlay for %s: %s", cmd.program, dict(cmd.env))


def run_command(cmd: Command) -> None:
    """Run a command with stdin, stdout and stderr attached to ours.

    Args:
        cmd: Command to execute.

    Raises:
        CommandError: If the program is missing or exits non-zero.
    """
    _echo(cmd)
    try:
        program = sh.Command(cmd.program)
        program(
            *cmd.args,
            _env=cmd.environment(),
            _cwd=str(cmd.cwd) if cmd.cwd else None,
            _fg=True,
        )
    except sh.CommandNotFound as err:
        raise CommandError(str(cmd), f"executable file not found: {err}") from err
    except sh.ErrorReturnCode as err:
        raise CommandError(str(cmd), f"exit status {err.exit_code}") from err


def get_command_output(cmd: Command) -> str:
    """Run a command and return its combined stdout and stderr.

    Uses subprocess instead of sh because stdin must stay attached to ours
    while stdout and stderr are interleaved into one captured stream.

    Args:
        cmd: Command to execute.

    Returns:
        The combined output as text.

    Raises:
        CommandError: If the program is missing or exits non-zero. The
            captured output is embedded in the error.
    """
    _echo(cmd)
    try:
        result = subprocess.run(
            cmd.argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            env=cmd.environment(),
            cwd=cmd.cwd,
        )
    except OSError as exc:
        raise CommandError(str(cmd), str(exc)) from exc
    output = result.stdout or ""
    if result.returncode != 0:
        raise CommandError(str(cmd), f"exit status {result.returncode}", output)
    return output
