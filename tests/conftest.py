"""Shared pytest fixtures for virtink-e2e tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Union
from unittest.mock import MagicMock

import pytest

from virtink_e2e.config import E2EConfig
from virtink_e2e.errors import CommandError
from virtink_e2e.utils import Command

Matcher = Callable[[Command], bool]
Response = Union[str, Callable[[Command], str]]


def invokes(tool: str, *args: str) -> Matcher:
    """Match a command whose program is *tool* and whose arguments start with *args*."""
    def _match(cmd: Command) -> bool:
        return Path(cmd.program).name == tool and cmd.args[:len(args)] == args
    return _match


class FakeExecutor:
    """Records commands instead of running them.

    Responses are matched in registration order. A matcher registered with
    several responses hands them out one per call and then keeps repeating
    the last one.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Command]] = []
        self._responses: list[tuple[Matcher, list[Response]]] = []
        self._failures: list[Matcher] = []
        self.fail_at: int | None = None

    def respond(self, match: Matcher, *responses: Response) -> None:
        self._responses.append((match, list(responses)))

    def fail_when(self, match: Matcher) -> None:
        self._failures.append(match)

    def _handle(self, mode: str, cmd: Command) -> str:
        index = len(self.calls)
        self.calls.append((mode, cmd))
        output = "simulated failure" if mode == "output" else None
        if index == self.fail_at or any(match(cmd) for match in self._failures):
            raise CommandError(str(cmd), "exit status 1", output)
        for match, responses in self._responses:
            if match(cmd):
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                return response(cmd) if callable(response) else response
        return ""

    def run_command(self, cmd: Command) -> None:
        self._handle("run", cmd)

    def get_command_output(self, cmd: Command) -> str:
        return self._handle("output", cmd)

    @property
    def commands(self) -> list[Command]:
        return [cmd for _, cmd in self.calls]

    def matching(self, match: Matcher) -> list[Command]:
        return [cmd for cmd in self.commands if match(cmd)]


@pytest.fixture
def executor(monkeypatch) -> FakeExecutor:
    """Replace command execution in every stage module with a FakeExecutor."""
    fake = FakeExecutor()
    for module in ("tools", "cluster", "components"):
        monkeypatch.setattr(f"virtink_e2e.{module}.get_command_output", fake.get_command_output)
    for module in ("images", "components", "kuttl"):
        monkeypatch.setattr(f"virtink_e2e.{module}.run_command", fake.run_command)
    return fake


@pytest.fixture
def docker_client(monkeypatch) -> MagicMock:
    """Replace the Docker SDK client used by the image builder."""
    client = MagicMock()
    client.images.get.return_value.short_id = "sha256:0123456789"
    monkeypatch.setattr("virtink_e2e.images.docker.from_env", lambda: client)
    return client


@pytest.fixture
def cfg(tmp_path) -> E2EConfig:
    """E2E configuration rooted in a temporary project directory."""
    return E2EConfig(
        cluster_name="e2e-test",
        project_dir=tmp_path,
        rendered_manifest=tmp_path / "rendered" / "virtink-e2e.yaml",
        goos="linux",
        goarch="amd64",
    )
