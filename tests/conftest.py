"""Shared pytest fixtures for aws-ssm-connect.

Provides a sample reservation payload, parsed instance records, an
in-memory rich console and a fake process runner so that no test ever
spawns a real ``aws`` process.
"""

from __future__ import annotations

import io
import json
import subprocess
from collections.abc import Sequence
from typing import Any

import pytest
from rich.console import Console

from ssm_connect.models import InstanceRecord

# ---------------------------------------------------------------------------
# Process runner double
# ---------------------------------------------------------------------------


class FakeRunner:
    """Records commands and replays a canned result or error."""

    def __init__(
        self,
        *,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        error: Exception | None = None,
    ) -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.calls: list[tuple[list[str], bool]] = []

    def run(self, command: Sequence[str], *, capture_output: bool) -> subprocess.CompletedProcess[str]:
        self.calls.append((list(command), capture_output))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(
            args=list(command),
            returncode=self.returncode,
            stdout=self.stdout if capture_output else None,
            stderr=self.stderr if capture_output else None,
        )


@pytest.fixture
def fake_runner_factory() -> Any:
    return FakeRunner


# ---------------------------------------------------------------------------
# Inventory data
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_reservations() -> list[list[dict[str, Any]]]:
    """Two reservations, the second holding two instances, one unnamed."""
    return [
        [{"InstanceId": "i-1", "Name": "web", "PrivateIpAddress": "10.0.0.1"}],
        [
            {"InstanceId": "i-2", "PrivateIpAddress": "10.0.0.2"},
            {"InstanceId": "i-3", "Name": None, "PrivateIpAddress": None},
        ],
    ]


@pytest.fixture
def sample_payload(sample_reservations: list[list[dict[str, Any]]]) -> str:
    return json.dumps(sample_reservations)


@pytest.fixture
def sample_instances() -> list[InstanceRecord]:
    return [
        InstanceRecord("i-1", "web", "10.0.0.1"),
        InstanceRecord("i-2", None, "10.0.0.2"),
        InstanceRecord("i-3", None, None),
    ]


# ---------------------------------------------------------------------------
# Terminal
# ---------------------------------------------------------------------------


@pytest.fixture
def console() -> Console:
    """A rich console that renders plain text into memory."""
    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False)


def console_text(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def output(console: Console) -> Any:
    return lambda: console_text(console)
