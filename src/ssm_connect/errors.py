"""Exception hierarchy for aws-ssm-connect.

Errors are raised where they happen and handled once, at the top of the
orchestration in ``app.SsmConnectApp.run``.
"""

from __future__ import annotations


class SsmConnectError(Exception):
    """Base exception for all aws-ssm-connect failures."""


class InventoryFetchError(SsmConnectError):
    """The instance inventory could not be retrieved."""

    def __init__(self, message: str, *, stderr: str = "", returncode: int | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode


class InventoryParseError(SsmConnectError):
    """The inventory payload is not valid JSON or has an unexpected shape."""


class ConfigError(SsmConnectError):
    """The configuration file exists but cannot be read or parsed."""
