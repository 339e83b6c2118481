from __future__ import annotations

import json
import logging
import shlex
import shutil
import signal
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import InventoryFetchError
from .models import SessionOutcome

logger = logging.getLogger(__name__)

DEFAULT_AWS_BINARY = "aws"
INSTANCE_QUERY = (
    "Reservations[*].Instances[*].{"
    "InstanceId:InstanceId,"
    "Name:Tags[?Key==`Name`].Value | [0],"
    "PrivateIpAddress:PrivateIpAddress}"
)


class ProcessRunner(Protocol):
    def run(self, command: Sequence[str], *, capture_output: bool) -> subprocess.CompletedProcess[str]: ...


class SubprocessRunner:
    """Runs commands with ``subprocess.run``.

    Without ``capture_output`` the child inherits this process's stdin, stdout
    and stderr, so an interactive session owns the terminal until it exits.
    SIGINT is ignored here for that time; Ctrl-C belongs to the child.
    """

    def run(self, command: Sequence[str], *, capture_output: bool) -> subprocess.CompletedProcess[str]:
        logger.debug("Running: %s", shlex.join(command))
        if capture_output:
            return subprocess.run(list(command), check=False, capture_output=True, text=True)
        previous_handler = signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            return subprocess.run(list(command), check=False)
        finally:
            signal.signal(signal.SIGINT, previous_handler)


def is_aws_cli_available(aws_binary: str = DEFAULT_AWS_BINARY) -> bool:
    return shutil.which(aws_binary) is not None


def build_describe_instances_command(
    profile: str | None = None,
    region: str | None = None,
    aws_binary: str = DEFAULT_AWS_BINARY,
) -> list[str]:
    return [
        aws_binary,
        "ec2",
        "describe-instances",
        "--query",
        INSTANCE_QUERY,
        "--output",
        "json",
        *_context_flags(profile, region),
    ]


def build_ssm_shell_command(
    instance_id: str,
    profile: str | None = None,
    region: str | None = None,
    aws_binary: str = DEFAULT_AWS_BINARY,
) -> list[str]:
    return [
        aws_binary,
        "ssm",
        "start-session",
        "--target",
        instance_id,
        *_context_flags(profile, region),
    ]


@dataclass(slots=True)
class AwsCliInventory:
    profile: str | None = None
    region: str | None = None
    aws_binary: str = DEFAULT_AWS_BINARY
    runner: ProcessRunner | None = None

    def fetch(self) -> str:
        if not is_aws_cli_available(self.aws_binary):
            raise InventoryFetchError(f"'{self.aws_binary}' executable not found in PATH")

        command = build_describe_instances_command(self.profile, self.region, self.aws_binary)
        runner = self.runner or SubprocessRunner()
        try:
            result = runner.run(command, capture_output=True)
        except OSError as error:
            raise InventoryFetchError(f"Failed to run AWS CLI: {error}") from error

        if result.returncode != 0:
            raise InventoryFetchError(
                f"AWS CLI exited with status {result.returncode}",
                stderr=(result.stderr or "").strip(),
                returncode=result.returncode,
            )
        return result.stdout or ""


class AwsSdkInventory:
    """Runs the same projection through boto3 instead of the AWS CLI."""

    def __init__(self, profile: str | None = None, region: str | None = None) -> None:
        self.profile = profile
        self.region = region

    def fetch(self) -> str:
        try:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
            paginator = session.client("ec2").get_paginator("describe_instances")
            # search() yields each reservation's projected instance list
            reservations = list(paginator.paginate().search(INSTANCE_QUERY))
        except (BotoCoreError, ClientError) as error:
            raise InventoryFetchError(f"EC2 API request failed: {error}", stderr=str(error)) from error
        logger.debug("SDK returned %d reservation(s)", len(reservations))
        return json.dumps(reservations)


@dataclass(slots=True)
class SessionLauncher:
    profile: str | None = None
    region: str | None = None
    aws_binary: str = DEFAULT_AWS_BINARY
    runner: ProcessRunner | None = None

    def launch(self, instance_id: str) -> SessionOutcome:
        command = build_ssm_shell_command(instance_id, self.profile, self.region, self.aws_binary)
        runner = self.runner or SubprocessRunner()
        try:
            result = runner.run(command, capture_output=False)
        except OSError as error:
            logger.debug("Session process for %s could not start: %s", instance_id, error)
            return SessionOutcome(returncode=None, error=str(error))

        if result.returncode != 0:
            return SessionOutcome(
                returncode=result.returncode,
                error=f"session command exited with status {result.returncode}",
            )
        return SessionOutcome(returncode=0)


def _context_flags(profile: str | None, region: str | None) -> list[str]:
    flags: list[str] = []
    if profile:
        flags.extend(["--profile", profile])
    if region:
        flags.extend(["--region", region])
    return flags
