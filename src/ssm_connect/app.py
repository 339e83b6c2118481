from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TextIO

from rich.console import Console

if __package__ in (None, ""):
    sys.path.append(str(Path(__file__).resolve().parents[1]))
    from ssm_connect.aws_api import (
        AwsCliInventory,
        AwsSdkInventory,
        ProcessRunner,
        SessionLauncher,
    )
    from ssm_connect.config import DEFAULT_CONFIG_PATH, INVENTORY_SOURCES, load_connect_config
    from ssm_connect.errors import ConfigError, InventoryFetchError, InventoryParseError
    from ssm_connect.inventory import parse_inventory
    from ssm_connect.models import InstanceSelected, SelectionCancelled, SelectionInvalid, SessionOutcome
    from ssm_connect.selector import prompt_for_selection
else:
    from .aws_api import (
        AwsCliInventory,
        AwsSdkInventory,
        ProcessRunner,
        SessionLauncher,
    )
    from .config import DEFAULT_CONFIG_PATH, INVENTORY_SOURCES, load_connect_config
    from .errors import ConfigError, InventoryFetchError, InventoryParseError
    from .inventory import parse_inventory
    from .models import InstanceSelected, SelectionCancelled, SelectionInvalid, SessionOutcome
    from .selector import prompt_for_selection

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

BANNER = "--- AWS EC2 Instance Lister (Interactive Selection) ---"
FETCH_FAILURE_HINTS = (
    "Is the 'aws' CLI installed and in your PATH?",
    "Is the specified profile configured for SSO and active (run 'aws sso login')?",
    "Do you have the necessary EC2 permissions and SSM Agent running on the instances?",
)
SESSION_FAILURE_HINTS = (
    "The SSM Plugin is installed for the AWS CLI.",
    "The instance is running and the SSM Agent is healthy.",
    "The instance's IAM role has the necessary SSM permissions (e.g., AmazonSSMManagedInstanceCore).",
)


class InventorySource(Protocol):
    def fetch(self) -> str: ...


class SsmConnectApp:
    def __init__(
        self,
        *,
        profile: str | None = None,
        region: str | None = None,
        inventory: InventorySource | None = None,
        launcher: SessionLauncher | None = None,
        runner: ProcessRunner | None = None,
        console: Console | None = None,
        stdin: TextIO | None = None,
    ) -> None:
        self.profile = profile
        self.region = region
        self.inventory = inventory or AwsCliInventory(profile=profile, region=region, runner=runner)
        self.launcher = launcher or SessionLauncher(profile=profile, region=region, runner=runner)
        self.console = console or Console()
        self.stdin = stdin

    def run(self) -> int:
        self.console.print(BANNER, style="bold")
        if self.profile:
            self.console.print(f"Using AWS Profile: {self.profile}", markup=False)
        else:
            self.console.print("No profile specified. Using the default profile/active environment.")

        try:
            instances = parse_inventory(self.inventory.fetch())
        except InventoryFetchError as error:
            self._report_fetch_failure(error)
            return EXIT_FAILURE
        except InventoryParseError as error:
            self.console.print(f"{error}", style="red", markup=False)
            return EXIT_FAILURE
        except KeyboardInterrupt:
            self.console.print()
            logger.debug("Instance listing interrupted by operator")
            return EXIT_INTERRUPTED

        if not instances:
            self.console.print("\nNo EC2 instances found.")
            return EXIT_OK

        try:
            outcome = prompt_for_selection(instances, self.console, self.stdin)
        except KeyboardInterrupt:
            self.console.print()
            logger.debug("Selection interrupted by operator")
            return EXIT_INTERRUPTED

        match outcome:
            case SelectionCancelled():
                self.console.print("\nExiting program.")
                return EXIT_OK
            case InstanceSelected(instance_id=instance_id):
                return self._start_session(instance_id)
            case SelectionInvalid(message=message):
                self.console.print(f"\nSelection Error: {message}", style="red", markup=False)
        return EXIT_FAILURE

    def _start_session(self, instance_id: str) -> int:
        self.console.print(
            f"\nAttempting to start SSM session for Instance ID: {instance_id}...",
            markup=False,
        )
        outcome = self.launcher.launch(instance_id)
        if outcome.succeeded:
            self.console.print("\nSSM Session terminated successfully.")
            return EXIT_OK

        self._report_session_failure(outcome)
        return session_exit_status(outcome)

    def _report_fetch_failure(self, error: InventoryFetchError) -> None:
        self.console.print(f"Error executing AWS CLI command: {error}", style="red", markup=False)
        if error.stderr:
            self.console.print(f"AWS CLI Error Output:\n{error.stderr}", markup=False)
        self._print_hints("\nPossible issues:", FETCH_FAILURE_HINTS)

    def _report_session_failure(self, outcome: SessionOutcome) -> None:
        self.console.print(f"\nError starting SSM session: {outcome.error}", style="red", markup=False)
        self._print_hints("\nCheck if:", SESSION_FAILURE_HINTS)
        if outcome.returncode is not None:
            self.console.print(f"SSM session terminated with exit code: {outcome.returncode}")

    def _print_hints(self, heading: str, hints: Sequence[str]) -> None:
        self.console.print(heading)
        for number, hint in enumerate(hints, start=1):
            self.console.print(f"{number}. {hint}", markup=False)


def session_exit_status(outcome: SessionOutcome) -> int:
    """Map a failed session to this program's exit status.

    A child killed by signal N reports -N; that becomes the shell convention 128 + N.
    """
    if outcome.returncode is None or outcome.returncode == 0:
        return EXIT_FAILURE
    if outcome.returncode < 0:
        return 128 - outcome.returncode
    return outcome.returncode


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List EC2 instances and open an interactive SSM session to one of them",
    )
    parser.add_argument("--profile", default=None, help="AWS CLI profile name")
    parser.add_argument("--region", default=None, help="AWS region name")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="YAML file with default profile, region, aws binary and inventory source",
    )
    parser.add_argument(
        "--source",
        choices=INVENTORY_SOURCES,
        default=None,
        help="List instances with the AWS CLI (cli) or boto3 (sdk)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def build_app(args: argparse.Namespace) -> SsmConnectApp:
    config = load_connect_config(args.config)
    profile = args.profile or config.profile
    region = args.region or config.region
    source = args.source or config.source

    if source == "sdk":
        inventory: InventorySource = AwsSdkInventory(profile=profile, region=region)
    else:
        inventory = AwsCliInventory(profile=profile, region=region, aws_binary=config.aws_binary)
    logger.debug("Inventory source: %s", source)

    return SsmConnectApp(
        profile=profile,
        region=region,
        inventory=inventory,
        launcher=SessionLauncher(profile=profile, region=region, aws_binary=config.aws_binary),
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        connect_app = build_app(args)
    except ConfigError as error:
        Console().print(f"Configuration Error: {error}", style="red", markup=False)
        return EXIT_FAILURE
    return connect_app.run()


if __name__ == "__main__":
    sys.exit(main())
