from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import (
    InstanceRecord,
    InstanceSelected,
    SelectionCancelled,
    SelectionInvalid,
    SelectionOutcome,
)

logger = logging.getLogger(__name__)

QUIT_TOKEN = "q"
SELECTION_PROMPT = "Enter the option number to start an SSM Session (or 'q' to quit): "


def render_instance_table(instances: Sequence[InstanceRecord], console: Console) -> None:
    table = Table(
        title="Available EC2 Instances",
        title_justify="left",
        box=box.SIMPLE_HEAD,
        show_edge=False,
        padding=0,
    )
    # 8 + 20 + 30 + 15 plus three separators fits an 80 column terminal
    table.add_column("OPTION", width=8, no_wrap=True)
    table.add_column("INSTANCE ID", width=20, no_wrap=True)
    table.add_column("NAME", width=30, overflow="fold")
    table.add_column("PRIVATE IP", width=15, no_wrap=True)

    for option, instance in enumerate(instances, start=1):
        table.add_row(
            str(option),
            Text(instance.instance_id),
            Text(instance.display_name),
            Text(instance.private_ip or "-"),
        )
    console.print()
    console.print(table)


def parse_selection(raw: str, instances: Sequence[InstanceRecord]) -> SelectionOutcome:
    choice = raw.strip().lower()
    if choice == QUIT_TOKEN:
        return SelectionCancelled()

    digits = choice[1:] if choice[:1] in ("+", "-") else choice
    if not (digits.isascii() and digits.isdigit()):
        return SelectionInvalid(f"invalid input: '{choice}' is not a valid number or '{QUIT_TOKEN}'")
    option = int(choice)

    if option < 1 or option > len(instances):
        return SelectionInvalid(
            f"invalid option number: {option}. Must be between 1 and {len(instances)}"
        )
    return InstanceSelected(instances[option - 1].instance_id)


def prompt_for_selection(
    instances: Sequence[InstanceRecord],
    console: Console,
    stdin: TextIO | None = None,
) -> SelectionOutcome:
    """Show the instance menu and read a single line of input.

    There is no re-prompt: one bad entry yields ``SelectionInvalid``.
    """
    render_instance_table(instances, console)
    try:
        raw = console.input(SELECTION_PROMPT, markup=False, stream=stdin)
    except EOFError:
        return SelectionInvalid("failed to read input: end of input")
    logger.debug("Operator entered %r", raw)
    return parse_selection(raw, instances)
