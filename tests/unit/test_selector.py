"""Unit tests for the numbered instance menu."""

from __future__ import annotations

import io
from typing import Any

import pytest
from rich.console import Console

from ssm_connect.models import (
    InstanceRecord,
    InstanceSelected,
    SelectionCancelled,
    SelectionInvalid,
)
from ssm_connect.selector import (
    SELECTION_PROMPT,
    parse_selection,
    prompt_for_selection,
    render_instance_table,
)


class TestRenderInstanceTable:
    def test_lists_every_instance(
        self, sample_instances: list[InstanceRecord], console: Console, output: Any
    ) -> None:
        render_instance_table(sample_instances, console)
        text = output()

        for header in ("OPTION", "INSTANCE ID", "NAME", "PRIVATE IP"):
            assert header in text
        for instance_id in ("i-1", "i-2", "i-3"):
            assert instance_id in text
        assert "10.0.0.1" in text

    def test_missing_name_renders_placeholder(self, console: Console, output: Any) -> None:
        render_instance_table([InstanceRecord("i-2", None, "10.0.0.2")], console)

        row = next(line for line in output().splitlines() if "i-2" in line)
        assert "N/A" in row

    def test_option_numbers_are_one_based(
        self, sample_instances: list[InstanceRecord], console: Console, output: Any
    ) -> None:
        render_instance_table(sample_instances, console)
        rows = [line.split() for line in output().splitlines() if "i-" in line]

        assert [row[0] for row in rows] == ["1", "2", "3"]
        assert [row[1] for row in rows] == ["i-1", "i-2", "i-3"]

    def test_fits_eighty_columns_without_truncation(self) -> None:
        narrow = Console(file=io.StringIO(), width=80, color_system=None, force_terminal=False)

        render_instance_table(
            [InstanceRecord("i-0123456789abcdef0", "web-server", "255.255.255.255")],
            narrow,
        )
        row = next(line for line in narrow.file.getvalue().splitlines() if "i-0" in line)  # type: ignore[attr-defined]

        assert row.split() == ["1", "i-0123456789abcdef0", "web-server", "255.255.255.255"]
        assert "\u2026" not in narrow.file.getvalue()  # type: ignore[attr-defined]

    def test_long_name_is_folded_not_cut(self, console: Console, output: Any) -> None:
        name = "analytics-warehouse-primary-replica-01"
        render_instance_table([InstanceRecord("i-7", name, "10.0.0.7")], console)

        assert name[:30] in output()
        assert name[30:] in output()

    def test_names_are_not_treated_as_markup(self, console: Console, output: Any) -> None:
        render_instance_table([InstanceRecord("i-9", "[bold]db[/bold]")], console)

        assert "[bold]db[/bold]" in output()


class TestParseSelection:
    @pytest.mark.parametrize("option", [1, 2, 3])
    def test_valid_option_selects_that_position(
        self, sample_instances: list[InstanceRecord], option: int
    ) -> None:
        outcome = parse_selection(f"{option}\n", sample_instances)

        assert outcome == InstanceSelected(sample_instances[option - 1].instance_id)

    @pytest.mark.parametrize("raw", ["q", "Q", " q \n"])
    def test_quit_token(self, sample_instances: list[InstanceRecord], raw: str) -> None:
        assert parse_selection(raw, sample_instances) == SelectionCancelled()

    @pytest.mark.parametrize("raw", ["0", "4", "-1", "99"])
    def test_out_of_range(self, sample_instances: list[InstanceRecord], raw: str) -> None:
        outcome = parse_selection(raw, sample_instances)

        assert isinstance(outcome, SelectionInvalid)
        assert "Must be between 1 and 3" in outcome.message

    @pytest.mark.parametrize(
        "raw", ["", "\n", "abc", "1.5", "quit", "i-1", "1_0", "\u0661", "\uff12", "+", "-", "+-1", " 1 2"]
    )
    def test_non_numeric(self, sample_instances: list[InstanceRecord], raw: str) -> None:
        outcome = parse_selection(raw, sample_instances)

        assert isinstance(outcome, SelectionInvalid)
        assert "not a valid number" in outcome.message

    def test_explicit_plus_sign(self, sample_instances: list[InstanceRecord]) -> None:
        assert parse_selection("+2", sample_instances) == InstanceSelected("i-2")


class TestPromptForSelection:
    def test_reads_one_line(
        self, sample_instances: list[InstanceRecord], console: Console, output: Any
    ) -> None:
        stdin = io.StringIO("2\n3\n")

        outcome = prompt_for_selection(sample_instances, console, stdin)

        assert outcome == InstanceSelected("i-2")
        assert stdin.readline() == "3\n"
        assert SELECTION_PROMPT in output()

    def test_end_of_input_is_invalid(
        self, sample_instances: list[InstanceRecord], console: Console
    ) -> None:
        outcome = prompt_for_selection(sample_instances, console, io.StringIO(""))

        assert isinstance(outcome, SelectionInvalid)

    def test_eof_from_terminal_is_invalid(
        self,
        sample_instances: list[InstanceRecord],
        console: Console,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def raise_eof(*args: Any, **kwargs: Any) -> str:
            raise EOFError

        monkeypatch.setattr(console, "input", raise_eof)

        outcome = prompt_for_selection(sample_instances, console)

        assert outcome == SelectionInvalid("failed to read input: end of input")
