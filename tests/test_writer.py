"""Tests for the ExcelWriter facade."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any

import pandas as pd
import pytest
from openpyxl import load_workbook

from conftest import RecordingHandler, read_back
from excel_write_context import ContextState, ExcelWriter
from excel_write_context.config import Settings
from excel_write_context.metadata.descriptors import (
    SheetDescriptor,
    TableDescriptor,
    WorkbookDescriptor,
)
from excel_write_context.utils.exceptions import HookExecutionError, InvalidArgumentError
from excel_write_context.write.handler import SheetWriteHandler


class TestWriteRows:
    """Tests for appending plain rows."""

    def test_rows_written_below_head(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        writer = ExcelWriter(workbook_descriptor, config=config)
        count = writer.write(
            [["Alice", 30], ["Bob", 25]],
            SheetDescriptor(sheet_name="People", head=[["Name"], ["Age"]]),
        )
        writer.finish()

        assert count == 2
        rows = list(read_back(output)["People"].iter_rows(values_only=True))
        assert rows == [("Name", "Age"), ("Alice", 30), ("Bob", 25)]

    def test_repeated_writes_append(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        sheet = SheetDescriptor(head=[["Value"]])
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            writer.write([[1], [2]], sheet)
            writer.write([[3]], sheet)

        values = [row[0] for row in read_back(output).active.iter_rows(values_only=True)]
        assert values == ["Value", 1, 2, 3]

    def test_data_rows_fire_hooks_as_non_head(
        self,
        output: io.BytesIO,
        events: list[tuple[Any, ...]],
        config: Settings,
    ) -> None:
        workbook = WorkbookDescriptor(
            output=output,
            auto_close_stream=False,
            handlers=[RecordingHandler(events)],
            need_head=False,
        )
        with ExcelWriter(workbook, config=config) as writer:
            writer.write([["a", "b"]], SheetDescriptor())

        row_events = [e for e in events if e[1] in ("before_row", "after_row")]
        assert row_events == [
            ("handler", "before_row", 0, False),
            ("handler", "after_row", 0, False),
        ]
        cell_events = [e for e in events if e[1] == "after_cell"]
        assert cell_events == [
            ("handler", "after_cell", 0, 0),
            ("handler", "after_cell", 0, 1),
        ]

    def test_null_data_rejected(
        self, workbook_descriptor: WorkbookDescriptor, config: Settings
    ) -> None:
        writer = ExcelWriter(workbook_descriptor, config=config)
        with pytest.raises(InvalidArgumentError):
            writer.write(None, SheetDescriptor())  # type: ignore[arg-type]
        writer.finish()

    def test_table_rows_follow_table_head(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            sheet = SheetDescriptor(head=[["Sheet"]])
            writer.write([["s1"]], sheet)
            writer.write(
                [["t1", "t2"]],
                sheet,
                TableDescriptor(table_no=1, head=[["Left"], ["Right"]]),
            )

        rows = list(read_back(output).active.iter_rows(values_only=True))
        assert rows == [
            ("Sheet", None),
            ("s1", None),
            ("Left", "Right"),
            ("t1", "t2"),
        ]


class TestWriteDataFrame:
    """Tests for writing pandas DataFrames."""

    def test_columns_become_head(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        frame = pd.DataFrame({"city": ["Oslo", "Lima"], "rank": [1, 2]})
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            assert writer.write(frame, SheetDescriptor(sheet_name="Cities")) == 2

        rows = list(read_back(output)["Cities"].iter_rows(values_only=True))
        assert rows == [("city", "rank"), ("Oslo", 1), ("Lima", 2)]

    def test_declared_head_wins(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        frame = pd.DataFrame({"a": ["x"]})
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            writer.write(frame, SheetDescriptor(head=[["Declared"]]))

        rows = list(read_back(output).active.iter_rows(values_only=True))
        assert rows == [("Declared",), ("x",)]

    def test_existing_sheet_not_given_second_head(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        frame = pd.DataFrame({"n": ["first"]})
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            writer.write(frame, SheetDescriptor())
            writer.write(pd.DataFrame({"n": ["second"]}), SheetDescriptor())

        rows = list(read_back(output).active.iter_rows(values_only=True))
        assert rows == [("n",), ("first",), ("second",)]


class TestLifecycle:
    """Tests for finishing the writer."""

    def test_write_retried_after_sheet_handler_failure(
        self,
        workbook_descriptor: WorkbookDescriptor,
        output: io.BytesIO,
        config: Settings,
    ) -> None:
        class RejectFirstSheet(SheetWriteHandler):
            calls = 0

            def before_sheet_create(self, workbook_holder, sheet_holder) -> None:
                self.calls += 1
                if self.calls == 1:
                    raise RuntimeError("not yet")

        workbook_descriptor.handlers = [RejectFirstSheet()]
        with ExcelWriter(workbook_descriptor, config=config) as writer:
            with pytest.raises(HookExecutionError):
                writer.write([["lost"]], SheetDescriptor(sheet_no=0))
            assert writer.write([["kept"]], SheetDescriptor(sheet_no=0)) == 1

        rows = list(read_back(output).active.iter_rows(values_only=True))
        assert rows == [("kept",)]

    def test_context_manager_writes_file(
        self, tmp_path: Path, config: Settings
    ) -> None:
        target = tmp_path / "report.xlsx"
        with ExcelWriter(WorkbookDescriptor(output=target), config=config) as writer:
            writer.write([["only"]], SheetDescriptor(sheet_name="One"))

        assert writer.context.state is ContextState.CLOSED
        assert load_workbook(target)["One"]["A1"].value == "only"
