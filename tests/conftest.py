from __future__ import annotations

import io
from typing import Any

import pytest
from openpyxl import load_workbook
from openpyxl.workbook.workbook import Workbook

from excel_write_context.config import Settings
from excel_write_context.metadata.descriptors import WorkbookDescriptor
from excel_write_context.write.handler import (
    CellWriteHandler,
    LegacyWriteHandler,
    RowWriteHandler,
    SheetWriteHandler,
    WorkbookWriteHandler,
)


class RecordingHandler(
    WorkbookWriteHandler, SheetWriteHandler, RowWriteHandler, CellWriteHandler
):
    """Handler implementing every capability, recording each call in order."""

    def __init__(self, events: list[tuple[Any, ...]], name: str = "handler") -> None:
        self.events = events
        self.name = name

    def before_workbook_create(self) -> None:
        self.events.append((self.name, "before_workbook"))

    def after_workbook_create(self, workbook_holder: Any) -> None:
        self.events.append((self.name, "after_workbook"))

    def before_sheet_create(self, workbook_holder: Any, sheet_holder: Any) -> None:
        self.events.append((self.name, "before_sheet", sheet_holder.sheet_no))

    def after_sheet_create(self, workbook_holder: Any, sheet_holder: Any) -> None:
        self.events.append((self.name, "after_sheet", sheet_holder.sheet_no))

    def before_row_create(
        self,
        sheet_holder: Any,
        table_holder: Any,
        row_index: int,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self.events.append((self.name, "before_row", row_index, is_head))

    def after_row_create(
        self,
        sheet_holder: Any,
        table_holder: Any,
        row: Any,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self.events.append((self.name, "after_row", row.row_index, is_head))

    def before_cell_create(
        self,
        sheet_holder: Any,
        table_holder: Any,
        row: Any,
        head: Any,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        column = head.column_index if head is not None else None
        self.events.append((self.name, "before_cell", row.row_index, column))

    def after_cell_create(
        self,
        sheet_holder: Any,
        table_holder: Any,
        cell: Any,
        head: Any,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self.events.append((self.name, "after_cell", cell.row - 1, cell.column - 1))


class RecordingLegacyHandler(LegacyWriteHandler):
    def __init__(self, events: list[tuple[Any, ...]]) -> None:
        self.events = events

    def sheet(self, sheet_no: int, sheet: Any) -> None:
        self.events.append(("legacy", "sheet", sheet_no))

    def row(self, row_index: int, row: Any) -> None:
        self.events.append(("legacy", "row", row_index))

    def cell(self, row_index: int, cell: Any) -> None:
        self.events.append(("legacy", "cell", row_index))


@pytest.fixture
def config() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def events() -> list[tuple[Any, ...]]:
    return []


@pytest.fixture
def output() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def workbook_descriptor(output: io.BytesIO) -> WorkbookDescriptor:
    """Workbook written to memory; the stream stays open for reading back."""
    return WorkbookDescriptor(output=output, auto_close_stream=False)


def read_back(output: io.BytesIO) -> Workbook:
    output.seek(0)
    return load_workbook(output)
