"""High level writer that appends data rows through a write context."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

import pandas as pd

from excel_write_context.backend import DocumentBackend
from excel_write_context.config import Settings
from excel_write_context.context import WriteContext
from excel_write_context.metadata.descriptors import (
    SheetDescriptor,
    TableDescriptor,
    WorkbookDescriptor,
)
from excel_write_context.utils.exceptions import InvalidArgumentError
from excel_write_context.utils.logging import get_logger

logger = get_logger(__name__)

Rows = Iterable[Sequence[Any]]


class ExcelWriter:
    """Write rows of values into sheets and tables of one workbook.

    Usage:
        with ExcelWriter(WorkbookDescriptor(output="report.xlsx")) as writer:
            writer.write([["Alice", 30]], SheetDescriptor(head=[["Name"], ["Age"]]))
    """

    def __init__(
        self,
        workbook: WorkbookDescriptor,
        backend: DocumentBackend | None = None,
        config: Settings | None = None,
    ) -> None:
        self._context = WriteContext.create(workbook, backend=backend, config=config)

    @property
    def context(self) -> WriteContext:
        return self._context

    def write(
        self,
        data: Rows | pd.DataFrame,
        sheet: SheetDescriptor,
        table: TableDescriptor | None = None,
    ) -> int:
        """Append ``data`` below the last written row of the sheet.

        A DataFrame contributes its rows; when neither the scope nor its
        parents declare a head, its column labels become the head of the
        sheet (or table) created by this call.

        Returns:
            The number of data rows written.
        """
        if data is None:
            raise InvalidArgumentError("Data argument cannot be null", argument="data")

        if isinstance(data, pd.DataFrame):
            head = [[str(column)] for column in data.columns]
            sheet, table = _with_default_head(self._context, sheet, table, head)
            rows: Rows = data.itertuples(index=False, name=None)
        else:
            rows = data

        self._context.enter_sheet(sheet)
        self._context.enter_table(table)
        return self._write_rows(rows)

    def finish(self) -> None:
        self._context.finish()

    def _write_rows(self, rows: Rows) -> int:
        context = self._context
        scope = context.active_scope()
        holder = scope.table_holder or scope.sheet_holder
        heads = holder.head_property.head_list

        start_row = context.backend.last_row_index(scope.sheet) + 1
        count = 0
        for relative_row_index, values in enumerate(rows):
            context.emitter.emit_row(
                scope,
                row_index=start_row + relative_row_index,
                relative_row_index=relative_row_index,
                values=list(values),
                heads=heads,
                is_head=False,
            )
            count += 1
        logger.debug("Rows written", rows=count, start_row=start_row)
        return count

    def __enter__(self) -> ExcelWriter:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self._context.__exit__(exc_type, exc, tb)


def _with_default_head(
    context: WriteContext,
    sheet: SheetDescriptor,
    table: TableDescriptor | None,
    head: list[list[str]],
) -> tuple[SheetDescriptor, TableDescriptor | None]:
    """Give the scope this call creates ``head`` when nothing declares one."""
    workbook_holder = context.current_workbook_holder()
    sheet_no = sheet.sheet_no if sheet.sheet_no and sheet.sheet_no > 0 else 0
    sheet_holder = workbook_holder.has_been_initialized_sheet.get(sheet_no)
    if sheet_holder is not None:
        sheet_head = sheet_holder.head
    else:
        sheet_head = sheet.head if sheet.head is not None else workbook_holder.head

    if table is None:
        if sheet_holder is None and sheet_head is None:
            return replace(sheet, head=head), None
        return sheet, None
    if table.head is None and sheet_head is None:
        return sheet, replace(table, head=head)
    return sheet, table
