"""Document backend: the library that owns the actual spreadsheet encoding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

from excel_write_context.metadata.descriptors import (
    SheetDescriptor,
    Source,
    WorkbookDescriptor,
)
from excel_write_context.metadata.head import CellRange
from excel_write_context.utils.exceptions import SheetNotFoundError
from excel_write_context.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RowHandle:
    """A created row. ``row_index`` is zero-based."""

    sheet: Any
    row_index: int

    @property
    def row_num(self) -> int:
        return self.row_index


@runtime_checkable
class DocumentBackend(Protocol):
    """Operations the write context needs from a spreadsheet library.

    All indexes are zero-based. I/O failures surface as ``OSError`` (or the
    library's own exception); the write context wraps them.
    """

    def create_or_open(self, workbook: WorkbookDescriptor) -> Any: ...

    def sheet_at(self, document: Any, index: int) -> Any: ...

    def create_sheet(self, document: Any, sheet: SheetDescriptor, sheet_no: int) -> Any: ...

    def create_row(self, sheet: Any, row_index: int) -> RowHandle: ...

    def create_cell(self, row: RowHandle, col_index: int, value: Any) -> Any: ...

    def add_merged_region(self, sheet: Any, cell_range: CellRange) -> None: ...

    def last_row_index(self, sheet: Any) -> int: ...

    def write(self, document: Any, sink: Source) -> None: ...

    def close(self, document: Any) -> None: ...


class OpenpyxlBackend:
    """Document backend built on openpyxl (xlsx only)."""

    def create_or_open(self, workbook: WorkbookDescriptor) -> Workbook:
        if workbook.template is not None:
            logger.debug("Loading template workbook")
            return load_workbook(workbook.template)

        document = Workbook()
        # Sheet index 0 must take the creation path like any other index.
        document.remove(document.active)
        return document

    def sheet_at(self, document: Workbook, index: int) -> Worksheet:
        worksheets = document.worksheets
        if index < 0 or index >= len(worksheets):
            raise SheetNotFoundError(index)
        return worksheets[index]

    def create_sheet(
        self, document: Workbook, sheet: SheetDescriptor, sheet_no: int
    ) -> Worksheet:
        title = sheet.sheet_name if sheet.sheet_name is not None else str(sheet_no)
        return document.create_sheet(title=title)

    def create_row(self, sheet: Worksheet, row_index: int) -> RowHandle:
        # openpyxl has no row objects; the dimension entry marks the row.
        sheet.row_dimensions[row_index + 1]
        return RowHandle(sheet=sheet, row_index=row_index)

    def create_cell(self, row: RowHandle, col_index: int, value: Any) -> Any:
        cell = row.sheet.cell(row=row.row_index + 1, column=col_index + 1)
        if isinstance(cell, MergedCell):
            # Covered by a merged region; only the top-left cell holds a value.
            return cell
        cell.value = value
        return cell

    def add_merged_region(self, sheet: Worksheet, cell_range: CellRange) -> None:
        sheet.merge_cells(
            start_row=cell_range.first_row + 1,
            end_row=cell_range.last_row + 1,
            start_column=cell_range.first_col + 1,
            end_column=cell_range.last_col + 1,
        )

    def last_row_index(self, sheet: Worksheet) -> int:
        """Zero-based index of the last written row, or -1 for an empty sheet."""
        if sheet.max_row == 1 and sheet.max_column == 1:
            if sheet.cell(row=1, column=1).value is None and not sheet.merged_cells.ranges:
                return -1
        return sheet.max_row - 1

    def write(self, document: Workbook, sink: Source) -> None:
        if not document.worksheets:
            document.create_sheet()
        document.save(sink)

    def close(self, document: Workbook) -> None:
        document.close()
