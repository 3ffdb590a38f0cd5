"""Row and cell emission with handler bracketing."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from excel_write_context.backend import DocumentBackend, RowHandle
from excel_write_context.metadata.head import Head
from excel_write_context.metadata.holders import (
    ConfigurationSelector,
    SheetHolder,
    TableHolder,
    WorkbookHolder,
)
from excel_write_context.utils.logging import PerformanceMetrics
from excel_write_context.write.dispatch import HookDispatcher
from excel_write_context.write.handler import HookKind


@dataclass(frozen=True)
class ActiveScope:
    """Snapshot of the scope a row is written into."""

    selector: ConfigurationSelector
    workbook_holder: WorkbookHolder
    sheet_holder: SheetHolder
    table_holder: TableHolder | None

    @property
    def sheet(self) -> Any:
        return self.sheet_holder.sheet


class RowEmitter:
    """Create rows and cells, each one bracketed by before/after handlers.

    Order per row: before-row, create row, after-row, legacy row; then for
    every value left to right: before-cell, create cell, after-cell, legacy
    cell.
    """

    def __init__(
        self,
        backend: DocumentBackend,
        dispatcher: HookDispatcher,
        metrics: PerformanceMetrics,
    ) -> None:
        self._backend = backend
        self._dispatcher = dispatcher
        self._metrics = metrics

    def emit_row(
        self,
        scope: ActiveScope,
        row_index: int,
        relative_row_index: int,
        values: Sequence[Any],
        heads: Sequence[Head | None],
        is_head: bool,
    ) -> RowHandle:
        handler_map = scope.selector.write_handler_map()
        row_handlers = handler_map.get(HookKind.ROW, [])
        cell_handlers = handler_map.get(HookKind.CELL, [])
        write_handler = scope.workbook_holder.write_handler

        self._dispatcher.before_row_create(
            row_handlers,
            scope.sheet_holder,
            scope.table_holder,
            row_index,
            relative_row_index,
            is_head,
        )
        row = self._backend.create_row(scope.sheet, row_index)
        self._metrics.rows_created += 1
        self._dispatcher.after_row_create(
            row_handlers,
            scope.sheet_holder,
            scope.table_holder,
            row,
            relative_row_index,
            is_head,
        )
        self._dispatcher.notify_row(write_handler, row)

        for col_index, value in enumerate(values):
            head = heads[col_index] if col_index < len(heads) else None
            self._dispatcher.before_cell_create(
                cell_handlers,
                scope.sheet_holder,
                scope.table_holder,
                row,
                head,
                relative_row_index,
                is_head,
            )
            cell = self._backend.create_cell(row, col_index, value)
            self._metrics.cells_created += 1
            self._dispatcher.after_cell_create(
                cell_handlers,
                scope.sheet_holder,
                scope.table_holder,
                cell,
                head,
                relative_row_index,
                is_head,
            )
            self._dispatcher.notify_cell(write_handler, row.row_index, cell)
        return row
