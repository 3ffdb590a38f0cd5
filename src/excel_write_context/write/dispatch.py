"""Invocation of write handlers around structural creation events."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from excel_write_context.utils.exceptions import HookExecutionError, WriteContextError
from excel_write_context.utils.logging import get_logger
from excel_write_context.write.handler import (
    HookKind,
    LegacyWriteHandler,
    WriteHandler,
)

if TYPE_CHECKING:
    from excel_write_context.backend import RowHandle
    from excel_write_context.metadata.head import Head
    from excel_write_context.metadata.holders import (
        SheetHolder,
        TableHolder,
        WorkbookHolder,
    )

logger = get_logger(__name__)


class HookDispatcher:
    """Call the handlers of one kind, in list order.

    Handler lists come from ``ConfigurationSelector.write_handler_map()``,
    which only files a handler under the kinds it implements. An empty list
    is a no-op.
    """

    def before_workbook_create(self, handlers: Sequence[WriteHandler]) -> None:
        self._invoke(HookKind.WORKBOOK, "before", handlers, "before_workbook_create")

    def after_workbook_create(
        self, handlers: Sequence[WriteHandler], workbook_holder: WorkbookHolder
    ) -> None:
        self._invoke(
            HookKind.WORKBOOK,
            "after",
            handlers,
            "after_workbook_create",
            workbook_holder,
        )

    def before_sheet_create(
        self,
        handlers: Sequence[WriteHandler],
        workbook_holder: WorkbookHolder,
        sheet_holder: SheetHolder,
    ) -> None:
        self._invoke(
            HookKind.SHEET,
            "before",
            handlers,
            "before_sheet_create",
            workbook_holder,
            sheet_holder,
        )

    def after_sheet_create(
        self,
        handlers: Sequence[WriteHandler],
        workbook_holder: WorkbookHolder,
        sheet_holder: SheetHolder,
    ) -> None:
        self._invoke(
            HookKind.SHEET,
            "after",
            handlers,
            "after_sheet_create",
            workbook_holder,
            sheet_holder,
        )

    def before_row_create(
        self,
        handlers: Sequence[WriteHandler],
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row_index: int,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self._invoke(
            HookKind.ROW,
            "before",
            handlers,
            "before_row_create",
            sheet_holder,
            table_holder,
            row_index,
            relative_row_index,
            is_head,
        )

    def after_row_create(
        self,
        handlers: Sequence[WriteHandler],
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row: RowHandle,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self._invoke(
            HookKind.ROW,
            "after",
            handlers,
            "after_row_create",
            sheet_holder,
            table_holder,
            row,
            relative_row_index,
            is_head,
        )

    def before_cell_create(
        self,
        handlers: Sequence[WriteHandler],
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row: RowHandle,
        head: Head | None,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self._invoke(
            HookKind.CELL,
            "before",
            handlers,
            "before_cell_create",
            sheet_holder,
            table_holder,
            row,
            head,
            relative_row_index,
            is_head,
        )

    def after_cell_create(
        self,
        handlers: Sequence[WriteHandler],
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        cell: Any,
        head: Head | None,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        self._invoke(
            HookKind.CELL,
            "after",
            handlers,
            "after_cell_create",
            sheet_holder,
            table_holder,
            cell,
            head,
            relative_row_index,
            is_head,
        )

    # ------------------------------------------------------------------ #
    # Legacy handler notifications
    # ------------------------------------------------------------------ #

    def notify_sheet(
        self, write_handler: LegacyWriteHandler | None, sheet_no: int, sheet: Any
    ) -> None:
        if write_handler is not None:
            self._call(write_handler, HookKind.SHEET, "legacy", "sheet", sheet_no, sheet)

    def notify_row(
        self, write_handler: LegacyWriteHandler | None, row: RowHandle
    ) -> None:
        if write_handler is not None:
            self._call(write_handler, HookKind.ROW, "legacy", "row", row.row_index, row)

    def notify_cell(
        self, write_handler: LegacyWriteHandler | None, row_index: int, cell: Any
    ) -> None:
        if write_handler is not None:
            self._call(write_handler, HookKind.CELL, "legacy", "cell", row_index, cell)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _invoke(
        self,
        kind: HookKind,
        phase: str,
        handlers: Sequence[WriteHandler],
        method: str,
        *args: Any,
    ) -> None:
        for handler in handlers:
            self._call(handler, kind, phase, method, *args)

    def _call(
        self, handler: object, kind: HookKind, phase: str, method: str, *args: Any
    ) -> None:
        try:
            getattr(handler, method)(*args)
        except WriteContextError:
            raise
        except Exception as exc:
            name = f"{type(handler).__module__}.{type(handler).__qualname__}"
            logger.error("Write handler failed", handler=name, method=method)
            raise HookExecutionError(
                f"Handler '{name}' failed during {method}: {exc}",
                handler=name,
                kind=kind.value,
                phase=phase,
            ) from exc
