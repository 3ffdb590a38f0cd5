"""Write handler capabilities and registration.

Handlers are caller-supplied objects that are called around every structural
creation event. A handler subclasses one or more capability classes below and
overrides the ``before_*``/``after_*`` methods it cares about; the remaining
methods are no-ops.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, Any

from excel_write_context.utils.exceptions import InvalidArgumentError

if TYPE_CHECKING:
    from excel_write_context.backend import RowHandle
    from excel_write_context.metadata.head import Head
    from excel_write_context.metadata.holders import (
        SheetHolder,
        TableHolder,
        WorkbookHolder,
    )


class HookKind(str, Enum):
    """Structural events a handler can observe."""

    WORKBOOK = "workbook"
    SHEET = "sheet"
    ROW = "row"
    CELL = "cell"


class WriteHandler:
    """Marker base class for every write handler."""


class WorkbookWriteHandler(WriteHandler):
    def before_workbook_create(self) -> None:
        pass

    def after_workbook_create(self, workbook_holder: WorkbookHolder) -> None:
        pass


class SheetWriteHandler(WriteHandler):
    def before_sheet_create(
        self, workbook_holder: WorkbookHolder, sheet_holder: SheetHolder
    ) -> None:
        pass

    def after_sheet_create(
        self, workbook_holder: WorkbookHolder, sheet_holder: SheetHolder
    ) -> None:
        pass


class RowWriteHandler(WriteHandler):
    """Called around every row, header or data.

    ``row_index`` is the absolute, zero-based row the row will occupy;
    ``relative_row_index`` counts from the first row of the current block.
    """

    def before_row_create(
        self,
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row_index: int,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        pass

    def after_row_create(
        self,
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row: RowHandle,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        pass


class CellWriteHandler(WriteHandler):
    """Called around every cell; ``head`` is None for columns without a head."""

    def before_cell_create(
        self,
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        row: RowHandle,
        head: Head | None,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        pass

    def after_cell_create(
        self,
        sheet_holder: SheetHolder,
        table_holder: TableHolder | None,
        cell: Any,
        head: Head | None,
        relative_row_index: int,
        is_head: bool,
    ) -> None:
        pass


class LegacyWriteHandler:
    """Single post-hoc observer registered on the workbook.

    Notified after the hook dispatch for every sheet, row and cell created,
    regardless of which handlers the active scope resolves.
    """

    def sheet(self, sheet_no: int, sheet: Any) -> None:
        pass

    def row(self, row_index: int, row: RowHandle) -> None:
        pass

    def cell(self, row_index: int, cell: Any) -> None:
        pass


CAPABILITIES: dict[HookKind, type[WriteHandler]] = {
    HookKind.WORKBOOK: WorkbookWriteHandler,
    HookKind.SHEET: SheetWriteHandler,
    HookKind.ROW: RowWriteHandler,
    HookKind.CELL: CellWriteHandler,
}

HandlerMap = dict[HookKind, list[WriteHandler]]


def build_handler_map(handlers: Iterable[WriteHandler] | None) -> HandlerMap:
    """File every handler under each kind it implements.

    Capabilities are checked here, once; dispatch trusts the map. Order
    within each kind follows registration order.

    Raises:
        InvalidArgumentError: If an object implements no capability.
    """
    handler_map: HandlerMap = {}
    for handler in handlers or ():
        kinds = [
            kind
            for kind, capability in CAPABILITIES.items()
            if isinstance(handler, capability)
        ]
        if not kinds:
            raise InvalidArgumentError(
                f"{type(handler).__name__} implements no write handler capability",
                argument="handlers",
            )
        for kind in kinds:
            handler_map.setdefault(kind, []).append(handler)
    return handler_map
