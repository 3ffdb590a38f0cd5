"""Scope holders and the configuration they resolve.

A holder exists per workbook, per initialized sheet and per initialized table.
Each one keeps the structural identity of its scope and answers configuration
queries by looking at its own overrides first and then at its parent.
"""

from __future__ import annotations

from typing import Any, Protocol

from excel_write_context.config import Settings, settings
from excel_write_context.metadata.descriptors import (
    ScopeDescriptor,
    SheetDescriptor,
    Source,
    TableDescriptor,
    WorkbookDescriptor,
)
from excel_write_context.metadata.head import HeadProperty, HeadSpec
from excel_write_context.utils.exceptions import InvalidArgumentError
from excel_write_context.write.handler import (
    HandlerMap,
    HookKind,
    LegacyWriteHandler,
    WriteHandler,
    build_handler_map,
)


class ConfigurationSelector(Protocol):
    """Effective configuration of the active scope."""

    def need_head(self) -> bool: ...

    def relative_head_row_index(self) -> int: ...

    def write_handler_map(self) -> HandlerMap: ...


class ScopeHolder:
    """Shared handler resolution for the three scope levels.

    Handler lists are resolved per kind: a scope that registers handlers of a
    kind replaces its parent's list for that kind instead of extending it.
    """

    def __init__(self, descriptor: ScopeDescriptor, inherited: HandlerMap) -> None:
        offset = descriptor.relative_head_row_index
        if offset is not None and offset < 0:
            raise InvalidArgumentError(
                f"relative_head_row_index must be at least 0, got {offset}",
                argument="relative_head_row_index",
            )

        resolved: HandlerMap = {
            kind: list(handlers) for kind, handlers in inherited.items()
        }
        resolved.update(build_handler_map(descriptor.handlers))
        self._write_handler_map = resolved

    def write_handler_map(self) -> HandlerMap:
        return self._write_handler_map

    def handlers(self, kind: HookKind) -> list[WriteHandler]:
        return self._write_handler_map.get(kind, [])


class WorkbookHolder(ScopeHolder):
    """Root scope: owns the backing document and the streams around it.

    Options the descriptor leaves unset are taken from ``config``.
    """

    def __init__(
        self, workbook: WorkbookDescriptor, config: Settings | None = None
    ) -> None:
        config = config or settings
        super().__init__(workbook, inherited={})
        self._need_head = (
            workbook.need_head if workbook.need_head is not None else config.need_head
        )
        self._relative_head_row_index = (
            workbook.relative_head_row_index
            if workbook.relative_head_row_index is not None
            else config.relative_head_row_index
        )

        self.descriptor = workbook
        self.workbook: Any = None
        self.output: Source | None = workbook.output
        self.template: Source | None = workbook.template
        self.auto_close_stream: bool = (
            workbook.auto_close_stream
            if workbook.auto_close_stream is not None
            else config.auto_close_stream
        )
        self.write_handler: LegacyWriteHandler | None = workbook.write_handler
        self.head: HeadSpec | None = workbook.head
        self.has_been_initialized_sheet: dict[int, SheetHolder] = {}

    def need_head(self) -> bool:
        return self._need_head

    def relative_head_row_index(self) -> int:
        return self._relative_head_row_index


class NestedScopeHolder(ScopeHolder):
    """A scope below the workbook: unset options fall back to ``parent``."""

    def __init__(
        self, descriptor: ScopeDescriptor, parent: ConfigurationSelector
    ) -> None:
        super().__init__(descriptor, inherited=parent.write_handler_map())
        self._parent = parent
        self._need_head = descriptor.need_head
        self._relative_head_row_index = descriptor.relative_head_row_index

    def need_head(self) -> bool:
        if self._need_head is not None:
            return self._need_head
        return self._parent.need_head()

    def relative_head_row_index(self) -> int:
        if self._relative_head_row_index is not None:
            return self._relative_head_row_index
        return self._parent.relative_head_row_index()


class SheetHolder(NestedScopeHolder):
    """One sheet of the workbook and the tables initialized inside it."""

    def __init__(
        self, sheet: SheetDescriptor, sheet_no: int, workbook_holder: WorkbookHolder
    ) -> None:
        super().__init__(sheet, parent=workbook_holder)
        self.descriptor = sheet
        self.sheet_no = sheet_no
        self.sheet_name = sheet.sheet_name
        self.workbook_holder = workbook_holder
        self.sheet: Any = None
        self.head: HeadSpec | None = (
            sheet.head if sheet.head is not None else workbook_holder.head
        )
        self.head_property = HeadProperty.from_head(None)
        self.new_initialization = True
        self.has_been_initialized_table: dict[int, TableHolder] = {}

    def __repr__(self) -> str:
        return f"SheetHolder(sheet_no={self.sheet_no}, sheet_name={self.sheet_name!r})"


class TableHolder(NestedScopeHolder):
    """A block of rows within one sheet with its own head and overrides."""

    def __init__(
        self, table: TableDescriptor, table_no: int, sheet_holder: SheetHolder
    ) -> None:
        super().__init__(table, parent=sheet_holder)
        self.descriptor = table
        self.table_no = table_no
        self.sheet_holder = sheet_holder
        self.head: HeadSpec | None = (
            table.head if table.head is not None else sheet_holder.head
        )
        self.head_property = HeadProperty.from_head(None)
        self.new_initialization = True

    @property
    def sheet(self) -> Any:
        return self.sheet_holder.sheet

    def __repr__(self) -> str:
        sheet_no = self.sheet_holder.sheet_no
        return f"TableHolder(table_no={self.table_no}, sheet_no={sheet_no})"
