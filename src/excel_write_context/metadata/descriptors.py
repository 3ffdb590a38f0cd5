"""Dataclasses describing the workbook, sheets and tables to write."""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from typing import IO, Union

from excel_write_context.metadata.head import HeadSpec
from excel_write_context.write.handler import LegacyWriteHandler, WriteHandler

Source = Union[str, PathLike[str], IO[bytes]]
"""A file path or an open binary stream."""


@dataclass(kw_only=True)
class ScopeDescriptor:
    """Options every scope can override.

    ``None`` means "not set here": the value is resolved from the enclosing
    scope, ending at the workbook defaults.
    """

    head: HeadSpec | None = None
    need_head: bool | None = None
    relative_head_row_index: int | None = None
    handlers: list[WriteHandler] = field(default_factory=list)


@dataclass(kw_only=True)
class WorkbookDescriptor(ScopeDescriptor):
    """Describes the document to produce.

    Attributes:
        output: Where the finished document is written.
        template: Existing workbook to start from, if any.
        auto_close_stream: Close ``output`` and ``template`` streams on finish.
        write_handler: Optional legacy handler notified of every creation.
    """

    output: Source | None = None
    template: Source | None = None
    auto_close_stream: bool | None = None
    write_handler: LegacyWriteHandler | None = None


@dataclass(kw_only=True)
class SheetDescriptor(ScopeDescriptor):
    sheet_no: int | None = None
    sheet_name: str | None = None


@dataclass(kw_only=True)
class TableDescriptor(ScopeDescriptor):
    """A repeated block inside one sheet. Inherits the sheet's head if unset."""

    table_no: int | None = None
