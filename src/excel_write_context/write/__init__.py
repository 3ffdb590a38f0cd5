"""Write handlers, their dispatch and row/header emission."""

from excel_write_context.write.handler import (
    CellWriteHandler,
    HookKind,
    LegacyWriteHandler,
    RowWriteHandler,
    SheetWriteHandler,
    WorkbookWriteHandler,
    WriteHandler,
)

__all__ = [
    "CellWriteHandler",
    "HookKind",
    "LegacyWriteHandler",
    "RowWriteHandler",
    "SheetWriteHandler",
    "WorkbookWriteHandler",
    "WriteHandler",
]
