"""Excel Write Context - staged workbook writing with scoped write handlers."""

from excel_write_context.context import ContextState, WriteContext
from excel_write_context.metadata.descriptors import (
    SheetDescriptor,
    TableDescriptor,
    WorkbookDescriptor,
)
from excel_write_context.writer import ExcelWriter

__all__ = [
    "ContextState",
    "ExcelWriter",
    "SheetDescriptor",
    "TableDescriptor",
    "WorkbookDescriptor",
    "WriteContext",
]
__version__ = "0.1.0"
