"""Concrete storage collaborators for ``WorkbookAdapter``."""

from workbook_adapter.adapters.memory import (
    MemoryRow,
    MemorySheet,
    MemoryWorkbookAdapter,
)
from workbook_adapter.adapters.xlsx import XlsxRow, XlsxSheet, XlsxWorkbookAdapter

__all__ = [
    "MemoryRow",
    "MemorySheet",
    "MemoryWorkbookAdapter",
    "XlsxRow",
    "XlsxSheet",
    "XlsxWorkbookAdapter",
]
