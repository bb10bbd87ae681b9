"""Workbook Adapter - schema-driven access to tabular workbooks with virtual cells."""

from workbook_adapter.cache import (
    UNSET,
    CellHandle,
    VirtualCellCache,
    is_composite,
    is_poisoned,
    unwrap,
)
from workbook_adapter.row import Row, RowCells
from workbook_adapter.schema import (
    CellType,
    SheetSchema,
    StorageType,
    WorkbookSchema,
    default_cell,
    virtual_cell,
)
from workbook_adapter.sheet import Column, Sheet
from workbook_adapter.utils.exceptions import (
    PoisonedCacheAccessError,
    WorkbookAdapterError,
)
from workbook_adapter.workbook import FlushReport, WorkbookAdapter

__all__ = [
    "UNSET",
    "CellHandle",
    "CellType",
    "Column",
    "FlushReport",
    "PoisonedCacheAccessError",
    "Row",
    "RowCells",
    "Sheet",
    "SheetSchema",
    "StorageType",
    "VirtualCellCache",
    "WorkbookAdapter",
    "WorkbookAdapterError",
    "WorkbookSchema",
    "default_cell",
    "is_composite",
    "is_poisoned",
    "unwrap",
    "virtual_cell",
]
__version__ = "0.1.0"
