"""Workbook adapter base class.

A ``WorkbookAdapter`` owns the virtual cell cache for one workbook and makes
sure every deferred virtual write reaches raw storage before the workbook is
saved or exported.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from workbook_adapter.cache import VirtualCellCache
from workbook_adapter.config import settings
from workbook_adapter.schema import CellType, WorkbookSchema
from workbook_adapter.utils.logging import (
    LogContext,
    ProgressTracker,
    get_logger,
    timed_operation,
)

if TYPE_CHECKING:
    from workbook_adapter.sheet import Sheet

logger = get_logger(__name__)


@dataclass
class FlushReport:
    """Counts gathered by one ``pre_save`` pass."""

    sheets: int = 0
    rows: int = 0
    cells: int = 0


class WorkbookAdapter(ABC):
    """Base class for workbook storage collaborators.

    Subclasses provide sheet enumeration and the file generation/saving
    operations; this class provides sheet iteration, the virtual cell cache
    and the pre-save flush.
    """

    def __init__(
        self,
        schema: WorkbookSchema | Mapping[str, Mapping[str, CellType]],
        label: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            schema: Workbook schema, or a ``{sheet: {column: CellType}}`` dict.
            label: Name used in log context; defaults to the class name.
        """
        if not isinstance(schema, WorkbookSchema):
            schema = WorkbookSchema.from_dict(schema)
        self.schema = schema
        self.label = label or type(self).__name__
        self._virtual_cell_cache = VirtualCellCache()

    @abstractmethod
    def get_sheet_names(self) -> list[str]: ...

    @abstractmethod
    def get_sheet(self, name: str) -> Sheet: ...

    @abstractmethod
    async def _generate_file(self) -> str | bytes:
        """Serialize raw storage."""
        ...

    @abstractmethod
    async def _save_file(self) -> None:
        """Persist raw storage."""
        ...

    def _iter_sheets(self) -> Iterator[Sheet]:
        for name in self.get_sheet_names():
            yield self.get_sheet(name)

    @property
    def sheets(self) -> Iterator[Sheet]:
        return self._iter_sheets()

    def __iter__(self) -> Iterator[Sheet]:
        return self._iter_sheets()

    @property
    def virtual_cell_cache(self) -> VirtualCellCache:
        return self._virtual_cell_cache

    def get_virtual_cell_cache(self, sheet: str, column: str, row: int) -> Any:
        """Return the cached virtual value of a cell, or ``UNSET``."""
        return self._virtual_cell_cache.get(sheet, column, row)

    def set_virtual_cell_cache(self, sheet: str, column: str, row: int, value: Any) -> Any:
        """Cache a virtual value, poisoning the previous composite if replaced."""
        return self._virtual_cell_cache.set(sheet, column, row, value)

    def pre_save(self) -> FlushReport:
        """Write every row's current values back to raw storage.

        Sheets are visited in enumeration order and rows in index order.

        Returns:
            Counts of sheets, rows and cells flushed.
        """
        report = FlushReport()
        with LogContext(workbook=self.label), timed_operation(
            logger, "pre_save"
        ) as metrics:
            for sheet in self.sheets:
                with LogContext(sheet=sheet.name):
                    tracker = ProgressTracker(
                        logger,
                        f"Flushing {sheet.name}",
                        total=sheet.get_row_count(),
                        log_interval=settings.flush_progress_interval,
                    )
                    report.cells += sheet.pre_save(tracker)
                    report.rows += tracker.current
                    report.sheets += 1
                    tracker.complete()

            metrics.sheets_processed = report.sheets
            metrics.rows_processed = report.rows
            metrics.cells_written = report.cells
        return report

    async def save(self) -> None:
        """Flush pending virtual writes, then persist the workbook."""
        self.pre_save()
        with LogContext(workbook=self.label):
            logger.info("Saving workbook")
            await self._save_file()

    async def export(self) -> str | bytes:
        """Flush pending virtual writes, then serialize the workbook."""
        self.pre_save()
        with LogContext(workbook=self.label):
            logger.info("Exporting workbook")
            return await self._generate_file()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(label={self.label!r}, sheets={self.get_sheet_names()})"
