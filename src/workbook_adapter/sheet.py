"""Sheet and column handles."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from workbook_adapter.schema import CellType, SheetSchema
from workbook_adapter.utils.exceptions import UnknownColumnError

if TYPE_CHECKING:
    from workbook_adapter.row import Row
    from workbook_adapter.utils.logging import ProgressTracker
    from workbook_adapter.workbook import WorkbookAdapter


class Column:
    """A column handle addressed by (sheet, name)."""

    def __init__(self, sheet: Sheet, name: str) -> None:
        self.sheet = sheet
        self.name = name
        self.workbook: WorkbookAdapter = sheet.workbook

    @property
    def cell_type(self) -> CellType:
        return self.sheet.schema[self.name]

    @property
    def is_virtual(self) -> bool:
        return self.cell_type.is_virtual

    def values(self) -> Iterator[Any]:
        """Yield this column's interface value for every row."""
        for row in self.sheet.rows:
            yield row.cells[self.name]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sheet={self.sheet.name!r}, name={self.name!r})"


class Sheet(ABC):
    """A sheet handle.

    Row and column sequences are regenerated on every access, so iterating
    a sheet twice walks all rows twice.
    """

    def __init__(self, workbook: WorkbookAdapter, name: str) -> None:
        self.workbook = workbook
        self.name = name

    @abstractmethod
    def get_row_count(self) -> int: ...

    @abstractmethod
    def get_row(self, index: int) -> Row: ...

    @abstractmethod
    def get_column_names(self) -> list[str]: ...

    def get_column(self, name: str) -> Column:
        if name not in self.get_column_names():
            raise UnknownColumnError(self.name, name)
        return Column(self, name)

    @property
    def schema(self) -> SheetSchema:
        return self.workbook.schema[self.name]

    def _iter_rows(self) -> Iterator[Row]:
        for index in range(self.get_row_count()):
            yield self.get_row(index)

    def _iter_columns(self) -> Iterator[Column]:
        for name in self.get_column_names():
            yield self.get_column(name)

    @property
    def rows(self) -> Iterator[Row]:
        return self._iter_rows()

    @property
    def columns(self) -> Iterator[Column]:
        return self._iter_columns()

    def __iter__(self) -> Iterator[Row]:
        return self._iter_rows()

    def __len__(self) -> int:
        return self.get_row_count()

    def get_virtual_cell_cache(self, row: int, column: str) -> Any:
        return self.workbook.get_virtual_cell_cache(self.name, column, row)

    def set_virtual_cell_cache(self, row: int, column: str, value: Any) -> Any:
        return self.workbook.set_virtual_cell_cache(self.name, column, row, value)

    def pre_save(self, tracker: ProgressTracker | None = None) -> int:
        """Flush every row in index order.

        Args:
            tracker: Optional progress tracker updated once per row.

        Returns:
            Number of cells written.
        """
        written = 0
        for row in self.rows:
            written += row.pre_save()
            if tracker is not None:
                tracker.update()
        return written

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
