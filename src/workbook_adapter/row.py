"""Row handles and the per-row cell view."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from workbook_adapter.cache import UNSET, unwrap
from workbook_adapter.utils.exceptions import UnknownColumnError

if TYPE_CHECKING:
    from workbook_adapter.sheet import Sheet
    from workbook_adapter.workbook import WorkbookAdapter


class RowCells(Mapping[str, Any]):
    """Column-keyed view over one row.

    Supports ``cells["name"]`` and ``cells.name`` for both reads and writes.
    Columns whose names clash with mapping methods (``keys``, ``get``...)
    are only reachable by item access.

    Composite virtual values are returned wrapped in a ``CellHandle``, so
    ``isinstance`` checks and serializers such as ``json.dumps`` see the
    handle, not the column's interface type. Pass the value through
    ``unwrap()`` first.
    """

    __slots__ = ("_row", "_columns")

    def __init__(self, row: Row, columns: list[str]) -> None:
        object.__setattr__(self, "_row", row)
        object.__setattr__(self, "_columns", tuple(columns))

    def __getitem__(self, column: str) -> Any:
        return self._row.read(column)

    def __setitem__(self, column: str, value: Any) -> None:
        self._row.write(column, value)

    def __delitem__(self, column: str) -> None:
        raise TypeError("Cells cannot be deleted; assign a new value instead")

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_") or name not in self._columns:
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        return self._row.read(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._columns:
            raise AttributeError(
                f"Cannot set '{name}': not a column of sheet {self._row.sheet.name!r}"
            )
        self._row.write(name, value)

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def __repr__(self) -> str:
        return f"RowCells(sheet={self._row.sheet.name!r}, row={self._row.index})"

    def to_dict(self) -> dict[str, Any]:
        """Read every column, materializing virtual values."""
        return {column: self._row.read(column) for column in self._columns}


class Row(ABC):
    """A row handle addressed by (sheet, index).

    Storage collaborators implement raw cell access; virtual columns are
    served from the workbook's cache and only reach raw storage on
    ``pre_save``.
    """

    def __init__(self, sheet: Sheet, index: int) -> None:
        self.sheet = sheet
        self.index = index
        self.workbook: WorkbookAdapter = sheet.workbook
        self._columns = list(sheet.get_column_names())
        self.cells = RowCells(self, self._columns)

    @abstractmethod
    def get_cell_value(self, column: str) -> Any:
        """Read the raw storage-typed value of a cell."""
        ...

    @abstractmethod
    def set_cell_value(self, column: str, value: Any) -> None:
        """Write a raw storage-typed value to a cell."""
        ...

    @abstractmethod
    def is_cell_virtual(self, column: str) -> bool:
        """Whether the column is exposed through a virtual type."""
        ...

    def _check_column(self, column: str) -> None:
        if column not in self._columns:
            raise UnknownColumnError(self.sheet.name, column)

    def read(self, column: str) -> Any:
        """Return the interface value of a cell.

        Virtual cells are computed from raw storage once and then served from
        the cache until the slot is overwritten.

        Composite values come back as a ``CellHandle`` bound to the slot;
        use ``unwrap()`` to get the underlying object.
        """
        self._check_column(column)
        if not self.is_cell_virtual(column):
            return self.get_cell_value(column)

        cached = self.sheet.get_virtual_cell_cache(self.index, column)
        if cached is not UNSET:
            return cached

        value = self.sheet.schema[column].to_virtual(self.get_cell_value(column))
        return self.sheet.set_virtual_cell_cache(self.index, column, value)

    def write(self, column: str, value: Any) -> None:
        """Assign the interface value of a cell.

        Virtual writes go to the cache only and are persisted by ``pre_save``.
        """
        self._check_column(column)
        if self.is_cell_virtual(column):
            self.sheet.set_virtual_cell_cache(self.index, column, value)
        else:
            self.set_cell_value(column, value)

    def pre_save(self) -> int:
        """Flush every column of this row to raw storage.

        Exactly one ``set_cell_value`` is issued per column. Materialized
        virtual values go through the column's setter, so raw storage only
        ever receives storage-typed values; columns without a cached value
        have their current raw value written back unchanged.

        Returns:
            Number of cells written.
        """
        written = 0
        for column in self._columns:
            cached = UNSET
            if self.is_cell_virtual(column):
                cached = self.sheet.get_virtual_cell_cache(self.index, column)

            if cached is UNSET:
                raw = self.get_cell_value(column)
            else:
                raw = self.sheet.schema[column].to_storage(unwrap(cached))

            self.set_cell_value(column, raw)
            written += 1
        return written

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return (
            self.workbook is other.workbook
            and self.sheet.name == other.sheet.name
            and self.index == other.index
        )

    def __hash__(self) -> int:
        return hash((id(self.workbook), self.sheet.name, self.index))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sheet={self.sheet.name!r}, index={self.index})"
