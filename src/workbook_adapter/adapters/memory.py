"""In-memory workbook adapter.

Raw storage is a plain ``{sheet: [{column: value}]}`` structure, which makes
this adapter handy for tests and for staging data before it is written to a
real file format.
"""

from __future__ import annotations

import copy
import json
from collections import Counter
from collections.abc import Mapping
from datetime import date
from typing import Any

from workbook_adapter.config import settings
from workbook_adapter.row import Row
from workbook_adapter.schema import CellType, WorkbookSchema
from workbook_adapter.sheet import Sheet
from workbook_adapter.utils.exceptions import UnknownColumnError
from workbook_adapter.utils.logging import get_logger
from workbook_adapter.workbook import WorkbookAdapter

logger = get_logger(__name__)

CellKey = tuple[str, str, int]


def _json_default(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class MemoryRow(Row):
    """Row backed by a dict in ``MemoryWorkbookAdapter.data``."""

    workbook: MemoryWorkbookAdapter

    def _record(self) -> dict[str, Any]:
        return self.workbook.data[self.sheet.name][self.index]

    def get_cell_value(self, column: str) -> Any:
        self.workbook.read_count[(self.sheet.name, column, self.index)] += 1
        return self._record().get(column)

    def set_cell_value(self, column: str, value: Any) -> None:
        storage_type = self.sheet.schema[column].storage_type
        if not storage_type.matches(value):
            logger.warning(
                "Raw value does not match storage type",
                sheet=self.sheet.name,
                column=column,
                row=self.index,
                storage_type=storage_type.value,
                value_type=type(value).__name__,
            )
        self.workbook.write_count[(self.sheet.name, column, self.index)] += 1
        self._record()[column] = value

    def is_cell_virtual(self, column: str) -> bool:
        return self.sheet.schema.is_virtual(column)


class MemorySheet(Sheet):
    workbook: MemoryWorkbookAdapter

    def get_row_count(self) -> int:
        return len(self.workbook.data[self.name])

    def get_row(self, index: int) -> MemoryRow:
        if not 0 <= index < self.get_row_count():
            raise IndexError(f"Row {index} out of range for sheet {self.name!r}")
        return MemoryRow(self, index)

    def get_column_names(self) -> list[str]:
        return self.schema.column_names


class MemoryWorkbookAdapter(WorkbookAdapter):
    """Workbook adapter holding raw cell values in memory.

    Attributes:
        data: Raw storage, one list of row dicts per sheet.
        read_count: Raw reads per (sheet, column, row).
        write_count: Raw writes per (sheet, column, row).
        saved_snapshots: Deep copies of ``data`` taken by each ``save()``.
    """

    def __init__(
        self,
        schema: WorkbookSchema | Mapping[str, Mapping[str, CellType]],
        data: Mapping[str, list[Mapping[str, Any]]] | None = None,
        label: str | None = None,
    ) -> None:
        super().__init__(schema, label)
        self.data: dict[str, list[dict[str, Any]]] = {name: [] for name in self.schema}
        self.read_count: Counter[CellKey] = Counter()
        self.write_count: Counter[CellKey] = Counter()
        self.saved_snapshots: list[dict[str, list[dict[str, Any]]]] = []

        for sheet, rows in (data or {}).items():
            for values in rows:
                self.append_row(sheet, values)

    def get_sheet_names(self) -> list[str]:
        return self.schema.sheet_names

    def get_sheet(self, name: str) -> MemorySheet:
        self.schema[name]  # raises UnknownSheetError
        return MemorySheet(self, name)

    def append_row(self, sheet: str, values: Mapping[str, Any]) -> int:
        """Append a row of raw values and return its index.

        Columns missing from ``values`` are stored as None.
        """
        sheet_schema = self.schema[sheet]
        for column in values:
            if column not in sheet_schema:
                raise UnknownColumnError(sheet, column)
        self.data[sheet].append({column: values.get(column) for column in sheet_schema})
        return len(self.data[sheet]) - 1

    async def _generate_file(self) -> str:
        return json.dumps(
            self.data,
            indent=settings.export_json_indent,
            default=_json_default,
        )

    async def _save_file(self) -> None:
        self.saved_snapshots.append(copy.deepcopy(self.data))
        logger.debug("Stored snapshot", snapshots=len(self.saved_snapshots))
