"""Excel workbook adapter backed by openpyxl.

Each declared sheet maps to a worksheet whose header row holds the column
names; data rows start directly below it. Columns declared in the schema but
missing from the header are appended to it.
"""

from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from workbook_adapter.config import settings
from workbook_adapter.row import Row
from workbook_adapter.schema import CellType, WorkbookSchema
from workbook_adapter.sheet import Sheet
from workbook_adapter.utils.exceptions import (
    ErrorCode,
    UnknownColumnError,
    WorkbookStorageError,
)
from workbook_adapter.utils.logging import get_logger
from workbook_adapter.workbook import WorkbookAdapter

logger = get_logger(__name__)


class XlsxRow(Row):
    """Row stored in an openpyxl worksheet."""

    sheet: XlsxSheet

    def get_cell_value(self, column: str) -> Any:
        return self.sheet.cell(self.index, column).value

    def set_cell_value(self, column: str, value: Any) -> None:
        self.sheet.cell(self.index, column).value = value

    def is_cell_virtual(self, column: str) -> bool:
        return self.sheet.schema.is_virtual(column)


class XlsxSheet(Sheet):
    workbook: XlsxWorkbookAdapter

    @property
    def worksheet(self) -> Worksheet:
        return self.workbook.worksheet(self.name)

    def cell(self, index: int, column: str) -> Any:
        """Return the openpyxl cell for a data row and column."""
        position = self.workbook.column_positions[self.name][column]
        return self.worksheet.cell(
            row=self.workbook.header_row + 1 + index, column=position
        )

    def get_row_count(self) -> int:
        return max(self.worksheet.max_row - self.workbook.header_row, 0)

    def get_row(self, index: int) -> XlsxRow:
        if not 0 <= index < self.get_row_count():
            raise IndexError(f"Row {index} out of range for sheet {self.name!r}")
        return XlsxRow(self, index)

    def get_column_names(self) -> list[str]:
        return self.schema.column_names


class XlsxWorkbookAdapter(WorkbookAdapter):
    """Workbook adapter reading and writing .xlsx files."""

    def __init__(
        self,
        schema: WorkbookSchema | Mapping[str, Mapping[str, CellType]],
        path: Path | str | None = None,
        header_row: int | None = None,
        label: str | None = None,
    ) -> None:
        """Open ``path`` if it exists, otherwise start an empty workbook.

        Args:
            schema: Workbook schema.
            path: File to load from and save to.
            header_row: 1-based header row; defaults to the configured value.
            label: Name used in log context; defaults to the file name.

        Raises:
            ValueError: If ``header_row`` is below 1.
            WorkbookStorageError: If an existing file cannot be read.
        """
        if header_row is not None and header_row < 1:
            raise ValueError(f"header_row must be at least 1, got {header_row}")
        self.path = Path(path) if path is not None else None
        super().__init__(schema, label or (self.path.name if self.path else None))
        self.header_row = (
            settings.xlsx_header_row if header_row is None else header_row
        )
        self._workbook = self._load()
        self.column_positions: dict[str, dict[str, int]] = {
            name: self._prepare_sheet(name) for name in self.schema
        }

    def _load(self) -> Workbook:
        if self.path is not None and self.path.exists():
            try:
                workbook = load_workbook(filename=self.path)
            except (OSError, InvalidFileException, BadZipFile) as exc:
                logger.error("Failed to read workbook", path=self.path, error=exc)
                raise WorkbookStorageError(
                    f"Failed to read workbook: {exc}",
                    error_code=ErrorCode.STORAGE_READ_FAILED,
                    file_path=str(self.path),
                ) from exc
            logger.info("Loaded workbook", path=self.path, sheets=workbook.sheetnames)
            return workbook

        workbook = Workbook()
        workbook.remove(workbook.active)
        return workbook

    def _prepare_sheet(self, name: str) -> dict[str, int]:
        """Locate each declared column in the header row, adding missing ones."""
        if name in self._workbook.sheetnames:
            worksheet = self._workbook[name]
        else:
            worksheet = self._workbook.create_sheet(name)

        positions: dict[str, int] = {}
        for cell in worksheet[self.header_row]:
            if cell.value is not None:
                positions.setdefault(str(cell.value), cell.column)

        next_column = max(positions.values(), default=0) + 1
        for column in self.schema[name]:
            if column not in positions:
                worksheet.cell(row=self.header_row, column=next_column, value=column)
                positions[column] = next_column
                next_column += 1

        return {column: positions[column] for column in self.schema[name]}

    def worksheet(self, name: str) -> Worksheet:
        self.schema[name]  # raises UnknownSheetError
        return self._workbook[name]

    def get_sheet_names(self) -> list[str]:
        return self.schema.sheet_names

    def get_sheet(self, name: str) -> XlsxSheet:
        self.schema[name]  # raises UnknownSheetError
        return XlsxSheet(self, name)

    def append_row(self, sheet: str, values: Mapping[str, Any]) -> int:
        """Append a row of raw values and return its index."""
        positions = self.column_positions[self.schema[sheet].name]
        for column in values:
            if column not in positions:
                raise UnknownColumnError(sheet, column)
        index = self.get_sheet(sheet).get_row_count()
        worksheet = self.worksheet(sheet)
        for column, position in positions.items():
            worksheet.cell(
                row=self.header_row + 1 + index,
                column=position,
                value=values.get(column),
            )
        return index

    async def _generate_file(self) -> bytes:
        buffer = BytesIO()
        self._workbook.save(buffer)
        return buffer.getvalue()

    async def _save_file(self) -> None:
        if self.path is None:
            raise WorkbookStorageError(
                "Cannot save a workbook that has no file path",
                error_code=ErrorCode.STORAGE_PATH_MISSING,
            )
        try:
            self._workbook.save(self.path)
        except OSError as exc:
            logger.error("Failed to write workbook", path=self.path, error=exc)
            raise WorkbookStorageError(
                f"Failed to write workbook: {exc}",
                error_code=ErrorCode.STORAGE_WRITE_FAILED,
                file_path=str(self.path),
            ) from exc
        logger.info("Saved workbook", path=self.path)
