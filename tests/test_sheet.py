"""Tests for sheet and column handles."""

import pytest

from tests.fixtures import FullName
from workbook_adapter.adapters.memory import MemoryRow, MemoryWorkbookAdapter
from workbook_adapter.cache import UNSET, unwrap
from workbook_adapter.sheet import Column
from workbook_adapter.utils.exceptions import UnknownColumnError


class TestSheetIteration:
    """Tests for restartable row and column sequences."""

    def test_rows_can_be_traversed_twice(self, workbook: MemoryWorkbookAdapter) -> None:
        sheet = workbook.get_sheet("Sheet2")

        first_pass = [row.cells.label for row in sheet]
        second_pass = [row.cells.label for row in sheet]

        assert first_pass == ["first", "second", "third"]
        assert second_pass == first_pass

    def test_each_rows_access_is_a_fresh_generator(
        self, workbook: MemoryWorkbookAdapter
    ) -> None:
        sheet = workbook.get_sheet("Sheet2")
        rows = sheet.rows
        next(rows)
        assert [row.index for row in sheet.rows] == [0, 1, 2]
        assert [row.index for row in rows] == [1, 2]

    def test_rows_reflect_current_row_count(
        self, workbook: MemoryWorkbookAdapter
    ) -> None:
        sheet = workbook.get_sheet("Sheet1")
        assert len(list(sheet.rows)) == 2
        workbook.append_row("Sheet1", {"fullName": "Alan Turing", "age": 41})
        assert len(list(sheet.rows)) == 3
        assert len(sheet) == 3

    def test_columns(self, workbook: MemoryWorkbookAdapter) -> None:
        sheet = workbook.get_sheet("Sheet1")
        columns = list(sheet.columns)
        assert [column.name for column in columns] == ["fullName", "age"]
        assert [column.is_virtual for column in columns] == [True, False]
        assert [column.name for column in sheet.columns] == ["fullName", "age"]

    def test_get_row_out_of_range(self, workbook: MemoryWorkbookAdapter) -> None:
        with pytest.raises(IndexError):
            workbook.get_sheet("Sheet1").get_row(5)


class TestColumn:
    """Tests for column handles."""

    def test_column_values(self, workbook: MemoryWorkbookAdapter) -> None:
        column = workbook.get_sheet("Sheet1").get_column("fullName")
        assert isinstance(column, Column)
        assert column.workbook is workbook
        assert [unwrap(v) for v in column.values()] == [
            FullName("Ada", "Lovelace"),
            FullName("Grace", "Hopper"),
        ]

    def test_unknown_column(self, workbook: MemoryWorkbookAdapter) -> None:
        with pytest.raises(UnknownColumnError):
            workbook.get_sheet("Sheet1").get_column("height")


class TestSheetCacheForwarding:
    """Tests for cache access keyed by the sheet name."""

    def test_forwards_with_sheet_name(self, workbook: MemoryWorkbookAdapter) -> None:
        sheet = workbook.get_sheet("Sheet2")
        assert sheet.get_virtual_cell_cache(1, "tags") is UNSET

        stored = sheet.set_virtual_cell_cache(1, "tags", ["x"])

        assert workbook.get_virtual_cell_cache("Sheet2", "tags", 1) is stored
        assert workbook.get_virtual_cell_cache("Sheet1", "tags", 1) is UNSET


class TestSheetPreSave:
    """Tests for flushing a sheet."""

    def test_flushes_rows_in_index_order(
        self, workbook: MemoryWorkbookAdapter, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        flushed: list[int] = []
        original = MemoryRow.pre_save

        def recording(self: MemoryRow) -> int:
            flushed.append(self.index)
            return original(self)

        monkeypatch.setattr(MemoryRow, "pre_save", recording)

        written = workbook.get_sheet("Sheet2").pre_save()

        assert flushed == [0, 1, 2]
        assert written == 6

    def test_writes_cached_values(self, workbook: MemoryWorkbookAdapter) -> None:
        sheet = workbook.get_sheet("Sheet2")
        sheet.get_row(1).cells.tags = ["new", "tags"]
        sheet.pre_save()
        assert [r["tags"] for r in workbook.data["Sheet2"]] == ["a,b", "new,tags", "c"]
