"""Tests for row handles and the per-row cell view."""

import json

import pytest

from tests.fixtures import FullName
from workbook_adapter.adapters.memory import MemoryWorkbookAdapter
from workbook_adapter.cache import UNSET, CellHandle, is_poisoned, unwrap
from workbook_adapter.row import Row
from workbook_adapter.utils.exceptions import (
    PoisonedCacheAccessError,
    UnknownColumnError,
)


@pytest.fixture
def row(workbook: MemoryWorkbookAdapter) -> Row:
    return workbook.get_sheet("Sheet1").get_row(0)


class TestVirtualColumns:
    """Tests for virtual column reads and writes."""

    def test_first_read_computes_and_caches(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        value = row.cells.fullName

        assert isinstance(value, CellHandle)
        assert value == FullName("Ada", "Lovelace")
        assert workbook.read_count[("Sheet1", "fullName", 0)] == 1
        assert workbook.get_virtual_cell_cache("Sheet1", "fullName", 0) is value

    def test_second_read_uses_cache(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        first = row.cells["fullName"]
        second = row.cells["fullName"]

        assert first is second
        assert workbook.read_count[("Sheet1", "fullName", 0)] == 1

    def test_cache_is_shared_between_row_handles(
        self, workbook: MemoryWorkbookAdapter
    ) -> None:
        sheet = workbook.get_sheet("Sheet1")
        first = sheet.get_row(1).cells.fullName
        assert sheet.get_row(1).cells.fullName is first

    def test_write_goes_to_cache_only(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        row.cells.fullName = FullName("Grace", "Hopper")

        assert workbook.data["Sheet1"][0]["fullName"] == "Ada Lovelace"
        assert workbook.write_count[("Sheet1", "fullName", 0)] == 0
        assert row.cells.fullName == FullName("Grace", "Hopper")
        assert workbook.read_count[("Sheet1", "fullName", 0)] == 0

    def test_write_poisons_previous_value(self, row: Row) -> None:
        old = row.cells.fullName
        row.cells.fullName = FullName("Grace", "Hopper")

        assert is_poisoned(old)
        with pytest.raises(PoisonedCacheAccessError):
            _ = old.last

    def test_in_place_mutation_stays_live(self, row: Row) -> None:
        value = row.cells.fullName
        value.first = "Augusta"
        row.cells.fullName = value

        assert not is_poisoned(value)
        assert row.cells.fullName.first == "Augusta"


class TestDefaultColumns:
    """Tests for pass-through columns."""

    def test_read_passes_through(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        assert row.cells.age == 36
        assert row.cells.age == 36
        assert workbook.read_count[("Sheet1", "age", 0)] == 2
        assert workbook.get_virtual_cell_cache("Sheet1", "age", 0) is UNSET

    def test_write_passes_through(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        row.cells["age"] = 37
        assert workbook.data["Sheet1"][0]["age"] == 37
        assert workbook.write_count[("Sheet1", "age", 0)] == 1


class TestRowCells:
    """Tests for the RowCells mapping view."""

    def test_mapping_protocol(self, row: Row) -> None:
        assert list(row.cells) == ["fullName", "age"]
        assert len(row.cells) == 2
        assert "age" in row.cells
        assert "height" not in row.cells

    def test_to_dict(self, row: Row) -> None:
        values = row.cells.to_dict()
        assert values["age"] == 36
        assert unwrap(values["fullName"]) == FullName("Ada", "Lovelace")

    def test_composite_values_need_unwrap_for_type_checks(
        self, workbook: MemoryWorkbookAdapter
    ) -> None:
        tags = workbook.get_sheet("Sheet2").get_row(0).cells.tags

        assert isinstance(tags, CellHandle)
        assert not isinstance(tags, list)
        assert isinstance(unwrap(tags), list)
        with pytest.raises(TypeError):
            json.dumps(tags)
        assert json.dumps(unwrap(tags)) == '["a", "b"]'

    def test_unknown_column_item_access(self, row: Row) -> None:
        with pytest.raises(UnknownColumnError):
            row.cells["height"]
        with pytest.raises(UnknownColumnError):
            row.cells["height"] = 180

    def test_unknown_column_attribute_access(self, row: Row) -> None:
        with pytest.raises(AttributeError):
            _ = row.cells.height
        with pytest.raises(AttributeError):
            row.cells.height = 180

    def test_delete_not_supported(self, row: Row) -> None:
        with pytest.raises(TypeError):
            del row.cells["age"]


class TestRowPreSave:
    """Tests for flushing a row to raw storage."""

    def test_one_write_per_column(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        written = row.pre_save()

        assert written == 2
        assert workbook.write_count[("Sheet1", "fullName", 0)] == 1
        assert workbook.write_count[("Sheet1", "age", 0)] == 1

    def test_applies_setter_to_cached_value(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        row.cells.fullName = FullName("Grace", "Hopper")
        row.pre_save()
        assert workbook.data["Sheet1"][0]["fullName"] == "Grace Hopper"

    def test_flushes_in_place_mutations(
        self, workbook: MemoryWorkbookAdapter
    ) -> None:
        row = workbook.get_sheet("Sheet2").get_row(0)
        row.cells.tags.append("z")
        row.pre_save()
        assert workbook.data["Sheet2"][0]["tags"] == "a,b,z"

    def test_unmaterialized_virtual_keeps_raw_value(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        row.pre_save()
        assert workbook.data["Sheet1"][0]["fullName"] == "Ada Lovelace"
        assert workbook.get_virtual_cell_cache("Sheet1", "fullName", 0) is UNSET

    def test_raw_storage_never_holds_virtual_values(
        self, workbook: MemoryWorkbookAdapter, row: Row
    ) -> None:
        _ = row.cells.fullName
        row.pre_save()
        assert isinstance(workbook.data["Sheet1"][0]["fullName"], str)

    def test_cached_value_stays_live_after_flush(self, row: Row) -> None:
        value = row.cells.fullName
        row.pre_save()
        assert value.first == "Ada"
        assert row.cells.fullName is value


class TestRowIdentity:
    """Tests for row equality."""

    def test_equal_by_sheet_and_index(self, workbook: MemoryWorkbookAdapter) -> None:
        sheet = workbook.get_sheet("Sheet1")
        assert sheet.get_row(0) == sheet.get_row(0)
        assert sheet.get_row(0) != sheet.get_row(1)
        assert len({sheet.get_row(0), sheet.get_row(0)}) == 1
        assert repr(sheet.get_row(1)) == "MemoryRow(sheet='Sheet1', index=1)"
