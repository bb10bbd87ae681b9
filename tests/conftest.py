from __future__ import annotations

import pytest

from tests.fixtures import (
    FullName,
    join_full_name,
    join_tags,
    parse_full_name,
    split_tags,
)
from workbook_adapter.adapters.memory import MemoryWorkbookAdapter
from workbook_adapter.schema import WorkbookSchema, default_cell, virtual_cell


@pytest.fixture
def schema() -> WorkbookSchema:
    """Two sheets mixing default and virtual columns."""
    return WorkbookSchema.from_dict(
        {
            "Sheet1": {
                "fullName": virtual_cell(
                    "string", FullName, parse_full_name, join_full_name
                ),
                "age": default_cell("number"),
            },
            "Sheet2": {
                "label": default_cell("string"),
                "tags": virtual_cell("string", list, split_tags, join_tags),
            },
        }
    )


@pytest.fixture
def raw_data() -> dict[str, list[dict[str, object]]]:
    return {
        "Sheet1": [
            {"fullName": "Ada Lovelace", "age": 36},
            {"fullName": "Grace Hopper", "age": 85},
        ],
        "Sheet2": [
            {"label": "first", "tags": "a,b"},
            {"label": "second", "tags": ""},
            {"label": "third", "tags": "c"},
        ],
    }


@pytest.fixture
def workbook(
    schema: WorkbookSchema, raw_data: dict[str, list[dict[str, object]]]
) -> MemoryWorkbookAdapter:
    """In-memory workbook seeded with raw rows."""
    return MemoryWorkbookAdapter(schema, raw_data, label="people")
