"""Workbook schema declarations.

A schema maps sheet names to columns and each column to a ``CellType``.
A cell type always names the primitive type the cell is stored as; virtual
cells additionally declare the type exposed to callers and the getter/setter
pair converting between the two.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from workbook_adapter.utils.exceptions import (
    SchemaValidationError,
    UnknownColumnError,
    UnknownSheetError,
)

Validator = Callable[[Any], bool]


class StorageType(str, Enum):
    """Primitive kinds a cell can be physically stored as."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "Date"

    @property
    def python_types(self) -> tuple[type, ...]:
        """Python types accepted for this storage kind."""
        return _PYTHON_TYPES[self]

    def matches(self, value: Any) -> bool:
        """Check whether ``value`` can be stored as this kind.

        ``None`` stands for an empty cell and matches every kind.
        """
        if value is None:
            return True
        if self is StorageType.NUMBER and isinstance(value, bool):
            return False
        return isinstance(value, self.python_types)


_PYTHON_TYPES: dict[StorageType, tuple[type, ...]] = {
    StorageType.STRING: (str,),
    StorageType.NUMBER: (int, float),
    StorageType.BOOLEAN: (bool,),
    StorageType.DATE: (date,),
}


@dataclass(frozen=True)
class CellType:
    """Descriptor for a single column.

    Attributes:
        storage_type: Kind the raw value is persisted as.
        virtual_type: Type exposed to callers, or None for default cells.
        getter: Converts a raw value to the virtual value.
        setter: Converts a virtual value back to a raw value.
        validators: Named predicates over the interface value.
    """

    storage_type: StorageType
    virtual_type: Any = None
    getter: Callable[[Any], Any] | None = None
    setter: Callable[[Any], Any] | None = None
    validators: dict[str, Validator] = field(default_factory=dict)

    def __post_init__(self) -> None:
        errors: list[str] = []

        storage_type = self.storage_type
        if not isinstance(storage_type, StorageType):
            try:
                storage_type = StorageType(storage_type)
            except ValueError:
                errors.append(
                    f"Unsupported storage type {self.storage_type!r}; expected one "
                    f"of: {', '.join(t.value for t in StorageType)}"
                )
            else:
                object.__setattr__(self, "storage_type", storage_type)

        if self.virtual_type is not None:
            if not callable(self.getter):
                errors.append("Virtual cells require a callable getter")
            if not callable(self.setter):
                errors.append("Virtual cells require a callable setter")
        elif self.getter is not None or self.setter is not None:
            errors.append("Getter/setter given without a virtual type")

        for name, check in self.validators.items():
            if not callable(check):
                errors.append(f"Validator {name!r} is not callable")

        if errors:
            raise SchemaValidationError("Invalid cell type", errors=errors)

    @property
    def is_virtual(self) -> bool:
        return self.virtual_type is not None

    @property
    def interface_type(self) -> Any:
        """Type callers see: the virtual type if any, else the storage type."""
        return self.virtual_type if self.is_virtual else self.storage_type

    def to_virtual(self, raw: Any) -> Any:
        if self.getter is None:
            return raw
        return self.getter(raw)

    def to_storage(self, value: Any) -> Any:
        if self.setter is None:
            return value
        return self.setter(value)

    def failed_validators(self, value: Any) -> list[str]:
        """Return the names of validators rejecting ``value``."""
        return [name for name, check in self.validators.items() if not check(value)]


def default_cell(
    storage_type: StorageType | str,
    validators: dict[str, Validator] | None = None,
) -> CellType:
    """Declare a column stored and exposed as a primitive."""
    return CellType(
        storage_type=storage_type,  # type: ignore[arg-type]
        validators=validators or {},
    )


def virtual_cell(
    storage_type: StorageType | str,
    virtual_type: Any,
    getter: Callable[[Any], Any],
    setter: Callable[[Any], Any],
    validators: dict[str, Validator] | None = None,
) -> CellType:
    """Declare a column exposed through a getter/setter transform pair."""
    return CellType(
        storage_type=storage_type,  # type: ignore[arg-type]
        virtual_type=virtual_type,
        getter=getter,
        setter=setter,
        validators=validators or {},
    )


class SheetSchema(Mapping[str, CellType]):
    """Ordered column declarations for one sheet."""

    def __init__(self, name: str, columns: Mapping[str, CellType]) -> None:
        errors: list[str] = []
        if not name:
            errors.append("Sheet name must be a non-empty string")
        if not columns:
            errors.append(f"Sheet {name!r} declares no columns")
        for column, cell_type in columns.items():
            if not column:
                errors.append(f"Sheet {name!r} has an empty column name")
            if not isinstance(cell_type, CellType):
                errors.append(
                    f"Column {column!r} in sheet {name!r} is not a CellType"
                )
        if errors:
            raise SchemaValidationError(f"Invalid sheet schema {name!r}", errors=errors)

        self.name = name
        self._columns: dict[str, CellType] = dict(columns)

    def __getitem__(self, column: str) -> CellType:
        try:
            return self._columns[column]
        except KeyError:
            raise UnknownColumnError(self.name, column) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"SheetSchema({self.name!r}, columns={list(self._columns)})"

    @property
    def column_names(self) -> list[str]:
        return list(self._columns)

    @property
    def virtual_columns(self) -> list[str]:
        return [name for name, cell in self._columns.items() if cell.is_virtual]

    def is_virtual(self, column: str) -> bool:
        return self[column].is_virtual


class WorkbookSchema(Mapping[str, SheetSchema]):
    """Ordered sheet declarations for one workbook."""

    def __init__(self, sheets: Mapping[str, SheetSchema]) -> None:
        if not sheets:
            raise SchemaValidationError("Workbook schema declares no sheets")
        self._sheets: dict[str, SheetSchema] = dict(sheets)

    @classmethod
    def from_dict(
        cls, sheets: Mapping[str, Mapping[str, CellType]]
    ) -> WorkbookSchema:
        """Build a schema from ``{sheet: {column: CellType}}``."""
        return cls({name: SheetSchema(name, columns) for name, columns in sheets.items()})

    def __getitem__(self, sheet: str) -> SheetSchema:
        try:
            return self._sheets[sheet]
        except KeyError:
            raise UnknownSheetError(sheet) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._sheets)

    def __len__(self) -> int:
        return len(self._sheets)

    def __repr__(self) -> str:
        return f"WorkbookSchema(sheets={list(self._sheets)})"

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)
