"""Virtual cell cache.

Materialized virtual values are kept per (sheet, column, row). Composite
values are handed out wrapped in a ``CellHandle``; when a slot is
overwritten with a different value the old handle is poisoned, so a stale
reference fails loudly instead of silently diverging from what will be
persisted.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from workbook_adapter.utils.exceptions import PoisonedCacheAccessError
from workbook_adapter.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "UNSET",
    "CellHandle",
    "VirtualCellCache",
    "is_composite",
    "is_poisoned",
    "unwrap",
]

SlotKey = tuple[str, str, int]

_PRIMITIVE_TYPES: tuple[type, ...] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    date,
    time,
    timedelta,
    Enum,
)


class _Unset:
    """Marker for a cache slot that was never written."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


def is_composite(value: Any) -> bool:
    """Check whether ``value`` carries state that can go stale.

    Primitives compare by value, so an overwritten primitive can never be
    observed as stale. Everything else is treated as a composite object.
    """
    if value is None or value is UNSET:
        return False
    if isinstance(value, CellHandle):
        return True
    return not isinstance(value, _PRIMITIVE_TYPES)


class CellHandle:
    """Owning handle around a cached composite value.

    All attribute, item and protocol access is forwarded to the wrapped
    value while the handle is live. After ``poison()`` every such access
    raises ``PoisonedCacheAccessError``; only ``repr()`` keeps working.

    Copying or pickling a live handle yields a detached copy of the
    wrapped value rather than another handle.
    """

    __slots__ = ("_CellHandle__target", "_CellHandle__live", "_CellHandle__slot")

    def __init__(self, target: Any, slot: SlotKey | None = None) -> None:
        object.__setattr__(self, "_CellHandle__target", target)
        object.__setattr__(self, "_CellHandle__live", True)
        object.__setattr__(self, "_CellHandle__slot", slot)

    def __getattr__(self, name: str) -> Any:
        return getattr(_live_target(self, name), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(_live_target(self, name), name, value)

    def __delattr__(self, name: str) -> None:
        delattr(_live_target(self, name), name)

    def __getitem__(self, key: Any) -> Any:
        return _live_target(self, "__getitem__")[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        _live_target(self, "__setitem__")[key] = value

    def __delitem__(self, key: Any) -> None:
        del _live_target(self, "__delitem__")[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(_live_target(self, "__iter__"))

    def __len__(self) -> int:
        return len(_live_target(self, "__len__"))

    def __contains__(self, item: Any) -> bool:
        return item in _live_target(self, "__contains__")

    def __bool__(self) -> bool:
        return bool(_live_target(self, "__bool__"))

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return _live_target(self, "__call__")(*args, **kwargs)

    def __eq__(self, other: Any) -> bool:
        target = _live_target(self, "__eq__")
        if isinstance(other, CellHandle):
            other = unwrap(other)
        return bool(target == other)

    def __hash__(self) -> int:
        return hash(_live_target(self, "__hash__"))

    def __str__(self) -> str:
        return str(_live_target(self, "__str__"))

    def __copy__(self) -> Any:
        return copy.copy(_live_target(self, "__copy__"))

    def __deepcopy__(self, memo: dict[int, Any]) -> Any:
        return copy.deepcopy(_live_target(self, "__deepcopy__"), memo)

    def __reduce__(self) -> tuple[Any, ...]:
        return _detached, (_live_target(self, "__reduce__"),)

    def __repr__(self) -> str:
        slot = object.__getattribute__(self, "_CellHandle__slot")
        where = f" {slot[0]}.{slot[1]}[{slot[2]}]" if slot else ""
        if not object.__getattribute__(self, "_CellHandle__live"):
            return f"<poisoned CellHandle{where}>"
        target = object.__getattribute__(self, "_CellHandle__target")
        return f"<CellHandle{where} {target!r}>"


def _live_target(handle: CellHandle, attribute: str) -> Any:
    if not object.__getattribute__(handle, "_CellHandle__live"):
        slot = object.__getattribute__(handle, "_CellHandle__slot") or (None, None, None)
        raise PoisonedCacheAccessError(*slot, attribute=attribute)
    return object.__getattribute__(handle, "_CellHandle__target")


def _detached(value: Any) -> Any:
    return value


def _poison(handle: CellHandle) -> None:
    object.__setattr__(handle, "_CellHandle__live", False)


def is_poisoned(value: Any) -> bool:
    """Check whether ``value`` is a handle whose slot was overwritten."""
    return isinstance(value, CellHandle) and not object.__getattribute__(
        value, "_CellHandle__live"
    )


def unwrap(value: Any) -> Any:
    """Return the object behind a handle, or ``value`` itself.

    Raises:
        PoisonedCacheAccessError: If ``value`` is a poisoned handle.
    """
    if isinstance(value, CellHandle):
        return _live_target(value, "unwrap")
    return value


class VirtualCellCache:
    """Three-level mapping: sheet -> column -> row index -> cached value.

    Intermediate levels are created on first access. Slots are only ever
    replaced, never removed.
    """

    def __init__(self) -> None:
        self._slots: dict[str, dict[str, dict[int, Any]]] = {}

    def _column(self, sheet: str, column: str) -> dict[int, Any]:
        return self._slots.setdefault(sheet, {}).setdefault(column, {})

    def get(self, sheet: str, column: str, row: int) -> Any:
        """Return the cached value for a slot, or ``UNSET``."""
        return self._column(sheet, column).get(row, UNSET)

    def set(self, sheet: str, column: str, row: int, value: Any) -> Any:
        """Store ``value`` in a slot and return what was stored.

        Composite values are stored wrapped in a fresh ``CellHandle``. If the
        slot held a handle to a different object, that handle is poisoned.

        Raises:
            PoisonedCacheAccessError: If ``value`` is itself a poisoned handle.
        """
        target = unwrap(value)
        slots = self._column(sheet, column)
        previous = slots.get(row, UNSET)

        if isinstance(previous, CellHandle):
            if unwrap(previous) is target:
                return previous
            _poison(previous)
            logger.debug("Poisoned cached value", sheet=sheet, column=column, row=row)

        stored = CellHandle(target, (sheet, column, row)) if is_composite(target) else target
        slots[row] = stored
        return stored

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, tuple) or len(key) != 3:
            return False
        sheet, column, row = key
        return row in self._slots.get(sheet, {}).get(column, {})

    def __len__(self) -> int:
        return sum(
            len(rows) for columns in self._slots.values() for rows in columns.values()
        )

    def __repr__(self) -> str:
        return f"VirtualCellCache(slots={len(self)})"
