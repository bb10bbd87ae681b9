"""Shared virtual types and transforms used across the test suite.

Example usage:
    from tests.fixtures import FullName, parse_full_name
"""

from dataclasses import dataclass


@dataclass
class FullName:
    """Structured virtual value stored as "First Last"."""

    first: str
    last: str


def parse_full_name(raw: str | None) -> FullName:
    first, _, last = (raw or "").partition(" ")
    return FullName(first, last)


def join_full_name(name: FullName) -> str:
    return f"{name.first} {name.last}".strip()


def split_tags(raw: str | None) -> list[str]:
    return [tag for tag in (raw or "").split(",") if tag]


def join_tags(tags: list[str]) -> str:
    return ",".join(tags)
