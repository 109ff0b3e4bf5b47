"""
Snapshotting and ordering of container contents.

Containers are copied into a list before anything is written, so the
size header always matches the entries that follow. When sorting is
enabled the natural ordering is used; values that cannot be compared
with each other fall back to ordering by (type name, str(value)).
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any, Callable, Optional

SortKey = Optional[Callable[[Any], Any]]


def _fallback_key(value: Any) -> tuple[str, str]:
    return (type(value).__name__, str(value))


def _sorted(items: list, key: Callable[[Any], Any]) -> list:
    try:
        return sorted(items, key=key)
    except TypeError:
        return sorted(items, key=lambda item: _fallback_key(key(item)))


def order_map(m: Mapping, sort: bool = False, key: SortKey = None) -> list[tuple[Any, Any]]:
    """Snapshot the entries of m, sorted by key when sort is set."""
    entries = list(m.items())
    if sort:
        sort_key = key or (lambda k: k)
        entries = _sorted(entries, lambda entry: sort_key(entry[0]))
    return entries


def order_collection(c: Collection, sort: bool = False, key: SortKey = None) -> list:
    """Snapshot the elements of c, sorted when sort is set."""
    items = list(c)
    if sort:
        items = _sorted(items, key or (lambda v: v))
    return items


def to_list(array: Any) -> list:
    """Materialize an array-like value into a list of boxed elements."""
    if hasattr(array, "tolist"):
        return array.tolist()
    return list(array)
