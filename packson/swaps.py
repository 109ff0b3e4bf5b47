"""
Swaps: one-hop substitutions for types that cannot be encoded directly.

A swap converts a value of its normal_class into a surrogate value of
its swapped_class, which is then classified and encoded in its place.
The surrogate is never offered to another swap, so swaps cannot chain.

Swaps are collected into an immutable SwapRegistry when a serializer is
configured. Lookup walks the MRO of the runtime class, so a swap
registered for a base class applies to its subclasses.

Example:
    >>> registry = SwapRegistry([IsoDate(datetime.date), (complex, repr)])
    >>> registry.find(datetime.date).swapped_class
    <class 'str'>
"""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from packson.serialize import SerializerSession


class ObjectSwap:
    """
    Base class for swaps.

    Subclasses set normal_class and swapped_class and implement swap().
    A swapped_class of object means the surrogate's type is taken from
    its runtime class.
    """

    normal_class: type = object
    swapped_class: type = object

    def swap(self, session: SerializerSession, value: Any) -> Any:
        """Convert value to its surrogate."""
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}({self.normal_class.__name__} -> {self.swapped_class.__name__})"


class FunctionSwap(ObjectSwap):
    """Adapts a plain callable to the ObjectSwap interface."""

    def __init__(self, normal_class: type, func: Callable[[Any], Any], swapped_class: type = object):
        self.normal_class = normal_class
        self.swapped_class = swapped_class
        self.func = func

    def swap(self, session, value):
        return self.func(value)


# =============================================================================
# Built-in Swaps
# =============================================================================


def _instant(value: datetime.datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value.isoformat() + "Z"


_FORMATTERS: dict[str, Callable[[Any], str]] = {
    "ISO_DATE_TIME": lambda v: v.isoformat(),
    "ISO_DATE": lambda v: (v.date() if isinstance(v, datetime.datetime) else v).isoformat(),
    "ISO_TIME": lambda v: (v.time() if isinstance(v, datetime.datetime) else v).isoformat(),
    "BASIC_ISO_DATE": lambda v: v.strftime("%Y%m%d"),
    "ISO_INSTANT": _instant,
}


class TemporalSwap(ObjectSwap):
    """
    Writes datetime, date and time values as ISO-8601 strings.

    Subclasses pick the format. Each instance is bound to one temporal
    class; register one instance per class that should be swapped.
    """

    swapped_class = str
    format = "ISO_DATE_TIME"

    def __init__(self, normal_class: type = datetime.datetime):
        self.normal_class = normal_class

    def swap(self, session, value):
        return _FORMATTERS[self.format](value)


class IsoDateTime(TemporalSwap):
    format = "ISO_DATE_TIME"


class IsoDate(TemporalSwap):
    format = "ISO_DATE"


class IsoTime(TemporalSwap):
    format = "ISO_TIME"


class BasicIsoDate(TemporalSwap):
    format = "BASIC_ISO_DATE"


class IsoInstant(TemporalSwap):
    format = "ISO_INSTANT"


class EnumSwap(ObjectSwap):
    """Writes enum members by name."""

    normal_class = Enum
    swapped_class = str

    def swap(self, session, value):
        return value.name


class UuidSwap(ObjectSwap):
    normal_class = uuid.UUID
    swapped_class = str

    def swap(self, session, value):
        return str(value)


class DecimalSwap(ObjectSwap):
    """Writes Decimal values as strings so no precision is lost."""

    normal_class = Decimal
    swapped_class = str

    def swap(self, session, value):
        return str(value)


SwapSpec = Union[ObjectSwap, "tuple[type, Callable[[Any], Any]]"]


class SwapRegistry:
    """Immutable lookup table from class to swap."""

    def __init__(self, swaps: Iterable[SwapSpec] = ()):
        table: dict[type, ObjectSwap] = {}
        for swap in swaps:
            if isinstance(swap, tuple):
                swap = FunctionSwap(*swap)
            if not isinstance(swap, ObjectSwap):
                raise TypeError(f"Expected an ObjectSwap or (type, callable) pair, got {swap!r}")
            table[swap.normal_class] = swap
        self._swaps = MappingProxyType(table)

    def find(self, cls: type) -> ObjectSwap | None:
        for klass in cls.__mro__:
            swap = self._swaps.get(klass)
            if swap is not None:
                return swap
        return None

    def with_swaps(self, *swaps: SwapSpec) -> "SwapRegistry":
        """Return a new registry with swaps added, replacing any for the same class."""
        return SwapRegistry([*self._swaps.values(), *swaps])

    def __len__(self):
        return len(self._swaps)

    def __iter__(self):
        return iter(self._swaps.values())


DEFAULT_SWAPS: tuple[ObjectSwap, ...] = (
    EnumSwap(),
    UuidSwap(),
)
