"""
Exception types raised by the packson serializer.

Recoverable problems (a bean getter that raised) are reported through
the session listener and never surface here. Everything in this module
aborts the walk and propagates to the caller of serialize().

Transport failures are deliberately absent: an error raised by the
output's write() propagates unchanged.
"""

from __future__ import annotations

from typing import Sequence


class SerializeError(Exception):
    """
    Base class for fatal serialization failures.

    Attributes:
        path: Attribute names from the root to the offending value.
        type_name: Name of the declared type at the failure, if known.
    """

    def __init__(
        self,
        message: str,
        path: Sequence[str] | None = None,
        type_name: str | None = None,
    ):
        self.path = list(path or [])
        self.type_name = type_name
        if self.path:
            message = f"{message}\nPath: {'/'.join(self.path)}"
        super().__init__(message)


class DepthExceededError(SerializeError):
    """Raised when the object graph is nested deeper than max_depth."""


class UnsupportedValueError(SerializeError):
    """Raised for values the MessagePack wire format cannot represent."""


class SwapError(SerializeError):
    """Raised when a registered swap fails to convert a value."""
