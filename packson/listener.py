"""
Listener receiving problems found while serializing.

Bean getter failures are recoverable: the property is left out and the
walk continues. They are handed to the listener instead of being raised.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from packson.beans import PropertyValue
    from packson.serialize import SerializerSession


class SerializerListener:
    """Default listener: logs everything it receives."""

    def __init__(self):
        self._logger = logging.getLogger("packson.listener")

    def on_bean_getter_exception(
        self,
        session: SerializerSession,
        prop: PropertyValue,
        exc: BaseException,
    ) -> None:
        self._logger.warning(
            f"Could not read property '{prop.name}' at '{'/'.join(session.path) or 'root'}': {exc!r}",
            exc_info=exc,
        )

    def on_error(self, session: SerializerSession, exc: BaseException, msg: str) -> None:
        self._logger.error(msg, exc_info=exc)


class RecordingListener(SerializerListener):
    """
    Listener that also keeps every reported failure.

    Attributes:
        getter_failures: (property name, exception) pairs.
        errors: (message, exception) pairs.
    """

    def __init__(self):
        super().__init__()
        self.getter_failures: list[tuple[str, BaseException]] = []
        self.errors: list[tuple[str, BaseException]] = []

    def on_bean_getter_exception(self, session, prop, exc):
        self.getter_failures.append((prop.name, exc))
        super().on_bean_getter_exception(session, prop, exc)

    def on_error(self, session, exc, msg):
        self.errors.append((msg, exc))
        super().on_error(session, exc, msg)

    def clear(self) -> None:
        self.getter_failures.clear()
        self.errors.clear()
