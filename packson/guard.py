"""
Cycle and depth guard for the graph walk.

The guard is a stack of the values currently being encoded, from the
root down to the current descent, plus an identity set over the same
values. A value whose id() is already on the stack is an ancestor of
itself: encoding it again would never terminate.

Values of leaf kinds (strings, numbers, bytes...) cannot reach other
values, so they are never pushed and do not count towards the depth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from packson.errors import DepthExceededError
from packson.meta import LEAF_KINDS, TypeMeta


@dataclass(frozen=True)
class StackElement:
    """Token for one descent. Returned by enter(), handed back to exit()."""

    depth: int
    name: str | None
    value_id: int
    type_meta: TypeMeta
    pushed: bool = True


class RecursionGuard:
    """
    Tracks the values along the current descent path.

    Usage:
        element = guard.enter(name, value, meta)
        if element is None:
            ...  # cycle, write null instead
        else:
            try:
                ...  # encode value
            finally:
                guard.exit(element)
    """

    def __init__(self, max_depth: int = 100, initial_depth: int = 0):
        self.max_depth = max_depth
        self.initial_depth = initial_depth
        self._stack: list[StackElement] = []
        self._ids: set[int] = set()

    def enter(self, name: str | None, value: Any, meta: TypeMeta) -> StackElement | None:
        """
        Start a descent into value.

        Returns:
            A StackElement to pass to exit(), or None if value is already
            being encoded further up the path.

        Raises:
            DepthExceededError: If the descent would exceed max_depth.
        """
        key = id(value)
        if key in self._ids:
            return None

        depth = self.initial_depth + len(self._stack)
        if meta.kind in LEAF_KINDS:
            return StackElement(depth, name, key, meta, pushed=False)

        if depth > self.max_depth:
            raise DepthExceededError(
                f"Depth too deep. Maximum depth of {self.max_depth} exceeded.",
                path=self.path + ([name] if name else []),
                type_name=meta.name,
            )

        element = StackElement(depth, name, key, meta)
        self._stack.append(element)
        self._ids.add(key)
        return element

    def exit(self, element: StackElement) -> None:
        """End the descent started by the enter() call that returned element."""
        if not element.pushed:
            return
        top = self._stack.pop()
        if top is not element:
            raise RuntimeError(f"Recursion guard out of order: expected {element}, got {top}")
        self._ids.discard(top.value_id)

    def will_recurse(self, value: Any) -> bool:
        """True if value is an ancestor of the current descent."""
        return value is not None and id(value) in self._ids

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def path(self) -> list[str]:
        return [e.name for e in self._stack if e.name]

    def reset(self) -> None:
        self._stack.clear()
        self._ids.clear()

    def __len__(self):
        return len(self._stack)
