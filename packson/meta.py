"""
Type descriptors and value classification.

A TypeMeta describes a declared or runtime type: the class behind it,
its element/key/value types for containers, its Kind, and the swap that
applies to it. TypeMetas are built on demand and cached per session by
a MetaCache, since the same handful of types recur throughout a walk.

Classification is a pure function of (value, TypeMeta). The Kind of a
type is computed once, when its TypeMeta is built, in this precedence:

    bool -> number -> bean -> URI -> str -> map -> bytes -> array
         -> text reader -> byte stream -> collection -> other

bytes and array.array are checked before the generic collection test
because Python registers them as sequences.
"""

from __future__ import annotations

import array
import io
import numbers
import types
import typing
from collections.abc import Collection, Mapping
from enum import Enum
from typing import Any, NewType, Union, TYPE_CHECKING

from pydantic import AnyUrl

if TYPE_CHECKING:
    from packson.beans import BeanMeta, BeanRegistry
    from packson.swaps import ObjectSwap, SwapRegistry


# Declared type for single characters. A "\x00" character is written as null.
Char = NewType("Char", str)


class Uri(str):
    """A string that is resolved and written as a URI."""

    __slots__ = ()


class Kind(Enum):
    """Semantic shape of a value, selecting the routine that encodes it."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    BEAN = "bean"
    URI = "uri"
    STRING = "string"
    MAP = "map"
    COLLECTION = "collection"
    BYTE_ARRAY = "byte_array"
    ARRAY = "array"
    READER = "reader"
    INPUT_STREAM = "input_stream"
    OTHER = "other"


# Kinds whose values cannot hold references to other values.
LEAF_KINDS = frozenset({
    Kind.NULL,
    Kind.BOOLEAN,
    Kind.NUMBER,
    Kind.STRING,
    Kind.URI,
    Kind.BYTE_ARRAY,
})

_BINARY = (bytes, bytearray, memoryview)
_BYTE_STREAMS = (io.RawIOBase, io.BufferedIOBase)


def _strip_optional(annotation: Any) -> Any:
    """Optional[X] and X | None resolve to X; other unions resolve to Any."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return _strip_optional(args[0])
        return Any
    return annotation


class TypeMeta:
    """
    Describes one declared or runtime type.

    Attributes:
        annotation: The type or typing annotation this meta was built from.
        inner_class: The concrete class behind the annotation.
        kind: Kind of values of this type.
        is_object: True for the unconstrained "any" type.
        is_char: True for the Char type.
        bean_meta: Property description when the type is a bean.
        swap: The swap registered for this type, if any.
    """

    __slots__ = (
        "annotation",
        "inner_class",
        "kind",
        "is_object",
        "is_char",
        "bean_meta",
        "swap",
        "_args",
        "_cache",
        "_element_type",
        "_key_type",
        "_value_type",
    )

    def __init__(self, annotation: Any, cache: MetaCache):
        self.annotation = annotation
        self._cache = cache
        self._element_type = None
        self._key_type = None
        self._value_type = None

        resolved = _strip_optional(annotation)
        self.is_char = resolved is Char
        self.is_object = (
            resolved is Any
            or resolved is object
            or isinstance(resolved, (str, typing.ForwardRef, typing.TypeVar))
        )

        if self.is_object:
            cls, self._args = object, ()
        elif self.is_char:
            cls, self._args = str, ()
        else:
            origin = typing.get_origin(resolved)
            cls = origin if isinstance(origin, type) else resolved
            self._args = typing.get_args(resolved)
            if not isinstance(cls, type):
                cls, self.is_object = object, True

        self.inner_class: type = cls
        self.bean_meta: BeanMeta | None = None if self.is_object else cache.beans.find(cls)
        self.swap: ObjectSwap | None = None if self.is_object else cache.swaps.find(cls)
        self.kind = Kind.OTHER if self.is_object else self._kind_of(cls)

    def _kind_of(self, cls: type) -> Kind:
        if cls is type(None):
            return Kind.NULL
        if issubclass(cls, bool):
            return Kind.BOOLEAN
        if issubclass(cls, numbers.Real):
            return Kind.NUMBER
        if self.bean_meta is not None:
            return Kind.BEAN
        if issubclass(cls, (Uri, AnyUrl)):
            return Kind.URI
        if issubclass(cls, str):
            return Kind.STRING
        if issubclass(cls, Mapping):
            return Kind.MAP
        if issubclass(cls, _BINARY):
            return Kind.BYTE_ARRAY
        if issubclass(cls, array.array):
            return Kind.ARRAY
        if issubclass(cls, io.TextIOBase):
            return Kind.READER
        if issubclass(cls, _BYTE_STREAMS):
            return Kind.INPUT_STREAM
        if issubclass(cls, Collection):
            return Kind.COLLECTION
        return Kind.OTHER

    @property
    def name(self) -> str:
        if self.is_object:
            return "Any"
        return getattr(self.inner_class, "__qualname__", repr(self.annotation))

    @property
    def element_type(self) -> TypeMeta:
        if self._element_type is None:
            arg = Any
            if self._args and self.kind is Kind.COLLECTION:
                if self.inner_class is tuple and not (len(self._args) == 2 and self._args[1] is Ellipsis):
                    arg = Any
                else:
                    arg = self._args[0]
            self._element_type = self._cache.get(arg)
        return self._element_type

    @property
    def key_type(self) -> TypeMeta:
        if self._key_type is None:
            arg = self._args[0] if self.kind is Kind.MAP and len(self._args) == 2 else Any
            self._key_type = self._cache.get(arg)
        return self._key_type

    @property
    def value_type(self) -> TypeMeta:
        if self._value_type is None:
            arg = self._args[1] if self.kind is Kind.MAP and len(self._args) == 2 else Any
            self._value_type = self._cache.get(arg)
        return self._value_type

    def __repr__(self):
        return f"TypeMeta({self.name}, {self.kind.name})"


class MetaCache:
    """
    Builds and caches TypeMetas for the duration of one session.

    Args:
        beans: Registry used to recognize bean classes.
        swaps: Registry used to find the swap for each type.
    """

    def __init__(self, beans: BeanRegistry, swaps: SwapRegistry):
        self.beans = beans
        self.swaps = swaps
        self._cache: dict[Any, TypeMeta] = {}
        self.object = self.get(Any)

    def get(self, annotation: Any) -> TypeMeta:
        if annotation is None:
            annotation = Any
        meta = self._cache.get(annotation)
        if meta is None:
            meta = TypeMeta(annotation, self)
            self._cache[annotation] = meta
        return meta

    def for_object(self, value: Any, declared: TypeMeta | None = None) -> TypeMeta:
        """Return the meta for value's runtime class, reusing declared when it matches."""
        cls = type(value)
        if declared is not None and declared.inner_class is cls:
            return declared
        return self.get(cls)

    def __len__(self):
        return len(self._cache)


def classify(value: Any, meta: TypeMeta, uri_property: bool = False) -> Kind:
    """
    Return the Kind of value, given the meta of its effective type.

    None and a Char-typed "\\x00" classify as NULL. A value of a property
    flagged as a URI classifies as URI unless it is a boolean, number or
    bean.
    """
    if value is None or (meta.is_char and value == "\x00"):
        return Kind.NULL
    kind = meta.kind
    if uri_property and kind not in (Kind.BOOLEAN, Kind.NUMBER, Kind.BEAN):
        return Kind.URI
    return kind
