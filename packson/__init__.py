"""
packson - MessagePack serialization of arbitrary Python object graphs.

This library walks an in-memory object graph and writes it as compact,
self-describing MessagePack. It handles:

- Primitives (None, bool, int, float, str, bytes)
- Maps and collections (dict, list, tuple, set, array.array, ...)
- Beans: dataclasses, pydantic models and registered classes, written as
  maps of their properties in declared order
- URIs, resolved against a configurable context
- Text readers and byte streams, copied through unframed
- Self-referential graphs: a value that refers back to one of its own
  ancestors is written as null instead of recursing forever

Types that cannot be encoded directly are handled by swaps, which
replace a value with an encodable surrogate.

Basic Usage:
    >>> from packson import serialize, deserialize
    >>>
    >>> data = serialize({"key": [1, 2, 3]})
    >>> deserialize(data)
    {'key': [1, 2, 3]}

Beans:
    >>> from dataclasses import dataclass
    >>>
    >>> @dataclass
    ... class Person:
    ...     name: str
    ...     age: int
    >>>
    >>> deserialize(serialize(Person("alice", 30)))
    {'name': 'alice', 'age': 30}

Plain classes are registered with their property names:
    >>> from packson import register_bean
    >>>
    >>> class Account:
    ...     def __init__(self, id, owner, balance):
    ...         self.id = id
    ...         self.owner = owner
    ...         self.balance = balance
    >>>
    >>> register_bean(Account, ["id", "owner", "balance"])

Swaps:
    >>> import datetime
    >>> from packson import MsgPackSerializer, swaps
    >>>
    >>> serializer = MsgPackSerializer(swaps=[
    ...     swaps.IsoDateTime(datetime.datetime),
    ...     (complex, repr),
    ... ])
    >>> deserialize(serializer.serialize(datetime.datetime(2020, 1, 2, 3, 4, 5)))
    '2020-01-02T03:04:05'

Settings:
    >>> from packson import SerializerConfig
    >>> serializer = MsgPackSerializer(SerializerConfig(sort_maps=True, keep_null_properties=True))
"""

from typing import Any

import msgpack

from packson import swaps
from packson.beans import BeanMeta, BeanPropertyMeta, BeanRegistry, PropertyValue, bean_registry, register_bean
from packson.config import BinaryFormat, SerializerConfig, UriContext, UriRelativity, UriResolution
from packson.errors import DepthExceededError, SerializeError, SwapError, UnsupportedValueError
from packson.listener import RecordingListener, SerializerListener
from packson.meta import Char, Kind, Uri
from packson.serialize import MsgPackSerializer, SerializerSession
from packson.swaps import ObjectSwap, SwapRegistry


def serialize(obj: Any, expected_type: Any = None, *, serializer: MsgPackSerializer | None = None) -> bytes:
    """
    Serialize a Python object graph to MessagePack bytes.

    Args:
        obj: The root value.
        expected_type: Declared type of obj, e.g. list[Person]. Defaults to
            the class of obj.
        serializer: Serializer to use. Defaults to MsgPackSerializer.DEFAULT.

    Returns:
        The encoded bytes.

    Raises:
        SerializeError: If the graph is too deep, holds a value that cannot
            be represented, or a swap fails.

    Example:
        >>> serialize({"a": 1, "b": "foo"}).hex(" ")
        '82 a1 61 01 a1 62 a3 66 6f 6f'
    """
    serializer = serializer or MsgPackSerializer.DEFAULT
    return serializer.serialize(obj, expected_type=expected_type)


def serialize_to_string(obj: Any, expected_type: Any = None, *, serializer: MsgPackSerializer | None = None) -> str:
    """
    Serialize obj and render the bytes as text.

    The rendering follows the serializer's binary_format setting
    (spaced hex by default).

    Example:
        >>> serialize_to_string([1, True, None])
        '93 01 C3 C0'
    """
    serializer = serializer or MsgPackSerializer.DEFAULT_SPACED_HEX
    return serializer.serialize_to_string(obj, expected_type)


def deserialize(data: bytes) -> Any:
    """
    Decode MessagePack bytes into plain Python values.

    Beans come back as dicts and collections as lists; map keys may be
    of any hashable type.
    """
    return msgpack.unpackb(data, raw=False, strict_map_key=False)


__all__ = [
    # Core API
    "serialize",
    "serialize_to_string",
    "deserialize",
    "MsgPackSerializer",
    "SerializerSession",
    # Configuration
    "SerializerConfig",
    "BinaryFormat",
    "UriContext",
    "UriResolution",
    "UriRelativity",
    # Beans
    "register_bean",
    "bean_registry",
    "BeanRegistry",
    "BeanMeta",
    "BeanPropertyMeta",
    "PropertyValue",
    # Swaps
    "swaps",
    "ObjectSwap",
    "SwapRegistry",
    # Types
    "Char",
    "Kind",
    "Uri",
    # Listeners
    "SerializerListener",
    "RecordingListener",
    # Errors
    "SerializeError",
    "DepthExceededError",
    "UnsupportedValueError",
    "SwapError",
]
