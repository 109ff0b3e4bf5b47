"""
Serializer and serializer session for the packson library.

MsgPackSerializer holds immutable configuration: settings, swaps and the
bean registry. Each call to serialize() runs in a fresh SerializerSession
that owns the per-walk state:

- a MetaCache of TypeMetas for every type met during the walk
- a RecursionGuard tracking the values along the current path
- the MsgPackOutputStream writing to the caller's output

Every value goes through the same steps in _serialize_anything():

1. None is written as null.
2. The guard is entered; a value that is already being encoded further
   up the path (a cycle) is written as null.
3. The swap for the runtime type, if any, replaces the value.
4. The value is classified and dispatched by Kind. Containers recurse.
5. The guard is exited, whether or not encoding succeeded.

Container contents are snapshotted and filtered before the size header is
written, so the header count always matches the entries that follow.

A session is not thread-safe. It may be reused for sequential calls.
"""

from __future__ import annotations

import base64
import io
import logging
from collections.abc import Collection, Mapping
from typing import Any, BinaryIO

from packson.beans import BeanMeta, BeanPropertyMeta, BeanRegistry, PropertyValue, bean_registry
from packson.config import BinaryFormat, SerializerConfig
from packson.errors import SerializeError, SwapError, UnsupportedValueError
from packson.guard import RecursionGuard, StackElement
from packson.listener import SerializerListener
from packson.meta import Kind, MetaCache, TypeMeta, classify
from packson.ordering import order_collection, order_map, to_list
from packson.output import MsgPackOutputStream
from packson.swaps import DEFAULT_SWAPS, ObjectSwap, SwapRegistry
from packson.uri import UriResolver

logger = logging.getLogger("packson.serialize")


def _render(data: bytes, binary_format: BinaryFormat) -> str:
    if binary_format is BinaryFormat.BASE64:
        return base64.b64encode(data).decode("ascii")
    if binary_format is BinaryFormat.HEX:
        return data.hex().upper()
    return data.hex(" ").upper()


class MsgPackSerializer:
    """
    Serializes object graphs to MessagePack.

    Args:
        config: Serializer settings. Defaults to SerializerConfig().
        swaps: A SwapRegistry, or swaps / (type, callable) pairs to build
            one from. Defaults to DEFAULT_SWAPS.
        beans: Bean registry. Defaults to the module-level bean_registry.

    Example:
        >>> serializer = MsgPackSerializer(SerializerConfig(sort_maps=True))
        >>> serializer.serialize({"b": 2, "a": 1}).hex(" ")
        '82 a1 61 01 a1 62 02'
    """

    DEFAULT: MsgPackSerializer
    DEFAULT_SPACED_HEX: MsgPackSerializer
    DEFAULT_BASE64: MsgPackSerializer

    def __init__(
        self,
        config: SerializerConfig | None = None,
        swaps: SwapRegistry | Collection | None = None,
        beans: BeanRegistry | None = None,
    ):
        self.config = config or SerializerConfig()
        if swaps is None:
            swaps = SwapRegistry(DEFAULT_SWAPS)
        elif not isinstance(swaps, SwapRegistry):
            swaps = SwapRegistry(swaps)
        self.swaps: SwapRegistry = swaps
        self.beans = beans if beans is not None else bean_registry

    def copy_with(self, **changes: Any) -> "MsgPackSerializer":
        """Return a serializer sharing swaps and beans, with settings replaced."""
        return MsgPackSerializer(self.config.copy_with(**changes), self.swaps, self.beans)

    def create_session(self) -> "SerializerSession":
        return SerializerSession(self)

    def serialize(self, obj: Any, out: BinaryIO | None = None, expected_type: Any = None):
        """
        Serialize obj.

        Args:
            obj: The root value.
            out: Binary output to write to. When omitted the encoded bytes
                are returned instead.
            expected_type: Declared type of obj; defaults to its class.

        Returns:
            The encoded bytes when out is None, otherwise the number of
            bytes written to out.
        """
        session = self.create_session()
        if out is None:
            buffer = io.BytesIO()
            session.serialize(obj, buffer, expected_type)
            return buffer.getvalue()
        return session.serialize(obj, out, expected_type)

    def serialize_to_string(self, obj: Any, expected_type: Any = None) -> str:
        """Serialize obj and render the bytes using the configured binary_format."""
        return _render(self.serialize(obj, expected_type=expected_type), self.config.binary_format)


MsgPackSerializer.DEFAULT = MsgPackSerializer()
MsgPackSerializer.DEFAULT_SPACED_HEX = MsgPackSerializer(SerializerConfig(binary_format=BinaryFormat.SPACED_HEX))
MsgPackSerializer.DEFAULT_BASE64 = MsgPackSerializer(SerializerConfig(binary_format=BinaryFormat.BASE64))


class SerializerSession:
    """
    State for serializing one object graph at a time.

    Attributes:
        ctx: The serializer this session was created from.
        config: The serializer's settings.
        meta: TypeMeta cache for this session.
        guard: Recursion guard for the walk in progress.
        listener: Receives recoverable failures.
        uri_resolver: Resolves values written as URIs.
    """

    def __init__(self, ctx: MsgPackSerializer):
        self.ctx = ctx
        self.config = ctx.config
        self.meta = MetaCache(ctx.beans, ctx.swaps)
        self.guard = RecursionGuard(self.config.max_depth, self.config.initial_depth)
        self.listener = self.config.listener or SerializerListener()
        self.uri_resolver = UriResolver(
            self.config.uri_resolution,
            self.config.uri_relativity,
            self.config.uri_context,
        )

    @property
    def path(self) -> list[str]:
        return self.guard.path

    def reset(self) -> None:
        """Discard walk state so the session can be reused."""
        self.guard.reset()

    def serialize(self, obj: Any, out: BinaryIO, expected_type: Any = None) -> int:
        """
        Write obj to out and return the number of bytes written.

        Raises:
            SerializeError: On depth overflow, unsupported values or failing
                swaps. Errors raised by out.write() propagate unchanged.
        """
        if expected_type is not None:
            e_meta = self.meta.get(expected_type)
        elif self.config.add_root_type:
            e_meta = self.meta.object
        else:
            e_meta = self.meta.for_object(obj)

        stream = MsgPackOutputStream(out)
        logger.debug(f"Serializing {type(obj).__name__} as {e_meta.name}")
        try:
            self._serialize_anything(stream, obj, e_meta, "root", None)
        except SerializeError as exc:
            self.listener.on_error(self, exc, f"Serialization failed: {exc}")
            raise
        finally:
            self.reset()
        stream.flush()
        logger.debug(f"Serialized {stream.bytes_written} bytes")
        return stream.bytes_written

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _serialize_anything(
        self,
        out: MsgPackOutputStream,
        o: Any,
        e_meta: TypeMeta | None,
        attr_name: str | None,
        p_meta: BeanPropertyMeta | None,
    ) -> None:
        if o is None:
            out.append_null()
            return

        if e_meta is None:
            e_meta = self.meta.object

        a_meta = self.meta.for_object(o, e_meta)
        element = self.guard.enter(attr_name, o, a_meta)
        if element is None:
            out.append_null()
            return

        try:
            s_meta = a_meta
            type_name = self._bean_type_name(e_meta, a_meta, element.depth)

            if a_meta.swap is not None:
                o = self._swap(a_meta.swap, o, a_meta)
                s_meta = self.meta.get(a_meta.swap.swapped_class)
                if s_meta.is_object:
                    s_meta = self.meta.for_object(o)

            kind = classify(o, s_meta, p_meta is not None and p_meta.uri)

            if kind is Kind.NULL:
                out.append_null()
            elif kind is Kind.BOOLEAN:
                out.append_boolean(o)
            elif kind is Kind.NUMBER:
                self._append_number(out, o, s_meta, element)
            elif kind is Kind.BEAN:
                self._serialize_bean(out, o, s_meta.bean_meta, type_name)
            elif kind is Kind.URI:
                self._append_string(out, self.uri_resolver.resolve(str(o)), s_meta, element)
            elif kind is Kind.STRING:
                self._append_string(out, self._trim(str(o)), s_meta, element)
            elif kind is Kind.MAP:
                self._serialize_map(out, o, e_meta)
            elif kind is Kind.COLLECTION:
                self._serialize_collection(out, o, e_meta)
            elif kind is Kind.BYTE_ARRAY:
                out.append_binary(o)
            elif kind is Kind.ARRAY:
                self._serialize_collection(out, to_list(o), e_meta)
            elif kind is Kind.READER:
                out.pipe_reader(o)
            elif kind is Kind.INPUT_STREAM:
                out.pipe_stream(o)
            else:
                self._append_string(out, self._trim(str(o)), s_meta, element)
        finally:
            self.guard.exit(element)

    def _swap(self, swap: ObjectSwap, o: Any, a_meta: TypeMeta) -> Any:
        try:
            swapped = swap.swap(self, o)
        except Exception as exc:
            raise SwapError(
                f"Could not swap value of type '{a_meta.name}' using {swap!r}: {exc}",
                path=self.path,
                type_name=a_meta.name,
            ) from exc
        logger.debug(f"Swapped {a_meta.name} using {swap!r}")
        return swapped

    def _value_path(self, element: StackElement) -> list[str]:
        """Path to the value being written, including unpushed leaves."""
        if element.pushed or not element.name:
            return self.path
        return self.path + [element.name]

    def _append_number(self, out: MsgPackOutputStream, o: Any, meta: TypeMeta, element: StackElement) -> None:
        try:
            out.append_number(o)
        except OverflowError as exc:
            raise UnsupportedValueError(
                f"Cannot serialize {meta.name} value {o!r}: {exc}",
                path=self._value_path(element),
                type_name=meta.name,
            ) from exc

    def _append_string(self, out: MsgPackOutputStream, s: str, meta: TypeMeta, element: StackElement) -> None:
        try:
            out.append_string(s)
        except UnicodeEncodeError as exc:
            raise UnsupportedValueError(
                f"Cannot serialize {meta.name} value as UTF-8: {exc}",
                path=self._value_path(element),
                type_name=meta.name,
            ) from exc

    def _bean_type_name(self, e_meta: TypeMeta, a_meta: TypeMeta, depth: int) -> str | None:
        bean = a_meta.bean_meta
        if bean is None or bean.type_name is None or not self.config.add_bean_types:
            return None
        is_root = depth == self.config.initial_depth
        if e_meta is a_meta and not (is_root and self.config.add_root_type):
            return None
        return bean.type_name

    def _trim(self, s: str) -> str:
        return s.strip() if self.config.trim_strings else s

    def _is_trimmed(self, value: Any) -> bool:
        """True if value is an empty container that the settings say to skip."""
        if isinstance(value, Mapping):
            return self.config.trim_empty_maps and len(value) == 0
        if isinstance(value, (str, bytes, bytearray, memoryview)):
            return False
        if isinstance(value, Collection):
            return self.config.trim_empty_collections and len(value) == 0
        return False

    # =========================================================================
    # Containers
    # =========================================================================

    def _serialize_bean(
        self,
        out: MsgPackOutputStream,
        bean: Any,
        bean_meta: BeanMeta,
        type_name: str | None,
    ) -> None:
        keep_null = self.config.keep_null_properties
        type_property = None
        if type_name is not None:
            type_property = PropertyValue(
                BeanPropertyMeta(self.config.bean_type_property_name, str),
                type_name,
            )

        entries: list[PropertyValue] = []
        for prop in bean_meta.get_values(bean, keep_null, type_property):
            if prop.thrown is not None:
                self.listener.on_bean_getter_exception(self, prop, prop.thrown)
            elif not keep_null and self.guard.will_recurse(prop.value):
                continue
            elif self._is_trimmed(prop.value):
                continue
            else:
                entries.append(prop)

        out.start_map(len(entries))
        for prop in entries:
            self._serialize_anything(out, prop.name, None, None, None)
            self._serialize_anything(out, prop.value, self.meta.get(prop.meta.annotation), prop.name, prop.meta)

    def _serialize_map(self, out: MsgPackOutputStream, m: Mapping, e_meta: TypeMeta) -> None:
        key_meta, value_meta = e_meta.key_type, e_meta.value_type
        entries = order_map(m, self.config.sort_maps, self.config.sort_key)
        if self.config.trim_empty_maps or self.config.trim_empty_collections:
            entries = [(k, v) for k, v in entries if not self._is_trimmed(v)]

        out.start_map(len(entries))
        for key, value in entries:
            self._serialize_anything(out, self._generalize(key, key_meta), key_meta, None, None)
            self._serialize_anything(out, value, value_meta, None, None)

    def _generalize(self, key: Any, key_meta: TypeMeta) -> Any:
        """Coerce a map key to the declared key type where that is a string."""
        if key is None or key_meta.is_object:
            return key
        if key_meta.kind is Kind.STRING and not isinstance(key, str):
            return str(key)
        return key

    def _serialize_collection(self, out: MsgPackOutputStream, c: Collection, e_meta: TypeMeta) -> None:
        element_meta = e_meta.element_type
        items = order_collection(c, self.config.sort_collections, self.config.sort_key)

        out.start_array(len(items))
        for item in items:
            self._serialize_anything(out, item, element_meta, "<iterator>", None)
