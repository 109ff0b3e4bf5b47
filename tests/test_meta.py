"""Tests for type descriptors and classification."""

import array
import io
import uuid
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Any, Optional, Union

import pytest
from pydantic import AnyUrl

from packson.beans import BeanRegistry
from packson.meta import Char, Kind, MetaCache, Uri, classify
from packson.swaps import DEFAULT_SWAPS, SwapRegistry


@dataclass
class Pet:
    name: str


@pytest.fixture
def cache():
    return MetaCache(BeanRegistry(), SwapRegistry(DEFAULT_SWAPS))


def kind_of(cache, value):
    return classify(value, cache.for_object(value))


class TestClassify:
    """Values classify by their runtime class."""

    @pytest.mark.parametrize(
        "value, kind",
        [
            (None, Kind.NULL),
            (True, Kind.BOOLEAN),
            (1, Kind.NUMBER),
            (1.5, Kind.NUMBER),
            (Pet("rex"), Kind.BEAN),
            (Uri("/a"), Kind.URI),
            ("text", Kind.STRING),
            ({"a": 1}, Kind.MAP),
            (OrderedDict(), Kind.MAP),
            ([1], Kind.COLLECTION),
            ((1,), Kind.COLLECTION),
            ({1}, Kind.COLLECTION),
            (deque(), Kind.COLLECTION),
            (b"x", Kind.BYTE_ARRAY),
            (bytearray(b"x"), Kind.BYTE_ARRAY),
            (array.array("b"), Kind.ARRAY),
            (io.StringIO(), Kind.READER),
            (io.BytesIO(), Kind.INPUT_STREAM),
            (object(), Kind.OTHER),
            (complex(1, 1), Kind.OTHER),
        ],
    )
    def test_kinds(self, cache, value, kind):
        assert kind_of(cache, value) is kind

    def test_pydantic_url(self, cache):
        assert kind_of(cache, AnyUrl("http://example.com/")) is Kind.URI

    def test_char_zero(self, cache):
        char = cache.get(Char)
        assert classify("\x00", char) is Kind.NULL
        assert classify("a", char) is Kind.STRING
        assert classify("\x00", cache.get(str)) is Kind.STRING

    def test_uri_property(self, cache):
        assert classify("a/b", cache.get(str), uri_property=True) is Kind.URI
        assert classify(1, cache.get(int), uri_property=True) is Kind.NUMBER

    def test_bool_before_number(self, cache):
        assert cache.get(bool).kind is Kind.BOOLEAN


class TestTypeMeta:
    """TypeMeta exposes container element types and swaps."""

    def test_collection_element_type(self, cache):
        meta = cache.get(list[int])
        assert meta.inner_class is list
        assert meta.element_type is cache.get(int)

    def test_map_key_and_value_types(self, cache):
        meta = cache.get(dict[str, Pet])
        assert meta.key_type is cache.get(str)
        assert meta.value_type.kind is Kind.BEAN

    def test_tuple_element_types(self, cache):
        assert cache.get(tuple[int, ...]).element_type is cache.get(int)
        assert cache.get(tuple[int, str]).element_type.is_object

    def test_unparameterized_containers(self, cache):
        assert cache.get(list).element_type.is_object
        assert cache.get(dict).key_type.is_object

    def test_optional_is_stripped(self, cache):
        assert cache.get(Optional[int]).inner_class is int
        assert cache.get(int | None).inner_class is int
        assert cache.get(Union[int, str]).is_object

    def test_any_and_forward_refs(self, cache):
        assert cache.get(Any).is_object
        assert cache.get(None).is_object
        assert cache.get("Pet").is_object

    def test_swap_is_resolved(self, cache):
        assert cache.get(uuid.UUID).swap is not None
        assert cache.get(int).swap is None

    def test_metas_are_cached(self, cache):
        assert cache.get(list[int]) is cache.get(list[int])
        size = len(cache)
        cache.get(list[int])
        assert len(cache) == size

    def test_for_object_reuses_declared(self, cache):
        declared = cache.get(list[int])
        assert cache.for_object([1], declared) is declared
        assert cache.for_object((1,), declared) is cache.get(tuple)
