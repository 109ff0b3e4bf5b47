"""Tests for bean registration and property enumeration."""

from dataclasses import dataclass, field
from typing import Any

import pytest
from pydantic import BaseModel

from packson.beans import BeanPropertyMeta, BeanRegistry, bean_registry, register_bean


@dataclass
class Address:
    street: str
    city: str = "Paris"
    homepage: str = field(default="", metadata={"uri": True})


class Profile(BaseModel):
    __uri_properties__ = ("avatar",)

    login: str
    avatar: str = ""


class Declared:
    __bean_properties__ = ("b", "a")
    __bean_type_name__ = "declared"
    a: int

    def __init__(self):
        self.a = 1
        self.b = None


class Plain:
    def __init__(self):
        self.x = 1
        self.y = 2
        self.secret = "s"


class PlainChild(Plain):
    pass


class TestImplicitBeans:
    """Dataclasses, pydantic models and __bean_properties__ classes."""

    def test_dataclass(self):
        meta = BeanRegistry().find(Address)
        assert meta.names == ["street", "city", "homepage"]
        assert [p.uri for p in meta.properties] == [False, False, True]
        assert meta.properties[0].annotation is str

    def test_pydantic_model(self):
        meta = BeanRegistry().find(Profile)
        assert meta.names == ["login", "avatar"]
        assert meta.properties[1].uri

    def test_bean_properties_attribute(self):
        meta = BeanRegistry().find(Declared)
        assert meta.names == ["b", "a"]
        assert meta.type_name == "declared"
        assert meta.properties[1].annotation is int

    def test_plain_class_is_not_a_bean(self):
        registry = BeanRegistry()
        assert registry.find(Plain) is None
        assert Plain not in registry


class TestRegistration:
    """Explicit registration with filters."""

    def test_properties_and_exclusions(self):
        registry = BeanRegistry()
        meta = registry.register(Plain, ["x", "y", "secret"], exclude_properties=["secret"])
        assert meta.names == ["x", "y"]

    def test_uri_and_sort(self):
        registry = BeanRegistry()
        meta = registry.register(Plain, ["y", "x"], uri_properties=["x"], sort_properties=True)
        assert meta.names == ["x", "y"]
        assert meta.properties[0].uri

    def test_subclasses_inherit_registration(self):
        registry = BeanRegistry()
        registry.register(Plain, ["x"], type_name="plain")
        assert registry.find(PlainChild).names == ["x"]

    def test_registering_a_dataclass_with_filters(self):
        registry = BeanRegistry()
        meta = registry.register(Address, exclude_properties=["homepage"])
        assert meta.names == ["street", "city"]

    def test_underivable_properties(self):
        with pytest.raises(ValueError, match="register_bean"):
            BeanRegistry().register(Plain)

    def test_custom_getter(self):
        registry = BeanRegistry()
        meta = registry.register(Plain, [BeanPropertyMeta("total", int, getter=lambda p: p.x + p.y)])
        assert [v.value for v in meta.get_values(Plain(), keep_null=False)] == [3]

    def test_default_registry(self):
        class Local:
            def __init__(self):
                self.v = 1

        meta = register_bean(Local, ["v"])
        assert bean_registry.find(Local) is meta


class TestGetValues:
    """get_values() reads properties without raising."""

    def test_nulls_dropped_unless_kept(self):
        meta = BeanRegistry().find(Declared)
        assert [v.name for v in meta.get_values(Declared(), keep_null=False)] == ["a"]
        assert [v.name for v in meta.get_values(Declared(), keep_null=True)] == ["b", "a"]

    def test_getter_failure_is_captured(self):
        class Broken:
            __bean_properties__ = ("ok", "bad")
            ok = 1

            @property
            def bad(self):
                raise KeyError("bad")

        values = BeanRegistry().find(Broken).get_values(Broken(), keep_null=False)
        assert values[0].value == 1 and values[0].thrown is None
        assert isinstance(values[1].thrown, KeyError)

    def test_type_property_comes_first(self):
        from packson.beans import PropertyValue

        meta = BeanRegistry().find(Address)
        type_property = PropertyValue(BeanPropertyMeta("_type", Any), "address")
        values = meta.get_values(Address("Main"), keep_null=False, type_property=type_property)
        assert [v.name for v in values] == ["_type", "street", "city", "homepage"]
