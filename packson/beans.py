"""
Bean property enumeration.

A bean is a structured value with a fixed, named, ordered set of
readable properties. Classes become beans in one of four ways:

- dataclasses (fields in declaration order)
- pydantic models (model_fields in declaration order)
- classes with a ``__bean_properties__`` attribute naming the properties
- explicit registration via register_bean()

Registration is static: the serializer never scans instances to guess
which attributes are properties.

Example:
    >>> class Point:
    ...     def __init__(self, x, y):
    ...         self.x, self.y = x, y
    >>> meta = register_bean(Point, ["x", "y"])
    >>> meta.names
    ['x', 'y']
"""

from __future__ import annotations

import dataclasses
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from pydantic import BaseModel


@dataclass(frozen=True)
class BeanPropertyMeta:
    """
    Describes one bean property.

    Attributes:
        name: Property name, written as the map key.
        annotation: Declared type of the property value.
        uri: Write the value as a URI.
        getter: Reads the value from a bean; defaults to getattr(bean, name).
    """

    name: str
    annotation: Any = Any
    uri: bool = False
    getter: Callable[[Any], Any] | None = None

    def get(self, bean: Any) -> Any:
        if self.getter is not None:
            return self.getter(bean)
        return getattr(bean, self.name)


@dataclass
class PropertyValue:
    """
    One property read from one bean instance.

    Exactly one of value/thrown is meaningful: thrown holds the exception
    raised by the property's getter.
    """

    meta: BeanPropertyMeta
    value: Any = None
    thrown: BaseException | None = None

    @property
    def name(self) -> str:
        return self.meta.name


@dataclass
class BeanMeta:
    """Ordered property description for one bean class."""

    bean_class: type
    properties: list[BeanPropertyMeta] = field(default_factory=list)
    type_name: str | None = None

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.properties]

    def get_values(
        self,
        bean: Any,
        keep_null: bool,
        type_property: PropertyValue | None = None,
    ) -> list[PropertyValue]:
        """
        Read every property of bean, in declared order.

        A getter that raises yields a PropertyValue with thrown set
        instead of aborting. None values are dropped unless keep_null.
        The type_property, when given, is placed first.
        """
        values = [type_property] if type_property is not None else []
        for prop in self.properties:
            try:
                value = prop.get(bean)
            except Exception as exc:
                values.append(PropertyValue(prop, thrown=exc))
                continue
            if value is None and not keep_null:
                continue
            values.append(PropertyValue(prop, value))
        return values


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return dict(getattr(cls, "__annotations__", {}))


def _implicit_properties(cls: type) -> list[BeanPropertyMeta] | None:
    """Derive properties for dataclasses, pydantic models and __bean_properties__ classes."""
    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        return [
            BeanPropertyMeta(
                name=f.name,
                annotation=hints.get(f.name, Any),
                uri=bool(f.metadata.get("uri", False)),
            )
            for f in dataclasses.fields(cls)
        ]

    if issubclass(cls, BaseModel):
        uri_names = set(getattr(cls, "__uri_properties__", ()))
        return [
            BeanPropertyMeta(name=name, annotation=info.annotation or Any, uri=name in uri_names)
            for name, info in cls.model_fields.items()
        ]

    names = getattr(cls, "__bean_properties__", None)
    if names is not None:
        hints = _type_hints(cls)
        uri_names = set(getattr(cls, "__uri_properties__", ()))
        return [
            BeanPropertyMeta(name=name, annotation=hints.get(name, Any), uri=name in uri_names)
            for name in names
        ]

    return None


class BeanRegistry:
    """
    Maps classes to their BeanMeta.

    Explicit registrations are looked up along the MRO, so subclasses of a
    registered class are beans too. Implicit bean classes are detected
    once and remembered.
    """

    def __init__(self):
        self._registered: dict[type, BeanMeta] = {}
        self._implicit: dict[type, BeanMeta | None] = {}

    def register(
        self,
        cls: type,
        properties: Sequence[str | BeanPropertyMeta] | None = None,
        *,
        exclude_properties: Iterable[str] = (),
        uri_properties: Iterable[str] = (),
        type_name: str | None = None,
        sort_properties: bool = False,
    ) -> BeanMeta:
        """
        Register cls as a bean.

        Args:
            cls: The bean class.
            properties: Property names (or full BeanPropertyMeta) in output
                order. Defaults to the implicit properties of the class.
            exclude_properties: Names to leave out.
            uri_properties: Names whose values are written as URIs.
            type_name: Name written in the type property when bean types
                are added to the output.
            sort_properties: Order properties alphabetically.

        Raises:
            ValueError: If no properties are given and none can be derived.
        """
        if properties is None:
            props = _implicit_properties(cls)
            if props is None:
                raise ValueError(
                    f"Cannot derive bean properties for {cls.__qualname__}; "
                    f"pass them explicitly to register_bean()"
                )
        else:
            hints = _type_hints(cls)
            props = [
                p if isinstance(p, BeanPropertyMeta) else BeanPropertyMeta(p, hints.get(p, Any))
                for p in properties
            ]

        excluded = set(exclude_properties)
        uri_names = set(uri_properties)
        props = [
            dataclasses.replace(p, uri=True) if p.name in uri_names else p
            for p in props
            if p.name not in excluded
        ]
        if sort_properties:
            props.sort(key=lambda p: p.name)

        meta = BeanMeta(cls, props, type_name or getattr(cls, "__bean_type_name__", None))
        self._registered[cls] = meta
        self._implicit.pop(cls, None)
        return meta

    def find(self, cls: type) -> BeanMeta | None:
        for klass in cls.__mro__:
            meta = self._registered.get(klass)
            if meta is not None:
                return meta

        if cls not in self._implicit:
            props = _implicit_properties(cls)
            self._implicit[cls] = (
                None
                if props is None
                else BeanMeta(cls, props, getattr(cls, "__bean_type_name__", None))
            )
        return self._implicit[cls]

    def __contains__(self, cls: type) -> bool:
        return self.find(cls) is not None


# Registry used by serializers that are not given one explicitly.
bean_registry = BeanRegistry()


def register_bean(
    cls: type,
    properties: Sequence[str | BeanPropertyMeta] | None = None,
    **kwargs: Any,
) -> BeanMeta:
    """Register cls as a bean in the default registry. See BeanRegistry.register()."""
    return bean_registry.register(cls, properties, **kwargs)
