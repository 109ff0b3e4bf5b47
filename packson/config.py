"""
Configuration models for the packson serializer.

All settings are immutable pydantic models. A MsgPackSerializer holds
one SerializerConfig for its whole lifetime; per-call state lives in
the SerializerSession instead.

Example:
    >>> from packson.config import SerializerConfig
    >>> config = SerializerConfig(sort_maps=True, keep_null_properties=True)
    >>> config.max_depth
    100
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from packson.listener import SerializerListener


class BinaryFormat(str, Enum):
    """Text rendering used when serialized bytes are returned as a string."""

    HEX = "HEX"
    SPACED_HEX = "SPACED_HEX"
    BASE64 = "BASE64"


class UriResolution(str, Enum):
    """How relative URIs are resolved before being written."""

    NONE = "NONE"
    ROOT_RELATIVE = "ROOT_RELATIVE"
    ABSOLUTE = "ABSOLUTE"


class UriRelativity(str, Enum):
    """What a relative URI (no leading slash) is relative to."""

    RESOURCE = "RESOURCE"
    PATH_INFO = "PATH_INFO"


class UriContext(BaseModel):
    """
    Describes the request context that relative URIs are resolved against.

    Attributes:
        authority: Scheme and host, e.g. "http://localhost:10000".
        context_root: Application context root, e.g. "/myContext".
        resource_path: Path of the resource, e.g. "/resource".
        path_info: Extra path info below the resource, e.g. "/foo/bar".
    """

    model_config = ConfigDict(frozen=True)

    authority: Optional[str] = None
    context_root: Optional[str] = None
    resource_path: Optional[str] = None
    path_info: Optional[str] = None


class SerializerConfig(BaseModel):
    """
    Settings controlling how an object graph is walked and encoded.

    Attributes:
        keep_null_properties: Write bean properties whose value is None.
            When off, a bean property that would recurse into an ancestor
            is dropped instead of being written as null.
        sort_maps: Sort map entries by key before writing.
        sort_collections: Sort collection elements before writing.
        sort_key: Optional key function used for both sorts.
        trim_empty_collections: Skip bean properties and map entries
            whose value is an empty collection.
        trim_empty_maps: Skip bean properties and map entries whose value
            is an empty map.
        trim_strings: Strip surrounding whitespace from strings.
        max_depth: Maximum nesting depth before DepthExceededError.
        initial_depth: Depth the root value starts at.
        add_bean_types: Write a type-name property on beans whose runtime
            class differs from the declared type.
        add_root_type: Also write the type-name property on the root bean.
        bean_type_property_name: Name of the type-name property.
        binary_format: Text rendering used by serialize_to_string().
        uri_context: Context that relative URIs are resolved against.
        uri_resolution: How far URIs are resolved.
        uri_relativity: What relative URIs are relative to.
        listener: Receives recoverable failures; defaults to a logging
            listener.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    keep_null_properties: bool = False
    sort_maps: bool = False
    sort_collections: bool = False
    sort_key: Optional[Callable[[Any], Any]] = None
    trim_empty_collections: bool = False
    trim_empty_maps: bool = False
    trim_strings: bool = False
    max_depth: int = Field(default=100, ge=0)
    initial_depth: int = Field(default=0, ge=0)
    add_bean_types: bool = False
    add_root_type: bool = False
    bean_type_property_name: str = "_type"
    binary_format: BinaryFormat = BinaryFormat.SPACED_HEX
    uri_context: UriContext = Field(default_factory=UriContext)
    uri_resolution: UriResolution = UriResolution.NONE
    uri_relativity: UriRelativity = UriRelativity.RESOURCE
    listener: Optional[SerializerListener] = None

    def copy_with(self, **changes: Any) -> "SerializerConfig":
        """Return a copy of this config with the given settings replaced."""
        return self.model_copy(update=changes)
