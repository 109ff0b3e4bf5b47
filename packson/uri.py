"""
Resolution of relative URIs to root-relative or absolute form.

Strings classified as URIs are passed through a UriResolver before they
are written. Besides plain relative and root-relative paths, three
prefixes are understood:

- "context:/..."  relative to the context root
- "servlet:/..."  relative to the resource path
- "request:/..."  relative to the resource path plus path info
"""

from __future__ import annotations

import re

from packson.config import UriContext, UriRelativity, UriResolution

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")

_PREFIXES = ("context:", "servlet:", "request:")


def _join(base: str, rest: str) -> str:
    base = base.rstrip("/")
    if not rest or rest == "/":
        return base or "/"
    return base + "/" + rest.lstrip("/")


def _is_absolute(uri: str) -> bool:
    return bool(_SCHEME.match(uri)) and not uri.startswith(_PREFIXES)


class UriResolver:
    """Turns relative URIs into the form selected by UriResolution."""

    def __init__(
        self,
        resolution: UriResolution = UriResolution.NONE,
        relativity: UriRelativity = UriRelativity.RESOURCE,
        context: UriContext | None = None,
    ):
        self.resolution = resolution
        self.relativity = relativity
        self.context = context or UriContext()

    def resolve(self, uri: str) -> str:
        if self.resolution is UriResolution.NONE or _is_absolute(uri):
            return uri

        path = self._root_relative(uri)

        if self.resolution is UriResolution.ABSOLUTE and self.context.authority:
            return self.context.authority.rstrip("/") + path
        return path

    def _root_relative(self, uri: str) -> str:
        ctx = self.context
        context_root = ctx.context_root or ""
        resource = _join(context_root, ctx.resource_path or "")
        request = _join(resource, ctx.path_info or "")

        if uri.startswith("context:"):
            return _join(context_root, uri[len("context:"):])
        if uri.startswith("servlet:"):
            return _join(resource, uri[len("servlet:"):])
        if uri.startswith("request:"):
            return _join(request, uri[len("request:"):])
        if uri.startswith("/"):
            return uri

        if self.relativity is UriRelativity.PATH_INFO:
            return _join(request, uri)
        return _join(resource, uri)
