"""Tests for URI resolution."""

import pytest

from packson.config import UriContext, UriRelativity, UriResolution
from packson.uri import UriResolver

CONTEXT = UriContext(
    authority="http://host:8080",
    context_root="/ctx",
    resource_path="/res",
    path_info="/info",
)


class TestUriResolver:
    """Relative URIs are expanded according to the resolution setting."""

    def test_none_leaves_uris_alone(self):
        resolver = UriResolver(UriResolution.NONE, context=CONTEXT)
        assert resolver.resolve("foo") == "foo"
        assert resolver.resolve("context:/foo") == "context:/foo"

    @pytest.mark.parametrize(
        "uri, expected",
        [
            ("foo", "/ctx/res/foo"),
            ("/foo", "/foo"),
            ("context:/foo", "/ctx/foo"),
            ("servlet:/foo", "/ctx/res/foo"),
            ("request:/foo", "/ctx/res/info/foo"),
            ("context:/", "/ctx"),
            ("http://other/x", "http://other/x"),
            ("mailto:someone@example.com", "mailto:someone@example.com"),
        ],
    )
    def test_root_relative(self, uri, expected):
        resolver = UriResolver(UriResolution.ROOT_RELATIVE, context=CONTEXT)
        assert resolver.resolve(uri) == expected

    def test_absolute(self):
        resolver = UriResolver(UriResolution.ABSOLUTE, context=CONTEXT)
        assert resolver.resolve("foo") == "http://host:8080/ctx/res/foo"
        assert resolver.resolve("/foo") == "http://host:8080/foo"
        assert resolver.resolve("https://x/y") == "https://x/y"

    def test_path_info_relativity(self):
        resolver = UriResolver(UriResolution.ROOT_RELATIVE, UriRelativity.PATH_INFO, CONTEXT)
        assert resolver.resolve("foo") == "/ctx/res/info/foo"

    def test_empty_context(self):
        resolver = UriResolver(UriResolution.ABSOLUTE)
        assert resolver.resolve("foo") == "/foo"
        assert resolver.resolve("context:/") == "/"
