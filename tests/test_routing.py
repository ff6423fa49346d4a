"""Tests for path compilation and the route table."""

from __future__ import annotations

import pytest

from replicax.routing import PathMatcher, Route, Router, compile_path, normalize_path


def _noop(request, response, next) -> None:
    pass


# =====================================================================
# Path normalization
# =====================================================================


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/users/", "/users"),
        ("/users///", "/users"),
        ("/users", "/users"),
        ("", "/"),
        ("/", "/"),
        ("///", "/"),
    ],
)
def test_normalize_path(raw: str, expected: str) -> None:
    assert normalize_path(raw) == expected


# =====================================================================
# PathMatcher
# =====================================================================


class TestPathMatcher:
    def test_static_path(self) -> None:
        matcher = compile_path("/health")
        assert matcher.match("/health") == {}
        assert matcher.match("/other") is None

    def test_root(self) -> None:
        matcher = compile_path("/")
        assert matcher.match("/") == {}
        assert matcher.match("/users") is None

    def test_empty_pattern_is_root(self) -> None:
        assert compile_path("").pattern == "/"

    def test_trailing_slash_in_pattern_is_dropped(self) -> None:
        matcher = compile_path("/users/")
        assert matcher.pattern == "/users"
        assert matcher.match("/users") == {}

    def test_single_param(self) -> None:
        matcher = compile_path("/users/:id")
        assert matcher.match("/users/42") == {"id": "42"}
        assert matcher.param_names == ("id",)

    def test_multiple_params(self) -> None:
        matcher = compile_path("/users/:id/posts/:postId")
        assert matcher.match("/users/42/posts/7") == {"id": "42", "postId": "7"}
        assert matcher.param_names == ("id", "postId")

    def test_param_does_not_cross_separator(self) -> None:
        matcher = compile_path("/files/:name")
        assert matcher.match("/files/a/b") is None

    def test_param_requires_non_empty_segment(self) -> None:
        matcher = compile_path("/a/:x/b")
        assert matcher.match("/a//b") is None

    def test_match_is_anchored(self) -> None:
        matcher = compile_path("/users")
        assert matcher.match("/users/42") is None
        assert matcher.match("/api/users") is None

    def test_underscore_and_digits_in_name(self) -> None:
        matcher = compile_path("/orders/:order_id2")
        assert matcher.match("/orders/abc") == {"order_id2": "abc"}

    def test_regex_metacharacters_are_literal(self) -> None:
        matcher = compile_path("/files/a.b")
        assert matcher.match("/files/a.b") == {}
        assert matcher.match("/files/axb") is None

        plus = compile_path("/c++/(x)")
        assert plus.match("/c++/(x)") == {}

    def test_partial_segment_is_literal(self) -> None:
        matcher = compile_path("/files/:name.json")
        assert matcher.param_names == ()
        assert matcher.match("/files/:name.json") == {}
        assert matcher.match("/files/report.json") is None

    def test_bare_colon_is_literal(self) -> None:
        matcher = compile_path("/a/:")
        assert matcher.match("/a/:") == {}
        assert matcher.match("/a/b") is None

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate path parameter 'id'"):
            compile_path("/a/:id/b/:id")

    def test_relative_pattern_never_matches_absolute_path(self) -> None:
        matcher = compile_path("users/:id")
        assert matcher.match("/users/1") is None

    def test_repr(self) -> None:
        assert repr(compile_path("/x/:y")) == "PathMatcher('/x/:y')"
        assert isinstance(compile_path("/x"), PathMatcher)


# =====================================================================
# Route & Router
# =====================================================================


class TestRoute:
    def test_route_keeps_method_as_registered(self) -> None:
        route = Route("get", "/x", (_noop,))
        assert route.method == "get"
        assert repr(route) == "Route('get', '/x')"

    def test_route_match_delegates_to_matcher(self) -> None:
        route = Route("GET", "/users/:id", (_noop,))
        assert route.match("/users/9") == {"id": "9"}
        assert route.matcher.pattern == "/users/:id"


class TestRouter:
    def test_match_returns_first_match(self) -> None:
        router = Router()
        router.add_route("GET", "/users/:id", [_noop])
        router.add_route("GET", "/users/me", [_noop])
        result = router.match("GET", "/users/me")
        assert result is not None
        route, params = result
        assert route.path == "/users/:id"
        assert params == {"id": "me"}

    def test_handlers_kept_in_order(self) -> None:
        def one(request, response, next) -> None: ...

        def two(request, response, next) -> None: ...

        router = Router()
        route = router.add_route("POST", "/x", [one, two])
        assert route.handlers == (one, two)

    def test_match_filters_by_method(self) -> None:
        router = Router()
        router.add_route("POST", "/x", [_noop])
        assert router.match("GET", "/x") is None
        assert router.match("POST", "/x") is not None

    def test_method_is_case_sensitive(self) -> None:
        router = Router()
        router.add_route("GET", "/x", [_noop])
        assert router.match("get", "/x") is None

    def test_skips_non_matching_paths(self) -> None:
        router = Router()
        router.add_route("GET", "/a", [_noop])
        router.add_route("GET", "/b/:id", [_noop])
        result = router.match("GET", "/b/3")
        assert result is not None
        assert result[1] == {"id": "3"}

    def test_match_returns_none_for_unknown(self) -> None:
        router = Router()
        assert router.match("GET", "/nope") is None

    def test_empty_handler_list_rejected(self) -> None:
        router = Router()
        with pytest.raises(ValueError, match="needs at least one handler"):
            router.add_route("GET", "/x", [])
        assert router.routes == []
