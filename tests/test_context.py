"""Tests for wren.context — Context, typed state bag, current_context."""

import pytest

from wren.context import (
    Context,
    RequestLifetime,
    State,
    StateKey,
    context_var,
    current_context,
)
from wren.http.headers import Headers
from wren.http.request import Request
from wren.http.response import Response

USER = StateKey("auth", "user", str)
ATTEMPTS = StateKey("retry", "attempts", int)


def _request(path: str = "/") -> Request:
    return Request(method="GET", path=path, headers=Headers())


class TestStateKey:
    def test_qualified_name(self) -> None:
        assert USER.qualified_name == "auth.user"

    def test_repr(self) -> None:
        assert repr(ATTEMPTS) == "StateKey('retry.attempts', int)"

    def test_equal_keys_share_a_slot(self) -> None:
        state = State()
        state[USER] = "alice"
        assert state[StateKey("auth", "user", str)] == "alice"


class TestState:
    def test_set_and_get(self) -> None:
        state = State()
        state[USER] = "alice"
        assert state[USER] == "alice"
        assert USER in state
        assert len(state) == 1

    def test_type_checked_on_write(self) -> None:
        state = State()
        with pytest.raises(TypeError, match="'retry.attempts' holds int, got str"):
            state[ATTEMPTS] = "three"  # type: ignore[assignment]

    def test_missing_raises_key_error(self) -> None:
        with pytest.raises(KeyError, match="auth.user"):
            _ = State()[USER]

    def test_get_fails_soft(self) -> None:
        state = State()
        assert state.get(USER) is None
        assert state.get(ATTEMPTS, 0) == 0

    def test_delete(self) -> None:
        state = State()
        state[USER] = "alice"
        del state[USER]
        assert USER not in state

    def test_delete_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            del State()[USER]

    def test_iterates_keys(self) -> None:
        state = State()
        state[USER] = "alice"
        state[ATTEMPTS] = 2
        assert list(state) == [USER, ATTEMPTS]

    def test_contains_rejects_plain_strings(self) -> None:
        state = State()
        state[USER] = "alice"
        assert "auth.user" not in state


class TestContext:
    def test_fresh_response_and_state(self) -> None:
        ctx = Context(_request())
        assert isinstance(ctx.response, Response)
        assert not ctx.response.is_written
        assert len(ctx.state) == 0

    def test_contexts_do_not_share_state(self) -> None:
        a = Context(_request())
        b = Context(_request())
        a.state[USER] = "alice"
        assert USER not in b.state
        assert a.response is not b.response

    def test_route_values_read_only_view(self) -> None:
        ctx = Context(_request(), route_values={"name": "world"})
        assert ctx.route_values["name"] == "world"
        with pytest.raises(TypeError):
            ctx.route_values["name"] = "other"  # type: ignore[index]

    def test_route_values_copied_from_input(self) -> None:
        values = {"name": "world"}
        ctx = Context(_request(), route_values=values)
        values["name"] = "changed"
        assert ctx.route_value("name") == "world"

    def test_route_value_default(self) -> None:
        ctx = Context(_request())
        assert ctx.route_value("missing") is None
        assert ctx.route_value("missing", "fallback") == "fallback"

    def test_set_route_value(self) -> None:
        ctx = Context(_request(), route_values={"name": "world"})
        ctx.set_route_value("name", "moon")
        assert ctx.route_value("name") == "moon"

    def test_aborted_follows_lifetime(self) -> None:
        lifetime = RequestLifetime()
        ctx = Context(_request(), lifetime=lifetime)
        assert ctx.aborted is False
        lifetime.abort()
        assert ctx.aborted is True

    def test_repr(self) -> None:
        assert repr(Context(_request("/x"))) == "<Context GET /x>"


class TestCurrentContext:
    def test_raises_outside_request(self) -> None:
        with pytest.raises(LookupError):
            current_context()

    def test_set_and_get(self) -> None:
        ctx = Context(_request("/test"))
        token = context_var.set(ctx)
        try:
            assert current_context() is ctx
        finally:
            context_var.reset(token)
