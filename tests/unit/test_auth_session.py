"""Unit tests for AuthSession and token expiry inspection."""

import pytest

from basebase.core.registry import Basebase
from basebase.domain.exceptions import InvalidArgumentError, UnauthenticatedError
from basebase.firestore.functions import doc, get_doc
from basebase.infrastructure.auth.session import (
    AuthSession,
    AuthState,
    BasebaseUser,
    decode_token_payload,
    is_token_expired,
)
from tests.conftest import FakeBasebaseServer, make_token


class TestTokenExpiry:
    """is_token_expired / decode_token_payload."""

    def test_future_exp_not_expired(self) -> None:
        assert not is_token_expired(make_token(3600))

    def test_past_exp_expired(self) -> None:
        assert is_token_expired(make_token(-60))

    def test_no_exp_never_expires(self) -> None:
        assert not is_token_expired(make_token(None))

    def test_garbage_counts_as_expired(self) -> None:
        assert is_token_expired("not-a-jwt")

    def test_decode_payload(self) -> None:
        assert decode_token_payload(make_token(None, role="admin")) == {
            "sub": "user-1",
            "role": "admin",
        }

    def test_decode_garbage_raises(self) -> None:
        with pytest.raises(InvalidArgumentError):
            decode_token_payload("a.b")


class TestAuthSession:
    """Token state and the Authorization header."""

    def test_header(self) -> None:
        token = make_token()
        assert AuthSession(token).auth_header() == {"Authorization": f"Bearer {token}"}

    def test_missing_token_raises(self) -> None:
        session = AuthSession()
        assert not session.is_authenticated
        with pytest.raises(UnauthenticatedError, match="sign in"):
            session.auth_header()

    def test_expired_token_is_cleared(self, caplog: pytest.LogCaptureFixture) -> None:
        session = AuthSession(make_token(-60))
        with pytest.raises(UnauthenticatedError, match="expired"):
            session.auth_header()
        assert session.token is None
        assert "expired" in caplog.text

    def test_set_token_and_sign_out(self) -> None:
        session = AuthSession()
        session.set_token(make_token())
        assert session.is_authenticated
        session.sign_out()
        assert session.token is None
        with pytest.raises(InvalidArgumentError):
            session.set_token("")

    def test_remote_calls_need_transport(self) -> None:
        with pytest.raises(InvalidArgumentError):
            AuthSession()._require_transport()

    @pytest.mark.asyncio
    async def test_request_without_token_fails_before_sending(
        self, bb: Basebase, server: FakeBasebaseServer
    ) -> None:
        bb.auth.sign_out()
        with pytest.raises(UnauthenticatedError):
            await get_doc(doc(bb, "users/a"))
        assert server.requests == []


class TestPhoneVerification:
    """request_code / verify_code against the fake server."""

    @pytest.mark.asyncio
    async def test_request_code(self, bb: Basebase, server: FakeBasebaseServer) -> None:
        resp = await bb.auth.request_code(" Alice ", "+256700000000")
        assert resp["message"] == "Code sent"
        assert server.last_body() == {"username": "Alice", "phone": "+256700000000"}
        assert str(server.requests[-1].url) == "https://basebase.test/requestCode"

    @pytest.mark.asyncio
    async def test_verify_code_stores_session(
        self, bb: Basebase, server: FakeBasebaseServer
    ) -> None:
        bb.auth.sign_out()
        await bb.auth.verify_code("+256700000000", "123456", bb.api_key)
        assert bb.auth.is_authenticated
        assert bb.auth.user == BasebaseUser(id="user-1", name="Alice", phone="+256700000000")
        assert bb.auth.project is not None and bb.auth.project.id == "testproj"
        assert server.last_body()["projectApiKey"] == bb.api_key

    @pytest.mark.asyncio
    async def test_verify_code_rejects_missing_input(self, bb: Basebase) -> None:
        with pytest.raises(InvalidArgumentError):
            await bb.auth.verify_code("", "123456", bb.api_key)


class TestAuthStateListeners:
    """on_auth_state_changed notifications."""

    def test_called_immediately_with_current_state(self) -> None:
        token = make_token()
        states: list[AuthState] = []
        AuthSession(token).on_auth_state_changed(states.append)
        assert states == [AuthState(token=token, user=None, is_authenticated=True)]

    def test_called_on_set_token_and_sign_out(self) -> None:
        session = AuthSession()
        states: list[AuthState] = []
        session.on_auth_state_changed(states.append)
        token = make_token()
        session.set_token(token)
        session.sign_out()
        assert [(s.token, s.is_authenticated) for s in states] == [
            (None, False),
            (token, True),
            (None, False),
        ]

    def test_unsubscribe_stops_notifications(self) -> None:
        session = AuthSession()
        states: list[AuthState] = []
        unsubscribe = session.on_auth_state_changed(states.append)
        unsubscribe()
        unsubscribe()
        session.set_token(make_token())
        assert len(states) == 1

    def test_failing_listener_does_not_block_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        session = AuthSession()
        calls: list[bool] = []

        def broken(state: AuthState) -> None:
            if state.is_authenticated:
                raise RuntimeError("listener bug")

        session.on_auth_state_changed(broken)
        session.on_auth_state_changed(lambda state: calls.append(state.is_authenticated))
        session.set_token(make_token())
        assert calls == [False, True]
        assert "listener" in caplog.text

    def test_expired_token_clear_notifies(self) -> None:
        session = AuthSession(make_token(-60))
        states: list[AuthState] = []
        session.on_auth_state_changed(states.append)
        with pytest.raises(UnauthenticatedError):
            session.auth_header()
        assert states[-1] == AuthState(token=None, user=None, is_authenticated=False)

    @pytest.mark.asyncio
    async def test_verify_code_notifies_with_user(self, bb: Basebase) -> None:
        bb.auth.sign_out()
        states: list[AuthState] = []
        bb.auth.on_auth_state_changed(states.append)
        await bb.auth.verify_code("+256700000000", "123456", bb.api_key)
        assert states[-1].is_authenticated
        assert states[-1].user == BasebaseUser(id="user-1", name="Alice", phone="+256700000000")
