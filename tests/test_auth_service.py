"""
Tests for the authentication service
"""
import httpx
import pytest

from reportsdesk.api import AuthService, SessionEvent
from reportsdesk.credentials import AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY

from tests.conftest import FakeBackend, envelope

USER = {"id": "u1", "username": "admin", "role": "admin", "permissions": ["reports:read"]}


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_stores_session_and_authorizes_next_call(self, make_client, store, backend):
        backend.json("POST", "/auth/login", envelope({"token": "T1", "refreshToken": "R1", "user": USER}))
        backend.json("GET", "/reports", envelope([]))
        client = make_client(store)
        auth = AuthService(client)

        response = await auth.login("admin", "secret")

        assert response.success is True
        assert store.get(AUTH_TOKEN_KEY) == "T1"
        assert store.get(REFRESH_TOKEN_KEY) == "R1"
        assert auth.get_current_user() == USER
        assert "Authorization" not in backend.requests[0].headers
        assert FakeBackend.body_of(backend.requests[0]) == {"username": "admin", "password": "secret"}

        await client.get("/reports")

        assert backend.requests[1].headers["Authorization"] == "Bearer T1"

    @pytest.mark.asyncio
    async def test_rejected_login_stores_nothing(self, make_client, store, backend):
        backend.json("POST", "/auth/login",
                     envelope(success=False, message="اسم المستخدم أو كلمة المرور غير صحيحة"),
                     status=401)
        auth = AuthService(make_client(store))

        response = await auth.login("admin", "wrong")

        assert response.success is False
        assert response.status_code == 401
        assert response.message == "اسم المستخدم أو كلمة المرور غير صحيحة"
        assert store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_success_without_token_is_a_failure(self, make_client, store, backend):
        backend.json("POST", "/auth/login", envelope({"user": USER}))
        auth = AuthService(make_client(store))

        response = await auth.login("admin", "secret")

        assert response.success is False
        assert auth.is_authenticated() is False

    @pytest.mark.asyncio
    async def test_login_replaces_previous_session(self, client, logged_in_store, backend):
        backend.json("POST", "/auth/login", envelope({"token": "T5"}))

        await AuthService(client).login("other", "pw")

        assert logged_in_store.get(AUTH_TOKEN_KEY) == "T5"
        assert logged_in_store.get(REFRESH_TOKEN_KEY) is None
        assert logged_in_store.get_user() is None


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout_clears_and_notifies(self, client, logged_in_store, backend, session_events):
        backend.json("POST", "/auth/logout", envelope())

        await AuthService(client).logout()

        assert len(backend.requests_to("POST", "/auth/logout")) == 1
        assert logged_in_store.snapshot() == {}
        assert session_events == [SessionEvent.LOGOUT]

    @pytest.mark.asyncio
    async def test_logout_clears_even_when_server_is_down(self, client, logged_in_store, backend):
        backend.on("POST", "/auth/logout", httpx.ConnectError("refused"))

        await AuthService(client).logout()

        assert logged_in_store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_logout_without_session_skips_server(self, make_client, store, backend,
                                                       session_events):
        await AuthService(make_client(store)).logout()

        assert backend.requests == []
        assert session_events == [SessionEvent.LOGOUT]


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_change_password_body(self, client, backend):
        backend.json("POST", "/auth/change-password", envelope())

        await AuthService(client).change_password("old", "new", "new")

        assert FakeBackend.body_of(backend.requests[0]) == {
            "currentPassword": "old", "newPassword": "new", "confirmPassword": "new",
        }

    @pytest.mark.asyncio
    async def test_password_reset_endpoints_are_public(self, make_client, store, backend):
        backend.json("POST", "/auth/forgot-password", envelope())
        backend.json("POST", "/auth/reset-password", envelope())
        auth = AuthService(make_client(store))

        first = await auth.request_password_reset("a@b.iq")
        second = await auth.reset_password("tok", "n3w")

        assert first.success and second.success
        assert FakeBackend.body_of(backend.requests[1]) == {"token": "tok", "newPassword": "n3w"}
        assert all("Authorization" not in r.headers for r in backend.requests)

    @pytest.mark.asyncio
    async def test_profile(self, client, backend):
        backend.json("GET", "/auth/profile", envelope(USER))
        backend.json("PUT", "/auth/profile", envelope(USER))
        auth = AuthService(client)

        assert (await auth.get_profile()).data == USER
        await auth.update_profile({"fullName": "مدير"})

        assert FakeBackend.body_of(backend.requests[1]) == {"fullName": "مدير"}


class TestLocalSession:

    def test_permissions_and_roles(self, client):
        auth = AuthService(client)

        assert auth.is_authenticated() is True
        assert auth.has_permission("reports:write") is True
        assert auth.has_permission("users:delete") is False
        assert auth.has_role("admin") is True
        assert auth.has_role("viewer") is False

    def test_no_user_means_no_permissions(self, make_client, store):
        auth = AuthService(make_client(store))

        assert auth.get_current_user() is None
        assert auth.has_permission("reports:read") is False
        assert auth.has_role("admin") is False

    def test_refresh_token_accessors(self, make_client, store):
        auth = AuthService(make_client(store))

        auth.set_refresh_token("R9")
        assert auth.get_refresh_token() == "R9"

        auth.remove_refresh_token()
        assert auth.get_refresh_token() is None
