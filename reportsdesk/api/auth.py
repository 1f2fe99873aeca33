"""
Authentication service: login, logout, profile and password management.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient, SessionEvent
from reportsdesk.api.envelope import ApiResponse, RequestOptions
from reportsdesk.credentials import REFRESH_TOKEN_KEY
from reportsdesk.logging_config import get_logger

logger = get_logger("api.auth")

PUBLIC = RequestOptions(requires_auth=False)


class AuthService:
    """
    Session lifecycle on top of ApiClient.

    Login stores the access token, refresh token and user profile; logout
    removes all three even when the server call fails.
    """

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, username: str, password: str) -> ApiResponse:
        """Log in with username and password"""
        response = await self.client.post(
            "/auth/login",
            {"username": username, "password": password},
            PUBLIC,
        )

        data = response.data if isinstance(response.data, dict) else {}
        if response.success and data.get("token"):
            self.client.store_session(
                data["token"],
                refresh_token=data.get("refreshToken"),
                user=data.get("user"),
            )
            logger.log_auth_event("login", True, username=username)
        else:
            logger.log_auth_event("login", False, reason=response.message, username=username)
            if response.success:
                # 2xx without a token is not a usable login
                response.success = False
        return response

    async def logout(self) -> None:
        """Log out; local credentials are cleared whatever the server says"""
        try:
            if self.client.is_authenticated():
                await self.client.post("/auth/logout")
        finally:
            self.client.end_session(SessionEvent.LOGOUT)
            logger.log_auth_event("logout", True)

    async def get_profile(self) -> ApiResponse:
        return await self.client.get("/auth/profile")

    async def update_profile(self, profile: Dict[str, Any]) -> ApiResponse:
        return await self.client.put("/auth/profile", profile)

    async def change_password(self, current_password: str, new_password: str,
                              confirm_password: str) -> ApiResponse:
        return await self.client.post("/auth/change-password", {
            "currentPassword": current_password,
            "newPassword": new_password,
            "confirmPassword": confirm_password,
        })

    async def request_password_reset(self, email: str) -> ApiResponse:
        return await self.client.post("/auth/forgot-password", {"email": email}, PUBLIC)

    async def reset_password(self, token: str, new_password: str) -> ApiResponse:
        return await self.client.post(
            "/auth/reset-password",
            {"token": token, "newPassword": new_password},
            PUBLIC,
        )

    # ==================== Local session ====================

    def is_authenticated(self) -> bool:
        return self.client.is_authenticated()

    def get_current_user(self) -> Optional[Dict[str, Any]]:
        return self.client.store.get_user()

    def has_permission(self, permission: str) -> bool:
        user = self.get_current_user()
        if not user or not user.get("permissions"):
            return False
        return permission in user["permissions"]

    def has_role(self, role: str) -> bool:
        user = self.get_current_user()
        if not user:
            return False
        return user.get("role") == role

    def get_refresh_token(self) -> Optional[str]:
        return self.client.store.get(REFRESH_TOKEN_KEY)

    def set_refresh_token(self, refresh_token: str) -> None:
        self.client.store.set(REFRESH_TOKEN_KEY, refresh_token)

    def remove_refresh_token(self) -> None:
        self.client.store.remove(REFRESH_TOKEN_KEY)
