"""
Users service (administration).
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse
from reportsdesk.api.query import UserFilters, build_query


class UsersService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_users(self, filters: Optional[UserFilters] = None) -> ApiResponse:
        return await self.client.get(f"/users{build_query(filters)}")

    async def get_user(self, user_id: str) -> ApiResponse:
        return await self.client.get(f"/users/{user_id}")

    async def create_user(self, user: Dict[str, Any]) -> ApiResponse:
        return await self.client.post("/users", user)

    async def update_user(self, user: Dict[str, Any]) -> ApiResponse:
        """Update a user. Passwords are changed through reset_user_password only."""
        payload = {k: v for k, v in user.items() if k != "password"}
        return await self.client.put(f"/users/{user['id']}", payload)

    async def delete_user(self, user_id: str) -> ApiResponse:
        return await self.client.delete(f"/users/{user_id}")

    async def change_user_status(self, user_id: str, status: str) -> ApiResponse:
        """status: active or inactive"""
        return await self.client.patch(f"/users/{user_id}/status", {"status": status})

    async def reset_user_password(self, user_id: str, new_password: str) -> ApiResponse:
        return await self.client.post(f"/users/{user_id}/reset-password", {"newPassword": new_password})

    async def get_roles(self) -> ApiResponse:
        return await self.client.get("/users/roles")

    async def get_permissions(self) -> ApiResponse:
        return await self.client.get("/users/permissions")

    async def get_user_activity_log(self, user_id: str, page: int = 1, limit: int = 10) -> ApiResponse:
        return await self.client.get(
            f"/users/{user_id}/activity-log{build_query({'page': page, 'limit': limit})}"
        )

    async def export_to_excel(self, filters: Optional[UserFilters] = None) -> ApiResponse:
        return await self.client.get(f"/users/export/excel{build_query(filters)}")
