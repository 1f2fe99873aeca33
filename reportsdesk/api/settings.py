"""
Settings service: system, backup, email and security settings, logs.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse, FormData
from reportsdesk.api.query import build_query


class SettingsService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_system_settings(self) -> ApiResponse:
        return await self.client.get("/settings/system")

    async def update_system_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        return await self.client.put("/settings/system", settings)

    # ==================== Backups ====================

    async def get_backup_settings(self) -> ApiResponse:
        return await self.client.get("/settings/backup")

    async def update_backup_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        return await self.client.put("/settings/backup", settings)

    async def trigger_backup(self) -> ApiResponse:
        return await self.client.post("/settings/backup/trigger")

    async def get_backups_list(self) -> ApiResponse:
        return await self.client.get("/settings/backup/list")

    async def restore_from_backup(self, filename: str) -> ApiResponse:
        return await self.client.post("/settings/backup/restore", {"filename": filename})

    async def upload_backup_file(self, filename: str, content: Any) -> ApiResponse:
        form = FormData().add_file("file", filename, content)
        return await self.client.upload_file("/settings/backup/upload", form)

    # ==================== Email ====================

    async def get_email_settings(self) -> ApiResponse:
        return await self.client.get("/settings/email")

    async def update_email_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        return await self.client.put("/settings/email", settings)

    async def test_email_settings(self, test_email: str) -> ApiResponse:
        return await self.client.post("/settings/email/test", {"testEmail": test_email})

    # ==================== Security ====================

    async def get_security_settings(self) -> ApiResponse:
        return await self.client.get("/settings/security")

    async def update_security_settings(self, settings: Dict[str, Any]) -> ApiResponse:
        return await self.client.put("/settings/security", settings)

    # ==================== Logs / info ====================

    async def get_system_logs(self, page: int = 1, limit: int = 100,
                              log_level: Optional[str] = None) -> ApiResponse:
        query = build_query({"page": page, "limit": limit, "log_level": log_level})
        return await self.client.get(f"/settings/logs{query}")

    async def clear_system_logs(self) -> ApiResponse:
        return await self.client.delete("/settings/logs")

    async def get_system_info(self) -> ApiResponse:
        return await self.client.get("/settings/system-info")
