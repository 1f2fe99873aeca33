"""
Governorates service: governorates and their regions.
"""

from typing import Any, Dict, List, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse
from reportsdesk.api.query import path_segment


class GovernoratesService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_governorates(self) -> ApiResponse:
        return await self.client.get("/governorates")

    async def get_governorate(self, governorate_id: str) -> ApiResponse:
        return await self.client.get(f"/governorates/{governorate_id}")

    async def get_governorate_regions(self, governorate_id: str) -> ApiResponse:
        return await self.client.get(f"/governorates/{governorate_id}/regions")

    async def create_governorate(self, name: str, code: str,
                                 regions: Optional[List[str]] = None) -> ApiResponse:
        payload: Dict[str, Any] = {"name": name, "code": code}
        if regions is not None:
            payload["regions"] = regions
        return await self.client.post("/governorates", payload)

    async def update_governorate(self, governorate_id: str, data: Dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/governorates/{governorate_id}", data)

    async def delete_governorate(self, governorate_id: str) -> ApiResponse:
        return await self.client.delete(f"/governorates/{governorate_id}")

    async def add_region(self, governorate_id: str, region_name: str) -> ApiResponse:
        return await self.client.post(f"/governorates/{governorate_id}/regions", {"name": region_name})

    async def remove_region(self, governorate_id: str, region_name: str) -> ApiResponse:
        return await self.client.delete(
            f"/governorates/{governorate_id}/regions/{path_segment(region_name)}"
        )
