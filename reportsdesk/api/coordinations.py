"""
Coordinations service: inter-agency movement requests and their responses.

A request is created pending, then approved or rejected by the other side.
Approved requests record the actual movement time and are finally completed.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse
from reportsdesk.api.query import CoordinationFilters, build_query, date_range


class CoordinationsService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_coordinations(self, filters: Optional[CoordinationFilters] = None) -> ApiResponse:
        return await self.client.get(f"/coordinations{build_query(filters)}")

    async def get_coordination(self, coordination_id: str) -> ApiResponse:
        return await self.client.get(f"/coordinations/{coordination_id}")

    async def create_coordination(self, coordination: Dict[str, Any]) -> ApiResponse:
        return await self.client.post("/coordinations", coordination)

    async def update_coordination(self, coordination: Dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/coordinations/{coordination['id']}", coordination)

    async def delete_coordination(self, coordination_id: str) -> ApiResponse:
        return await self.client.delete(f"/coordinations/{coordination_id}")

    async def cancel_coordination(self, coordination_id: str,
                                  reason: Optional[str] = None) -> ApiResponse:
        return await self.client.patch(f"/coordinations/{coordination_id}/cancel", {"reason": reason})

    async def respond_to_coordination(self, coordination_id: str, status: str,
                                      approval_time: Optional[str] = None,
                                      movement_time: Optional[str] = None,
                                      rejection_reason: Optional[str] = None) -> ApiResponse:
        """Approve or reject a pending request (status: approved, rejected)"""
        payload: Dict[str, Any] = {"status": status}
        if approval_time:
            payload["approvalTime"] = approval_time
        if movement_time:
            payload["movementTime"] = movement_time
        if rejection_reason:
            payload["rejectionReason"] = rejection_reason
        return await self.client.post(f"/coordinations/{coordination_id}/respond", payload)

    async def update_movement_time(self, coordination_id: str, movement_time: str) -> ApiResponse:
        return await self.client.patch(
            f"/coordinations/{coordination_id}/movement", {"movementTime": movement_time}
        )

    async def complete_coordination(self, coordination_id: str) -> ApiResponse:
        return await self.client.patch(f"/coordinations/{coordination_id}/complete", {})

    async def get_coordination_statistics(self, start_date: Optional[str] = None,
                                          end_date: Optional[str] = None) -> ApiResponse:
        return await self.client.get(f"/coordinations/statistics{date_range(start_date, end_date)}")

    async def get_pending_coordinations(self) -> ApiResponse:
        return await self.client.get("/coordinations/pending")

    async def get_today_coordinations(self) -> ApiResponse:
        return await self.client.get("/coordinations/today")

    async def export_to_excel(self, filters: Optional[CoordinationFilters] = None) -> ApiResponse:
        return await self.client.get(f"/coordinations/export/excel{build_query(filters)}")
