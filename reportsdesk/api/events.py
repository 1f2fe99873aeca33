"""
Events service: security incidents, optionally linked to a report.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse, FormData
from reportsdesk.api.query import EventFilters, build_query, date_range

EVENT_STATUSES = ("ongoing", "finished", "monitoring")
SEVERITIES = ("low", "medium", "high", "critical")


class EventsService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_events(self, filters: Optional[EventFilters] = None) -> ApiResponse:
        """data: {events, total, page, totalPages}"""
        return await self.client.get(f"/events{build_query(filters)}")

    async def get_event(self, event_id: str) -> ApiResponse:
        return await self.client.get(f"/events/{event_id}")

    async def create_event(self, event: Dict[str, Any]) -> ApiResponse:
        """Create an event. eventNumber is assigned by the server; reportId is required."""
        return await self.client.post("/events", event)

    async def update_event(self, event: Dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/events/{event['id']}", event)

    async def delete_event(self, event_id: str) -> ApiResponse:
        return await self.client.delete(f"/events/{event_id}")

    async def change_event_status(self, event_id: str, status: str) -> ApiResponse:
        return await self.client.patch(f"/events/{event_id}/status", {"status": status})

    async def get_event_statistics(self, start_date: Optional[str] = None,
                                   end_date: Optional[str] = None) -> ApiResponse:
        return await self.client.get(f"/events/statistics{date_range(start_date, end_date)}")

    async def get_today_events(self) -> ApiResponse:
        return await self.client.get("/events/today")

    async def get_critical_events(self) -> ApiResponse:
        return await self.client.get("/events/critical")

    async def upload_event_attachment(self, event_id: str, filename: str, content: Any,
                                      content_type: Optional[str] = None) -> ApiResponse:
        # The events endpoint expects the part to be named "attachment"
        form = FormData().add_file("attachment", filename, content, content_type)
        return await self.client.upload_file(f"/events/{event_id}/attachments", form)

    async def export_to_excel(self, filters: Optional[EventFilters] = None) -> ApiResponse:
        return await self.client.get(f"/events/export/excel{build_query(filters)}")
