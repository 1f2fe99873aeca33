"""
Reports service: daily (morning/evening) reports and the events recorded in them.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse, FormData
from reportsdesk.api.query import ReportFilters, build_query, date_range

REPORT_STATUSES = ("draft", "published", "reviewed", "archived")


class ReportsService:
    """CRUD, status changes, statistics and attachments for reports"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_reports(self, filters: Optional[ReportFilters] = None) -> ApiResponse:
        """List reports. data is the report list; paging info is not unwrapped."""
        return await self.client.get(f"/reports{build_query(filters)}")

    async def get_report(self, report_id: str) -> ApiResponse:
        return await self.client.get(f"/reports/{report_id}")

    async def create_report(self, report: Dict[str, Any]) -> ApiResponse:
        return await self.client.post("/reports", report)

    async def update_report(self, report: Dict[str, Any]) -> ApiResponse:
        """Update a report; `report` must carry its id"""
        return await self.client.put(f"/reports/{report['id']}", report)

    async def delete_report(self, report_id: str) -> ApiResponse:
        return await self.client.delete(f"/reports/{report_id}")

    async def change_report_status(self, report_id: str, status: str) -> ApiResponse:
        return await self.client.patch(f"/reports/{report_id}/status", {"status": status})

    async def get_report_statistics(self, start_date: Optional[str] = None,
                                    end_date: Optional[str] = None) -> ApiResponse:
        return await self.client.get(f"/reports/statistics{date_range(start_date, end_date)}")

    # ==================== Report events ====================

    async def get_report_events(self, report_id: str) -> ApiResponse:
        return await self.client.get(f"/reports/{report_id}/events")

    async def add_report_event(self, report_id: str, event: Dict[str, Any]) -> ApiResponse:
        return await self.client.post(f"/reports/{report_id}/events", event)

    async def update_report_event(self, report_id: str, event_id: str,
                                  event: Dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/reports/{report_id}/events/{event_id}", event)

    async def delete_report_event(self, report_id: str, event_id: str) -> ApiResponse:
        return await self.client.delete(f"/reports/{report_id}/events/{event_id}")

    # ==================== Attachments ====================

    async def upload_event_attachment(self, report_id: str, event_id: str, filename: str,
                                      content: Any, content_type: Optional[str] = None) -> ApiResponse:
        form = FormData().add_file("file", filename, content, content_type)
        return await self.client.upload_file(
            f"/reports/{report_id}/events/{event_id}/attachments", form
        )

    async def delete_attachment(self, attachment_id: str) -> ApiResponse:
        return await self.client.delete(f"/attachments/{attachment_id}")

    # ==================== Exports ====================

    async def generate_pdf(self, report_id: str) -> ApiResponse:
        """The backend renders the PDF; data is {url}"""
        return await self.client.get(f"/reports/{report_id}/pdf")

    async def export_to_excel(self, filters: Optional[ReportFilters] = None) -> ApiResponse:
        return await self.client.get(f"/reports/export/excel{build_query(filters)}")
