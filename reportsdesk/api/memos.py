"""
Memos service: memos and detainee release documents.

Both kinds live under /memos and are told apart by `type`. Releases carry
the person and detention fields in addition to the common memo fields.
"""

from typing import Any, Dict, Optional

from reportsdesk.api.client import ApiClient
from reportsdesk.api.envelope import ApiResponse, FormData
from reportsdesk.api.query import MemoFilters, build_query


class MemosService:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_memos(self, filters: Optional[MemoFilters] = None) -> ApiResponse:
        """data: {documents, total, page, totalPages}"""
        return await self.client.get(f"/memos{build_query(filters)}")

    async def get_memo(self, memo_id: str) -> ApiResponse:
        return await self.client.get(f"/memos/{memo_id}")

    async def create_memo(self, document: Dict[str, Any]) -> ApiResponse:
        """
        Create a memo or a release (`type`: memo, release).

        Releases also need personName, residencePlace and detentionDate; the
        server rejects incomplete documents with a 422 envelope.
        """
        return await self.client.post("/memos", document)

    async def update_memo(self, document: Dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/memos/{document['id']}", document)

    async def delete_memo(self, memo_id: str) -> ApiResponse:
        return await self.client.delete(f"/memos/{memo_id}")

    async def change_status(self, memo_id: str, status: str) -> ApiResponse:
        return await self.client.patch(f"/memos/{memo_id}/status", {"status": status})

    async def upload_attachment(self, memo_id: str, filename: str, content: Any,
                                content_type: Optional[str] = None) -> ApiResponse:
        form = FormData().add_file("file", filename, content, content_type)
        return await self.client.upload_file(f"/memos/{memo_id}/attachments", form)

    async def delete_attachment(self, memo_id: str, attachment_id: str) -> ApiResponse:
        return await self.client.delete(f"/memos/{memo_id}/attachments/{attachment_id}")

    async def generate_pdf(self, memo_id: str) -> ApiResponse:
        return await self.client.get(f"/memos/{memo_id}/pdf")

    async def export_to_excel(self, filters: Optional[MemoFilters] = None) -> ApiResponse:
        return await self.client.get(f"/memos/export/excel{build_query(filters)}")
