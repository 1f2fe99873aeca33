"""
ReportsDesk API services.

Build one ApiClient at startup and hand it to every service:

    client = ApiClient(config, store, on_session_expired=go_to_login)
    services = Services.create(client)
    response = await services.reports.get_reports(ReportFilters(status="draft"))
"""

from dataclasses import dataclass

from reportsdesk.api.client import ApiClient, PendingRequest, SessionEvent, REFRESH_PATH
from reportsdesk.api.envelope import (
    ApiResponse,
    FormData,
    Messages,
    RequestOptions,
    is_success_response,
)
from reportsdesk.api.query import (
    CoordinationFilters,
    EventFilters,
    MemoFilters,
    ReportFilters,
    UserFilters,
    build_query,
)
from reportsdesk.api.auth import AuthService
from reportsdesk.api.reports import ReportsService
from reportsdesk.api.events import EventsService
from reportsdesk.api.coordinations import CoordinationsService
from reportsdesk.api.memos import MemosService
from reportsdesk.api.users import UsersService
from reportsdesk.api.governorates import GovernoratesService
from reportsdesk.api.settings import SettingsService


@dataclass
class Services:
    """Every domain service, sharing one client"""
    client: ApiClient
    auth: AuthService
    reports: ReportsService
    events: EventsService
    coordinations: CoordinationsService
    memos: MemosService
    users: UsersService
    governorates: GovernoratesService
    settings: SettingsService

    @classmethod
    def create(cls, client: ApiClient) -> "Services":
        return cls(
            client=client,
            auth=AuthService(client),
            reports=ReportsService(client),
            events=EventsService(client),
            coordinations=CoordinationsService(client),
            memos=MemosService(client),
            users=UsersService(client),
            governorates=GovernoratesService(client),
            settings=SettingsService(client),
        )


__all__ = [
    'ApiClient',
    'ApiResponse',
    'AuthService',
    'CoordinationFilters',
    'CoordinationsService',
    'EventFilters',
    'EventsService',
    'FormData',
    'GovernoratesService',
    'MemoFilters',
    'MemosService',
    'Messages',
    'PendingRequest',
    'REFRESH_PATH',
    'ReportFilters',
    'ReportsService',
    'RequestOptions',
    'Services',
    'SessionEvent',
    'SettingsService',
    'UserFilters',
    'UsersService',
    'build_query',
    'is_success_response',
]
