#!/usr/bin/env python3
"""
ReportsDesk CLI - Main Entry Point

Usage:
    reportsdesk login                       # Log in (prompts for password)
    reportsdesk status                      # Show the stored session
    reportsdesk reports list --status draft # List reports
    reportsdesk reports show 42             # Show one report
    reportsdesk events critical             # Critical incidents
    reportsdesk --json events today         # Raw response envelope

Exit codes:
    0   success
    1   the server reported a failure (or bad input/config)
    2   session missing or expired - log in again
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from reportsdesk import __version__
from reportsdesk.api import (
    ApiClient,
    ApiResponse,
    CoordinationFilters,
    EventFilters,
    MemoFilters,
    ReportFilters,
    Services,
    SessionEvent,
    UserFilters,
)
from reportsdesk.config import ClientConfig
from reportsdesk.credentials import CredentialStore, FileCredentialStore
from reportsdesk.exceptions import ReportsDeskError
from reportsdesk.logging_config import setup_logging
from reportsdesk.notifications import ConsoleNotifier

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SESSION = 2

Columns = List[Tuple[str, str]]  # (field, header)

REPORT_COLUMNS: Columns = [
    ("reportNumber", "رقم التقرير"), ("reportDate", "التاريخ"), ("reportType", "النوع"),
    ("status", "الحالة"), ("governorates", "المحافظات"),
]
EVENT_COLUMNS: Columns = [
    ("eventNumber", "رقم الحدث"), ("eventDate", "التاريخ"), ("eventTime", "الوقت"),
    ("governorate", "المحافظة"), ("eventType", "النوع"), ("severity", "الخطورة"),
    ("status", "الحالة"),
]
COORDINATION_COLUMNS: Columns = [
    ("requestNumber", "رقم الطلب"), ("requestTime", "وقت الطلب"), ("fromLocation", "من"),
    ("toLocation", "إلى"), ("department", "الجهة"), ("status", "الحالة"),
]
MEMO_COLUMNS: Columns = [
    ("referenceNumber", "المرجع"), ("type", "النوع"), ("date", "التاريخ"),
    ("subject", "الموضوع"), ("governorate", "المحافظة"), ("status", "الحالة"),
]
GOVERNORATE_COLUMNS: Columns = [("code", "الرمز"), ("name", "الاسم"), ("regions", "المناطق")]
USER_COLUMNS: Columns = [
    ("username", "اسم المستخدم"), ("fullName", "الاسم"), ("role", "الدور"),
    ("governorate", "المحافظة"), ("status", "الحالة"),
]


class SessionWatcher:
    """Session-expired listener: remembers the event and tells the user to log in"""

    def __init__(self, console: Console):
        self.console = console
        self.event: Optional[SessionEvent] = None

    def __call__(self, event: SessionEvent) -> None:
        if event == SessionEvent.LOGOUT:
            return
        self.event = event
        self.console.print("\n[yellow]Session ended. Please login again:[/yellow]")
        self.console.print("  [cyan]reportsdesk login[/cyan]")

    @property
    def expired(self) -> bool:
        return self.event is not None


def _add_list_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="start_date", help="Start date (YYYY-MM-DD)")
    parser.add_argument("--to", dest="end_date", help="End date (YYYY-MM-DD)")
    parser.add_argument("--status", help="Filter by status")
    parser.add_argument("--governorate", help="Filter by governorate")
    parser.add_argument("--page", type=int, help="Page number")
    parser.add_argument("--limit", type=int, help="Page size")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="reportsdesk",
        description="ReportsDesk - security reports, events, coordinations and memos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reportsdesk login -u admin                   Login (password is prompted)
  reportsdesk logout                           Logout and clear the stored session
  reportsdesk reports list --from 2024-01-01   Reports since January
  reportsdesk events list --severity critical  Critical events
  reportsdesk coordinations pending            Requests waiting for a response
  reportsdesk --json memos list --type release Raw JSON envelope
        """
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--json", action="store_true", help="Print the raw response envelope")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--server-url", type=str, help="Backend API base URL")
    parser.add_argument("--config", type=str, help="Path to config file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Auth
    login_parser = subparsers.add_parser("login", help="Login to the reporting system")
    login_parser.add_argument("--username", "-u", help="Username")
    login_parser.add_argument("--password", "-p", help="Password (prompted if omitted)")
    subparsers.add_parser("logout", help="Logout")
    subparsers.add_parser("status", help="Show authentication status")
    subparsers.add_parser("whoami", help="Show current user info")

    # Reports
    reports = subparsers.add_parser("reports", help="Daily reports")
    reports_sub = reports.add_subparsers(dest="action", required=True)
    reports_list = reports_sub.add_parser("list", help="List reports")
    _add_list_filters(reports_list)
    reports_list.add_argument("--type", dest="report_type", choices=["morning", "evening"])
    reports_show = reports_sub.add_parser("show", help="Show a report and its events")
    reports_show.add_argument("id")
    reports_pdf = reports_sub.add_parser("pdf", help="Get the PDF download URL")
    reports_pdf.add_argument("id")
    reports_stats = reports_sub.add_parser("stats", help="Report statistics")
    reports_stats.add_argument("--from", dest="start_date")
    reports_stats.add_argument("--to", dest="end_date")

    # Events
    events = subparsers.add_parser("events", help="Security events")
    events_sub = events.add_subparsers(dest="action", required=True)
    events_list = events_sub.add_parser("list", help="List events")
    _add_list_filters(events_list)
    events_list.add_argument("--severity", choices=["low", "medium", "high", "critical"])
    events_list.add_argument("--type", dest="event_type")
    events_list.add_argument("--region")
    events_sub.add_parser("today", help="Today's events")
    events_sub.add_parser("critical", help="Critical events")

    # Coordinations
    coordinations = subparsers.add_parser("coordinations", help="Coordination requests")
    coordinations_sub = coordinations.add_subparsers(dest="action", required=True)
    coordinations_list = coordinations_sub.add_parser("list", help="List coordination requests")
    _add_list_filters(coordinations_list)
    coordinations_list.add_argument("--department")
    coordinations_sub.add_parser("pending", help="Requests waiting for a response")
    coordinations_sub.add_parser("today", help="Today's requests")

    # Memos
    memos = subparsers.add_parser("memos", help="Memos and releases")
    memos_sub = memos.add_subparsers(dest="action", required=True)
    memos_list = memos_sub.add_parser("list", help="List memos and releases")
    _add_list_filters(memos_list)
    memos_list.add_argument("--type", dest="memo_type", choices=["memo", "release"])
    memos_list.add_argument("--search")

    # Reference data / admin
    governorates = subparsers.add_parser("governorates", help="Governorates")
    governorates.add_subparsers(dest="action", required=True).add_parser("list", help="List governorates")
    users = subparsers.add_parser("users", help="Users (admin)")
    users_list = users.add_subparsers(dest="action", required=True).add_parser("list", help="List users")
    users_list.add_argument("--role")
    users_list.add_argument("--status")
    users_list.add_argument("--governorate")
    settings = subparsers.add_parser("settings", help="System settings (admin)")
    settings.add_subparsers(dest="action", required=True).add_parser("info", help="System information")

    return parser


# ==================== Rendering ====================

def extract_records(data: Any, key: Optional[str] = None) -> List[Dict[str, Any]]:
    """Pull the record list out of the various list payload shapes"""
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if isinstance(data, dict):
        for candidate in (key, "data", "items"):
            if candidate and isinstance(data.get(candidate), list):
                return [r for r in data[candidate] if isinstance(r, dict)]
    return []


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) if value else "-"
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def render_table(console: Console, title: str, records: List[Dict[str, Any]],
                 columns: Columns) -> None:
    if not records:
        console.print(f"[dim]{title}: no records[/dim]")
        return
    table = Table(title=title, show_lines=False)
    for _, header in columns:
        table.add_column(header)
    for record in records:
        table.add_row(*(_cell(record.get(name)) for name, _ in columns))
    console.print(table)


def render_record(console: Console, title: str, record: Any) -> None:
    if not isinstance(record, dict):
        console.print(_cell(record))
        return
    table = Table(title=title, show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    for key, value in record.items():
        table.add_row(key, _cell(value))
    console.print(table)


# ==================== Commands ====================

def _filters_from_args(cls, args: argparse.Namespace, **renames: str):
    """Build a filters dataclass from the parsed options it knows about"""
    values = {}
    for name in cls.__dataclass_fields__:
        source = renames.get(name, name)
        if hasattr(args, source):
            values[name] = getattr(args, source)
    return cls(**values)


async def _login(args: argparse.Namespace, services: Services, console: Console) -> ApiResponse:
    username = args.username or Prompt.ask("Username", console=console)
    password = args.password or Prompt.ask("Password", password=True, console=console)
    response = await services.auth.login(username, password)
    if response.success:
        user = services.auth.get_current_user() or {}
        console.print("\n[green]✓ Login successful![/green]")
        console.print(f"Welcome, [bold]{user.get('fullName') or username}[/bold]!")
    else:
        console.print(f"\n[red]✗ Login failed[/red] {response.message or ''}")
    return response


def _show_status(services: Services, console: Console) -> int:
    if services.auth.is_authenticated():
        user = services.auth.get_current_user() or {}
        console.print(Panel(
            f"[green]Authenticated[/green]\n\n"
            f"[bold]User:[/bold] {user.get('fullName') or user.get('username') or 'Unknown'}\n"
            f"[bold]Role:[/bold] {user.get('role') or 'Not set'}\n"
            f"[bold]Governorate:[/bold] {user.get('governorate') or 'Not set'}\n"
            f"[bold]Server:[/bold] {services.client.base_url}",
            title="Authentication Status",
            border_style="green"
        ))
        return EXIT_OK

    console.print(Panel(
        "[red]Not authenticated[/red]\n\n"
        "Please login using: [cyan]reportsdesk login[/cyan]",
        title="Authentication Status",
        border_style="red"
    ))
    return EXIT_FAILED


async def dispatch(args: argparse.Namespace, services: Services,
                   console: Console) -> Optional[Tuple[ApiResponse, Any]]:
    """
    Run one command against the services.

    Returns (response, renderer) where renderer is called with the response
    data when the call succeeded, or None for local-only commands.
    """
    command, action = args.command, getattr(args, "action", None)

    if command == "reports":
        s = services.reports
        if action == "list":
            filters = _filters_from_args(ReportFilters, args)
            return await s.get_reports(filters), lambda d: render_table(
                console, "التقارير", extract_records(d, "reports"), REPORT_COLUMNS)
        if action == "show":
            report = await s.get_report(args.id)
            if not report.success:
                return report, None
            events = await s.get_report_events(args.id)

            def show(data):
                render_record(console, f"التقرير {args.id}", data)
                if events.success:
                    render_table(console, "الأحداث", extract_records(events.data, "events"),
                                 EVENT_COLUMNS)
            return report, show
        if action == "pdf":
            return await s.generate_pdf(args.id), lambda d: console.print(
                d.get("url") if isinstance(d, dict) else _cell(d))
        if action == "stats":
            return await s.get_report_statistics(args.start_date, args.end_date), lambda d: \
                render_record(console, "إحصائيات التقارير", d)

    if command == "events":
        s = services.events
        if action == "list":
            filters = _filters_from_args(EventFilters, args)
            response = await s.get_events(filters)
        elif action == "today":
            response = await s.get_today_events()
        else:
            response = await s.get_critical_events()
        return response, lambda d: render_table(
            console, "الأحداث", extract_records(d, "events"), EVENT_COLUMNS)

    if command == "coordinations":
        s = services.coordinations
        if action == "list":
            response = await s.get_coordinations(_filters_from_args(CoordinationFilters, args))
        elif action == "pending":
            response = await s.get_pending_coordinations()
        else:
            response = await s.get_today_coordinations()
        return response, lambda d: render_table(
            console, "طلبات التنسيق", extract_records(d, "coordinations"), COORDINATION_COLUMNS)

    if command == "memos":
        filters = _filters_from_args(MemoFilters, args, type="memo_type")
        return await services.memos.get_memos(filters), lambda d: render_table(
            console, "المذكرات والإفراجات", extract_records(d, "documents"), MEMO_COLUMNS)

    if command == "governorates":
        return await services.governorates.get_governorates(), lambda d: render_table(
            console, "المحافظات", extract_records(d, "governorates"), GOVERNORATE_COLUMNS)

    if command == "users":
        return await services.users.get_users(_filters_from_args(UserFilters, args)), lambda d: \
            render_table(console, "المستخدمون", extract_records(d, "users"), USER_COLUMNS)

    if command == "settings":
        return await services.settings.get_system_info(), lambda d: \
            render_record(console, "معلومات النظام", d)

    return None


async def run_cli(args: argparse.Namespace, config: ClientConfig, console: Console,
                  store: Optional[CredentialStore] = None,
                  transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """Execute parsed arguments; returns the process exit code"""
    # Keep stdout clean for --json output
    status_console = Console(stderr=True) if args.json else console
    watcher = SessionWatcher(status_console)
    store = store or FileCredentialStore(config.credentials_file)

    async with ApiClient(
        config,
        store,
        on_session_expired=watcher,
        notifier=ConsoleNotifier(status_console),
        transport=transport,
    ) as client:
        services = Services.create(client)

        if args.command in ("status", "whoami"):
            return _show_status(services, console)

        if args.command == "logout":
            await services.auth.logout()
            console.print("[green]Logged out successfully[/green]")
            return EXIT_OK

        if args.command == "login":
            response = await _login(args, services, console)
            return EXIT_OK if response.success else EXIT_FAILED

        result = await dispatch(args, services, console)
        if result is None:
            console.print(f"[red]Unknown command: {args.command}[/red]")
            return EXIT_FAILED

        response, renderer = result
        if args.json:
            console.print_json(json.dumps(response.to_dict(), ensure_ascii=False))
        elif response.success and renderer:
            renderer(response.data)

        if watcher.expired:
            return EXIT_SESSION
        return EXIT_OK if response.success else EXIT_FAILED


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    console = Console()

    if not args.command:
        parser.print_help()
        return EXIT_FAILED

    try:
        config = ClientConfig.load_default()
        if args.config:
            config.load_from_file(args.config)
        if args.server_url:
            config.api_base_url = ClientConfig.normalize_base_url(args.server_url)

        setup_logging(
            "DEBUG" if args.verbose or config.verbose else config.log_level,
            config.log_format,
            config.log_file,
        )

        return asyncio.run(run_cli(args, config, console))

    except KeyboardInterrupt:
        console.print("\n\nGoodbye! 👋")
        return 130
    except ReportsDeskError as e:
        console.print(f"\n[red]✗ {e.message}[/red]")
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
