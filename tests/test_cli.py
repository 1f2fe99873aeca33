"""
Tests for the command-line front-end
"""
import io
import json

import httpx
import pytest
from rich.console import Console

from reportsdesk.main import (
    EXIT_FAILED,
    EXIT_OK,
    EXIT_SESSION,
    create_parser,
    extract_records,
    main,
    run_cli,
)
from reportsdesk.credentials import AUTH_TOKEN_KEY, MemoryCredentialStore

from tests.conftest import envelope


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, width=200, force_terminal=False, color_system=None)


def parse(*argv):
    return create_parser().parse_args(list(argv))


class TestParser:

    def test_list_filters(self):
        args = parse("reports", "list", "--from", "2024-01-01", "--type", "morning", "--page", "2")

        assert args.command == "reports"
        assert args.action == "list"
        assert args.start_date == "2024-01-01"
        assert args.report_type == "morning"
        assert args.page == 2

    def test_global_flags(self):
        args = parse("--json", "--server-url", "https://x.example/api", "events", "today")

        assert args.json is True
        assert args.server_url == "https://x.example/api"

    def test_invalid_choice_exits(self):
        with pytest.raises(SystemExit):
            parse("events", "list", "--severity", "apocalyptic")


class TestExtractRecords:

    def test_shapes(self):
        assert extract_records([{"id": 1}, "junk"]) == [{"id": 1}]
        assert extract_records({"reports": [{"id": 2}], "total": 1}, "reports") == [{"id": 2}]
        assert extract_records({"items": [{"id": 3}]}, "events") == [{"id": 3}]
        assert extract_records({"total": 0}, "reports") == []
        assert extract_records(None) == []


class TestRunCli:

    @pytest.mark.asyncio
    async def test_login_then_status(self, config, backend, console, output):
        store = MemoryCredentialStore()
        backend.json("POST", "/auth/login", envelope({
            "token": "T1", "refreshToken": "R1",
            "user": {"id": "u1", "username": "admin", "fullName": "مدير النظام", "role": "admin"},
        }))

        code = await run_cli(parse("login", "-u", "admin", "-p", "secret"), config, console,
                             store=store, transport=backend.transport)

        assert code == EXIT_OK
        assert store.get(AUTH_TOKEN_KEY) == "T1"
        assert "Login successful" in output.getvalue()

        code = await run_cli(parse("status"), config, console, store=store,
                             transport=backend.transport)

        assert code == EXIT_OK
        assert "مدير النظام" in output.getvalue()

    @pytest.mark.asyncio
    async def test_failed_login(self, config, backend, console, output):
        backend.json("POST", "/auth/login", envelope(success=False, message="invalid"), status=401)

        code = await run_cli(parse("login", "-u", "admin", "-p", "bad"), config, console,
                             store=MemoryCredentialStore(), transport=backend.transport)

        assert code == EXIT_FAILED
        assert "Login failed" in output.getvalue()

    @pytest.mark.asyncio
    async def test_status_without_session(self, config, console, output):
        code = await run_cli(parse("status"), config, console, store=MemoryCredentialStore())

        assert code == EXIT_FAILED
        assert "Not authenticated" in output.getvalue()

    @pytest.mark.asyncio
    async def test_list_renders_table(self, config, backend, console, output, logged_in_store):
        backend.json("GET", "/events", envelope({"events": [
            {"eventNumber": "EV-7", "governorate": "البصرة", "severity": "high", "status": "open"},
        ], "total": 1}))

        code = await run_cli(parse("events", "list", "--severity", "high"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_OK
        assert "EV-7" in output.getvalue()
        assert "البصرة" in output.getvalue()
        assert backend.requests[0].url.params["severity"] == "high"

    @pytest.mark.asyncio
    async def test_json_output_is_the_envelope(self, config, backend, console, output,
                                               logged_in_store):
        backend.json("GET", "/governorates", envelope([{"code": "BGD", "name": "بغداد"}]))

        code = await run_cli(parse("--json", "governorates", "list"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_OK
        assert json.loads(output.getvalue()) == {
            "success": True,
            "data": [{"code": "BGD", "name": "بغداد"}],
            "statusCode": 200,
        }

    @pytest.mark.asyncio
    async def test_server_failure_exit_code(self, config, backend, console, output, logged_in_store):
        backend.json("GET", "/settings/system-info", {"message": "boom"}, status=500)

        code = await run_cli(parse("settings", "info"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_FAILED
        assert "boom" in output.getvalue()

    @pytest.mark.asyncio
    async def test_expired_session_exit_code(self, config, backend, console, output,
                                             logged_in_store):
        backend.json("GET", "/reports", {}, status=401)
        backend.on("POST", "/auth/refresh-token", httpx.Response(401))

        code = await run_cli(parse("reports", "list"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_SESSION
        assert "reportsdesk login" in output.getvalue()
        assert logged_in_store.snapshot() == {}

    @pytest.mark.asyncio
    async def test_missing_session_exit_code(self, config, backend, console):
        code = await run_cli(parse("memos", "list", "--type", "release"), config, console,
                             store=MemoryCredentialStore(), transport=backend.transport)

        assert code == EXIT_SESSION
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_logout(self, config, backend, console, output, logged_in_store):
        backend.json("POST", "/auth/logout", envelope())

        code = await run_cli(parse("logout"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_OK
        assert logged_in_store.snapshot() == {}
        assert "Session ended" not in output.getvalue()

    @pytest.mark.asyncio
    async def test_report_show_includes_events(self, config, backend, console, output,
                                               logged_in_store):
        backend.json("GET", "/reports/r1", envelope({"id": "r1", "reportNumber": "RPT-1"}))
        backend.json("GET", "/reports/r1/events", envelope([{"eventNumber": "EV-1"}]))

        code = await run_cli(parse("reports", "show", "r1"), config, console,
                             store=logged_in_store, transport=backend.transport)

        assert code == EXIT_OK
        assert "RPT-1" in output.getvalue()
        assert "EV-1" in output.getvalue()


class TestMain:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_FAILED
        assert "usage: reportsdesk" in capsys.readouterr().out

    def test_bad_server_url(self, monkeypatch, tmp_path):
        monkeypatch.setenv("REPORTSDESK_CONFIG_DIR", str(tmp_path))
        monkeypatch.delenv("REPORTSDESK_API_URL", raising=False)
        monkeypatch.delenv("NEXT_PUBLIC_API_URL", raising=False)

        assert main(["--server-url", "ftp://reports.example", "status"]) == EXIT_FAILED
