"""
Authenticated request client for the reporting backend.

Handles:
- Bearer credentials from the injected credential store
- Body serialization (JSON, raw, multipart)
- Failure classification into ApiResponse envelopes
- One transparent token refresh + retry on 401

Every call returns an ApiResponse. Transport failures never escape.

Usage:
    async with ApiClient(config, store, on_session_expired=show_login) as client:
        response = await client.get("/reports")
        if response.success:
            render(response.data)
"""

import asyncio
import json
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import httpx

from reportsdesk.api.envelope import (
    ApiResponse,
    FormData,
    JSON_CONTENT_TYPE,
    MULTIPART_CONTENT_TYPE,
    Messages,
    RequestOptions,
)
from reportsdesk.config import ClientConfig
from reportsdesk.credentials import (
    AUTH_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    CredentialStore,
    FileCredentialStore,
)
from reportsdesk.logging_config import generate_request_id, get_logger, set_request_id
from reportsdesk.notifications import Notifier

logger = get_logger("api.client")

REFRESH_PATH = "/auth/refresh-token"


class SessionEvent(str, Enum):
    """Why the session ended; listeners should send the user back to login"""
    MISSING = "missing"                # auth required, no token stored
    EXPIRED = "expired"                # rejected again after a refresh
    REFRESH_FAILED = "refresh_failed"  # refresh call failed
    LOGOUT = "logout"                  # explicit logout


SessionListener = Callable[[SessionEvent], None]


@dataclass(frozen=True)
class PendingRequest:
    """What is needed to replay a call once after a token refresh"""
    path: str
    method: str
    body: Any
    options: RequestOptions
    is_retry: bool = False


class ApiClient:
    """
    Async client for the reporting backend.

    Construct once at startup and hand it to the domain services.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[CredentialStore] = None,
        *,
        on_session_expired: Optional[SessionListener] = None,
        notifier: Optional[Notifier] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        coalesce_refresh: Optional[bool] = None,
    ):
        self.config = config or ClientConfig()
        self.base_url = self.config.api_base_url
        self.store = store or FileCredentialStore(self.config.credentials_file)
        self.notifier = notifier or Notifier()
        self.coalesce_refresh = (
            self.config.coalesce_refresh if coalesce_refresh is None else coalesce_refresh
        )

        self._listeners: List[SessionListener] = []
        if on_session_expired:
            self._listeners.append(on_session_expired)

        self._refresh_task: Optional[asyncio.Task] = None
        self._http = httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==================== Session ====================

    def add_session_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_session_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def get_auth_token(self) -> Optional[str]:
        return self.store.get(AUTH_TOKEN_KEY)

    def set_auth_token(self, token: str) -> None:
        self.store.set(AUTH_TOKEN_KEY, token)
        logger.debug(f"Auth token set, length: {len(token)}")

    def remove_auth_token(self) -> None:
        self.store.remove(AUTH_TOKEN_KEY)
        logger.debug("Auth token removed")

    def is_authenticated(self) -> bool:
        return bool(self.get_auth_token())

    def store_session(self, token: str, refresh_token: Optional[str] = None,
                      user: Optional[Dict[str, Any]] = None) -> None:
        """Replace the stored session with a fresh one (after login)"""
        self.store.clear()
        self.set_auth_token(token)
        if refresh_token:
            self.store.set(REFRESH_TOKEN_KEY, refresh_token)
        if user:
            self.store.set_user(user)

    def clear_session(self) -> None:
        self.store.clear()

    def end_session(self, event: SessionEvent) -> None:
        """Clear credentials and tell listeners the user must log in again"""
        self.clear_session()
        self._emit(event)

    def _emit(self, event: SessionEvent) -> None:
        logger.info(f"Session ended: {event.value}", extra={"event_type": "auth", "auth_event": event.value})
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Session listener failed for event {event.value}")

    # ==================== HTTP verbs ====================

    async def get(self, path: str, options: Optional[RequestOptions] = None) -> ApiResponse:
        return await self.request(path, "GET", None, options)

    async def post(self, path: str, body: Any = None,
                   options: Optional[RequestOptions] = None) -> ApiResponse:
        return await self.request(path, "POST", body, options)

    async def put(self, path: str, body: Any = None,
                  options: Optional[RequestOptions] = None) -> ApiResponse:
        return await self.request(path, "PUT", body, options)

    async def patch(self, path: str, body: Any = None,
                    options: Optional[RequestOptions] = None) -> ApiResponse:
        return await self.request(path, "PATCH", body, options)

    async def delete(self, path: str, options: Optional[RequestOptions] = None) -> ApiResponse:
        return await self.request(path, "DELETE", None, options)

    async def upload_file(self, path: str, form: FormData,
                          options: Optional[RequestOptions] = None) -> ApiResponse:
        """POST a multipart form; the transport sets the boundary header"""
        options = replace(options or RequestOptions(), content_type=MULTIPART_CONTENT_TYPE)
        return await self.request(path, "POST", form, options)

    async def request(self, path: str, method: str = "GET", body: Any = None,
                      options: Optional[RequestOptions] = None) -> ApiResponse:
        """One logical exchange: the call, plus at most one refresh and one retry"""
        set_request_id(generate_request_id())
        pending = PendingRequest(
            path=path,
            method=method.upper(),
            body=body,
            options=options or RequestOptions(),
        )
        return await self._exchange(pending)

    # ==================== Exchange ====================

    def _build_request_kwargs(self, pending: PendingRequest) -> Dict[str, Any]:
        """Headers and body arguments for httpx"""
        headers: Dict[str, str] = {}
        kwargs: Dict[str, Any] = {"headers": headers}
        content_type = pending.options.content_type
        body = pending.body

        if content_type == MULTIPART_CONTENT_TYPE and isinstance(body, dict):
            body = FormData(fields={k: str(v) for k, v in body.items()})

        # No Content-Type for multipart: httpx adds it with the boundary
        if not isinstance(body, FormData):
            headers["Content-Type"] = content_type

        if pending.method in ("GET", "DELETE") or body is None:
            return kwargs

        if isinstance(body, FormData):
            # Text fields go as filename-less parts so the body stays multipart without files
            kwargs["files"] = [(name, (None, value)) for name, value in body.fields.items()]
            kwargs["files"].extend(body.files)
        elif isinstance(body, (str, bytes)) and content_type != JSON_CONTENT_TYPE:
            kwargs["content"] = body
        else:
            kwargs["content"] = json.dumps(body, ensure_ascii=False).encode("utf-8")
        return kwargs

    async def _exchange(self, pending: PendingRequest) -> ApiResponse:
        url = f"{self.base_url}{pending.path}"
        try:
            kwargs = self._build_request_kwargs(pending)
        except (TypeError, ValueError) as e:
            # Nothing was sent; no status code to report
            logger.warning(f"{pending.method} {pending.path} body could not be serialized: {e}")
            self.notifier.error(Messages.INVALID_DATA)
            return ApiResponse.failure(Messages.INVALID_DATA, None)

        if pending.options.requires_auth:
            token = self.get_auth_token()
            if not token:
                logger.info(f"{pending.method} {pending.path} requires auth but no token is stored")
                self._emit(SessionEvent.MISSING)
                return ApiResponse.failure(Messages.UNAUTHORIZED, 401)
            kwargs["headers"]["Authorization"] = f"Bearer {token}"

        start = time.perf_counter()
        try:
            response = await self._http.request(pending.method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.log_request(pending.method, pending.path, 0,
                               (time.perf_counter() - start) * 1000,
                               error=type(e).__name__, retry=pending.is_retry)
            self.notifier.error(Messages.CONNECTION_ERROR)
            return ApiResponse.failure(Messages.CONNECTION_ERROR, 0)

        logger.log_request(pending.method, pending.path, response.status_code,
                           (time.perf_counter() - start) * 1000, retry=pending.is_retry)

        body = self._parse_body(response)

        if not response.is_success:
            return await self._handle_error(pending, response.status_code, body)

        return ApiResponse.from_body(body, response.status_code)

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """JSON when parseable, otherwise the raw text wrapped as {message}"""
        text = response.text
        if not text.strip():
            return {}
        try:
            return json.loads(text)
        except ValueError:
            return {"message": text}

    # ==================== Error handling ====================

    async def _handle_error(self, pending: PendingRequest, status: int, body: Any) -> ApiResponse:
        server_message = None
        payload = None
        if isinstance(body, dict):
            if isinstance(body.get("message"), str) and body["message"]:
                server_message = body["message"]
            payload = body.get("data")

        if status == 401 and pending.options.requires_auth:
            return await self._handle_unauthorized(pending)

        if status == 403:
            self.notifier.error(Messages.FORBIDDEN)
            return ApiResponse.failure(Messages.FORBIDDEN, status, data=payload)

        if status == 404:
            return ApiResponse.failure(Messages.NOT_FOUND, status, data=payload)

        if status in (400, 422):
            message = server_message or Messages.INVALID_DATA
            errors = body.get("errors") if isinstance(body, dict) else None
            self.notifier.error(message)
            return ApiResponse.failure(message, status, errors=errors or [], data=payload)

        message = server_message or Messages.GENERIC_ERROR
        self.notifier.error(message)
        return ApiResponse.failure(message, status, data=payload)

    async def _handle_unauthorized(self, pending: PendingRequest) -> ApiResponse:
        if pending.is_retry:
            # Rejected even with a fresh token: do not refresh again
            logger.log_auth_event("retry", False, reason="token rejected after refresh")
            self.end_session(SessionEvent.EXPIRED)
            return ApiResponse.failure(Messages.SESSION_EXPIRED, 401)

        if not await self._refresh():
            self.end_session(SessionEvent.REFRESH_FAILED)
            return ApiResponse.failure(Messages.SESSION_EXPIRED, 401)

        return await self._exchange(replace(pending, is_retry=True))

    # ==================== Token refresh ====================

    async def _refresh(self) -> bool:
        if not self.coalesce_refresh:
            return await self.refresh_access_token()

        # Concurrent 401s wait on the same refresh call
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self.refresh_access_token())
        return await asyncio.shield(self._refresh_task)

    async def refresh_access_token(self) -> bool:
        """Exchange the stored refresh token for a new access token"""
        refresh_token = self.store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            logger.log_auth_event("refresh", False, reason="no refresh token stored")
            return False

        url = f"{self.base_url}{REFRESH_PATH}"
        start = time.perf_counter()
        try:
            response = await self._http.post(
                url,
                content=json.dumps({"refreshToken": refresh_token}).encode("utf-8"),
                headers={"Content-Type": JSON_CONTENT_TYPE},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.log_request("POST", REFRESH_PATH, 0, (time.perf_counter() - start) * 1000,
                               error=type(e).__name__)
            logger.log_auth_event("refresh", False, reason=type(e).__name__)
            return False

        logger.log_request("POST", REFRESH_PATH, response.status_code,
                           (time.perf_counter() - start) * 1000)

        if not response.is_success:
            logger.log_auth_event("refresh", False, reason=f"status {response.status_code}")
            return False

        try:
            body = response.json()
        except ValueError:
            logger.log_auth_event("refresh", False, reason="malformed response")
            return False

        if not isinstance(body, dict):
            body = {}
        data = body.get("data")
        if not (body.get("success") is True and isinstance(data, dict) and data.get("token")):
            logger.log_auth_event("refresh", False, reason="response without token")
            return False

        self.set_auth_token(data["token"])
        if data.get("refreshToken"):
            self.store.set(REFRESH_TOKEN_KEY, data["refreshToken"])

        logger.log_auth_event("refresh", True)
        return True
