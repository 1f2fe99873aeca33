"""
Response envelope, per-call options and multipart payloads.

Every backend endpoint answers with {success, data?, message?, errors?}.
Some older endpoints return a bare JSON payload instead; that is read as an
implicit success carrying the payload as data.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


class Messages:
    """User-facing messages, already localized for the Arabic UI"""
    CONNECTION_ERROR = "خطأ في الاتصال بالخادم"
    UNAUTHORIZED = "غير مصرح، يرجى تسجيل الدخول"
    SESSION_EXPIRED = "انتهت صلاحية الجلسة، يرجى تسجيل الدخول مرة أخرى"
    FORBIDDEN = "ليس لديك صلاحية للوصول إلى هذا المورد"
    NOT_FOUND = "المورد غير موجود"
    INVALID_DATA = "بيانات غير صالحة"
    GENERIC_ERROR = "حدث خطأ ما"


@dataclass
class RequestOptions:
    """Per-call options"""
    requires_auth: bool = True
    content_type: str = JSON_CONTENT_TYPE


@dataclass
class ApiResponse:
    """Normalized result of every client call"""
    success: bool
    data: Any = None
    message: Optional[str] = None
    errors: Optional[List[Any]] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.success is True

    @classmethod
    def from_body(cls, body: Any, status_code: int) -> "ApiResponse":
        """Normalize a 2xx body into an envelope"""
        if isinstance(body, dict) and "success" in body:
            return cls(
                success=bool(body["success"]),
                data=body.get("data"),
                message=body.get("message"),
                errors=body.get("errors"),
                status_code=status_code,
            )

        # Bare payload from an endpoint that does not wrap its response
        return cls(success=True, data=body, status_code=status_code)

    @classmethod
    def failure(cls, message: str, status_code: Optional[int], errors: Optional[List[Any]] = None,
                data: Any = None) -> "ApiResponse":
        return cls(success=False, data=data, message=message, errors=errors,
                   status_code=status_code)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape, omitting empty optional fields"""
        result: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.message is not None:
            result["message"] = self.message
        if self.errors is not None:
            result["errors"] = self.errors
        if self.status_code is not None:
            result["statusCode"] = self.status_code
        return result


FileContent = Union[bytes, Any]  # bytes or a binary file object


@dataclass
class FormData:
    """
    Multipart payload for file uploads.

    Usage:
        form = FormData()
        form.add_field("description", "صورة الموقع")
        form.add_file("file", "photo.jpg", open("photo.jpg", "rb"), "image/jpeg")
        await client.upload_file("/events/42/attachments", form)
    """
    fields: Dict[str, str] = field(default_factory=dict)
    files: List[Tuple[str, Tuple[str, FileContent, Optional[str]]]] = field(default_factory=list)

    def add_field(self, name: str, value: Any) -> "FormData":
        self.fields[name] = str(value)
        return self

    def add_file(self, name: str, filename: str, content: FileContent,
                 content_type: Optional[str] = None) -> "FormData":
        self.files.append((name, (filename, content, content_type)))
        return self

    def __bool__(self) -> bool:
        return bool(self.fields or self.files)


def is_success_response(response: ApiResponse) -> bool:
    """True only for a successful envelope; data is safe to read"""
    return response.success is True
