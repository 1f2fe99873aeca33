"""
Custom Exceptions for ReportsDesk
=================================

The request client never raises for transport or server failures; those
always end in an ApiResponse. These exceptions cover the local side only:
configuration and credential persistence.

Usage:
    from reportsdesk.exceptions import ConfigurationError

    if not url.startswith(("http://", "https://")):
        raise ConfigurationError(f"Invalid API base URL: {url}")
"""

from typing import Optional, Any, Dict


class ReportsDeskError(Exception):
    """Base exception for all ReportsDesk errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


class ConfigurationError(ReportsDeskError):
    """Invalid client configuration"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message,
            code="CONFIG_ERROR",
            details={"setting": setting} if setting else None
        )


class CredentialStoreError(ReportsDeskError):
    """Credentials could not be persisted"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            message,
            code="CREDENTIAL_STORE_ERROR",
            details={"path": path} if path else None
        )
