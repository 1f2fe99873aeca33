"""
Session credential storage.

The session is three keys: the access token, the refresh token and the
serialized user profile. They are created together on login, the tokens are
replaced on refresh, and all three are removed together on logout or when a
refresh fails.

Stores only promise atomic single-key reads and writes; concurrent token
replacement resolves last-write-wins.
"""

import os
import json
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Dict, Any

from reportsdesk.exceptions import CredentialStoreError
from reportsdesk.logging_config import get_logger

logger = get_logger("credentials")

AUTH_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "user"

SESSION_KEYS = (AUTH_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY)


class CredentialStore(ABC):
    """Client-local key/value store for the session credential"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...

    def clear(self) -> None:
        """Remove every session key"""
        for key in SESSION_KEYS:
            self.remove(key)

    def get_user(self) -> Optional[Dict[str, Any]]:
        """Stored user profile, or None if missing or unreadable"""
        raw = self.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user profile is not valid JSON; ignoring it")
            return None
        return user if isinstance(user, dict) else None

    def set_user(self, user: Dict[str, Any]) -> None:
        self.set(USER_KEY, json.dumps(user, ensure_ascii=False))


class MemoryCredentialStore(CredentialStore):
    """In-process store. Used by tests and embedded clients."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class FileCredentialStore(CredentialStore):
    """
    Persists the session in a JSON file (default ~/.reportsdesk/credentials.json).

    Survives restarts, never leaves the machine. Every write replaces the file
    atomically; a corrupt file reads as an empty session.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read credentials file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Credentials file {self.path} has unexpected shape; ignoring it")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=".credentials-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, 'w', encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                # Secure the file (no-op on Windows)
                try:
                    os.chmod(tmp_path, 0o600)
                except OSError:
                    pass
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise CredentialStoreError(
                f"Could not save credentials: {e}", path=str(self.path)
            ) from e

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        data = self._read()
        remaining = {k: v for k, v in data.items() if k not in SESSION_KEYS}
        if not remaining:
            if self.path.exists():
                self.path.unlink()
            return
        self._write(remaining)
