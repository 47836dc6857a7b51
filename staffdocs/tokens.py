# staffdocs/tokens.py
"""
Token storage.

A token store owns the access/refresh pair. The request pipeline reads it to
authenticate requests and writes it after login or refresh; nothing else
touches persisted tokens.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from .config import DEFAULT_TOKEN_FILE

logger = logging.getLogger(__name__)


ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"


@runtime_checkable
class TokenStore(Protocol):
    """Interface every token store implements."""

    def get(self) -> Optional[str]: ...

    def get_refresh(self) -> Optional[str]: ...

    def set(self, access: str, refresh: str) -> None: ...

    def clear(self) -> None: ...

    def is_authenticated(self) -> bool: ...


class MemoryTokenStore:
    """Keeps tokens for the lifetime of the process."""

    def __init__(self, access: Optional[str] = None, refresh: Optional[str] = None):
        self._lock = threading.Lock()
        self._access = access
        self._refresh = refresh

    def get(self) -> Optional[str]:
        with self._lock:
            return self._access

    def get_refresh(self) -> Optional[str]:
        with self._lock:
            return self._refresh

    def set(self, access: str, refresh: str) -> None:
        with self._lock:
            self._access = access
            self._refresh = refresh

    def clear(self) -> None:
        with self._lock:
            self._access = None
            self._refresh = None

    def is_authenticated(self) -> bool:
        return bool(self.get())


class FileTokenStore:
    """
    Persists tokens as JSON so a session survives process restarts.

    The file holds the well-known keys ``accessToken`` and ``refreshToken``.
    It is only removed by ``clear()``.
    """

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path) if path else DEFAULT_TOKEN_FILE
        self._lock = threading.Lock()

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> Optional[str]:
        with self._lock:
            return self._read().get(ACCESS_TOKEN_KEY) or None

    def get_refresh(self) -> Optional[str]:
        with self._lock:
            return self._read().get(REFRESH_TOKEN_KEY) or None

    def set(self, access: str, refresh: str) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(
                json.dumps({ACCESS_TOKEN_KEY: access, REFRESH_TOKEN_KEY: refresh}),
                encoding="utf-8",
            )
            tmp.replace(self.path)

    def clear(self) -> None:
        with self._lock:
            self.path.unlink(missing_ok=True)

    def is_authenticated(self) -> bool:
        return bool(self.get())
