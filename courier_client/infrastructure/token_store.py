"""Persisted bearer token.

The courier's token is the only state kept on the device between runs.
"""
import os
from pathlib import Path
from typing import Optional, Protocol

from courier_client.core import get_logger

logger = get_logger(__name__)


class TokenStore(Protocol):
    def get(self) -> Optional[str]: ...
    def set(self, token: str) -> None: ...
    def clear(self) -> None: ...


class MemoryTokenStore:
    def __init__(self, token: Optional[str] = None):
        self._token = token

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Single-file store readable only by the current user (0600 in a 0700 dir)."""

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def get(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def set(self, token: str) -> None:
        self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(token)
        # O_CREAT mode is ignored when the file already existed
        os.chmod(self.path, 0o600)
        logger.debug(f"Stored session token at {self.path}")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
