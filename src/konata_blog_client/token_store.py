from typing import Callable, Dict, List, Optional
from threading import Lock
import logging
import json
import os
import tempfile


TOKEN_KEY = "auth_token"

TokenListener = Callable[[Optional[str]], None]

log = logging.getLogger(__name__)


class TokenStore:
    """
    Process-wide storage of the bearer token with change notification.

    Responsibilities:
    - Read the token fresh on every call (no caching beyond the backing
      storage itself).
    - Persist or delete the token.
    - Notify subscribed listeners after each change has been applied.

    Subclasses implement `_read`, `_write` and `_delete`.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._listeners: List[TokenListener] = []

    def _read(self) -> Optional[str]:
        raise NotImplementedError

    def _write(self, value: str) -> None:
        raise NotImplementedError

    def _delete(self) -> None:
        raise NotImplementedError

    def get_token(self) -> Optional[str]:
        """
        Return the stored token.

        Returns:
            str | None: The trimmed token, or None if absent or blank.
        """
        raw = self._read()
        if raw is None:
            return None
        token = str(raw).strip()
        return token or None

    def set_token(self, value: str) -> None:
        """Persist the trimmed token, then notify listeners."""
        token = value.strip()
        with self._lock:
            self._write(token)
        self._notify(token)

    def remove_token(self) -> None:
        """Delete the token, then notify listeners."""
        with self._lock:
            self._delete()
        self._notify(None)

    def subscribe(self, listener: TokenListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: TokenListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self, token: Optional[str]) -> None:
        # Fire-and-forget: only listeners subscribed right now are called.
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(token)
            except Exception:
                log.exception("Token listener %r failed", listener)


class MemoryTokenStore(TokenStore):
    """Token store kept in process memory only."""

    def __init__(
        self,
        token: Optional[str] = None
    ) -> None:
        super().__init__()
        self._token = token

    def _read(self) -> Optional[str]:
        return self._token

    def _write(self, value: str) -> None:
        self._token = value

    def _delete(self) -> None:
        self._token = None


class FileTokenStore(TokenStore):
    """
    Token store backed by a local JSON file.

    The file holds a single object keyed by `auth_token`. It is read on
    every `get_token()` call so that other processes sharing the file see
    the same credential.
    """

    def __init__(
        self,
        token_file: Optional[str] = ".konata_token.json"
    ) -> None:
        """
        Args:
            token_file (str, optional): Path to the JSON file storing the
                                        token. Defaults to
                                        ".konata_token.json".
        """
        super().__init__()
        self.token_file = token_file

    def _load(self) -> Dict:
        """
        Load the stored JSON object.

        Returns:
            dict: The file contents, or an empty dictionary if the file is
                missing, malformed, or not a JSON object.
        """
        try:
            with open(self.token_file, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            return {}

        if not isinstance(data, dict):
            return {}

        return data

    def _read(self) -> Optional[str]:
        return self._load().get(TOKEN_KEY)

    def _write(self, value: str) -> None:
        data = self._load()
        data[TOKEN_KEY] = value

        self._save(data)

    def _delete(self) -> None:
        data = self._load()
        if TOKEN_KEY not in data:
            return

        data.pop(TOKEN_KEY)
        if data:
            self._save(data)
        else:
            os.remove(self.token_file)

    def _save(self, data: Dict) -> None:
        """
        Replace the token file atomically.

        Readers do not take the lock, so the new object is written to a
        temporary file in the same directory and moved over the old one.
        A concurrent `get_token()` sees either the old or the new object,
        never a truncated file.
        """
        directory = os.path.dirname(self.token_file) or "."
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=".konata_token.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.token_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
