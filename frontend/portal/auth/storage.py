"""
Persisted token slot implementations.

The slot holds a single string under the key ``"token"`` and must outlive the
running client.  ``SessionController`` only depends on ``TokenStore``:

- ``CookieTokenStore``  -- browser cookie via ``extra-streamlit-components``
- ``FileTokenStore``    -- JSON file on disk, for single-user local runs
- ``MemoryTokenStore``  -- process memory, for tests
"""

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"


class TokenStore:
    """Interface of the durable ``token -> string`` slot."""

    def sync(self) -> bool:
        """
        Refresh from the backing medium.

        Returns False while the medium has not reported its contents yet.
        """
        return True

    def get(self) -> Optional[str]:
        raise NotImplementedError

    def set(self, token: str) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        """Remove the token. Must succeed when the slot is already empty."""
        raise NotImplementedError


class MemoryTokenStore(TokenStore):
    def __init__(self, token: Optional[str] = None) -> None:
        self._slots: Dict[str, str] = {}
        if token is not None:
            self._slots[TOKEN_KEY] = token

    def get(self) -> Optional[str]:
        return self._slots.get(TOKEN_KEY)

    def set(self, token: str) -> None:
        self._slots[TOKEN_KEY] = token

    def clear(self) -> None:
        self._slots.pop(TOKEN_KEY, None)


class FileTokenStore(TokenStore):
    """
    Store the token in a small JSON document on disk.

    The file is re-read on every ``get()`` so that separate processes (or a
    restarted one) see the same slot.  Writes go through a temporary file and
    ``os.replace`` so a crash never leaves a half-written document behind.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)

    def get(self) -> Optional[str]:
        token = self._read().get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set(self, token: str) -> None:
        data = self._read()
        data[TOKEN_KEY] = token
        self._write(data)

    def clear(self) -> None:
        data = self._read()
        if TOKEN_KEY not in data:
            return
        del data[TOKEN_KEY]
        if data:
            self._write(data)
        else:
            self.path.unlink(missing_ok=True)


class CookieTokenStore(TokenStore):
    """
    Store the token in a browser cookie.

    *cookie_manager* is an ``extra_streamlit_components.CookieManager`` (or
    anything with the same ``get_all``/``get``/``set``/``delete`` methods).

    The manager only knows the cookies the browser last reported.  ``sync()``
    asks for a fresh report and must run once per Streamlit script run,
    before ``get()``; on the very first run of a browser session the
    component has not answered yet and the report is empty.
    """

    def __init__(self, cookie_manager, cookie_name: str = TOKEN_KEY, max_age_days: int = 7) -> None:
        self._manager = cookie_manager
        self._name = cookie_name
        self._max_age_days = max_age_days

    def sync(self) -> bool:
        cookies = self._manager.get_all(key=f"get_{self._name}_cookies")
        return bool(cookies)

    def get(self) -> Optional[str]:
        token = self._manager.get(self._name)
        return token or None

    def set(self, token: str) -> None:
        self._manager.set(
            self._name,
            token,
            expires_at=datetime.now(timezone.utc) + timedelta(days=self._max_age_days),
            key=f"set_{self._name}_cookie",
        )

    def clear(self) -> None:
        # The browser may hold the cookie even when the last report does not.
        try:
            self._manager.delete(self._name, key=f"delete_{self._name}_cookie")
        except KeyError:
            # Raised after the browser-side delete was sent, when the report
            # never listed the cookie.
            logger.debug("Cookie %s was not in the last browser report", self._name)
