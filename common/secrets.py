import json
import os
from pathlib import Path
from typing import Any, Optional


class SecretsManager:
    """Ledger secrets backed by a JSON file pointed to by ``SECRETS_PATH``.

    Known keys:

    * ``JWT_SECRET``  - HS256 key for user bearer tokens
    * ``API_TOKENS``  - ``{username: static_token}`` map for service callers
    * ``ADMIN_USERS`` - usernames allowed to manage pay configs

    When a key is missing from the file, an environment variable of the same
    name is consulted (JSON-decoded for the map/list keys). Tests replace the
    cache via :meth:`set_override`.
    """

    _JSON_KEYS = frozenset({"API_TOKENS", "ADMIN_USERS"})

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(
            path or os.getenv("SECRETS_PATH", "/var/run/secrets/ledger.json")
        )
        self._cache: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._cache is None:
            try:
                with self._path.open("r", encoding="utf-8") as fh:
                    self._cache = json.load(fh)
            except FileNotFoundError:
                self._cache = {}
        return self._cache

    def _from_env(self, key: str) -> Any:
        raw = os.getenv(key)
        if raw is None or key not in self._JSON_KEYS:
            return raw
        return json.loads(raw)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        """Return secret value for *key* or *default* if missing."""

        data = self._load()
        if key in data:
            return data[key]
        value = self._from_env(key)
        return default if value is None else value

    def set_override(self, data: dict[str, Any]) -> None:
        """Replace the entire secret cache (test helper)."""

        self._cache = dict(data)


# Global default manager
secrets = SecretsManager()


def get_secret(key: str, default: Optional[Any] = None) -> Any:
    """Convenience wrapper around :class:`SecretsManager`."""

    return secrets.get(key, default)
