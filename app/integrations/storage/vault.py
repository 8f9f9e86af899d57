"""
Secret Vault Backends

Secrets are a string value plus a flat dict of string tags, keyed by name
(e.g. "oauth-U123" -> access token, tags {user, team, scopes}).

MemorySecretVault keeps secrets in-memory only; they do not persist across
server restarts. FileSecretVault keeps them in a single JSON file with
owner-only permissions.
"""

import json
import os
import threading
from pathlib import Path
from typing import Dict, Protocol, Tuple

from app.core.errors import CollaboratorTransportError, SecretNotFoundError


class SecretVault(Protocol):
    """Narrow vault interface used by the credential store."""

    def get_secret(self, key: str) -> Tuple[str, Dict[str, str]]: ...

    def set_secret(self, key: str, value: str, tags: Dict[str, str]) -> None: ...


class MemorySecretVault:
    def __init__(self):
        self._lock = threading.Lock()
        self._store: Dict[str, Tuple[str, Dict[str, str]]] = {}

    def get_secret(self, key: str) -> Tuple[str, Dict[str, str]]:
        with self._lock:
            if key not in self._store:
                raise SecretNotFoundError(key)
            value, tags = self._store[key]
            return value, dict(tags)

    def set_secret(self, key: str, value: str, tags: Dict[str, str]) -> None:
        with self._lock:
            self._store[key] = (value, dict(tags))


class FileSecretVault:
    """Vault backed by one JSON document: {key: {"value": ..., "tags": {...}}}."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, dict]:
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise CollaboratorTransportError(
                f"could not load secrets from {self.path}: {e}"
            ) from e

    def get_secret(self, key: str) -> Tuple[str, Dict[str, str]]:
        with self._lock:
            secrets = self._load()
        if key not in secrets:
            raise SecretNotFoundError(key)
        entry = secrets[key]
        return entry.get("value", ""), dict(entry.get("tags") or {})

    def set_secret(self, key: str, value: str, tags: Dict[str, str]) -> None:
        with self._lock:
            secrets = self._load()
            secrets[key] = {"value": value, "tags": dict(tags)}
            tmp = self.path.with_name(f".{self.path.name}.tmp")
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(secrets, f, indent=2, sort_keys=True)
                os.replace(tmp, self.path)
            except OSError as e:
                raise CollaboratorTransportError(f"error saving secret {key}: {e}") from e
