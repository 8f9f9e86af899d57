"""
Blob Storage Backends

Containers of named blobs, addressed by path-like names such as
"{user_id}/{trigger_name}". Every write overwrites; there are no multi-blob
transactions.

Backends:
- FileBlobStore: one file per blob under <data_dir>/<container>/
- MemoryBlobStore: process-local, for tests and throwaway runs
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Protocol

from app.core.errors import BlobNotFoundError, CollaboratorTransportError

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Narrow blob interface used by the template and user stores."""

    def get_blob(self, container: str, name: str) -> bytes: ...

    def set_blob(self, container: str, name: str, data: bytes) -> None: ...

    def delete_blob(self, container: str, name: str) -> None: ...

    def list_container(self, container: str, prefix: str = "") -> List[str]: ...


def _check_name(container: str, name: str) -> None:
    parts = name.split("/")
    if not name or any(part in ("", ".", "..") for part in parts):
        raise CollaboratorTransportError(f"invalid blob name {container}/{name!r}")


class MemoryBlobStore:
    """In-memory blob store. Contents do not persist across restarts."""

    def __init__(self):
        self._lock = threading.Lock()
        self._containers: Dict[str, Dict[str, bytes]] = {}

    def get_blob(self, container: str, name: str) -> bytes:
        with self._lock:
            try:
                return self._containers[container][name]
            except KeyError:
                raise BlobNotFoundError(container, name) from None

    def set_blob(self, container: str, name: str, data: bytes) -> None:
        _check_name(container, name)
        with self._lock:
            self._containers.setdefault(container, {})[name] = bytes(data)

    def delete_blob(self, container: str, name: str) -> None:
        with self._lock:
            blobs = self._containers.get(container, {})
            if name not in blobs:
                raise BlobNotFoundError(container, name)
            del blobs[name]

    def list_container(self, container: str, prefix: str = "") -> List[str]:
        with self._lock:
            names = self._containers.get(container, {}).keys()
            return sorted(n for n in names if n.startswith(prefix))


class FileBlobStore:
    """Blob store backed by the local filesystem."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self._lock = threading.Lock()

    def _path(self, container: str, name: str) -> Path:
        _check_name(container, name)
        return self.root / container / Path(*name.split("/"))

    def get_blob(self, container: str, name: str) -> bytes:
        path = self._path(container, name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(container, name) from None
        except OSError as e:
            raise CollaboratorTransportError(
                f"error reading blob {container}/{name}: {e}"
            ) from e

    def set_blob(self, container: str, name: str, data: bytes) -> None:
        path = self._path(container, name)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            with self._lock:
                path.parent.mkdir(parents=True, exist_ok=True)
                tmp.write_bytes(data)
                os.replace(tmp, path)
        except OSError as e:
            raise CollaboratorTransportError(
                f"error saving {container}/{name}: {e}"
            ) from e
        logger.debug(f"Saved blob {container}/{name} ({len(data)} bytes)")

    def delete_blob(self, container: str, name: str) -> None:
        path = self._path(container, name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise BlobNotFoundError(container, name) from None
        except OSError as e:
            raise CollaboratorTransportError(
                f"error deleting blob {container}/{name}: {e}"
            ) from e

    def list_container(self, container: str, prefix: str = "") -> List[str]:
        base = self.root / container
        if not base.is_dir():
            return []

        try:
            names = [
                path.relative_to(base).as_posix()
                for path in base.rglob("*")
                if path.is_file() and not path.name.startswith(".")
            ]
        except OSError as e:
            raise CollaboratorTransportError(
                f"error listing container {container} with prefix {prefix}: {e}"
            ) from e

        return sorted(n for n in names if n.startswith(prefix))
