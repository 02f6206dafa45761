"""Durable key-value storage scoped to a single client device.

Values are strings, mirroring a browser's localStorage. Every backend raises
:class:`StorageError` when the underlying medium fails.
"""
import json
import logging
import re
from pathlib import Path
from typing import Callable, Dict, Optional

from firebase_admin import firestore

from .errors import StorageError

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth-token"
AUTH_USER_KEY = "auth-user"
LAST_LOGIN_KEY = "last-login"
FAVORITES_KEY = "movie-favorites"


class Storage:
    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(Storage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage(Storage):
    """Keeps every key of one namespace in a single JSON file"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {self.path}: {str(e)}") from e

    def _write(self, items: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(items), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {str(e)}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if key not in items:
            return
        del items[key]
        if items:
            self._write(items)
            return
        # An emptied namespace leaves no file behind
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {self.path}: {str(e)}") from e


class FirestoreStorage(Storage):
    """Stores a namespace as one document in the ``client_storage`` collection"""

    collection = "client_storage"

    def __init__(self, db, namespace: str):
        self.db = db
        self.namespace = namespace

    def _ref(self):
        return self.db.collection(self.collection).document(self.namespace)

    def get_item(self, key: str) -> Optional[str]:
        try:
            doc = self._ref().get()
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {str(e)}") from e
        if not doc.exists:
            return None
        return doc.to_dict().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            self._ref().set({
                key: value,
                'updated_at': firestore.SERVER_TIMESTAMP
            }, merge=True)
        except Exception as e:
            raise StorageError(f"Failed to save {key}: {str(e)}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._ref().set({key: firestore.DELETE_FIELD}, merge=True)
        except Exception as e:
            raise StorageError(f"Failed to remove {key}: {str(e)}") from e


def _safe_namespace(client_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]", "_", client_id) or "default"


def build_storage_factory(backend: str, storage_dir: Path, db_provider: Optional[Callable] = None) -> Callable[[str], Storage]:
    """Return a callable creating the storage for a client namespace"""
    if backend == "memory":
        return lambda client_id: MemoryStorage()
    if backend == "file":
        return lambda client_id: FileStorage(Path(storage_dir) / f"{_safe_namespace(client_id)}.json")
    if backend == "firestore":
        if db_provider is None:
            from .firebase import get_db
            db_provider = get_db
        return lambda client_id: FirestoreStorage(db_provider(), _safe_namespace(client_id))
    raise ValueError(f"Unknown storage backend: {backend}")
