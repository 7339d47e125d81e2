"""JSON file store for UnifiedCollections.

Implements the ``load()``/``save()`` persistence contract with a single JSON
array of collections in their camelCase serialized form.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from api_collection_kit.config import DEFAULT_STORE_PATH
from api_collection_kit.errors import StorageError
from api_collection_kit.models import UnifiedCollection

logger = logging.getLogger(__name__)

_collections_adapter = TypeAdapter(list[UnifiedCollection])


class CollectionStore:
    """Persists a list of collections keyed by their ``id``."""

    def __init__(self, path: Path | None = None):
        self.path = Path(path) if path else DEFAULT_STORE_PATH

    def load(self) -> list[UnifiedCollection]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return _collections_adapter.validate_python(data)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Corrupt collection store {self.path}: {e}") from e

    def save(self, collections: list[UnifiedCollection]) -> None:
        """Replace the stored collections with ``collections``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [c.to_dict() for c in collections]
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug("Saved %d collections to %s", len(collections), self.path)

    def get(self, collection_id: str) -> UnifiedCollection | None:
        return next((c for c in self.load() if c.id == collection_id), None)

    def upsert(self, collection: UnifiedCollection) -> None:
        """Insert ``collection`` or replace the stored one with the same id, keeping order."""
        collections = self.load()
        for i, existing in enumerate(collections):
            if existing.id == collection.id:
                collections[i] = collection
                break
        else:
            collections.append(collection)
        self.save(collections)

    def delete(self, collection_id: str) -> bool:
        """Remove a collection. Returns False when no collection has that id."""
        collections = self.load()
        remaining = [c for c in collections if c.id != collection_id]
        if len(remaining) == len(collections):
            return False
        self.save(remaining)
        return True

    def clear(self) -> None:
        self.save([])
