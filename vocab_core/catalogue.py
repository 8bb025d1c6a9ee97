"""
Word catalogue access.

The catalogue supplies vocabulary content and candidate new items to the
scheduler. Two backends: an in-memory list (optionally loaded from a JSON
seed file) and a MongoDB collection.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError
from pymongo import MongoClient
from pymongo.collection import Collection

from vocab_core import config
from vocab_core.schemas import VocabularyEntry

logger = logging.getLogger(__name__)

COLLECTION_NAME = "words"

# Global connection pool (reused across calls)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None


class WordCatalogue(ABC):
    """Read-only source of vocabulary entries."""

    @abstractmethod
    def all_entries(self) -> list[VocabularyEntry]:
        """Return every entry in catalogue order."""

    @abstractmethod
    def get(self, item_id: str) -> Optional[VocabularyEntry]:
        """Return one entry, or None if the id is unknown."""


class InMemoryCatalogue(WordCatalogue):

    def __init__(self, entries: Iterable[VocabularyEntry]):
        self._entries: dict[str, VocabularyEntry] = {}
        for entry in entries:
            if entry.id in self._entries:
                raise ValueError(f"duplicate catalogue id: {entry.id}")
            self._entries[entry.id] = entry

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "InMemoryCatalogue":
        """
        Load a catalogue from a JSON file holding a list of entries.

        Raises:
            ValueError: if the file is not a list or an entry is malformed
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a JSON list of entries")
        try:
            entries = [VocabularyEntry.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise ValueError(f"{path}: invalid catalogue entry: {exc}") from exc
        logger.info("Loaded %d catalogue entries from %s", len(entries), path)
        return cls(entries)

    def all_entries(self) -> list[VocabularyEntry]:
        return list(self._entries.values())

    def get(self, item_id: str) -> Optional[VocabularyEntry]:
        return self._entries.get(item_id)

    def __len__(self) -> int:
        return len(self._entries)


# ---- MongoDB ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB word collection.

    Uses a persistent connection pool that's reused across calls.

    Returns:
        MongoDB collection object
    """
    global _client, _collection

    # Return cached collection if it exists
    if _collection is not None:
        return _collection

    mongo_uri = config.get_mongo_uri()
    if not mongo_uri:
        raise ValueError("MONGO_URI not found in environment variables")

    _client = MongoClient(
        mongo_uri,
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    _collection = _client[config.get_mongo_db_name()][COLLECTION_NAME]
    return _collection


def _document_to_entry(doc: dict) -> Optional[VocabularyEntry]:
    data = {k: v for k, v in doc.items() if k != "_id"}
    if "id" not in data and "_id" in doc:
        data["id"] = str(doc["_id"])
    try:
        return VocabularyEntry.model_validate(data)
    except ValidationError as exc:
        logger.warning("Skipping malformed catalogue document %s: %s", data.get("id"), exc)
        return None


class MongoCatalogue(WordCatalogue):
    """Catalogue backed by a MongoDB collection (one document per word)."""

    def __init__(self, collection: Optional[Collection] = None):
        self.collection = collection if collection is not None else get_collection()

    def all_entries(self) -> list[VocabularyEntry]:
        entries = []
        for doc in self.collection.find({}).sort("_id", 1):
            entry = _document_to_entry(doc)
            if entry is not None:
                entries.append(entry)
        return entries

    def get(self, item_id: str) -> Optional[VocabularyEntry]:
        doc = self.collection.find_one({"id": item_id})
        if doc is None:
            return None
        return _document_to_entry(doc)
