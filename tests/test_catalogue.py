import json
from unittest.mock import MagicMock

import pytest

from vocab_core.catalogue import InMemoryCatalogue, MongoCatalogue
from vocab_core.schemas import Category, VocabularyEntry


def test_seed_catalogue_loads(seed_catalogue_path):
    catalogue = InMemoryCatalogue.from_json(seed_catalogue_path)
    entry = catalogue.get("ephemeral")
    assert entry.word == "Ephemeral"
    assert entry.part_of_speech == "adjective"
    assert "fleeting" in entry.synonyms
    assert catalogue.get("obfuscate").category == Category.TECHNOLOGY.value
    assert catalogue.all_entries()[0].id == "perspicacious"


def test_from_json_rejects_non_list(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(json.dumps({"id": "w1"}))
    with pytest.raises(ValueError):
        InMemoryCatalogue.from_json(path)


def test_from_json_rejects_malformed_entry(tmp_path):
    path = tmp_path / "words.json"
    path.write_text(json.dumps([{"id": "w1"}]))
    with pytest.raises(ValueError):
        InMemoryCatalogue.from_json(path)


def test_duplicate_ids_rejected():
    entries = [VocabularyEntry(id="w1", word="a"), VocabularyEntry(id="w1", word="b")]
    with pytest.raises(ValueError):
        InMemoryCatalogue(entries)


def test_unknown_category_rejected():
    with pytest.raises(ValueError):
        VocabularyEntry(id="w1", word="a", category="Cooking")


def test_mongo_catalogue_reads_documents():
    collection = MagicMock()
    collection.find.return_value.sort.return_value = [
        {"_id": 1, "id": "w1", "word": "Cogent", "partOfSpeech": "adjective"},
        {"_id": 2, "id": "w2"},  # malformed: no word
        {"_id": 3, "id": "w3", "word": "Obfuscate", "category": "Technology"},
    ]
    collection.find_one.return_value = {"_id": 1, "id": "w1", "word": "Cogent"}

    catalogue = MongoCatalogue(collection)

    assert [e.id for e in catalogue.all_entries()] == ["w1", "w3"]
    assert catalogue.get("w1").word == "Cogent"
    collection.find_one.assert_called_with({"id": "w1"})


def test_mongo_catalogue_missing_entry():
    collection = MagicMock()
    collection.find_one.return_value = None
    assert MongoCatalogue(collection).get("nope") is None
