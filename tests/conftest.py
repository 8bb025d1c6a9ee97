from datetime import datetime, timezone
from pathlib import Path

import pytest

from vocab_core.catalogue import InMemoryCatalogue
from vocab_core.schemas import VocabularyEntry
from vocab_core.srs import InMemoryRecordStore, SqlRecordStore, SRSService, get_engine

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@pytest.fixture
def t0():
    return datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def service(memory_store, t0):
    return SRSService(memory_store, clock=lambda: t0)


@pytest.fixture
def sql_engine(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'srs.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlRecordStore(sql_engine, user_id="alice")


@pytest.fixture
def catalogue():
    return InMemoryCatalogue([
        VocabularyEntry(id="w1", word="Ephemeral", partOfSpeech="adjective"),
        VocabularyEntry(id="w2", word="Cogent", partOfSpeech="adjective"),
        VocabularyEntry(id="w3", word="Obfuscate", partOfSpeech="verb", category="Technology"),
        VocabularyEntry(id="w4", word="Sagacious", partOfSpeech="adjective"),
    ])


@pytest.fixture
def seed_catalogue_path():
    return DATA_DIR / "words.json"
