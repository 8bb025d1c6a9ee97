"""
Pydantic models for the vocabulary catalogue.

These models define the structure of catalogue documents (JSON seed files
or MongoDB documents). Scheduling state is not stored here; it lives in
the SRS record store and is joined by `id`.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Topic a vocabulary entry belongs to."""
    SCIENCE = "Science"
    TECHNOLOGY = "Technology"
    ARTS = "Arts"
    LITERATURE = "Literature"


class VocabularyEntry(BaseModel):
    """
    A single word in the catalogue.

    Immutable for the lifetime of a run.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable identifier, the key into the SRS store")
    word: str = Field(..., min_length=1)
    part_of_speech: str = Field(default="", alias="partOfSpeech")
    definition: str = ""
    example: str = ""
    synonyms: list[str] = Field(default_factory=list)
    antonyms: list[str] = Field(default_factory=list)
    category: Category = Category.SCIENCE

    # Pronunciation (optional)
    pronunciation: Optional[str] = None
    phonetic: Optional[str] = None
