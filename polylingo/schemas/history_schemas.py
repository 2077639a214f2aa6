from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from polylingo.core.validators import LanguageCode, StrippedText


class SearchedItem(BaseModel):
    """One successful (language, text) pair inside a batch history entry."""

    lng: str
    text: str


class HistoryRecord(BaseModel):
    """
    Aggregate history record for a completed batch.

    A single record represents the whole batch, not one entry per language.
    """

    source_language: str
    target_language: str
    source_text: str
    translated_text: str
    searched_data: list[SearchedItem] = Field(default_factory=list)


class HistoryEntryResponse(BaseModel):
    """Schema for history responses."""

    id: int
    source_language: str
    target_language: str
    source_text: str
    translated_text: str
    searched_data: list[SearchedItem]
    searched_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FavoriteCreate(BaseModel):
    """
    Schema for saving a single translation result as favorite.
    """

    source_text: StrippedText = Field(min_length=1, max_length=5000)
    translated_text: StrippedText = Field(min_length=1, max_length=5000)
    source_language: LanguageCode
    target_language: LanguageCode


class FavoriteResponse(BaseModel):
    """Schema for favorite responses."""

    id: int
    source_text: str
    translated_text: str
    source_language: str
    target_language: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
