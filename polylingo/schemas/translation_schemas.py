from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from polylingo.core.validators import LanguageCode, StrippedText


class Meaning(BaseModel):
    """
    One alternate meaning of a translated word.
    """

    translation: str
    part_of_speech: str = "general"
    pronunciation: str | None = None

    model_config = ConfigDict(frozen=True)


class TranslationResult(BaseModel):
    """
    Outcome of one (source, target) translation.

    Zero confidence marks a failed or filtered translation.
    """

    source_language: str
    target_language: str
    source_text: str
    translated_text: str
    meanings: list[Meaning] = Field(default_factory=list)
    pronunciation: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)

    @property
    def is_successful(self) -> bool:
        return self.confidence > 0


# ============================================================================
# Request Schemas
# ============================================================================


class TranslateRequest(BaseModel):
    """
    Schema for a single (source, target) translation request.
    """

    text: StrippedText = Field(min_length=1)
    source_language: LanguageCode
    target_language: LanguageCode


class BatchCreate(BaseModel):
    """
    Schema for starting a multi-target batch.
    Target order is preserved in the results.
    """

    text: StrippedText = Field(min_length=1)
    source_language: LanguageCode
    target_languages: list[LanguageCode] = Field(min_length=1)


# ============================================================================
# Response Schemas
# ============================================================================


class TranslateResponse(BaseModel):
    """Single translation response."""

    translation: str
    pronunciation: str | None = None
    meanings: list[Meaning] = Field(default_factory=list)


class UnitResponse(BaseModel):
    """
    Snapshot of one translation unit.
    """

    target_language: str
    status: str = Field(description="loading, retrying, success, timeout, error or cancelled")
    retry_count: int = Field(ge=0)
    can_retry: bool
    max_retries_reached: bool
    error: str | None = None
    result: TranslationResult | None = None


class BatchResponse(BaseModel):
    """
    Snapshot of a batch.

    `results` is index-aligned with `target_languages`; unresolved or cancelled slots are null.
    """

    batch_id: str
    source_text: str
    source_language: str
    target_languages: list[str]
    status: str = Field(description="running, completed or cancelled; running again while a unit is retried")
    is_complete: bool
    successful_count: int = Field(ge=0)
    units: list[UnitResponse]
    results: list[TranslationResult | None]
