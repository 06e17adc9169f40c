"""Pydantic schemas for API request/response models.

Request models carry the input rules; response models use camelCase aliases
to match the JSON contract consumed by the web client.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from meetnotes.config import get_settings

DEFAULT_FILE_PROMPT = "Please provide a comprehensive summary of this meeting transcript."
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


def _default_model() -> str:
    return get_settings().default_model


def _coerce_int(value: Any, default: int) -> int:
    """Parse an integer the forgiving way: junk falls back to the default."""
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


# --- Requests ---


class GenerateSummaryRequest(BaseModel):
    """Request body for generating a summary from pasted text."""

    transcript: str = Field(min_length=10)
    prompt: str = Field(min_length=5)
    model: str = Field(default_factory=_default_model)
    user_id: str | None = Field(
        default=None, validation_alias=AliasChoices("userId", "user_id")
    )

    @field_validator("model", mode="before")
    @classmethod
    def _blank_model_uses_default(cls, value: Any) -> Any:
        if value is None or value == "":
            return _default_model()
        return value


class UpdateSummaryRequest(BaseModel):
    """Request body for editing a summary."""

    edited_summary: str = Field(
        min_length=1, validation_alias=AliasChoices("editedSummary", "edited_summary")
    )


class ShareSummaryRequest(BaseModel):
    """Request body for emailing a summary."""

    recipients: Annotated[list[EmailStr], Field(min_length=1)]
    subject: str | None = None


class ListSummariesQuery(BaseModel):
    """Query parameters for listing summaries.

    ``page`` and ``limit`` are coerced and clamped rather than rejected.
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    user_id: str | None = None

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: Any) -> int:
        return max(1, _coerce_int(value, 1))

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: Any) -> int:
        return min(MAX_PAGE_SIZE, max(1, _coerce_int(value, DEFAULT_PAGE_SIZE)))

    @field_validator("user_id", mode="before")
    @classmethod
    def _blank_user_is_none(cls, value: Any) -> Any:
        return value or None


# --- Responses ---


class CamelModel(BaseModel):
    """Response base serialising field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ShareResponse(CamelModel):
    """A recorded email distribution."""

    id: str
    summary_id: str
    recipients: list[str]
    subject: str | None
    body_html: str
    created_at: datetime


class SummaryDetailResponse(CamelModel):
    """Full summary with its most recent shares."""

    id: str
    transcript: str
    prompt: str
    ai_summary: str
    edited_summary: str | None
    model: str
    tokens_in: int | None
    tokens_out: int | None
    status: str
    user_id: str | None
    created_at: datetime
    updated_at: datetime
    shares: list[ShareResponse] = []


class SummaryListItemResponse(CamelModel):
    """Summary as shown in listings. Never includes the transcript."""

    id: str
    prompt: str
    ai_summary: str
    edited_summary: str | None
    model: str
    tokens_in: int | None
    tokens_out: int | None
    status: str
    user_id: str | None
    created_at: datetime
    updated_at: datetime
    share_count: int


class PaginationResponse(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class SummaryListResponse(CamelModel):
    """Response schema for paginated summary list."""

    summaries: list[SummaryListItemResponse]
    pagination: PaginationResponse


class GenerateSummaryResponse(CamelModel):
    """Response schema for a completed generation."""

    id: str
    ai_summary: str
    tokens_in: int | None
    tokens_out: int | None
    model: str


class UpdateSummaryResponse(CamelModel):
    id: str
    edited_summary: str | None
    updated_at: datetime


class ShareSummaryResponse(CamelModel):
    success: bool
    share_id: str
    recipients: list[str]
    subject: str
    message_id: str | None = None


class DeleteSummaryResponse(CamelModel):
    success: bool
    message: str
    deleted_id: str
