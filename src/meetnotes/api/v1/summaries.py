"""Summary API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Path, Request, status
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from meetnotes.api.dependencies import ListQueryDep, SummaryServiceDep
from meetnotes.api.errors import validation_error_from_pydantic
from meetnotes.api.v1.schemas import (
    DEFAULT_FILE_PROMPT,
    DeleteSummaryResponse,
    GenerateSummaryRequest,
    GenerateSummaryResponse,
    PaginationResponse,
    ShareResponse,
    ShareSummaryRequest,
    ShareSummaryResponse,
    SummaryDetailResponse,
    SummaryListItemResponse,
    SummaryListResponse,
    UpdateSummaryRequest,
    UpdateSummaryResponse,
)
from meetnotes.config import get_settings
from meetnotes.domain.errors import ValidationError
from meetnotes.infrastructure.models import ShareModel, SummaryModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/summaries", tags=["summaries"])

SummaryId = Annotated[str, Path(min_length=1)]

PLAIN_TEXT = "text/plain"


async def read_transcript_file(upload: UploadFile) -> str:
    """Validate an uploaded transcript file and decode it as UTF-8 text."""
    max_bytes = get_settings().max_upload_bytes
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    problems: list[dict[str, Any]] = []

    if content_type != PLAIN_TEXT:
        problems.append({
            "loc": ["file", "mimetype"],
            "msg": "Only .txt files are allowed",
            "input": upload.content_type,
        })

    data = await upload.read()
    if len(data) > max_bytes:
        problems.append({
            "loc": ["file", "size"],
            "msg": f"File size must be less than {max_bytes // (1024 * 1024)}MB",
            "input": len(data),
        })

    if problems:
        logger.warning(f"File validation failed for {upload.filename!r}: {problems}")
        raise ValidationError(error="Invalid file upload", details=problems)

    return data.decode("utf-8", errors="replace")


def _form_value(value: Any) -> str | None:
    if value is None or isinstance(value, UploadFile):
        return None
    return str(value) or None


async def _parse_generate_request(request: Request) -> tuple[GenerateSummaryRequest, bool]:
    """Read a generate request sent either as JSON or as multipart with a text file."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        upload = form.get("transcript")
        if isinstance(upload, UploadFile):
            transcript = await read_transcript_file(upload)
            return (
                GenerateSummaryRequest.model_construct(
                    transcript=transcript,
                    prompt=_form_value(form.get("prompt")) or DEFAULT_FILE_PROMPT,
                    model=_form_value(form.get("model")) or get_settings().default_model,
                    user_id=_form_value(form.get("userId")),
                ),
                True,
            )
        payload: Any = {key: value for key, value in form.items() if not isinstance(value, UploadFile)}
    else:
        try:
            payload = await request.json()
        except ValueError:
            raise ValidationError(message="Request body must be valid JSON") from None

    try:
        return GenerateSummaryRequest.model_validate(payload), False
    except PydanticValidationError as e:
        raise validation_error_from_pydantic(e) from None


def _detail_response(summary: SummaryModel, shares: list[ShareModel]) -> SummaryDetailResponse:
    fields = {
        name: getattr(summary, name)
        for name in SummaryDetailResponse.model_fields
        if name != "shares"
    }
    return SummaryDetailResponse(
        **fields,
        shares=[ShareResponse.model_validate(share) for share in shares],
    )


@router.post(
    "/generate",
    response_model=GenerateSummaryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a summary from a transcript (JSON or text file upload)",
)
async def generate_summary(
    request: Request,
    service: SummaryServiceDep,
) -> GenerateSummaryResponse:
    """Generate an AI summary.

    Accepts ``application/json`` with ``transcript``, ``prompt`` and optional
    ``model``, or ``multipart/form-data`` with a ``transcript`` text file plus
    ``prompt``/``model`` form fields.
    """
    body, from_file = await _parse_generate_request(request)
    summary = await service.generate(
        transcript=body.transcript,
        prompt=body.prompt,
        model=body.model,
        user_id=body.user_id,
        from_file=from_file,
    )
    return GenerateSummaryResponse.model_validate(summary)


@router.get("", response_model=SummaryListResponse)
async def list_summaries(
    service: SummaryServiceDep,
    query: ListQueryDep,
) -> SummaryListResponse:
    """List summaries with pagination, newest first. Transcripts are omitted."""
    items, pagination = await service.list_summaries(
        page=query.page, limit=query.limit, user_id=query.user_id
    )
    return SummaryListResponse(
        summaries=[SummaryListItemResponse.model_validate(item) for item in items],
        pagination=PaginationResponse.model_validate(pagination),
    )


@router.get("/{summary_id}", response_model=SummaryDetailResponse)
async def get_summary(
    summary_id: SummaryId,
    service: SummaryServiceDep,
) -> SummaryDetailResponse:
    """Get a single summary with its ten most recent shares."""
    summary, shares = await service.get(summary_id)
    return _detail_response(summary, shares)


@router.patch("/{summary_id}", response_model=UpdateSummaryResponse)
async def update_summary(
    summary_id: SummaryId,
    body: UpdateSummaryRequest,
    service: SummaryServiceDep,
) -> UpdateSummaryResponse:
    """Save a user-edited version of the summary."""
    summary = await service.update(summary_id, body.edited_summary)
    return UpdateSummaryResponse.model_validate(summary)


@router.post("/{summary_id}/share", response_model=ShareSummaryResponse)
async def share_summary(
    summary_id: SummaryId,
    body: ShareSummaryRequest,
    service: SummaryServiceDep,
) -> ShareSummaryResponse:
    """Email the summary to the given recipients."""
    recipients = [str(r) for r in body.recipients]
    outcome = await service.share(summary_id, recipients, body.subject)
    return ShareSummaryResponse(
        success=True,
        share_id=outcome.share.id,
        recipients=recipients,
        subject=outcome.subject,
        message_id=outcome.message_id,
    )


@router.delete("/{summary_id}", response_model=DeleteSummaryResponse)
async def delete_summary(
    summary_id: SummaryId,
    service: SummaryServiceDep,
) -> DeleteSummaryResponse:
    """Delete a summary together with its share history."""
    await service.delete(summary_id)
    return DeleteSummaryResponse(
        success=True,
        message="Summary deleted successfully",
        deleted_id=summary_id,
    )
