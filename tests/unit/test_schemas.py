"""Tests for request schema validation and query coercion."""

import pytest
from pydantic import ValidationError

from meetnotes.api.v1.schemas import (
    MAX_PAGE_SIZE,
    GenerateSummaryRequest,
    ListSummariesQuery,
    ShareSummaryRequest,
    SummaryListItemResponse,
    UpdateSummaryRequest,
)
from meetnotes.config import get_settings


class TestGenerateSummaryRequest:
    def test_short_transcript_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateSummaryRequest(transcript="short", prompt="Summarize this")
        assert exc_info.value.errors()[0]["loc"] == ("transcript",)

    def test_short_prompt_rejected(self):
        with pytest.raises(ValidationError):
            GenerateSummaryRequest(transcript="a long enough transcript", prompt="hey")

    def test_boundary_lengths_accepted(self):
        body = GenerateSummaryRequest(transcript="x" * 10, prompt="y" * 5)
        assert body.transcript == "x" * 10

    def test_model_defaults_from_settings(self):
        body = GenerateSummaryRequest(transcript="x" * 10, prompt="y" * 5)
        assert body.model == get_settings().default_model

    def test_blank_model_uses_default(self):
        body = GenerateSummaryRequest(transcript="x" * 10, prompt="y" * 5, model="")
        assert body.model == get_settings().default_model

    def test_explicit_model_kept(self):
        body = GenerateSummaryRequest(transcript="x" * 10, prompt="y" * 5, model="mixtral-8x7b-32768")
        assert body.model == "mixtral-8x7b-32768"

    def test_user_id_camel_case_alias(self):
        body = GenerateSummaryRequest.model_validate(
            {"transcript": "x" * 10, "prompt": "y" * 5, "userId": "u-1"}
        )
        assert body.user_id == "u-1"

    def test_missing_fields_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            GenerateSummaryRequest.model_validate({})
        locs = {e["loc"][0] for e in exc_info.value.errors()}
        assert locs == {"transcript", "prompt"}


class TestUpdateSummaryRequest:
    def test_camel_case_field(self):
        body = UpdateSummaryRequest.model_validate({"editedSummary": "new text"})
        assert body.edited_summary == "new text"

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            UpdateSummaryRequest.model_validate({"editedSummary": ""})


class TestShareSummaryRequest:
    def test_valid_recipients(self):
        body = ShareSummaryRequest(recipients=["a@x.com", "b@x.com"])
        assert [str(r) for r in body.recipients] == ["a@x.com", "b@x.com"]
        assert body.subject is None

    def test_empty_recipients_rejected(self):
        with pytest.raises(ValidationError):
            ShareSummaryRequest(recipients=[])

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            ShareSummaryRequest(recipients=["a@x.com", "not-an-email"])


class TestListSummariesQuery:
    """Invalid page/limit values are coerced, never rejected."""

    def test_defaults(self):
        q = ListSummariesQuery()
        assert (q.page, q.limit, q.user_id) == (1, 10, None)

    @pytest.mark.parametrize(
        "raw,expected",
        [("3", 3), ("0", 1), ("-4", 1), ("abc", 1), ("", 1), (None, 1), ("2.7", 2)],
    )
    def test_page_coercion(self, raw, expected):
        assert ListSummariesQuery(page=raw).page == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [("25", 25), ("0", 1), ("-1", 1), ("500", MAX_PAGE_SIZE), ("junk", 10), (None, 10)],
    )
    def test_limit_clamped(self, raw, expected):
        assert ListSummariesQuery(limit=raw).limit == expected

    def test_blank_user_id_is_none(self):
        assert ListSummariesQuery(user_id="").user_id is None


class TestResponseAliases:
    def test_list_item_serializes_camel_case(self):
        from datetime import UTC, datetime

        now = datetime(2026, 1, 15, tzinfo=UTC)
        item = SummaryListItemResponse(
            id="s1",
            prompt="Summarize",
            ai_summary="text",
            edited_summary=None,
            model="m",
            tokens_in=1,
            tokens_out=2,
            status="completed",
            user_id=None,
            created_at=now,
            updated_at=now,
            share_count=3,
        )
        data = item.model_dump(by_alias=True)
        assert data["aiSummary"] == "text"
        assert data["shareCount"] == 3
        assert "transcript" not in data
