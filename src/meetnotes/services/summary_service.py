"""Summary lifecycle: generate, read, list, edit, share and delete summaries."""

import logging
import time
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from meetnotes.domain.errors import DeliveryError, GenerationError, NotFoundError
from meetnotes.domain.summary import Pagination, resolve_share_content
from meetnotes.infrastructure.models import ShareModel, SummaryModel
from meetnotes.infrastructure.usage_logger import UsageLogger, get_usage_logger
from meetnotes.repositories.summary_repo import (
    ShareRepository,
    SummaryListItem,
    SummaryRepository,
)
from meetnotes.services.email_sender import EmailService
from meetnotes.services.summarizer import SummarizerService

logger = logging.getLogger(__name__)


def default_subject(today: date | None = None) -> str:
    """Subject used when the caller does not provide one."""
    today = today or date.today()
    return f"Meeting Summary - {today.month}/{today.day}/{today.year}"


@dataclass(frozen=True)
class ShareOutcome:
    """Result of a successful share."""

    share: ShareModel
    subject: str
    message_id: str | None


class SummaryService:
    """Orchestrates persistence and the model/email collaborators.

    The service owns transaction boundaries: each mutating operation commits
    before returning.
    """

    def __init__(
        self,
        session: AsyncSession,
        summarizer: SummarizerService,
        email_service: EmailService,
        usage_logger: UsageLogger | None = None,
    ) -> None:
        self.session = session
        self.summaries = SummaryRepository(session)
        self.shares = ShareRepository(session)
        self.summarizer = summarizer
        self.email_service = email_service
        self.usage_logger = usage_logger or get_usage_logger()

    async def _get_or_raise(self, summary_id: str) -> SummaryModel:
        summary = await self.summaries.get_by_id(summary_id)
        if summary is None:
            raise NotFoundError()
        return summary

    async def generate(
        self,
        transcript: str,
        prompt: str,
        model: str,
        user_id: str | None = None,
        from_file: bool = False,
    ) -> SummaryModel:
        """Create a summary and run a single generation attempt.

        The pending row is committed before the model is called so it survives
        a crash mid-call. The row then moves to ``completed`` or ``failed``.

        Raises:
            GenerationError: The model call failed; the row is marked failed.
        """
        logger.info(
            f"Starting summary generation (transcript_length={len(transcript)}, "
            f"prompt_length={len(prompt)}, model={model}, has_file={from_file})"
        )

        summary = await self.summaries.create_pending(
            transcript=transcript, prompt=prompt, model=model, user_id=user_id
        )
        await self.session.commit()

        started = time.perf_counter()
        try:
            result = await self.summarizer.summarize(
                transcript=transcript, prompt=prompt, model=model
            )
        except Exception as e:
            await self.summaries.mark_failed(summary)
            await self.session.commit()
            logger.error(f"LLM call failed for summary {summary.id}: {e}")
            if isinstance(e, GenerationError):
                raise
            raise GenerationError(f"Summarization failed: {e}") from e

        duration_ms = (time.perf_counter() - started) * 1000
        self.usage_logger.log_generation(
            model=result.model,
            tokens_in=result.tokens_in,
            tokens_out=result.tokens_out,
            duration_ms=duration_ms,
        )

        completed = await self.summaries.mark_completed(
            summary,
            ai_summary=result.summary,
            tokens_in=result.tokens_in,
            tokens_out=result.tokens_out,
        )
        await self.session.commit()
        if not completed:
            logger.warning(
                f"Summary {summary.id} left pending before the model answered "
                f"(status={summary.status}); discarding the generated text"
            )
            raise GenerationError(
                f"Summarization failed: summary was already marked {summary.status} "
                "before the model responded"
            )

        logger.info(
            f"Summary generated successfully (id={summary.id}, tokens_in={result.tokens_in}, "
            f"tokens_out={result.tokens_out}, model={result.model})"
        )
        return summary

    async def get(self, summary_id: str) -> tuple[SummaryModel, list[ShareModel]]:
        """Get a summary and its ten most recent shares."""
        found = await self.summaries.get_with_recent_shares(summary_id)
        if found is None:
            raise NotFoundError()
        logger.info(f"Summary retrieved successfully (id={summary_id})")
        return found

    async def list_summaries(
        self,
        page: int = 1,
        limit: int = 10,
        user_id: str | None = None,
    ) -> tuple[list[SummaryListItem], Pagination]:
        """Get one page of summaries, newest first."""
        total = await self.summaries.count(user_id=user_id)
        pagination = Pagination.from_total(page=page, limit=limit, total=total)
        if pagination.offset >= total:
            items: list[SummaryListItem] = []
        else:
            items = await self.summaries.list_summaries(
                offset=pagination.offset, limit=limit, user_id=user_id
            )
        logger.info(
            f"Summaries retrieved successfully (page={page}, limit={limit}, total={total}, "
            f"total_pages={pagination.total_pages}, user_id={user_id})"
        )
        return items, pagination

    async def update(self, summary_id: str, edited_summary: str) -> SummaryModel:
        """Replace the user-edited text of a summary."""
        summary = await self._get_or_raise(summary_id)
        await self.summaries.update_edited_summary(summary, edited_summary)
        await self.session.commit()
        logger.info(f"Summary updated successfully (id={summary_id})")
        return summary

    async def share(
        self,
        summary_id: str,
        recipients: list[str],
        subject: str | None = None,
    ) -> ShareOutcome:
        """Email a summary and record the share.

        The edited text is sent when present. Nothing is persisted when
        delivery fails.

        Raises:
            NotFoundError: No such summary.
            DeliveryError: The email collaborator reported a failure.
        """
        summary = await self._get_or_raise(summary_id)
        content = resolve_share_content(summary.ai_summary, summary.edited_summary)
        email_subject = subject or default_subject()

        logger.info(
            f"Starting email share (id={summary_id}, recipients={len(recipients)}, "
            f"subject={email_subject!r})"
        )

        result = await self.email_service.send_summary(
            recipients=recipients,
            subject=email_subject,
            summary=content,
            summary_id=summary_id,
        )
        if not result.success:
            raise DeliveryError(result.error or "Unknown error")

        share = await self.shares.create(
            summary_id=summary_id,
            recipients=recipients,
            subject=email_subject,
            body_html=result.body_html,
        )
        await self.session.commit()

        logger.info(
            f"Summary shared successfully (share_id={share.id}, id={summary_id}, "
            f"recipients={len(recipients)}, message_id={result.message_id})"
        )
        return ShareOutcome(share=share, subject=email_subject, message_id=result.message_id)

    async def delete(self, summary_id: str) -> int:
        """Delete a summary and all of its shares in one transaction.

        Returns:
            Number of shares removed
        """
        await self._get_or_raise(summary_id)
        try:
            shares_deleted = await self.summaries.delete_with_shares(summary_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Summary deleted successfully (id={summary_id}, shares_deleted={shares_deleted})")
        return shares_deleted
