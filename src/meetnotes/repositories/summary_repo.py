"""Summary and share repositories for database operations."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from meetnotes.domain.summary import SummaryStatus
from meetnotes.infrastructure.models import ShareModel, SummaryModel

RECENT_SHARES_LIMIT = 10


@dataclass
class SummaryListItem:
    """List projection of a summary: everything except the transcript."""

    id: str
    prompt: str
    ai_summary: str
    edited_summary: str | None
    model: str
    tokens_in: int | None
    tokens_out: int | None
    status: str
    created_at: datetime
    updated_at: datetime
    user_id: str | None
    share_count: int


class SummaryRepository:
    """Repository for Summary CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def create_pending(
        self,
        transcript: str,
        prompt: str,
        model: str,
        user_id: str | None = None,
    ) -> SummaryModel:
        """Insert a new summary in the ``pending`` state with an empty summary text."""
        summary = SummaryModel(
            transcript=transcript,
            prompt=prompt,
            model=model,
            ai_summary="",
            status=SummaryStatus.PENDING.value,
            user_id=user_id,
        )
        self.session.add(summary)
        await self.session.flush()
        return summary

    async def _finish_pending(self, summary: SummaryModel, **values) -> bool:
        """Move a pending summary to a terminal state.

        The update only matches rows still ``pending``; the object is then
        refreshed so it reflects whatever state the row is really in.

        Returns:
            False when the row had already left ``pending``
        """
        stmt = (
            update(SummaryModel)
            .where(SummaryModel.id == summary.id)
            .where(SummaryModel.status == SummaryStatus.PENDING.value)
            .values(updated_at=datetime.now(UTC), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.refresh(summary)
        return bool(result.rowcount)

    async def mark_completed(
        self,
        summary: SummaryModel,
        ai_summary: str,
        tokens_in: int,
        tokens_out: int,
    ) -> bool:
        """Record a successful generation, unless the row was already reconciled."""
        return await self._finish_pending(
            summary,
            ai_summary=ai_summary,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            status=SummaryStatus.COMPLETED.value,
        )

    async def mark_failed(self, summary: SummaryModel) -> bool:
        """Record a failed generation. Transcript and prompt are kept."""
        return await self._finish_pending(summary, status=SummaryStatus.FAILED.value)

    async def get_by_id(self, summary_id: str) -> SummaryModel | None:
        """Get a summary by its ID, without shares."""
        stmt = select(SummaryModel).where(SummaryModel.id == summary_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_recent_shares(
        self, summary_id: str, limit: int = RECENT_SHARES_LIMIT
    ) -> tuple[SummaryModel, list[ShareModel]] | None:
        """Get a summary together with its most recent shares, newest first."""
        summary = await self.get_by_id(summary_id)
        if summary is None:
            return None

        stmt = (
            select(ShareModel)
            .where(ShareModel.summary_id == summary_id)
            .order_by(ShareModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return summary, list(result.scalars().all())

    async def count(self, user_id: str | None = None) -> int:
        """Get total summary count, optionally for a single user."""
        stmt = select(func.count(SummaryModel.id))
        if user_id:
            stmt = stmt.where(SummaryModel.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def list_summaries(
        self,
        offset: int = 0,
        limit: int = 10,
        user_id: str | None = None,
    ) -> list[SummaryListItem]:
        """List summaries newest first with their share counts.

        The transcript column is never selected.
        """
        share_count = (
            select(func.count(ShareModel.id))
            .where(ShareModel.summary_id == SummaryModel.id)
            .correlate(SummaryModel)
            .scalar_subquery()
        )
        stmt = select(
            SummaryModel.id,
            SummaryModel.prompt,
            SummaryModel.ai_summary,
            SummaryModel.edited_summary,
            SummaryModel.model,
            SummaryModel.tokens_in,
            SummaryModel.tokens_out,
            SummaryModel.status,
            SummaryModel.created_at,
            SummaryModel.updated_at,
            SummaryModel.user_id,
            share_count.label("share_count"),
        )
        if user_id:
            stmt = stmt.where(SummaryModel.user_id == user_id)

        stmt = stmt.order_by(SummaryModel.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return [SummaryListItem(**row._asdict()) for row in result.all()]

    async def update_edited_summary(
        self, summary: SummaryModel, edited_summary: str
    ) -> SummaryModel:
        """Overwrite the user edit. Status and model output are left alone."""
        summary.edited_summary = edited_summary
        summary.updated_at = datetime.now(UTC)
        await self.session.flush()
        return summary

    async def delete_with_shares(self, summary_id: str) -> int:
        """Delete a summary's shares, then the summary itself.

        Both statements run in the caller's transaction.

        Returns:
            Number of shares removed
        """
        shares_result = await self.session.execute(
            delete(ShareModel).where(ShareModel.summary_id == summary_id)
        )
        await self.session.execute(delete(SummaryModel).where(SummaryModel.id == summary_id))
        return shares_result.rowcount or 0

    async def fail_stale_pending(self, older_than_minutes: int) -> int:
        """Mark pending summaries created before the cutoff as failed.

        Returns:
            Number of summaries moved to ``failed``
        """
        cutoff = datetime.now(UTC) - timedelta(minutes=older_than_minutes)
        stmt = (
            update(SummaryModel)
            .where(SummaryModel.status == SummaryStatus.PENDING.value)
            .where(SummaryModel.created_at < cutoff)
            .values(status=SummaryStatus.FAILED.value, updated_at=datetime.now(UTC))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0


class ShareRepository:
    """Repository for Share records. Shares are insert-only."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session."""
        self.session = session

    async def create(
        self,
        summary_id: str,
        recipients: list[str],
        subject: str | None,
        body_html: str,
    ) -> ShareModel:
        """Record one email distribution of a summary."""
        share = ShareModel(
            summary_id=summary_id,
            recipients=list(recipients),
            subject=subject,
            body_html=body_html,
        )
        self.session.add(share)
        await self.session.flush()
        return share
