"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from meetnotes.api.v1.schemas import ListSummariesQuery
from meetnotes.infrastructure.database import get_session
from meetnotes.services.email_sender import EmailService, get_email_service
from meetnotes.services.summarizer import SummarizerService
from meetnotes.services.summary_service import SummaryService

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]

_summarizer: SummarizerService | None = None


def get_summarizer() -> SummarizerService:
    """Provide the shared SummarizerService instance."""
    global _summarizer
    if _summarizer is None:
        _summarizer = SummarizerService()
    return _summarizer


SummarizerDep = Annotated[SummarizerService, Depends(get_summarizer)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]


async def get_summary_service(
    session: SessionDep,
    summarizer: SummarizerDep,
    email_service: EmailServiceDep,
) -> AsyncGenerator[SummaryService, None]:
    """Provide SummaryService instance bound to the request session."""
    yield SummaryService(session, summarizer, email_service)


def get_list_query(
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> ListSummariesQuery:
    """Collect list parameters as raw strings and let the schema coerce them."""
    return ListSummariesQuery(page=page, limit=limit, user_id=user_id)


# Type aliases for commonly used dependencies
SummaryServiceDep = Annotated[SummaryService, Depends(get_summary_service)]
ListQueryDep = Annotated[ListSummariesQuery, Depends(get_list_query)]
