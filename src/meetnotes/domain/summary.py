"""Summary domain types."""

import math
from dataclasses import dataclass
from enum import StrEnum


class SummaryStatus(StrEnum):
    """Generation lifecycle of a summary.

    A summary starts as ``pending`` and moves exactly once to either
    ``completed`` or ``failed``. Both are terminal.
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Pagination:
    """Page metadata for summary listings."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_total(cls, page: int, limit: int, total: int) -> "Pagination":
        """Build pagination metadata for ``total`` items split into pages of ``limit``."""
        total_pages = math.ceil(total / limit)
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


def resolve_share_content(ai_summary: str, edited_summary: str | None) -> str:
    """Return the text to distribute: the user's edit wins over the model output."""
    return edited_summary or ai_summary
