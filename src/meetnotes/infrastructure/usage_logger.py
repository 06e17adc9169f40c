"""Append-only CSV record of LLM token usage, one row per generation."""

import csv
import threading
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path

FIELDS = ("timestamp", "operation", "duration_ms", "model", "tokens_in", "tokens_out")


@dataclass(frozen=True)
class UsageRecord:
    operation: str
    model: str
    tokens_in: int
    tokens_out: int
    duration_ms: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def as_row(self) -> dict[str, str | int]:
        row = asdict(self)
        row["timestamp"] = self.timestamp.isoformat()
        row["duration_ms"] = f"{self.duration_ms:.2f}"
        return row


class UsageLogger:
    """Writes ``UsageRecord`` rows to a CSV file shared across threads."""

    def __init__(self, filepath: str | Path) -> None:
        self.filepath = Path(filepath)
        self._lock = threading.Lock()

    def record(self, entry: UsageRecord) -> None:
        with self._lock:
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            is_new = not self.filepath.exists() or self.filepath.stat().st_size == 0
            with self.filepath.open("a", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=FIELDS)
                if is_new:
                    writer.writeheader()
                writer.writerow(entry.as_row())

    def log_generation(
        self,
        model: str,
        tokens_in: int,
        tokens_out: int,
        duration_ms: float,
    ) -> None:
        """Record the token usage of one summarization call."""
        self.record(
            UsageRecord(
                operation="generate_summary",
                model=model,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
                duration_ms=duration_ms,
            )
        )


_usage_logger: UsageLogger | None = None


def get_usage_logger() -> UsageLogger:
    """Get or create the shared usage logger."""
    global _usage_logger
    if _usage_logger is None:
        from meetnotes.config import get_settings

        _usage_logger = UsageLogger(get_settings().usage_log_path)
    return _usage_logger
