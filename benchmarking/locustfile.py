"""Locust load testing script for the summaries API."""

import random

from locust import HttpUser, between, task

SAMPLE_PROMPTS = [
    "Summarize the key decisions and action items.",
    "List every action item with its owner and deadline.",
    "Write a short executive summary for leadership.",
]

SAMPLE_TRANSCRIPT = (
    "Alice: Let's review the launch checklist.\n"
    "Bob: QA signed off yesterday, docs are still pending.\n"
    "Alice: Then docs are the blocker. Carol, can you own that by Friday?\n"
    "Carol: Yes, I'll have a draft by Thursday.\n"
)


class SummaryUser(HttpUser):
    """Simulated user browsing and generating summaries."""

    wait_time = between(1, 3)  # Wait 1-3 seconds between tasks

    def on_start(self) -> None:
        self.summary_ids: list[str] = []

    @task(5)
    def list_summaries(self) -> None:
        """Fetch the first page - most common operation."""
        response = self.client.get("/api/summaries?page=1&limit=10")
        if response.ok:
            self.summary_ids = [s["id"] for s in response.json().get("summaries", [])]

    @task(2)
    def list_later_page(self) -> None:
        """Simulate paging through history."""
        page = random.choice([2, 3, 4])
        self.client.get(f"/api/summaries?page={page}&limit=10", name="/api/summaries?page=N")

    @task(3)
    def get_summary(self) -> None:
        """Open a summary from the list."""
        if not self.summary_ids:
            return
        summary_id = random.choice(self.summary_ids)
        self.client.get(f"/api/summaries/{summary_id}", name="/api/summaries/[id]")

    @task(1)
    def generate_summary(self) -> None:
        """Generate a new summary (hits the LLM)."""
        self.client.post(
            "/api/summaries/generate",
            json={"transcript": SAMPLE_TRANSCRIPT, "prompt": random.choice(SAMPLE_PROMPTS)},
        )

    @task(1)
    def health(self) -> None:
        self.client.get("/health")
