"""Transcript summarization through an OpenAI-compatible chat endpoint (Groq)."""

import logging
from dataclasses import dataclass

import httpx
from openai import AsyncOpenAI

from meetnotes.config import get_settings
from meetnotes.domain.errors import GenerationError

logger = logging.getLogger(__name__)
settings = get_settings()


SYSTEM_PROMPT = """You are an AI assistant specialized in creating comprehensive and \
well-structured meeting summaries. Your task is to analyze meeting transcripts and create \
clear, actionable summaries that help participants understand key discussions, decisions, \
and next steps.

Guidelines:
- Extract key topics, decisions, and action items
- Maintain a professional and clear tone
- Organize information logically
- Highlight important deadlines and responsibilities
- Use markdown formatting for better readability
- Focus on actionable insights and outcomes"""

USER_PROMPT = """{prompt}

Meeting Transcript:
{transcript}"""


@dataclass(frozen=True)
class SummarizationResult:
    """Text and token usage returned by the model."""

    summary: str
    tokens_in: int
    tokens_out: int
    model: str


class SummarizerService:
    """Service for generating meeting summaries from transcripts."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the summarizer.

        The client never retries: one request per summary, bounded by
        ``llm_request_timeout``.
        """
        self.api_key = api_key if api_key is not None else settings.groq_api_key
        self.client = AsyncOpenAI(
            api_key=self.api_key or "unset",
            base_url=base_url or settings.llm_base_url,
            timeout=settings.llm_request_timeout,
            max_retries=0,
            http_client=http_client,
        )

    async def summarize(
        self,
        transcript: str,
        prompt: str,
        model: str | None = None,
    ) -> SummarizationResult:
        """Summarize a transcript following the caller's instruction.

        Makes a single attempt. Every failure surfaces as ``GenerationError``.
        """
        model = model or settings.default_model
        if not self.api_key:
            logger.warning("LLM API key not configured")
            raise GenerationError("Summarization failed: LLM API key is not configured")

        logger.info(f"Starting LLM summarization (model={model}, transcript_length={len(transcript)})")

        try:
            completion = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {
                        "role": "user",
                        "content": USER_PROMPT.format(prompt=prompt, transcript=transcript),
                    },
                ],
                temperature=settings.llm_temperature,
                max_tokens=settings.llm_max_tokens,
                top_p=1,
                stream=False,
            )
        except Exception as e:
            logger.error(f"Failed to summarize transcript with {model}: {e}")
            raise GenerationError(f"Summarization failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            logger.error(f"No content returned from {model}")
            raise GenerationError("Summarization failed: No content returned from the model")

        usage = completion.usage
        tokens_in = (usage.prompt_tokens if usage else 0) or 0
        tokens_out = (usage.completion_tokens if usage else 0) or 0

        logger.info(
            f"LLM summarization completed (model={model}, tokens_in={tokens_in}, "
            f"tokens_out={tokens_out})"
        )

        return SummarizationResult(
            summary=content,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            model=model,
        )
