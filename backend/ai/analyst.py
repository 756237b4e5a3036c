"""Client for the external AI analysis service.

Every call is a single attempt under a bounded timeout. Failures never
escape this module: idea analysis degrades to the fixed fallback payload
and the assistant degrades to an apology string.
"""

import asyncio
import logging
import os
from typing import Optional

import anthropic
from anthropic import AsyncAnthropic
from fastapi import Request

from backend.ai.prompts import (
    ASSISTANT_SYSTEM,
    IDEA_ANALYSIS_SYSTEM,
    build_analysis_messages,
    build_assistant_messages,
)
from ideaengine.analysis import ASSISTANT_FALLBACK, fallback_analysis, parse_analysis
from ideaengine.errors import ExternalServiceFailure

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_TIMEOUT_SECONDS = 20.0

ANALYSIS_MAX_TOKENS = 1000
ASSISTANT_MAX_TOKENS = 500


class IdeaAnalyst:
    """Talks to the Anthropic Messages API on behalf of the enrichment pipeline."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("ANTHROPIC_API_KEY")
        self.model = model or os.getenv("AI_MODEL", DEFAULT_MODEL)
        self.timeout = timeout if timeout is not None else float(os.getenv("AI_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        self._client: Optional[AsyncAnthropic] = None

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            if not self.api_key:
                raise ExternalServiceFailure("ANTHROPIC_API_KEY not configured")
            # No retries: one attempt, then the caller falls back
            self._client = AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    async def _complete(self, system: str, messages: list[dict], max_tokens: int) -> str:
        """Send a prompt and return the response text.

        Raises:
            ExternalServiceFailure: on any transport, status, timeout or shape problem.
        """
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    system=system,
                    messages=messages,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ExternalServiceFailure(f"AI service did not answer within {self.timeout:g}s") from None
        except anthropic.APIStatusError as e:
            raise ExternalServiceFailure(f"AI service returned status {e.status_code}") from e
        except anthropic.APIError as e:
            raise ExternalServiceFailure(f"AI service request failed: {e.__class__.__name__}") from e

        try:
            text = "".join(block.text for block in response.content if block.type == "text")
        except (AttributeError, TypeError) as e:
            raise ExternalServiceFailure("AI service response had an unexpected shape") from e
        if not text.strip():
            raise ExternalServiceFailure("AI service returned an empty response")
        return text

    async def analyze_idea(self, title: str, description: str, tags: Optional[list[str]] = None) -> dict:
        """Return a structured analysis of an idea, or the fallback payload."""
        try:
            text = await self._complete(
                IDEA_ANALYSIS_SYSTEM,
                build_analysis_messages(title, description, tags),
                ANALYSIS_MAX_TOKENS,
            )
            return parse_analysis(text)
        except ExternalServiceFailure as e:
            logger.warning("AI analysis failed, using fallback: %s", e.message)
            return fallback_analysis()
        except Exception:
            logger.exception("Unexpected error during AI analysis, using fallback")
            return fallback_analysis()

    async def ask(self, question: str, title: str, description: str, phase: str) -> str:
        """Answer a question about an idea, or apologise when the service fails."""
        try:
            text = await self._complete(
                ASSISTANT_SYSTEM,
                build_assistant_messages(question, title, description, phase),
                ASSISTANT_MAX_TOKENS,
            )
            return text.strip()
        except ExternalServiceFailure as e:
            logger.warning("AI assistant failed: %s", e.message)
            return ASSISTANT_FALLBACK
        except Exception:
            logger.exception("Unexpected error in AI assistant")
            return ASSISTANT_FALLBACK


def get_analyst(request: Request) -> IdeaAnalyst:
    """FastAPI dependency — the analyst shared by the application."""
    return request.app.state.analyst
