"""Scoring collaborator client.

Talks to an OpenAI-compatible chat completions endpoint; by default that is
Gemini's compatibility endpoint, configured through ``settings.scoring_*``.
"""

import json
from typing import Optional, Protocol

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError as PydanticValidationError
import structlog

from placement_backend.core.config import settings
from placement_backend.core.error_handling import UpstreamError
from placement_backend.models.job import Job
from placement_backend.models.student import Student
from placement_backend.schemas.scoring import ATSScore
from .prompts import SYSTEM_PROMPT, build_scoring_prompt

logger = structlog.get_logger(__name__)


class ScoringClient(Protocol):
    """Anything that can score one candidate against one job."""
    
    async def score(self, student: Student, job: Job) -> ATSScore:
        ...


def _strip_code_fences(text: str) -> str:
    """Remove the markdown code fences models like to wrap JSON in."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_score_response(text: Optional[str]) -> ATSScore:
    """Turn the model's reply into an :class:`ATSScore`.
    
    Raises:
        UpstreamError: Empty reply, invalid JSON, or a payload that does not
            match the score schema
    """
    if not text:
        raise UpstreamError("Scoring service returned an empty response")
    
    try:
        payload = json.loads(_strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise UpstreamError(f"Scoring service returned invalid JSON: {e.msg}", original_error=e)
    
    try:
        return ATSScore.model_validate(payload)
    except PydanticValidationError as e:
        raise UpstreamError(f"Scoring service returned an invalid score: {e}", original_error=e)


class OpenAIScoringClient:
    """Scores candidates with a chat completion model."""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self.model = model or settings.scoring_model
        self.client = client or AsyncOpenAI(
            api_key=api_key or settings.scoring_api_key,
            base_url=base_url or settings.scoring_base_url,
            # Each scoring call is attempted once
            max_retries=0
        )
    
    async def score(self, student: Student, job: Job) -> ATSScore:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_scoring_prompt(student, job)}
                ],
                temperature=0.1
            )
        except OpenAIError as e:
            logger.warning(
                "Scoring request failed",
                student_id=str(student.id),
                job_id=str(job.id),
                error=str(e)
            )
            raise UpstreamError(f"Scoring request failed: {str(e)}", original_error=e)
        
        if not response.choices:
            raise UpstreamError("Scoring service returned no choices")
        
        return parse_score_response(response.choices[0].message.content)


_scoring_client: Optional[OpenAIScoringClient] = None


def get_scoring_client() -> OpenAIScoringClient:
    """Get or create the shared scoring client."""
    global _scoring_client
    if _scoring_client is None:
        _scoring_client = OpenAIScoringClient()
    return _scoring_client
