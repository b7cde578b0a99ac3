"""Pydantic schemas for ATS scoring."""

import math
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator


class Recommendation(str, Enum):
    """Qualitative verdict returned with every ATS score."""
    HIGHLY_RECOMMENDED = "Highly recommended"
    RECOMMENDED = "Recommended"
    MAYBE = "Maybe"
    NOT_RECOMMENDED = "Not recommended"


class ATSScore(BaseModel):
    """Fit score for one candidate against one job, stored on the application."""
    
    score: int = Field(..., ge=0, le=100, description="Fit score 0-100")
    recommendation: Recommendation
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    
    @validator("score", pre=True)
    def round_fractional_score(cls, v):
        """Round fractional model output half up to a whole score."""
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v + 0.5)
        return v


class ScoreRecalculationRequest(BaseModel):
    """Body of the score recalculation endpoint.
    
    The threshold range is checked by the scoring service so that an
    out-of-range value is reported like any other validation error.
    """
    
    auto_shortlist: bool = Field(True, description="Shortlist applications reaching the threshold")
    auto_shortlist_threshold: Optional[int] = Field(
        None, description="Shortlist threshold 0-100, defaults to the configured value"
    )


class ScoreItemResult(BaseModel):
    """Outcome of scoring a single application."""
    
    application_id: UUID
    scored: bool = False
    score: Optional[int] = None
    shortlisted: bool = False
    error: Optional[str] = None
    message: Optional[str] = None


class ScoreRecalculationResult(BaseModel):
    """Batch summary of a score recalculation run."""
    
    job_id: UUID
    auto_shortlist_threshold: Optional[int] = None
    total: int = 0
    scored: int = 0
    shortlisted: int = 0
    failed: int = 0
    items: List[ScoreItemResult] = Field(default_factory=list)
