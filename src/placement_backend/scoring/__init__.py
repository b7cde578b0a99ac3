"""ATS scoring collaborator: prompt building and the model client."""

from .client import ScoringClient, OpenAIScoringClient, parse_score_response, get_scoring_client

__all__ = ["ScoringClient", "OpenAIScoringClient", "parse_score_response", "get_scoring_client"]
