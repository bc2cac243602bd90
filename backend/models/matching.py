"""
LEADBANK CRM - ICP match results (derived, never persisted)
"""

from typing import Any, List
from pydantic import BaseModel, Field
from enum import Enum


class MatchType(str, Enum):
    IMPORTED = "imported"
    EXACT = "exact"
    GOOD = "good"
    SIMILAR = "similar"
    LOOSE = "loose"


# Sort rank of each tier (imported contacts are always listed first)
MATCH_TYPE_RANK = {
    MatchType.IMPORTED: -1,
    MatchType.EXACT: 0,
    MatchType.GOOD: 1,
    MatchType.SIMILAR: 2,
    MatchType.LOOSE: 3,
}


class MatchedCriteria(BaseModel):
    industries: List[str] = Field(default_factory=list)
    job_titles: List[str] = Field(default_factory=list)
    company_size: bool = False
    geographies: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)


class RecommendationReason(BaseModel):
    type: str
    weight: int
    matched: List[Any] = Field(default_factory=list)
    message: str = ""


class MatchResult(BaseModel):
    score: int = 0                  # rounded percentage, 0..100
    raw_score: float = 0.0          # sum of weighted points
    max_score: int = 0              # sum of weights of the criteria present
    percentage: float = 0.0
    match_type: MatchType = MatchType.LOOSE
    matched_criteria: MatchedCriteria = Field(default_factory=MatchedCriteria)
    recommendation_reasons: List[RecommendationReason] = Field(default_factory=list)
