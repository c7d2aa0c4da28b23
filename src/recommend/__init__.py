"""Career recommendation pipeline.

This module turns interest-quiz answers into ranked, enriched career
recommendations, staying available when the AI text service or the
occupation taxonomy is slow, rate-limited or down.

Public API:
    - RecommendationService: Main recommendation pipeline
    - ExternalCallWrapper: Retry/timeout wrapper for upstream calls
    - CareerCatalog / load_catalog: Static career catalog
    - Recommendation, RecommendationResult, Insight: Output models
    - RecommendConfig: Configuration settings
"""

from src.recommend.catalog import CareerCatalog, CareerRecord, load_catalog
from src.recommend.config import RecommendConfig, get_recommend_config, reset_recommend_config
from src.recommend.models import (
    AnswerSignal,
    Candidate,
    Insight,
    InterestSignal,
    Recommendation,
    RecommendationResult,
    ScoredCandidate,
    SourceTag,
    parse_answers,
)
from src.recommend.outcome import CallOutcome, Failure, FailureReason, Success
from src.recommend.resilience import ExternalCallWrapper
from src.recommend.service import RecommendationService

__all__ = [
    "RecommendationService",
    "ExternalCallWrapper",
    "CallOutcome",
    "Success",
    "Failure",
    "FailureReason",
    "CareerCatalog",
    "CareerRecord",
    "load_catalog",
    "AnswerSignal",
    "Candidate",
    "InterestSignal",
    "ScoredCandidate",
    "SourceTag",
    "Insight",
    "Recommendation",
    "RecommendationResult",
    "parse_answers",
    "RecommendConfig",
    "get_recommend_config",
    "reset_recommend_config",
]
