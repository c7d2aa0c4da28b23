"""Tests for recommendation data models."""

from datetime import UTC

import pytest
from pydantic import ValidationError

from src.recommend.models import (
    RANKED_CAREERS_ADAPTER,
    Candidate,
    Insight,
    Recommendation,
    RecommendationResult,
    ScoredCandidate,
    SourceTag,
    normalize_name,
)


def _result(**overrides) -> RecommendationResult:
    values = {
        "rank": 1,
        "name": "Software Engineer",
        "description": "Builds software.",
        "match_score": 91,
        "rationale": "Matches your interest in technology.",
        "source_tag": SourceTag.STATIC_FALLBACK,
        "external_id": None,
        "category": "technology",
        "skills": ("Programming",),
        "education_path": "B.Tech",
        "salary_band": "₹6-25 LPA",
        "stream": "Science (PCM)",
        "growth_rate": "Very High",
    }
    values.update(overrides)
    return RecommendationResult(**values)


class TestNormalizeName:
    def test_collapses_case_and_whitespace(self):
        assert normalize_name("  Data   Scientist ") == "data scientist"

    def test_candidate_normalized_name(self):
        candidate = Candidate(name="Web  Developer", description="", source_tag=SourceTag.TAXONOMY)
        assert candidate.normalized_name == "web developer"


class TestScoredCandidate:
    def test_rejects_scores_outside_range(self):
        candidate = Candidate(name="Chef", description="", source_tag=SourceTag.TAXONOMY)

        with pytest.raises(ValueError):
            ScoredCandidate(candidate=candidate, match_score=101, rationale="")
        with pytest.raises(ValueError):
            ScoredCandidate(candidate=candidate, match_score=-1, rationale="")

    def test_exposes_candidate_name(self):
        candidate = Candidate(name="Chef", description="", source_tag=SourceTag.TAXONOMY)
        assert ScoredCandidate(candidate, 70, "ok").name == "Chef"


class TestSerialization:
    def test_result_to_dict_uses_json_keys(self):
        payload = _result().to_dict()

        assert payload["matchScore"] == 91
        assert payload["source"] == "static_fallback"
        assert payload["skills"] == ["Programming"]
        assert payload["education"] == "B.Tech"
        assert payload["salary"] == "₹6-25 LPA"
        assert payload["growthRate"] == "Very High"

    def test_recommendation_to_dict(self):
        insight = Insight(insight="Great fit.", fallback=True)
        payload = Recommendation(results=[_result()], insight=insight).to_dict()

        assert payload["results"][0]["name"] == "Software Engineer"
        assert payload["insight"]["insight"] == "Great fit."
        assert payload["insight"]["fallback"] is True

    def test_insight_timestamp_is_utc(self):
        assert Insight(insight="x").generated_at.tzinfo == UTC


class TestRankedCareerParsing:
    def test_accepts_camel_case_and_alias_fields(self):
        ranked = RANKED_CAREERS_ADAPTER.validate_json(
            '[{"name": "Pilot", "matchScore": 90, "whyMatch": "Loves flying."},'
            ' {"name": "Chef", "match_score": 80}]',
            strict=True,
        )

        assert ranked[0].match_score == 90
        assert ranked[0].rationale == "Loves flying."
        assert ranked[1].rationale == ""

    def test_strict_mode_rejects_string_scores(self):
        with pytest.raises(ValidationError):
            RANKED_CAREERS_ADAPTER.validate_json(
                '[{"name": "Pilot", "matchScore": "90"}]', strict=True
            )

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            RANKED_CAREERS_ADAPTER.validate_json('[{"name": "", "matchScore": 1}]')
