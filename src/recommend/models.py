"""Data models for the recommendation pipeline."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter


class AnswerSignal(str, Enum):
    """A single quiz answer."""

    AGREE = "agree"
    DISAGREE = "disagree"


_ANSWER_ALIASES: dict[str, AnswerSignal] = {
    "agree": AnswerSignal.AGREE,
    "right": AnswerSignal.AGREE,
    "yes": AnswerSignal.AGREE,
    "disagree": AnswerSignal.DISAGREE,
    "left": AnswerSignal.DISAGREE,
    "no": AnswerSignal.DISAGREE,
}

QuizAnswers = Mapping[int, AnswerSignal]


def parse_answers(raw: Mapping[Any, Any]) -> dict[int, AnswerSignal]:
    """Normalize raw quiz answers into ``{question_id: AnswerSignal}``.

    Accepts integer or numeric-string question ids and the swipe vocabulary
    (``right``/``left``) in addition to ``agree``/``disagree``.

    Raises:
        ValueError: If a question id is not an integer or an answer is unknown.
    """
    answers: dict[int, AnswerSignal] = {}
    for key, value in raw.items():
        try:
            question_id = int(key)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid question id: {key!r}") from e

        if isinstance(value, AnswerSignal):
            answers[question_id] = value
            continue

        signal = _ANSWER_ALIASES.get(str(value).strip().lower())
        if signal is None:
            raise ValueError(f"Invalid answer for question {question_id}: {value!r}")
        answers[question_id] = signal
    return answers


def agreement_count(answers: QuizAnswers) -> int:
    """Return the number of agreed answers (the user's engagement level)."""
    return sum(1 for value in answers.values() if value == AnswerSignal.AGREE)


def normalize_name(name: str) -> str:
    """Normalize a career name for de-duplication (case and whitespace)."""
    return re.sub(r"\s+", " ", name).strip().lower()


@dataclass(frozen=True)
class InterestSignal:
    """A weighted interest category derived from agreed quiz answers."""

    category: str
    keyword: str
    weight: int


class SourceTag(str, Enum):
    """Where a candidate came from."""

    TAXONOMY = "taxonomy"
    STATIC_FALLBACK = "static_fallback"
    AI_MATCHED = "ai_matched"


@dataclass(frozen=True)
class Candidate:
    """An occupation under consideration, before scoring."""

    name: str
    description: str
    source_tag: SourceTag
    external_id: str | None = None
    category: str | None = None
    search_term: str | None = None

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its match score and a one-sentence rationale."""

    candidate: Candidate
    match_score: int
    rationale: str

    def __post_init__(self) -> None:
        if not (0 <= self.match_score <= 100):
            raise ValueError(
                f"match_score must be between 0 and 100 (got {self.match_score})"
            )

    @property
    def name(self) -> str:
        return self.candidate.name


@dataclass(frozen=True)
class RecommendationResult:
    """Final, enriched recommendation returned to the caller."""

    rank: int
    name: str
    description: str
    match_score: int
    rationale: str
    source_tag: SourceTag
    external_id: str | None
    category: str
    skills: tuple[str, ...]
    education_path: str
    salary_band: str
    stream: str
    growth_rate: str

    def to_dict(self) -> dict:
        """Serialize to a JSON-ready dictionary."""
        return {
            "rank": self.rank,
            "name": self.name,
            "description": self.description,
            "matchScore": self.match_score,
            "rationale": self.rationale,
            "source": self.source_tag.value,
            "externalId": self.external_id,
            "category": self.category,
            "skills": list(self.skills),
            "education": self.education_path,
            "salary": self.salary_band,
            "stream": self.stream,
            "growthRate": self.growth_rate,
        }


@dataclass(frozen=True)
class Insight:
    """Personalized natural-language summary of a recommendation."""

    insight: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "insight": self.insight,
            "generatedAt": self.generated_at.isoformat(),
            "fallback": self.fallback,
        }


@dataclass(frozen=True)
class Recommendation:
    """Full response of the recommendation pipeline."""

    results: list[RecommendationResult]
    insight: Insight

    def to_dict(self) -> dict:
        return {
            "results": [result.to_dict() for result in self.results],
            "insight": self.insight.to_dict(),
        }


# LLM output models


class RankedCareer(BaseModel):
    """One entry of the AI ranking response."""

    name: str = Field(..., min_length=1, description="Career name")
    match_score: int = Field(
        ...,
        validation_alias=AliasChoices("matchScore", "match_score", "score"),
        description="Match percentage",
    )
    rationale: str = Field(
        default="",
        validation_alias=AliasChoices("rationale", "whyMatch", "why_match", "reason"),
        description="One-sentence reason for the match",
    )


RANKED_CAREERS_ADAPTER: TypeAdapter[list[RankedCareer]] = TypeAdapter(list[RankedCareer])
SEARCH_TERMS_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])
