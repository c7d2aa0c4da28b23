"""Prompt builders for the recommendation pipeline."""

from __future__ import annotations

from collections.abc import Sequence

from src.recommend.models import Candidate, InterestSignal, RecommendationResult

RECOMMEND_SYSTEM_PROMPT = """You are a career guidance assistant for high school students.

You must follow these rules:
- Base every suggestion on the interests provided. Do NOT invent interests.
- Output MUST be valid JSON only (no markdown) when JSON is requested.
"""

INSIGHT_SYSTEM_PROMPT = (
    "You are a friendly career counselor for Indian high school students."
)


def describe_interests(
    signals: Sequence[InterestSignal], liked: Sequence[str] | None = None
) -> str:
    """Describe the user's interests in one line of natural language."""
    if liked:
        return ", ".join(liked)
    parts = [
        f"{signal.category} (e.g. {signal.keyword}, strength {signal.weight})"
        for signal in signals
    ]
    return ", ".join(parts)


def build_search_terms_prompt(
    *,
    signals: Sequence[InterestSignal],
    liked: Sequence[str] | None = None,
    max_terms: int = 3,
) -> str:
    """Build the prompt asking for taxonomy search terms."""
    return "\n".join(
        [
            f"A student said they like: {describe_interests(signals, liked)}.",
            "",
            f"Give me {max_terms} short job title keywords (1-4 words each) to search "
            "for careers matching their interests.",
            f"Reply ONLY with a JSON array of {max_terms} strings. "
            'Example: ["software developer", "data analyst", "teacher"]',
            "No explanation, just the JSON array.",
        ]
    )


def build_ranking_prompt(
    *,
    candidates: Sequence[Candidate],
    signals: Sequence[InterestSignal],
    liked: Sequence[str] | None = None,
    top_n: int = 5,
) -> str:
    """Build the prompt asking the AI to rank candidates."""
    options = [
        f"{index}. {candidate.name}: {(candidate.description or candidate.name)[:100]}"
        for index, candidate in enumerate(candidates, start=1)
    ]
    return "\n".join(
        [
            f"A student likes: {describe_interests(signals, liked)}.",
            "",
            "Here are some career options:",
            *options,
            "",
            f"Pick the TOP {top_n} most suitable careers for this student and give "
            "each a match percentage between 0 and 100.",
            "Use the career names exactly as listed.",
            "Reply ONLY with a JSON array like this (no extra text):",
            '[{"name": "Career Name", "matchScore": 94, "rationale": "one sentence reason"}]',
        ]
    )


def build_insight_prompt(
    *,
    results: Sequence[RecommendationResult],
    signals: Sequence[InterestSignal] = (),
    agreement_count: int,
    total_questions: int,
) -> str:
    """Build the prompt for the personalized insight."""
    top_careers = ", ".join(result.name for result in results[:3])
    lines = [
        f"A student agreed with {agreement_count} out of {total_questions} "
        "career interest questions.",
        f"Their top career matches are: {top_careers}.",
    ]
    if signals:
        interests = ", ".join(signal.category for signal in signals[:3])
        lines.append(f"Their strongest interests: {interests}.")
    lines.extend(
        [
            "",
            "Write a 3-4 sentence personalized, encouraging insight. "
            "Be specific about their interests.",
            "Keep it under 80 words. Use simple language.",
        ]
    )
    return "\n".join(lines)
