"""Personalized insight generation."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.llm import TextGenerator
from src.recommend.models import Insight, InterestSignal, RecommendationResult
from src.recommend.outcome import Success
from src.recommend.prompts import INSIGHT_SYSTEM_PROMPT, build_insight_prompt
from src.recommend.resilience import ExternalCallWrapper

logger = logging.getLogger(__name__)

FALLBACK_INSIGHT_TEMPLATE = (
    "Based on your responses, you show strong potential in {career}! "
    "Your unique combination of interests points to exciting career opportunities. "
    "Start exploring these paths and trust your instincts - you're on the right track!"
)
FALLBACK_CAREER = "your chosen field"


def fallback_insight(results: Sequence[RecommendationResult]) -> Insight:
    """Build the templated insight for the top result."""
    career = results[0].name if results else FALLBACK_CAREER
    return Insight(insight=FALLBACK_INSIGHT_TEMPLATE.format(career=career), fallback=True)


class InsightGenerator:
    """Summarize a recommendation in a few encouraging sentences."""

    def __init__(
        self,
        *,
        llm: TextGenerator,
        wrapper: ExternalCallWrapper,
        config: RecommendConfig | None = None,
    ) -> None:
        self.llm = llm
        self.wrapper = wrapper
        self.config = config or get_recommend_config()

    async def generate(
        self,
        signals: Sequence[InterestSignal],
        results: Sequence[RecommendationResult],
        *,
        agreement_count: int = 0,
    ) -> Insight:
        """Return an AI insight, or the template when the AI call fails."""
        if not results:
            return fallback_insight(results)

        prompt = build_insight_prompt(
            results=results,
            signals=signals,
            agreement_count=agreement_count,
            total_questions=self.config.total_questions,
        )
        outcome = await self.wrapper.invoke(
            lambda: self.llm.generate_text(prompt, system_prompt=INSIGHT_SYSTEM_PROMPT),
            max_attempts=self.config.llm_max_attempts,
            base_delay=self.config.llm_base_delay,
            timeout=self.config.insight_timeout,
            label="insight generation",
        )
        if isinstance(outcome, Success) and outcome.value.strip():
            return Insight(insight=outcome.value.strip())

        if isinstance(outcome, Success):
            logger.info("Insight generation returned empty text; using template")
        else:
            logger.info("Insight generation fell back (%s)", outcome.reason.value)
        return fallback_insight(results)
