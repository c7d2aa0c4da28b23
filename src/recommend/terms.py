"""Taxonomy search term synthesis."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.llm import TextGenerator
from src.recommend.models import SEARCH_TERMS_ADAPTER, InterestSignal, normalize_name
from src.recommend.outcome import MalformedResponseError, Success
from src.recommend.prompts import RECOMMEND_SYSTEM_PROMPT, build_search_terms_prompt
from src.recommend.resilience import ExternalCallWrapper

logger = logging.getLogger(__name__)

MAX_TERM_WORDS = 4


def clean_terms(raw_terms: Sequence[str], limit: int) -> list[str]:
    """Normalize whitespace, drop empty/overlong/duplicate terms, cap at limit."""
    terms: list[str] = []
    seen: set[str] = set()
    for raw in raw_terms:
        words = raw.split()
        if not words or len(words) > MAX_TERM_WORDS:
            continue
        term = " ".join(words)
        key = normalize_name(term)
        if key in seen:
            continue
        seen.add(key)
        terms.append(term)
        if len(terms) >= limit:
            break
    return terms


class SearchTermSynthesizer:
    """Derive taxonomy search terms, AI first, keywords as fallback."""

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

    async def synthesize(
        self,
        signals: Sequence[InterestSignal],
        liked: Sequence[str] | None = None,
    ) -> list[str]:
        """Return 1 to ``max_search_terms`` terms for non-empty signals."""
        if not signals:
            return []

        limit = self.config.max_search_terms
        prompt = build_search_terms_prompt(signals=signals, liked=liked, max_terms=limit)

        async def _ask() -> list[str]:
            raw_terms = await self.llm.generate_structured(
                prompt,
                SEARCH_TERMS_ADAPTER,
                system_prompt=RECOMMEND_SYSTEM_PROMPT,
            )
            terms = clean_terms(raw_terms, limit)
            if not terms:
                raise MalformedResponseError("AI returned no usable search terms")
            return terms

        outcome = await self.wrapper.invoke(
            _ask,
            max_attempts=self.config.llm_max_attempts,
            base_delay=self.config.llm_base_delay,
            timeout=self.config.llm_timeout,
            label="search term synthesis",
        )
        if isinstance(outcome, Success):
            logger.info("AI search terms: %s", outcome.value)
            return outcome.value

        terms = self.fallback_terms(signals)
        logger.info(
            "Search term synthesis fell back (%s); using keywords: %s",
            outcome.reason.value,
            terms,
        )
        return terms

    def fallback_terms(self, signals: Sequence[InterestSignal]) -> list[str]:
        """Signal keywords, highest weight first, capped at max_search_terms."""
        ordered = sorted(signals, key=lambda signal: signal.weight, reverse=True)
        terms = clean_terms([signal.keyword for signal in ordered], self.config.max_search_terms)
        if not terms and ordered:
            # Keywords longer than a search term allows still need one term.
            terms = [" ".join(ordered[0].keyword.split()[:MAX_TERM_WORDS]) or ordered[0].category]
        return terms
