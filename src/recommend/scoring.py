"""Candidate scoring: AI re-ranking with deterministic fallback."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from src.recommend.catalog import CareerCatalog
from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.llm import TextGenerator
from src.recommend.matching import find_career
from src.recommend.models import (
    RANKED_CAREERS_ADAPTER,
    Candidate,
    InterestSignal,
    RankedCareer,
    ScoredCandidate,
    SourceTag,
    normalize_name,
)
from src.recommend.outcome import MalformedResponseError, Success
from src.recommend.prompts import RECOMMEND_SYSTEM_PROMPT, build_ranking_prompt
from src.recommend.resilience import ExternalCallWrapper

logger = logging.getLogger(__name__)

TOP_SIGNALS = 3
MIN_TOKEN_LENGTH = 4
DEFAULT_AI_RATIONALE = "Recommended based on your interests."


def _tokens(text: str) -> set[str]:
    return {token for token in re.findall(r"[a-z]+", text.lower()) if len(token) >= MIN_TOKEN_LENGTH}


class CandidateScorer:
    """Rank candidates for a user's interest signals."""

    def __init__(
        self,
        *,
        llm: TextGenerator,
        wrapper: ExternalCallWrapper,
        config: RecommendConfig | None = None,
        catalog: CareerCatalog | None = None,
    ) -> None:
        self.llm = llm
        self.wrapper = wrapper
        self.config = config or get_recommend_config()
        self.catalog = catalog

    async def score(
        self,
        candidates: Sequence[Candidate],
        signals: Sequence[InterestSignal],
        *,
        agreement_count: int = 0,
        liked: Sequence[str] | None = None,
    ) -> list[ScoredCandidate]:
        """Return at most ``top_n`` scored candidates, best first."""
        if not candidates:
            return []

        if len(candidates) > self.config.max_candidates_to_score:
            prompt_candidates = [
                scored.candidate
                for scored in self._rank_deterministic(candidates, signals, agreement_count)
            ][: self.config.max_candidates_to_score]
        else:
            prompt_candidates = list(candidates)

        prompt = build_ranking_prompt(
            candidates=prompt_candidates,
            signals=signals,
            liked=liked,
            top_n=self.config.top_n,
        )

        async def _ask() -> list[ScoredCandidate]:
            ranked = await self.llm.generate_structured(
                prompt,
                RANKED_CAREERS_ADAPTER,
                system_prompt=RECOMMEND_SYSTEM_PROMPT,
            )
            scored = self._from_ai_ranking(ranked, candidates)
            if not scored:
                raise MalformedResponseError("AI ranking contained no careers")
            return scored

        outcome = await self.wrapper.invoke(
            _ask,
            max_attempts=self.config.llm_max_attempts,
            base_delay=self.config.llm_base_delay,
            timeout=self.config.llm_timeout,
            label="candidate ranking",
        )
        if isinstance(outcome, Success):
            logger.info("AI ranked %s candidates", len(outcome.value))
            return outcome.value

        logger.info(
            "Candidate ranking fell back to deterministic scoring (%s)",
            outcome.reason.value,
        )
        return self.score_deterministic(candidates, signals, agreement_count=agreement_count)

    def score_deterministic(
        self,
        candidates: Sequence[Candidate],
        signals: Sequence[InterestSignal],
        *,
        agreement_count: int = 0,
    ) -> list[ScoredCandidate]:
        """Score by category overlap and engagement; top ``top_n``."""
        return self._rank_deterministic(candidates, signals, agreement_count)[
            : self.config.top_n
        ]

    def _rank_deterministic(
        self,
        candidates: Sequence[Candidate],
        signals: Sequence[InterestSignal],
        agreement_count: int,
    ) -> list[ScoredCandidate]:
        top_signals = list(signals[:TOP_SIGNALS])
        agreement_bonus = min(
            agreement_count * self.config.agreement_bonus_per_answer,
            self.config.agreement_bonus_cap,
        )

        scored: list[ScoredCandidate] = []
        for candidate in candidates:
            categories = self.candidate_categories(candidate, top_signals)
            matched = [signal for signal in top_signals if signal.category in categories]
            category_bonus = min(
                sum(signal.weight * self.config.category_weight_factor for signal in matched),
                self.config.category_bonus_cap,
            )
            raw = self.config.base_score + category_bonus + agreement_bonus
            score = max(0, min(round(raw), self.config.fallback_score_cap))
            scored.append(
                ScoredCandidate(
                    candidate=candidate,
                    match_score=score,
                    rationale=_fallback_rationale(matched, signals),
                )
            )

        # sorted() is stable: equal scores keep discovery order.
        return sorted(scored, key=lambda item: item.match_score, reverse=True)

    def candidate_categories(
        self, candidate: Candidate, signals: Sequence[InterestSignal]
    ) -> set[str]:
        """Return the interest categories a candidate belongs to.

        A known category (from the candidate or the catalog) is
        authoritative. Otherwise the category is inferred from the search
        term that found the candidate and from keyword words in its name.
        """
        if candidate.category:
            return {candidate.category}
        if self.catalog is not None:
            record = find_career(
                candidate.name,
                self.catalog,
                fuzzy=self.config.fuzzy_name_match,
                threshold=self.config.name_match_threshold,
                min_length=self.config.name_match_min_length,
            )
            if record is not None:
                return {record.category}

        categories: set[str] = set()
        if candidate.search_term:
            term = normalize_name(candidate.search_term)
            for signal in signals:
                if normalize_name(signal.keyword) == term:
                    categories.add(signal.category)

        name_tokens = _tokens(f"{candidate.name} {candidate.search_term or ''}")
        for signal in signals:
            if _tokens(f"{signal.category} {signal.keyword}") & name_tokens:
                categories.add(signal.category)

        return categories

    def _from_ai_ranking(
        self,
        ranked: Sequence[RankedCareer],
        candidates: Sequence[Candidate],
    ) -> list[ScoredCandidate]:
        by_name = {candidate.normalized_name: candidate for candidate in candidates}

        scored: list[ScoredCandidate] = []
        seen: set[str] = set()
        for item in ranked:
            key = normalize_name(item.name)
            if not key or key in seen:
                continue
            seen.add(key)

            candidate = by_name.get(key) or Candidate(
                name=" ".join(item.name.split()),
                description="",
                source_tag=SourceTag.AI_MATCHED,
            )
            score = max(0, min(item.match_score, self.config.max_match_score))
            scored.append(
                ScoredCandidate(
                    candidate=candidate,
                    match_score=score,
                    rationale=item.rationale.strip() or DEFAULT_AI_RATIONALE,
                )
            )

        scored.sort(key=lambda item: item.match_score, reverse=True)
        return scored[: self.config.top_n]


def _fallback_rationale(
    matched: Sequence[InterestSignal], signals: Sequence[InterestSignal]
) -> str:
    if matched:
        best = matched[0]
        return f"Matches your interest in {best.category} ({best.keyword})."
    if signals:
        return "Based on your overall interest profile."
    return "Based on general aptitude."
