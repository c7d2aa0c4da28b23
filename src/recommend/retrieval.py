"""Occupation retrieval from the taxonomy search service."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.models import Candidate, SourceTag
from src.recommend.outcome import CallOutcome, Failure
from src.recommend.resilience import ExternalCallWrapper
from src.recommend.taxonomy import TaxonomyClient, TaxonomyOccupation

logger = logging.getLogger(__name__)


def merge_candidates(groups: Sequence[Sequence[Candidate]]) -> list[Candidate]:
    """Concatenate candidate groups, keeping the first of each normalized name."""
    merged: list[Candidate] = []
    seen: set[str] = set()
    for group in groups:
        for candidate in group:
            key = candidate.normalized_name
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(candidate)
    return merged


class OccupationRetriever:
    """Search the taxonomy once per term with per-term fault isolation."""

    def __init__(
        self,
        *,
        taxonomy: TaxonomyClient,
        wrapper: ExternalCallWrapper,
        config: RecommendConfig | None = None,
    ) -> None:
        self.taxonomy = taxonomy
        self.wrapper = wrapper
        self.config = config or get_recommend_config()

    async def retrieve(self, terms: Sequence[str]) -> list[Candidate]:
        """Return de-duplicated taxonomy candidates for ``terms``.

        Searches run concurrently; the merge follows term order, so the
        result does not depend on completion order. An empty list means
        every search failed or found nothing.
        """
        if not terms:
            return []

        outcomes = await asyncio.gather(*(self._search(term) for term in terms))

        groups: list[list[Candidate]] = []
        failures = 0
        for term, outcome in zip(terms, outcomes, strict=True):
            if isinstance(outcome, Failure):
                failures += 1
                logger.warning(
                    "Taxonomy search for %r skipped (%s)", term, outcome.reason.value
                )
                continue
            occupations = outcome.value[: self.config.results_per_term]
            logger.info("Taxonomy returned %s results for %r", len(occupations), term)
            groups.append([_to_candidate(occupation, term) for occupation in occupations])

        candidates = merge_candidates(groups)
        logger.info(
            "Retrieved %s unique candidates from %s terms (%s failed)",
            len(candidates),
            len(terms),
            failures,
        )
        return candidates

    async def _search(self, term: str) -> CallOutcome[list[TaxonomyOccupation]]:
        return await self.wrapper.invoke(
            lambda: self.taxonomy.search(term),
            max_attempts=self.config.taxonomy_max_attempts,
            base_delay=self.config.taxonomy_base_delay,
            timeout=self.config.taxonomy_timeout,
            label=f"taxonomy search {term!r}",
        )


def _to_candidate(occupation: TaxonomyOccupation, term: str) -> Candidate:
    return Candidate(
        name=occupation.title,
        description=occupation.description,
        source_tag=SourceTag.TAXONOMY,
        external_id=occupation.id,
        search_term=term,
    )
