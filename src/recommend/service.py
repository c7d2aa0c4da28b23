"""Career recommendation service.

Orchestrates the pipeline from quiz answers to enriched recommendations:
interest extraction, search term synthesis, taxonomy retrieval, scoring,
enrichment and the personalized insight.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.recommend.assembly import ResultAssembler
from src.recommend.catalog import CareerCatalog, load_catalog
from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.insight import InsightGenerator, fallback_insight
from src.recommend.interests import InterestExtractor
from src.recommend.llm import RecommendLLM, TextGenerator
from src.recommend.models import (
    Candidate,
    InterestSignal,
    Recommendation,
    RecommendationResult,
    agreement_count,
    parse_answers,
)
from src.recommend.resilience import ExternalCallWrapper
from src.recommend.retrieval import OccupationRetriever
from src.recommend.scoring import CandidateScorer
from src.recommend.taxonomy import EscoTaxonomyClient, TaxonomyClient
from src.recommend.terms import SearchTermSynthesizer

logger = logging.getLogger(__name__)


class RecommendationService:
    """Main service for career recommendations.

    Orchestrates the complete pipeline:
    1. Extract weighted interest signals from the quiz answers
    2. Synthesize taxonomy search terms (AI, keywords as fallback)
    3. Retrieve occupations per term (static catalog as fallback)
    4. Score candidates (AI ranking, deterministic formula as fallback)
    5. Enrich results with catalog data
    6. Generate a personalized insight (template as fallback)

    Every upstream call goes through one shared ExternalCallWrapper, so
    upstream failures degrade a stage instead of failing the request.
    """

    def __init__(
        self,
        config: RecommendConfig | None = None,
        *,
        llm: TextGenerator | None = None,
        taxonomy: TaxonomyClient | None = None,
        catalog: CareerCatalog | None = None,
        wrapper: ExternalCallWrapper | None = None,
        offline: bool = False,
    ):
        """Initialize the recommendation service.

        Args:
            config: Optional RecommendConfig. Uses global config if not provided.
            llm: AI text generator. Defaults to the LiteLLM client.
            taxonomy: Occupation search client. Defaults to the ESCO client.
            catalog: Static career catalog. Defaults to ``config.catalog_path``
                or the bundled catalog.
            wrapper: Resilient call wrapper shared by all stages.
            offline: Skip every upstream call and answer from the catalog.
        """
        self.config = config or get_recommend_config()
        self.offline = offline
        self.catalog = catalog if catalog is not None else load_catalog(self.config.catalog_path)

        self._owns_taxonomy = taxonomy is None
        self.llm = llm if llm is not None else RecommendLLM(config=self.config)
        self.taxonomy = taxonomy if taxonomy is not None else EscoTaxonomyClient(self.config)
        self.wrapper = wrapper or ExternalCallWrapper(
            max_attempts=self.config.llm_max_attempts,
            base_delay=self.config.llm_base_delay,
            timeout=self.config.llm_timeout,
        )

        self.extractor = InterestExtractor()
        self.synthesizer = SearchTermSynthesizer(
            llm=self.llm, wrapper=self.wrapper, config=self.config
        )
        self.retriever = OccupationRetriever(
            taxonomy=self.taxonomy, wrapper=self.wrapper, config=self.config
        )
        self.scorer = CandidateScorer(
            llm=self.llm, wrapper=self.wrapper, config=self.config, catalog=self.catalog
        )
        self.assembler = ResultAssembler(self.catalog, config=self.config)
        self.insight_generator = InsightGenerator(
            llm=self.llm, wrapper=self.wrapper, config=self.config
        )

    async def __aenter__(self) -> RecommendationService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the taxonomy HTTP client if this service created it."""
        if self._owns_taxonomy and isinstance(self.taxonomy, EscoTaxonomyClient):
            await self.taxonomy.aclose()

    async def recommend(
        self,
        answers: Mapping[Any, Any],
        *,
        include_insight: bool = True,
    ) -> Recommendation:
        """Recommend careers for a set of quiz answers.

        Upstream failures never propagate: each stage falls back on its own,
        and an unexpected error anywhere in the pipeline is answered with the
        deterministic catalog recommendation.

        Args:
            answers: Mapping of question id to answer (``agree``/``disagree``
                or ``right``/``left``).
            include_insight: Generate the insight with the AI service. When
                False the templated insight is returned.

        Raises:
            ValueError: If the answers themselves are invalid.
        """
        parsed = parse_answers(answers)
        engagement = agreement_count(parsed)
        signals = self.extractor.extract(parsed)
        liked = self.extractor.describe(parsed)

        results = await self._rank_safely(signals, liked, engagement)

        if not include_insight or self.offline or not signals:
            insight = fallback_insight(results)
        else:
            insight = await self.insight_generator.generate(
                signals, results, agreement_count=engagement
            )
        return Recommendation(results=results, insight=insight)

    async def rank(self, answers: Mapping[Any, Any]) -> list[RecommendationResult]:
        """Return only the ranked results (no insight)."""
        parsed = parse_answers(answers)
        return await self._rank_safely(
            self.extractor.extract(parsed),
            self.extractor.describe(parsed),
            agreement_count(parsed),
        )

    async def _rank_safely(
        self,
        signals: list[InterestSignal],
        liked: list[str],
        engagement: int,
    ) -> list[RecommendationResult]:
        try:
            return await self._rank(signals, liked, engagement)
        except Exception as e:
            logger.exception("Recommendation pipeline failed, using static fallback: %s", e)
            return self.static_recommendations(signals, agreement_count=engagement)

    async def _rank(
        self,
        signals: list[InterestSignal],
        liked: list[str],
        engagement: int,
    ) -> list[RecommendationResult]:
        if not signals:
            logger.info("No agreed answers; returning generic recommendations")
            return self.static_recommendations([], agreement_count=engagement)

        if self.offline:
            logger.info("Offline mode; scoring the static catalog")
            return self.static_recommendations(signals, agreement_count=engagement)

        logger.info(
            "Interest signals: %s",
            ", ".join(f"{signal.category}={signal.weight}" for signal in signals),
        )

        terms = await self.synthesizer.synthesize(signals, liked)
        candidates = await self.retriever.retrieve(terms)
        if not candidates:
            logger.info("No taxonomy candidates; using the static catalog")
            candidates = self._catalog_candidates()

        scored = await self.scorer.score(
            candidates, signals, agreement_count=engagement, liked=liked
        )
        if not scored:
            return self.static_recommendations(signals, agreement_count=engagement)

        results = self.assembler.assemble(scored)
        logger.info(
            "Recommended: %s",
            ", ".join(f"{result.name} ({result.match_score})" for result in results),
        )
        return results

    def static_recommendations(
        self,
        signals: list[InterestSignal],
        *,
        agreement_count: int = 0,
    ) -> list[RecommendationResult]:
        """Deterministic recommendations from the static catalog alone."""
        scored = self.scorer.score_deterministic(
            self._catalog_candidates(), signals, agreement_count=agreement_count
        )
        return self.assembler.assemble(scored)

    def _catalog_candidates(self) -> list[Candidate]:
        return self.catalog.to_candidates()
