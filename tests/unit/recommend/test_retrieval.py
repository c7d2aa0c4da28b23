"""Tests for OccupationRetriever."""

import asyncio

import pytest

from src.recommend.models import Candidate, SourceTag
from src.recommend.outcome import RateLimitedError, UpstreamUnavailableError
from src.recommend.retrieval import OccupationRetriever, merge_candidates


class TestMergeCandidates:
    def test_first_occurrence_wins(self):
        first = Candidate(name="Data Analyst", description="first", source_tag=SourceTag.TAXONOMY)
        second = Candidate(name="data  analyst", description="second", source_tag=SourceTag.TAXONOMY)
        other = Candidate(name="Statistician", description="", source_tag=SourceTag.TAXONOMY)

        merged = merge_candidates([[first], [second, other]])

        assert merged == [first, other]


class TestRetrieve:
    @pytest.mark.asyncio
    async def test_merges_in_term_order(
        self, fake_taxonomy, make_occupation, wrapper, recommend_config
    ):
        fake_taxonomy.results = {
            "software developer": [make_occupation("Software Developer"), make_occupation("Web Developer")],
            "data analyst": [make_occupation("Data Analyst"), make_occupation("web developer")],
        }
        retriever = OccupationRetriever(
            taxonomy=fake_taxonomy, wrapper=wrapper, config=recommend_config
        )

        candidates = await retriever.retrieve(["software developer", "data analyst"])

        assert [c.name for c in candidates] == ["Software Developer", "Web Developer", "Data Analyst"]
        assert all(c.source_tag == SourceTag.TAXONOMY for c in candidates)
        assert candidates[2].search_term == "data analyst"
        assert candidates[0].external_id is not None

    @pytest.mark.asyncio
    async def test_order_does_not_depend_on_completion_order(
        self, make_occupation, wrapper, recommend_config
    ):
        class _SlowFirstTaxonomy:
            async def search(self, term):
                if term == "slow":
                    await asyncio.sleep(0.05)
                return [make_occupation(f"{term} occupation")]

        retriever = OccupationRetriever(
            taxonomy=_SlowFirstTaxonomy(), wrapper=wrapper, config=recommend_config
        )

        candidates = await retriever.retrieve(["slow", "fast"])

        assert [c.name for c in candidates] == ["slow occupation", "fast occupation"]

    @pytest.mark.asyncio
    async def test_failed_term_is_skipped(
        self, fake_taxonomy, make_occupation, wrapper, recommend_config
    ):
        fake_taxonomy.results = {
            "pilot": UpstreamUnavailableError("503"),
            "chef": [make_occupation("Chef")],
        }
        retriever = OccupationRetriever(
            taxonomy=fake_taxonomy, wrapper=wrapper, config=recommend_config
        )

        candidates = await retriever.retrieve(["pilot", "chef"])

        assert [c.name for c in candidates] == ["Chef"]

    @pytest.mark.asyncio
    async def test_all_terms_failing_yields_empty(
        self, failing_taxonomy, wrapper, recommend_config
    ):
        retriever = OccupationRetriever(
            taxonomy=failing_taxonomy, wrapper=wrapper, config=recommend_config
        )

        assert await retriever.retrieve(["a", "b", "c"]) == []
        assert sorted(failing_taxonomy.searched) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_rate_limited_search_uses_taxonomy_attempts(
        self, fake_taxonomy, wrapper, sleep_calls, recommend_config
    ):
        fake_taxonomy.default = RateLimitedError("429")
        retriever = OccupationRetriever(
            taxonomy=fake_taxonomy, wrapper=wrapper, config=recommend_config
        )

        assert await retriever.retrieve(["nurse"]) == []
        assert len(fake_taxonomy.searched) == recommend_config.taxonomy_max_attempts
        assert sleep_calls == [recommend_config.taxonomy_base_delay]

    @pytest.mark.asyncio
    async def test_caps_results_per_term(
        self, fake_taxonomy, make_occupation, wrapper, recommend_config
    ):
        fake_taxonomy.default = [make_occupation(f"Job {n}") for n in range(10)]
        retriever = OccupationRetriever(
            taxonomy=fake_taxonomy, wrapper=wrapper, config=recommend_config
        )

        candidates = await retriever.retrieve(["anything"])

        assert len(candidates) == recommend_config.results_per_term

    @pytest.mark.asyncio
    async def test_no_terms_makes_no_calls(self, fake_taxonomy, wrapper, recommend_config):
        retriever = OccupationRetriever(
            taxonomy=fake_taxonomy, wrapper=wrapper, config=recommend_config
        )

        assert await retriever.retrieve([]) == []
        assert fake_taxonomy.searched == []
