"""Enrichment of scored candidates with static catalog fields."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.recommend.catalog import CareerCatalog, CareerRecord
from src.recommend.config import RecommendConfig, get_recommend_config
from src.recommend.matching import find_career
from src.recommend.models import RecommendationResult, ScoredCandidate
from src.recommend.taxonomy import clean_description

logger = logging.getLogger(__name__)

GENERIC_SKILLS: tuple[str, ...] = (
    "Critical Thinking",
    "Communication",
    "Leadership",
    "Problem Solving",
)
GENERIC_EDUCATION = "Bachelor's degree in relevant field"
GENERIC_SALARY = "₹4-15 LPA"
GENERIC_STREAM = "Any stream"
GENERIC_CATEGORY = "professional"
GENERIC_GROWTH = "Growing"


@dataclass(frozen=True)
class _TitleRule:
    keywords: tuple[str, ...]
    value: object


# Title-keyword defaults for careers that are not in the catalog.
# First matching rule wins.
_SKILL_RULES: tuple[_TitleRule, ...] = (
    _TitleRule(("software", "developer"), ("Programming", "Problem Solving", "Algorithms", "Databases")),
    _TitleRule(("data",), ("Python", "Statistics", "SQL", "Machine Learning")),
    _TitleRule(("design",), ("Figma", "Creativity", "User Research", "Prototyping")),
    _TitleRule(("doctor", "physician"), ("Medical Knowledge", "Patient Care", "Diagnosis", "Empathy")),
    _TitleRule(("market",), ("Digital Marketing", "Analytics", "Branding", "SEO")),
    _TitleRule(("teacher",), ("Communication", "Subject Expertise", "Patience", "Planning")),
    _TitleRule(("financial", "finance"), ("Financial Modeling", "Excel", "Analysis", "Accounting")),
    _TitleRule(("psycho",), ("Counseling", "Empathy", "Active Listening", "Assessment")),
    _TitleRule(("engineer",), ("Technical Skills", "Problem Solving", "CAD", "Mathematics")),
)
_EDUCATION_RULES: tuple[_TitleRule, ...] = (
    _TitleRule(("doctor", "physician"), "MBBS (5.5 years) + MD/MS"),
    _TitleRule(("lawyer", "legal"), "LLB (5 years integrated)"),
    _TitleRule(("architect",), "B.Arch (5 years)"),
    _TitleRule(("software", "developer", "data", "engineer"), "B.Tech / B.E. in relevant field"),
    _TitleRule(("teacher",), "Graduation + B.Ed"),
    _TitleRule(("pilot",), "Commercial Pilot License (CPL)"),
    _TitleRule(("psycho",), "M.A./M.Sc in Psychology"),
    _TitleRule(("design",), "B.Des or relevant design degree"),
)
_SALARY_RULES: tuple[_TitleRule, ...] = (
    _TitleRule(("software", "developer"), "₹6-25 LPA"),
    _TitleRule(("data", "machine"), "₹8-30 LPA"),
    _TitleRule(("doctor", "physician"), "₹8-50 LPA"),
    _TitleRule(("pilot",), "₹10-80 LPA"),
    _TitleRule(("lawyer",), "₹4-40 LPA"),
    _TitleRule(("financial",), "₹5-20 LPA"),
    _TitleRule(("market",), "₹5-22 LPA"),
    _TitleRule(("design",), "₹4-18 LPA"),
    _TitleRule(("teacher",), "₹3-12 LPA"),
    _TitleRule(("engineer",), "₹4-18 LPA"),
)
_STREAM_RULES: tuple[_TitleRule, ...] = (
    _TitleRule(("software", "engineer", "data"), "Science (PCM)"),
    _TitleRule(("doctor", "physician", "pharma", "nurse"), "Science (PCB)"),
    _TitleRule(("financial", "market", "business"), "Commerce"),
)


def _apply_rules(title: str, rules: Sequence[_TitleRule], default: object) -> object:
    lowered = title.lower()
    for rule in rules:
        if any(keyword in lowered for keyword in rule.keywords):
            return rule.value
    return default


class ResultAssembler:
    """Merge scored candidates with catalog skills, education, salary and stream."""

    def __init__(
        self,
        catalog: CareerCatalog,
        config: RecommendConfig | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or get_recommend_config()

    def lookup(self, name: str) -> CareerRecord | None:
        """Find the catalog record for a career name (exact, then fuzzy)."""
        return find_career(
            name,
            self.catalog,
            fuzzy=self.config.fuzzy_name_match,
            threshold=self.config.name_match_threshold,
            min_length=self.config.name_match_min_length,
        )

    def assemble(self, scored: Sequence[ScoredCandidate]) -> list[RecommendationResult]:
        """Enrich scored candidates, preserving the scorer's order."""
        results: list[RecommendationResult] = []
        for rank, item in enumerate(scored, start=1):
            record = self.lookup(item.candidate.name)
            if record is None:
                logger.debug("No catalog match for %r, using defaults", item.candidate.name)
            results.append(self._build(rank, item, record))
        return results

    def _build(
        self,
        rank: int,
        item: ScoredCandidate,
        record: CareerRecord | None,
    ) -> RecommendationResult:
        candidate = item.candidate
        description = candidate.description or (record.description if record else "")

        if record is not None:
            skills = record.skills or GENERIC_SKILLS
            education = record.education or GENERIC_EDUCATION
            salary = record.salary or GENERIC_SALARY
            stream = record.stream or GENERIC_STREAM
            category = record.category
            growth = record.growth_rate or GENERIC_GROWTH
        else:
            title = candidate.name
            skills = tuple(_apply_rules(title, _SKILL_RULES, GENERIC_SKILLS))  # type: ignore[arg-type]
            education = str(_apply_rules(title, _EDUCATION_RULES, GENERIC_EDUCATION))
            salary = str(_apply_rules(title, _SALARY_RULES, GENERIC_SALARY))
            stream = str(_apply_rules(title, _STREAM_RULES, GENERIC_STREAM))
            category = candidate.category or GENERIC_CATEGORY
            growth = GENERIC_GROWTH

        return RecommendationResult(
            rank=rank,
            name=candidate.name,
            description=clean_description(description),
            match_score=item.match_score,
            rationale=item.rationale,
            source_tag=candidate.source_tag,
            external_id=candidate.external_id,
            category=category,
            skills=tuple(skills),
            education_path=education,
            salary_band=salary,
            stream=stream,
            growth_rate=growth,
        )
