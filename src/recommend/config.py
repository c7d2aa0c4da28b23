"""Configuration settings for the recommendation pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecommendConfig(BaseSettings):
    """Recommendation pipeline configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `RECOMMEND_` prefix or a .env file.

    Example: RECOMMEND_LLM_MODEL=gemini/gemini-2.0-flash
    """

    model_config = SettingsConfigDict(
        env_prefix="RECOMMEND_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM settings
    llm_provider: str = Field(
        default="gemini",
        description="LLM provider (gemini, openai, anthropic, etc.)",
    )
    llm_model: str = Field(
        default="gemini-2.0-flash",
        description="LLM model name",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_reasoning_effort: str | None = Field(
        default=None,
        description="Reasoning effort for supported models",
    )
    llm_timeout: Annotated[float, Field(gt=0)] = Field(
        default=8.0,
        description="Timeout in seconds for a single LLM call",
    )
    llm_max_attempts: Annotated[int, Field(ge=1)] = Field(
        default=3,
        description="Maximum attempts for a rate-limited LLM call",
    )
    llm_base_delay: Annotated[float, Field(ge=0)] = Field(
        default=2.0,
        description="Linear backoff unit in seconds between rate-limited LLM attempts",
    )

    # Taxonomy (ESCO) settings
    taxonomy_base_url: str = Field(
        default="https://ec.europa.eu/esco/api",
        description="Base URL of the occupation taxonomy API",
    )
    taxonomy_language: str = Field(
        default="en",
        description="Language code for taxonomy search results",
    )
    taxonomy_timeout: Annotated[float, Field(gt=0)] = Field(
        default=8.0,
        description="Timeout in seconds for a single taxonomy search",
    )
    taxonomy_max_attempts: Annotated[int, Field(ge=1)] = Field(
        default=2,
        description="Maximum attempts for a rate-limited taxonomy search",
    )
    taxonomy_base_delay: Annotated[float, Field(ge=0)] = Field(
        default=1.0,
        description="Linear backoff unit in seconds between rate-limited searches",
    )
    taxonomy_search_limit: Annotated[int, Field(gt=0)] = Field(
        default=5,
        description="Number of occupations requested per search",
    )
    results_per_term: Annotated[int, Field(gt=0)] = Field(
        default=5,
        description="Number of search results kept per search term",
    )

    # Pipeline sizing
    max_search_terms: Annotated[int, Field(ge=1, le=3)] = Field(
        default=3,
        description="Maximum number of search terms sent to the taxonomy",
    )
    max_candidates_to_score: Annotated[int, Field(gt=0)] = Field(
        default=15,
        description="Maximum number of candidates presented to the AI ranker",
    )
    top_n: Annotated[int, Field(ge=1, le=5)] = Field(
        default=5,
        description="Number of recommendations returned",
    )

    # Deterministic scoring
    base_score: Annotated[int, Field(ge=0, le=100)] = Field(
        default=65,
        description="Starting score for every candidate in fallback scoring",
    )
    category_weight_factor: Annotated[float, Field(ge=0)] = Field(
        default=3.0,
        description="Points per unit of signal weight for a matching category",
    )
    category_bonus_cap: Annotated[float, Field(ge=0)] = Field(
        default=20.0,
        description="Upper bound for the total category-overlap bonus",
    )
    agreement_bonus_per_answer: Annotated[float, Field(ge=0)] = Field(
        default=1.5,
        description="Points per agreed quiz answer",
    )
    agreement_bonus_cap: Annotated[float, Field(ge=0, le=15)] = Field(
        default=15.0,
        description="Upper bound for the agreement bonus",
    )
    fallback_score_cap: Annotated[int, Field(ge=0, le=100)] = Field(
        default=97,
        description="Highest score the fallback scorer may assign",
    )
    max_match_score: Annotated[int, Field(ge=0, le=100)] = Field(
        default=98,
        description="Highest score any recommendation may carry",
    )

    # Catalog name matching
    fuzzy_name_match: bool = Field(
        default=True,
        description="Enable similarity matching after exact/prefix/substring lookup",
    )
    name_match_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.85,
        description="Similarity threshold for fuzzy catalog lookup",
    )
    name_match_min_length: Annotated[int, Field(ge=1)] = Field(
        default=4,
        description="Shortest name allowed to take part in substring matching",
    )
    catalog_path: Path | None = Field(
        default=None,
        description="Optional YAML/JSON career catalog (bundled catalog when unset)",
    )

    # Insight
    insight_timeout: Annotated[float, Field(gt=0)] = Field(
        default=8.0,
        description="Timeout in seconds for the insight LLM call",
    )
    total_questions: Annotated[int, Field(gt=0)] = Field(
        default=30,
        description="Number of quiz questions shown to the user",
    )

    @model_validator(mode="after")
    def validate_score_caps(self) -> RecommendConfig:
        """Ensure the fallback cap never exceeds the global score cap."""
        if self.fallback_score_cap > self.max_match_score:
            raise ValueError(
                "fallback_score_cap must not exceed max_match_score "
                f"(fallback_score_cap={self.fallback_score_cap}, "
                f"max_match_score={self.max_match_score})."
            )
        if self.base_score > self.fallback_score_cap:
            raise ValueError(
                "base_score must not exceed fallback_score_cap "
                f"(base_score={self.base_score}, "
                f"fallback_score_cap={self.fallback_score_cap})."
            )
        return self


# Singleton instance for easy import
_recommend_config: RecommendConfig | None = None


def get_recommend_config() -> RecommendConfig:
    """Get the recommendation configuration singleton."""
    global _recommend_config
    if _recommend_config is None:
        _recommend_config = RecommendConfig()
    return _recommend_config


def reset_recommend_config() -> None:
    """Reset the recommendation configuration singleton (useful for testing)."""
    global _recommend_config
    _recommend_config = None
