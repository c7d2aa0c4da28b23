"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from src.recommend.catalog import CareerCatalog, load_catalog
from src.recommend.config import RecommendConfig, reset_recommend_config
from src.recommend.models import SEARCH_TERMS_ADAPTER
from src.recommend.outcome import UpstreamUnavailableError
from src.recommend.resilience import ExternalCallWrapper
from src.recommend.taxonomy import TaxonomyOccupation


class FakeLLM:
    """Scriptable stand-in for the AI text service.

    Each response slot holds a value, an exception to raise, or a list of
    those consumed one per call (the last entry repeats).
    """

    def __init__(self, *, terms=None, ranking=None, text="An encouraging insight.") -> None:
        self.terms = terms
        self.ranking = ranking
        self.text = text
        self.structured_prompts: list[str] = []
        self.text_prompts: list[str] = []

    @staticmethod
    def _next(slot):
        if isinstance(slot, list) and slot and isinstance(slot[0], (BaseException, list)):
            value = slot.pop(0) if len(slot) > 1 else slot[0]
        else:
            value = slot
        if isinstance(value, BaseException):
            raise value
        return value

    async def generate_text(self, prompt: str, system_prompt: str | None = None) -> str:
        self.text_prompts.append(prompt)
        return self._next(self.text)

    async def generate_structured(self, prompt, adapter, system_prompt=None):
        self.structured_prompts.append(prompt)
        if adapter is SEARCH_TERMS_ADAPTER:
            value = self._next(self.terms)
        else:
            value = self._next(self.ranking)
        return adapter.validate_python(value)

    @property
    def calls(self) -> int:
        return len(self.structured_prompts) + len(self.text_prompts)


class FakeTaxonomy:
    """In-memory taxonomy keyed by search term."""

    def __init__(self, results: dict | None = None, default=None) -> None:
        self.results = results or {}
        self.default = default
        self.searched: list[str] = []

    async def search(self, term: str) -> list[TaxonomyOccupation]:
        self.searched.append(term)
        value = self.results.get(term, self.default)
        if isinstance(value, BaseException):
            raise value
        return list(value or [])


def occupation(title: str, description: str = "", uri: str | None = None) -> TaxonomyOccupation:
    return TaxonomyOccupation(
        id=uri or f"http://data.europa.eu/esco/occupation/{title.lower().replace(' ', '-')}",
        title=title,
        description=description or f"{title} description.",
    )


@pytest.fixture(autouse=True)
def _reset_recommend_config():
    reset_recommend_config()
    yield
    reset_recommend_config()


@pytest.fixture
def recommend_config() -> RecommendConfig:
    """Default recommendation config, isolated from any .env file."""
    return RecommendConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def sleep_calls() -> list[float]:
    return []


@pytest.fixture
def wrapper(sleep_calls: list[float]) -> ExternalCallWrapper:
    """Call wrapper whose backoff sleeps are recorded instead of awaited."""

    async def _sleep(delay: float) -> None:
        sleep_calls.append(delay)

    return ExternalCallWrapper(max_attempts=3, base_delay=1.0, timeout=5.0, sleep=_sleep)


@pytest.fixture
def catalog() -> CareerCatalog:
    return load_catalog()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def failing_llm() -> FakeLLM:
    down = UpstreamUnavailableError("AI service unreachable")
    return FakeLLM(terms=down, ranking=down, text=down)


@pytest.fixture
def fake_taxonomy() -> FakeTaxonomy:
    return FakeTaxonomy()


@pytest.fixture
def failing_taxonomy() -> FakeTaxonomy:
    return FakeTaxonomy(default=UpstreamUnavailableError("taxonomy unreachable"))


@pytest.fixture
def make_occupation() -> Callable[..., TaxonomyOccupation]:
    return occupation
