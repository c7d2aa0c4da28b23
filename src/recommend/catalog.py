"""Static career catalog used for enrichment and fallback recommendations."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.recommend.models import Candidate, SourceTag, normalize_name

BUNDLED_CATALOG_PATH = Path(__file__).parent / "data" / "careers.yaml"


class CareerRecord(BaseModel):
    """One curated career with its supplementary fields."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Career name")
    category: str = Field(..., description="Interest category")
    description: str = Field(default="", description="Short description")
    salary: str = Field(default="", description="Salary band")
    skills: tuple[str, ...] = Field(default=(), description="Key skills")
    education: str = Field(default="", description="Typical education path")
    stream: str = Field(default="Any", description="School stream")
    growth_rate: str = Field(default="Growing", description="Demand growth")

    def to_candidate(self) -> Candidate:
        return Candidate(
            name=self.name,
            description=self.description,
            source_tag=SourceTag.STATIC_FALLBACK,
            category=self.category,
        )


class CareerCatalog:
    """Read-only, ordered collection of curated careers.

    Safe for concurrent reads; nothing mutates a catalog after construction.
    """

    def __init__(self, records: list[CareerRecord] | tuple[CareerRecord, ...]) -> None:
        unique: list[CareerRecord] = []
        seen: set[str] = set()
        for record in records:
            key = normalize_name(record.name)
            if key in seen:
                raise ValueError(f"Duplicate career in catalog: {record.name}")
            seen.add(key)
            unique.append(record)
        self._records: tuple[CareerRecord, ...] = tuple(unique)
        self._by_name = {record.name: record for record in self._records}

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CareerRecord]:
        return iter(self._records)

    @property
    def records(self) -> tuple[CareerRecord, ...]:
        return self._records

    def get(self, name: str) -> CareerRecord | None:
        """Return the record with exactly this name, if any."""
        return self._by_name.get(name)

    def to_candidates(self) -> list[Candidate]:
        """Return every career as a static-fallback candidate, in catalog order."""
        return [record.to_candidate() for record in self._records]

    @classmethod
    def from_data(cls, data: object, *, source: str = "<data>") -> CareerCatalog:
        """Build a catalog from a ``{"careers": [...]}`` mapping or a list."""
        if isinstance(data, dict):
            data = data.get("careers")
        if not isinstance(data, list):
            raise ValueError(f"Career catalog must contain a list of careers: {source}")

        try:
            records = [CareerRecord.model_validate(item) for item in data]
        except ValidationError as e:
            raise ValueError(f"Invalid career catalog: {source}: {e}") from e
        return cls(records)


def load_catalog(path: Path | str | None = None) -> CareerCatalog:
    """Load a career catalog from YAML or JSON (bundled catalog by default)."""
    catalog_path = Path(path) if path is not None else BUNDLED_CATALOG_PATH
    if not catalog_path.exists():
        raise FileNotFoundError(f"Career catalog not found: {catalog_path}")

    raw = catalog_path.read_text(encoding="utf-8")
    if catalog_path.suffix.lower() == ".json":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON catalog: {catalog_path}") from e
    else:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML catalog: {catalog_path}") from e

    return CareerCatalog.from_data(data, source=str(catalog_path))
