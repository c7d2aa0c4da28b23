"""Career name matching against the static catalog."""

from __future__ import annotations

import re
from difflib import SequenceMatcher

from src.recommend.catalog import CareerCatalog, CareerRecord
from src.recommend.models import normalize_name


def _comparable(name: str) -> str:
    """Normalize a career name and drop parenthesized qualifiers.

    "Teacher (High School)" and "Civil Services (IAS)" compare as
    "teacher" and "civil services".
    """
    value = normalize_name(name)
    value = re.sub(r"\([^)]*\)", "", value)
    value = re.sub(r"\s+", " ", value)
    return value.strip(" ,;-")


def find_career(
    name: str,
    catalog: CareerCatalog,
    *,
    fuzzy: bool = True,
    threshold: float = 0.85,
    min_length: int = 4,
) -> CareerRecord | None:
    """Find the catalog record for a career name.

    Matching tiers, first hit wins (catalog order within a tier):
    exact name, case-insensitive name, prefix, substring containment, and
    optionally difflib similarity above ``threshold``.
    """
    exact = catalog.get(name)
    if exact is not None:
        return exact

    target = _comparable(name)
    if not target:
        return None

    records = [(record, _comparable(record.name)) for record in catalog]

    for record, candidate in records:
        if candidate == target:
            return record

    for record, candidate in records:
        if not candidate:
            continue
        if target.startswith(candidate) or candidate.startswith(target):
            if min(len(candidate), len(target)) >= min_length:
                return record

    for record, candidate in records:
        if min(len(candidate), len(target)) < min_length:
            continue
        if candidate in target or target in candidate:
            return record

    if not fuzzy:
        return None

    best: CareerRecord | None = None
    best_ratio = 0.0
    for record, candidate in records:
        ratio = SequenceMatcher(None, target, candidate).ratio()
        if ratio >= threshold and ratio > best_ratio:
            best, best_ratio = record, ratio
    return best
