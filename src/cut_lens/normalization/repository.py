"""Seed taxonomy repository for normalization."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib import import_module

from cut_lens.exceptions import ConflictError
from cut_lens.normalization.similarity import preprocess
from cut_lens.schema import CUT_TYPES, MEAT_CATEGORIES
from cut_lens.stores.base import CutStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedCut:
    name: str
    category: str
    cut_type: str | None = None
    is_premium: bool = False
    cooking_methods: list[str] = field(default_factory=list)
    variations: list[str] = field(default_factory=list)


class TaxonomyRepository:
    """Loads seed cuts, detection keywords and matching corrections from packaged data."""

    def __init__(self, version: str = "v1"):
        self.version = version
        module = import_module(f"cut_lens.normalization.data.{version}")
        self.cuts: list[SeedCut] = [SeedCut(**item) for item in module.CUTS]
        self.category_keywords: dict[str, list[str]] = module.CATEGORY_KEYWORDS
        self.cut_type_keywords: dict[str, list[str]] = module.CUT_TYPE_KEYWORDS
        self.premium_keywords: list[str] = module.PREMIUM_KEYWORDS
        self.whole_word_keywords: set[str] = {preprocess(k) for k in module.WHOLE_WORD_KEYWORDS}
        self.corrections: dict[str, list[str]] = {
            preprocess(wrong): preprocess(right).split() for wrong, right in module.CORRECTIONS.items()
        }
        noise = {tuple(preprocess(word).split()) for word in module.NOISE_WORDS}
        self.noise_phrases: list[tuple[str, ...]] = sorted((p for p in noise if p), key=len, reverse=True)

    def detect_category(self, text: str) -> str | None:
        return self._first_keyword_hit(self.category_keywords, text)

    def detect_cut_type(self, text: str) -> str | None:
        return self._first_keyword_hit(self.cut_type_keywords, text)

    def is_premium(self, text: str) -> bool:
        cleaned = preprocess(text)
        return any(self._has_keyword(cleaned, keyword) for keyword in self.premium_keywords)

    def clean_for_matching(self, text: str) -> str:
        """Drop noise words and apply spelling/language corrections.

        "חזה עוף טרי" becomes "חזה עוף" and "chicken breast" becomes
        "עוף חזה". Returns "" when nothing but noise is left.
        """

        source = preprocess(text).split()
        kept: list[str] = []
        i = 0
        while i < len(source):
            phrase = next((p for p in self.noise_phrases if tuple(source[i : i + len(p)]) == p), None)
            if phrase is not None:
                i += len(phrase)
                continue
            kept.extend(self.corrections.get(source[i], [source[i]]))
            i += 1

        seen: set[str] = set()
        result = []
        for token in kept:
            if token not in seen:
                seen.add(token)
                result.append(token)
        return " ".join(result)

    def seed(self, store: CutStore) -> tuple[int, int]:
        """Load the seed taxonomy into a store. Existing rows are kept.

        Returns the number of cuts and variations created.
        """

        cuts_created = 0
        variations_created = 0
        for seed in self.cuts:
            cut = store.find_cut(seed.name, seed.category)
            if cut is None:
                cut = store.create_cut(
                    name=seed.name,
                    category=seed.category,
                    cut_type=seed.cut_type,
                    is_premium=seed.is_premium,
                    cooking_methods=seed.cooking_methods,
                )
                cuts_created += 1
            for name in seed.variations:
                if store.find_variation(name) is not None:
                    continue
                try:
                    store.create_variation(
                        original_name=name,
                        normalized_cut_id=cut.id,
                        confidence_score=1.0,
                        source="manual",
                        verified=True,
                    )
                except ConflictError:
                    logger.warning("seed variation already mapped: %s", name)
                    continue
                variations_created += 1

        logger.info(
            "seeded taxonomy %s: %d cuts, %d variations", self.version, cuts_created, variations_created
        )
        return cuts_created, variations_created

    def validate(self) -> list[str]:
        """Return consistency problems in the seed data."""

        problems: list[str] = []
        canonical: dict[str, str] = {}
        seen_cuts: set[tuple[str, str]] = set()
        for seed in self.cuts:
            if seed.category not in MEAT_CATEGORIES:
                problems.append(f"unknown category for {seed.name}: {seed.category}")
            if seed.cut_type is not None and seed.cut_type not in CUT_TYPES:
                problems.append(f"unknown cut type for {seed.name}: {seed.cut_type}")
            signature = (seed.category, preprocess(seed.name))
            if signature in seen_cuts:
                problems.append(f"duplicate cut: {seed.category}/{seed.name}")
            seen_cuts.add(signature)
            canonical[preprocess(seed.name)] = seed.name

        owners: dict[str, str] = {}
        for seed in self.cuts:
            for name in seed.variations:
                key = preprocess(name)
                if key in canonical and canonical[key] != seed.name:
                    problems.append(f"variation {name!r} of {seed.name} collides with cut {canonical[key]}")
                if key in owners and owners[key] != seed.name:
                    problems.append(f"ambiguous variation {name!r}: {owners[key]} vs {seed.name}")
                owners[key] = seed.name
        return problems

    def _first_keyword_hit(self, table: dict[str, list[str]], text: str) -> str | None:
        cleaned = preprocess(text)
        if not cleaned:
            return None
        for value, keywords in table.items():
            for keyword in keywords:
                if self._has_keyword(cleaned, keyword):
                    return value
        return None

    def _has_keyword(self, cleaned: str, keyword: str) -> bool:
        key = preprocess(keyword)
        if key in self.whole_word_keywords:
            return f" {key} " in f" {cleaned} "
        return key in cleaned
