"""Candidate generation and ranking for raw cut names."""

from __future__ import annotations

from typing import Callable

from cut_lens.normalization.similarity import HybridScorer, SimilarityScorer, preprocess
from cut_lens.normalization.types import MATCH_TYPE_RANK, CutCandidate
from cut_lens.schema import NormalizedCut
from cut_lens.stores.base import CutStore


class CutMatcher:
    """Variation-first matcher with an exact and a fuzzy fallback.

    Lookup order: known variation, exact canonical name, fuzzy similarity
    against canonical names (and known variations when enabled). Results
    are merged per cut keeping the strongest entry. When a ``rewrite``
    callable is given, its output is looked up as well as the raw name.
    The confidence floor applies to fuzzy hits only.
    """

    def __init__(
        self,
        store: CutStore,
        scorer: SimilarityScorer | None = None,
        *,
        match_variations: bool = True,
        rewrite: Callable[[str], str] | None = None,
    ):
        self.store = store
        self.scorer = scorer or HybridScorer()
        self.match_variations = match_variations
        self.rewrite = rewrite

    def find_candidates(
        self,
        raw_name: str,
        category: str | None = None,
        limit: int = 5,
        min_confidence: float = 0.3,
    ) -> list[CutCandidate]:
        key = preprocess(raw_name)
        if not key or limit <= 0:
            return []
        keys = [key]
        if self.rewrite is not None:
            rewritten = preprocess(self.rewrite(raw_name))
            if rewritten and rewritten != key:
                keys.append(rewritten)

        best: dict[int, CutCandidate] = {}
        cuts = self.store.list_cuts(category)
        for lookup in keys:
            for candidate in self._variation_hit(lookup, category):
                _offer(best, candidate)
            for candidate in self._exact_hits(lookup, cuts):
                _offer(best, candidate)
            for candidate in self._fuzzy_hits(lookup, cuts, category, min_confidence):
                _offer(best, candidate)

        ranked = sorted(best.values(), key=_sort_key)
        return ranked[:limit]

    def _variation_hit(self, name: str, category: str | None) -> list[CutCandidate]:
        variation = self.store.find_variation(name)
        if variation is None:
            return []
        cut = self.store.get_cut(variation.normalized_cut_id)
        if cut is None or (category is not None and cut.category != category):
            return []
        return [
            CutCandidate(
                cut=cut,
                confidence=variation.effective_confidence,
                match_type="variation",
                matched_text=variation.original_name,
                variation=variation,
            )
        ]

    def _exact_hits(self, key: str, cuts: list[NormalizedCut]) -> list[CutCandidate]:
        return [
            CutCandidate(cut=cut, confidence=1.0, match_type="exact", matched_text=cut.name)
            for cut in cuts
            if preprocess(cut.name) == key
        ]

    def _fuzzy_hits(
        self,
        key: str,
        cuts: list[NormalizedCut],
        category: str | None,
        min_confidence: float,
    ) -> list[CutCandidate]:
        hits: list[CutCandidate] = []
        for cut in cuts:
            if preprocess(cut.name) == key:
                continue
            ratio = self.scorer.score(key, cut.name)
            if ratio >= min_confidence:
                hits.append(
                    CutCandidate(cut=cut, confidence=ratio, match_type="fuzzy", matched_text=cut.name)
                )

        if not self.match_variations:
            return hits

        cut_index = {cut.id: cut for cut in cuts}
        for variation in self.store.list_variations(category=category):
            cut = cut_index.get(variation.normalized_cut_id)
            if cut is None or preprocess(variation.original_name) == key:
                continue
            # An unverified variation is only as trustworthy as its own score.
            ratio = self.scorer.score(key, variation.original_name) * variation.effective_confidence
            if ratio >= min_confidence:
                hits.append(
                    CutCandidate(
                        cut=cut,
                        confidence=ratio,
                        match_type="fuzzy",
                        matched_text=variation.original_name,
                        variation=variation,
                    )
                )
        return hits


def has_exact_match(candidates: list[CutCandidate]) -> bool:
    return any(c.match_type in {"exact", "variation"} for c in candidates)


def _rank(candidate: CutCandidate) -> tuple[float, int]:
    return (-candidate.confidence, MATCH_TYPE_RANK[candidate.match_type])


def _offer(best: dict[int, CutCandidate], candidate: CutCandidate) -> None:
    current = best.get(candidate.cut.id)
    if current is None or _rank(candidate) < _rank(current):
        best[candidate.cut.id] = candidate


def _sort_key(candidate: CutCandidate) -> tuple[float, int, int, int]:
    return (
        -candidate.confidence,
        MATCH_TYPE_RANK[candidate.match_type],
        len(candidate.cut.name),
        candidate.cut.id,
    )
