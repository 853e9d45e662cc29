"""String similarity scoring for cut names.

Every scorer compares preprocessed text: diacritics (including Hebrew niqqud)
stripped, punctuation turned into spaces, whitespace collapsed, case folded.
Scorers are pure and hold no mutable state, so one instance can be shared
across threads.
"""

from __future__ import annotations

import re
import unicodedata
from abc import ABC, abstractmethod

from rapidfuzz.distance import JaroWinkler, Levenshtein


def preprocess(value: str | None) -> str:
    """Fold a raw name into its comparison form."""

    if not value:
        return ""
    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = unicodedata.normalize("NFKC", text).casefold()
    text = text.replace("_", " ").replace("-", " ")
    text = re.sub(r"[^\w\s%]", " ", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def tokens(value: str) -> set[str]:
    return {token for token in value.split(" ") if token}


def token_set_similarity(a: str, b: str) -> float:
    """Jaccard overlap of whitespace tokens. Inputs must be preprocessed."""

    left, right = tokens(a), tokens(b)
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


def edit_similarity(a: str, b: str) -> float:
    """1 - normalized Levenshtein distance. Inputs must be preprocessed."""

    if not a or not b:
        return 0.0
    return Levenshtein.normalized_similarity(a, b)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class SimilarityScorer(ABC):
    """Scores how likely two cut names refer to the same cut."""

    name: str = "base"

    def score(self, a: str, b: str) -> float:
        left, right = preprocess(a), preprocess(b)
        if not left or not right:
            return 0.0
        if left == right:
            return 1.0
        return _clamp(self.score_preprocessed(left, right))

    @abstractmethod
    def score_preprocessed(self, a: str, b: str) -> float:
        """Score two non-empty, already preprocessed, unequal strings."""
        pass


class HybridScorer(SimilarityScorer):
    """Max of token-set overlap and edit-distance similarity.

    Token overlap catches reordered or extra words ("אנטריקוט בקר" vs
    "בקר אנטריקוט"); edit distance catches typos within a word
    ("אנטרקוט" vs "אנטריקוט"). Taking the max treats both kinds of
    near-miss equally.
    """

    name = "hybrid"

    def score_preprocessed(self, a: str, b: str) -> float:
        return max(token_set_similarity(a, b), edit_similarity(a, b))


class JaroWinklerScorer(SimilarityScorer):
    """Prefix-weighted alternative, better on short abbreviated names."""

    name = "jaro_winkler"

    def score_preprocessed(self, a: str, b: str) -> float:
        return max(token_set_similarity(a, b), JaroWinkler.normalized_similarity(a, b))


SCORERS: dict[str, type[SimilarityScorer]] = {
    HybridScorer.name: HybridScorer,
    JaroWinklerScorer.name: JaroWinklerScorer,
}


def build_scorer(name: str | None = None) -> SimilarityScorer:
    scorer_name = (name or HybridScorer.name).strip().lower()
    try:
        return SCORERS[scorer_name]()
    except KeyError:
        raise ValueError(f"Unsupported similarity scorer: {scorer_name}") from None


def score(a: str, b: str) -> float:
    """Score two raw names with the default scorer."""

    return _DEFAULT_SCORER.score(a, b)


_DEFAULT_SCORER = HybridScorer()
