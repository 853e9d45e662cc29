"""Normalization utilities for cut-lens."""

from cut_lens.normalization.engine import CutNormalizer, NormalizationConfig, normalize_cut
from cut_lens.normalization.matcher import CutMatcher
from cut_lens.normalization.similarity import HybridScorer, JaroWinklerScorer, SimilarityScorer, preprocess, score
from cut_lens.normalization.types import (
    BulkImportOptions,
    BulkImportResponse,
    BulkImportRow,
    CutAnalysisResult,
    CutCandidate,
    CutSuggestionsResponse,
    NormalizeResult,
)

__all__ = [
    "BulkImportOptions",
    "BulkImportResponse",
    "BulkImportRow",
    "CutAnalysisResult",
    "CutCandidate",
    "CutMatcher",
    "CutNormalizer",
    "CutSuggestionsResponse",
    "HybridScorer",
    "JaroWinklerScorer",
    "NormalizationConfig",
    "NormalizeResult",
    "SimilarityScorer",
    "normalize_cut",
    "preprocess",
    "score",
]
