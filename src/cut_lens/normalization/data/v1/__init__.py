"""Seed taxonomy v1."""

from cut_lens.normalization.data.v1.corrections import CORRECTIONS, NOISE_WORDS
from cut_lens.normalization.data.v1.cuts import CUTS
from cut_lens.normalization.data.v1.keywords import (
    CATEGORY_KEYWORDS,
    CUT_TYPE_KEYWORDS,
    PREMIUM_KEYWORDS,
    WHOLE_WORD_KEYWORDS,
)

__all__ = [
    "CORRECTIONS",
    "NOISE_WORDS",
    "CUTS",
    "CATEGORY_KEYWORDS",
    "CUT_TYPE_KEYWORDS",
    "PREMIUM_KEYWORDS",
    "WHOLE_WORD_KEYWORDS",
]
