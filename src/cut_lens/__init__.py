"""cut-lens: Map free-text meat cut names onto a canonical cut taxonomy."""

from cut_lens.normalization import CutNormalizer, NormalizationConfig, NormalizeResult, normalize_cut
from cut_lens.schema import CategoryStats, CutVariation, NormalizedCut
from cut_lens.stores import CutStore, InMemoryCutStore

__version__ = "0.1.0"

__all__ = [
    "normalize_cut",
    "CategoryStats",
    "CutNormalizer",
    "CutStore",
    "CutVariation",
    "InMemoryCutStore",
    "NormalizationConfig",
    "NormalizeResult",
    "NormalizedCut",
    "__version__",
]
