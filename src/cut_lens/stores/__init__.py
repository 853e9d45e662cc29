"""Stores for cut-lens.

PostgresCutStore lives in ``cut_lens.stores.postgres`` and is imported on
demand so the in-memory path works without a database driver loaded.
"""

from cut_lens.stores.base import CutStore
from cut_lens.stores.memory import InMemoryCutStore

__all__ = ["CutStore", "InMemoryCutStore"]
