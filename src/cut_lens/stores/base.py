"""Base store interface for the cut taxonomy and its variations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from cut_lens.schema import CategoryStats, CutVariation, NormalizedCut

if TYPE_CHECKING:
    from cut_lens.stores.memory import InMemoryCutStore

CUT_FIELDS = (
    "name",
    "category",
    "cut_type",
    "subcategory",
    "description",
    "is_premium",
    "typical_weight_range",
    "cooking_methods",
)


class CutStore(ABC):
    """Persistence collaborator for normalized cuts and cut variations.

    Implementations enforce two uniqueness constraints:
    (category, preprocessed name) for cuts and preprocessed original name
    for variations. Violations raise ConflictError. Calls that exceed
    ``timeout_sec`` raise StoreTimeoutError.
    """

    timeout_sec: float | None = None

    @abstractmethod
    def get_cut(self, cut_id: int) -> NormalizedCut | None:
        pass

    @abstractmethod
    def find_cut(self, name: str, category: str | None = None) -> NormalizedCut | None:
        """Look up a cut by preprocessed name, optionally within a category."""
        pass

    @abstractmethod
    def list_cuts(self, category: str | None = None) -> list[NormalizedCut]:
        pass

    @abstractmethod
    def create_cut(
        self,
        *,
        name: str,
        category: str,
        cut_type: str | None = None,
        subcategory: str | None = None,
        description: str | None = None,
        is_premium: bool = False,
        typical_weight_range: str | None = None,
        cooking_methods: list[str] | None = None,
    ) -> NormalizedCut:
        pass

    @abstractmethod
    def update_cut(self, cut_id: int, **changes: object) -> NormalizedCut:
        pass

    @abstractmethod
    def delete_cut(self, cut_id: int) -> None:
        """Delete a cut. Raises ConflictError while variations reference it."""
        pass

    @abstractmethod
    def get_variation(self, variation_id: int) -> CutVariation | None:
        pass

    @abstractmethod
    def find_variation(self, name: str) -> CutVariation | None:
        """Look up a variation by preprocessed original name."""
        pass

    @abstractmethod
    def list_variations(
        self,
        *,
        category: str | None = None,
        normalized_cut_id: int | None = None,
        verified: bool | None = None,
    ) -> list[CutVariation]:
        pass

    @abstractmethod
    def create_variation(
        self,
        *,
        original_name: str,
        normalized_cut_id: int,
        confidence_score: float,
        source: str = "manual",
        verified: bool = False,
        created_by: int | None = None,
    ) -> CutVariation:
        pass

    @abstractmethod
    def update_variation(
        self,
        variation_id: int,
        *,
        normalized_cut_id: int | None = None,
        confidence_score: float | None = None,
        verified: bool | None = None,
    ) -> CutVariation:
        pass

    @abstractmethod
    def delete_variation(self, variation_id: int) -> None:
        pass

    @abstractmethod
    def stats(self) -> list[CategoryStats]:
        pass

    def snapshot(self) -> InMemoryCutStore:
        """Copy current contents into a detached in-memory store."""

        from cut_lens.stores.memory import InMemoryCutStore

        return InMemoryCutStore.from_records(
            self.list_cuts(),
            self.list_variations(),
            timeout_sec=self.timeout_sec,
        )


def check_cut_changes(changes: dict[str, object]) -> None:
    unknown = set(changes) - set(CUT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown cut fields: {', '.join(sorted(unknown))}")
