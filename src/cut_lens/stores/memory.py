"""Thread-safe in-memory store."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterable, Iterator

from cut_lens.exceptions import ConflictError, NotFoundError, StoreTimeoutError
from cut_lens.normalization.similarity import preprocess
from cut_lens.schema import CategoryStats, CutVariation, NormalizedCut
from cut_lens.stores.base import CutStore, check_cut_changes


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCutStore(CutStore):
    """Dict-backed store with the same constraints as the database schema."""

    def __init__(self, timeout_sec: float | None = 5.0):
        self.timeout_sec = timeout_sec
        self._lock = threading.RLock()
        self._cuts: dict[int, NormalizedCut] = {}
        self._variations: dict[int, CutVariation] = {}
        self._cut_keys: dict[tuple[str, str], int] = {}
        self._variation_keys: dict[str, int] = {}
        self._next_cut_id = 1
        self._next_variation_id = 1

    @classmethod
    def from_records(
        cls,
        cuts: Iterable[NormalizedCut],
        variations: Iterable[CutVariation],
        *,
        timeout_sec: float | None = 5.0,
    ) -> InMemoryCutStore:
        """Build a store holding the given rows with their ids preserved."""

        store = cls(timeout_sec=timeout_sec)
        for cut in cuts:
            store._cuts[cut.id] = cut.model_copy(deep=True)
            store._cut_keys[(cut.category, preprocess(cut.name))] = cut.id
            store._next_cut_id = max(store._next_cut_id, cut.id + 1)
        for variation in variations:
            store._variations[variation.id] = variation.model_copy(deep=True)
            store._variation_keys[preprocess(variation.original_name)] = variation.id
            store._next_variation_id = max(store._next_variation_id, variation.id + 1)
        return store

    @contextmanager
    def _locked(self) -> Iterator[None]:
        timeout = -1 if self.timeout_sec is None else self.timeout_sec
        if not self._lock.acquire(timeout=timeout):
            raise StoreTimeoutError(f"store lock not acquired within {self.timeout_sec}s")
        try:
            yield
        finally:
            self._lock.release()

    def get_cut(self, cut_id: int) -> NormalizedCut | None:
        with self._locked():
            cut = self._cuts.get(cut_id)
            return cut.model_copy(deep=True) if cut else None

    def find_cut(self, name: str, category: str | None = None) -> NormalizedCut | None:
        key = preprocess(name)
        with self._locked():
            if category is not None:
                cut_id = self._cut_keys.get((category, key))
            else:
                ids = [cid for (_, k), cid in self._cut_keys.items() if k == key]
                cut_id = min(ids) if ids else None
            if cut_id is None:
                return None
            return self._cuts[cut_id].model_copy(deep=True)

    def list_cuts(self, category: str | None = None) -> list[NormalizedCut]:
        with self._locked():
            return [
                cut.model_copy(deep=True)
                for cut_id, cut in sorted(self._cuts.items())
                if category is None or cut.category == category
            ]

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
        now = _utc_now()
        with self._locked():
            cut = NormalizedCut(
                id=self._next_cut_id,
                name=name,
                category=category,
                cut_type=cut_type,
                subcategory=subcategory,
                description=description,
                is_premium=is_premium,
                typical_weight_range=typical_weight_range,
                cooking_methods=list(cooking_methods or []),
                created_at=now,
                updated_at=now,
            )
            key = (cut.category, preprocess(cut.name))
            if key in self._cut_keys:
                raise ConflictError(f"cut already exists: {cut.category}/{cut.name}")
            self._cuts[cut.id] = cut
            self._cut_keys[key] = cut.id
            self._next_cut_id += 1
            return cut.model_copy(deep=True)

    def update_cut(self, cut_id: int, **changes: object) -> NormalizedCut:
        check_cut_changes(changes)
        with self._locked():
            current = self._cuts.get(cut_id)
            if current is None:
                raise NotFoundError(f"normalized cut not found: {cut_id}")
            data = current.model_dump()
            data.update(changes)
            data["updated_at"] = _utc_now()
            updated = NormalizedCut.model_validate(data)

            old_key = (current.category, preprocess(current.name))
            new_key = (updated.category, preprocess(updated.name))
            if new_key != old_key:
                if new_key in self._cut_keys:
                    raise ConflictError(f"cut already exists: {updated.category}/{updated.name}")
                del self._cut_keys[old_key]
                self._cut_keys[new_key] = cut_id
            self._cuts[cut_id] = updated
            return updated.model_copy(deep=True)

    def delete_cut(self, cut_id: int) -> None:
        with self._locked():
            cut = self._cuts.get(cut_id)
            if cut is None:
                raise NotFoundError(f"normalized cut not found: {cut_id}")
            referenced = sum(1 for v in self._variations.values() if v.normalized_cut_id == cut_id)
            if referenced:
                raise ConflictError(f"cut {cut_id} is referenced by {referenced} variations")
            del self._cut_keys[(cut.category, preprocess(cut.name))]
            del self._cuts[cut_id]

    def get_variation(self, variation_id: int) -> CutVariation | None:
        with self._locked():
            variation = self._variations.get(variation_id)
            return variation.model_copy(deep=True) if variation else None

    def find_variation(self, name: str) -> CutVariation | None:
        key = preprocess(name)
        with self._locked():
            variation_id = self._variation_keys.get(key)
            if variation_id is None:
                return None
            return self._variations[variation_id].model_copy(deep=True)

    def list_variations(
        self,
        *,
        category: str | None = None,
        normalized_cut_id: int | None = None,
        verified: bool | None = None,
    ) -> list[CutVariation]:
        with self._locked():
            rows: list[CutVariation] = []
            for _, variation in sorted(self._variations.items()):
                if normalized_cut_id is not None and variation.normalized_cut_id != normalized_cut_id:
                    continue
                if verified is not None and variation.verified != verified:
                    continue
                if category is not None and self._cuts[variation.normalized_cut_id].category != category:
                    continue
                rows.append(variation.model_copy(deep=True))
            return rows

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
        key = preprocess(original_name)
        now = _utc_now()
        with self._locked():
            if normalized_cut_id not in self._cuts:
                raise NotFoundError(f"normalized cut not found: {normalized_cut_id}")
            if key in self._variation_keys:
                raise ConflictError(f"variation already exists: {original_name}")
            variation = CutVariation(
                id=self._next_variation_id,
                original_name=original_name,
                normalized_cut_id=normalized_cut_id,
                confidence_score=confidence_score,
                source=source,
                verified=verified,
                created_by=created_by,
                created_at=now,
                updated_at=now,
            )
            self._variations[variation.id] = variation
            self._variation_keys[key] = variation.id
            self._next_variation_id += 1
            return variation.model_copy(deep=True)

    def update_variation(
        self,
        variation_id: int,
        *,
        normalized_cut_id: int | None = None,
        confidence_score: float | None = None,
        verified: bool | None = None,
    ) -> CutVariation:
        with self._locked():
            current = self._variations.get(variation_id)
            if current is None:
                raise NotFoundError(f"variation not found: {variation_id}")
            if normalized_cut_id is not None and normalized_cut_id not in self._cuts:
                raise NotFoundError(f"normalized cut not found: {normalized_cut_id}")
            data = current.model_dump()
            if normalized_cut_id is not None:
                data["normalized_cut_id"] = normalized_cut_id
            if confidence_score is not None:
                data["confidence_score"] = confidence_score
            if verified is not None:
                data["verified"] = verified
            data["updated_at"] = _utc_now()
            updated = CutVariation.model_validate(data)
            self._variations[variation_id] = updated
            return updated.model_copy(deep=True)

    def delete_variation(self, variation_id: int) -> None:
        with self._locked():
            variation = self._variations.pop(variation_id, None)
            if variation is None:
                raise NotFoundError(f"variation not found: {variation_id}")
            del self._variation_keys[preprocess(variation.original_name)]

    def stats(self) -> list[CategoryStats]:
        with self._locked():
            by_category: dict[str, dict] = {}
            for cut in self._cuts.values():
                entry = by_category.setdefault(cut.category, {"cuts": 0, "scores": [], "verified": 0})
                entry["cuts"] += 1
            for variation in self._variations.values():
                entry = by_category[self._cuts[variation.normalized_cut_id].category]
                entry["scores"].append(variation.confidence_score)
                entry["verified"] += int(variation.verified)

        return [
            CategoryStats(
                category=category,
                normalized_cuts_count=entry["cuts"],
                variations_count=len(entry["scores"]),
                avg_confidence=round(sum(entry["scores"]) / len(entry["scores"]), 4) if entry["scores"] else None,
                verified_variations=entry["verified"],
            )
            for category, entry in sorted(by_category.items())
        ]
