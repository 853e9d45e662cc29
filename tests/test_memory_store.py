"""Tests for the in-memory store."""

import threading

import pytest

from cut_lens.exceptions import ConflictError, NotFoundError, StoreTimeoutError
from cut_lens.stores import InMemoryCutStore


def test_cut_name_unique_within_category(store):
    store.create_cut(name="פילה", category="בקר")

    with pytest.raises(ConflictError):
        store.create_cut(name="  פִילה ", category="בקר")

    other = store.create_cut(name="פילה", category="דגים")
    assert other.id == 2


def test_variation_lookup_is_normalization_insensitive(store):
    cut = store.create_cut(name="Ribeye", category="בקר")
    store.create_variation(original_name="Rib-Eye", normalized_cut_id=cut.id, confidence_score=0.9)

    assert store.find_variation("rib eye").normalized_cut_id == cut.id
    with pytest.raises(ConflictError):
        store.create_variation(original_name="RIB EYE", normalized_cut_id=cut.id, confidence_score=0.9)


def test_variation_requires_existing_cut(store):
    with pytest.raises(NotFoundError):
        store.create_variation(original_name="x", normalized_cut_id=99, confidence_score=0.5)


def test_delete_cut_rejected_while_referenced(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")
    variation = store.create_variation(original_name="אנטרקוט", normalized_cut_id=cut.id, confidence_score=1.0)

    with pytest.raises(ConflictError):
        store.delete_cut(cut.id)

    store.delete_variation(variation.id)
    store.delete_cut(cut.id)
    assert store.get_cut(cut.id) is None
    with pytest.raises(NotFoundError):
        store.delete_cut(cut.id)


def test_update_cut_rekeys_name(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")

    updated = store.update_cut(cut.id, name="אנטריקוט מיושן", is_premium=True)

    assert updated.is_premium is True
    assert store.find_cut("אנטריקוט") is None
    assert store.find_cut("אנטריקוט מיושן", "בקר").id == cut.id


def test_update_cut_rejects_unknown_fields(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")

    with pytest.raises(ValueError):
        store.update_cut(cut.id, colour="red")


def test_list_variations_filters(seeded_store):
    beef = seeded_store.list_variations(category="בקר")
    first_cut = seeded_store.list_cuts()[0]

    assert beef
    assert all(seeded_store.get_cut(v.normalized_cut_id).category == "בקר" for v in beef)
    assert all(v.normalized_cut_id == first_cut.id for v in seeded_store.list_variations(normalized_cut_id=first_cut.id))
    assert seeded_store.list_variations(verified=False) == []


def test_returned_models_are_copies(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר", cooking_methods=["גריל"])

    cut.cooking_methods.append("מחבת")

    assert store.get_cut(cut.id).cooking_methods == ["גריל"]


def test_snapshot_is_detached(seeded_store):
    snapshot = seeded_store.snapshot()
    before = len(seeded_store.list_cuts())

    cut = snapshot.create_cut(name="כתף טלה", category="טלה")

    assert cut.id == before + 1
    assert len(seeded_store.list_cuts()) == before
    assert [c.id for c in snapshot.list_cuts()][:before] == [c.id for c in seeded_store.list_cuts()]


def test_lock_timeout_raises_store_timeout():
    store = InMemoryCutStore(timeout_sec=0.05)
    acquired = threading.Event()
    release = threading.Event()

    def hold():
        with store._lock:
            acquired.set()
            release.wait(2)

    worker = threading.Thread(target=hold)
    worker.start()
    acquired.wait(2)
    try:
        with pytest.raises(StoreTimeoutError):
            store.list_cuts()
    finally:
        release.set()
        worker.join()


def test_stats_groups_by_category(seeded_store):
    stats = seeded_store.stats()

    assert [item.category for item in stats] == sorted(item.category for item in stats)
    assert sum(item.normalized_cuts_count for item in stats) == len(seeded_store.list_cuts())
    assert all(item.verified_variations == item.variations_count for item in stats)
