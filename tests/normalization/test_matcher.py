"""Tests for candidate matching."""

from cut_lens.normalization.matcher import CutMatcher, has_exact_match


def test_empty_or_blank_input_returns_nothing(seeded_store):
    matcher = CutMatcher(seeded_store)

    assert matcher.find_candidates("") == []
    assert matcher.find_candidates("   ") == []


def test_non_positive_limit_returns_nothing(seeded_store):
    matcher = CutMatcher(seeded_store)

    assert matcher.find_candidates("אנטריקוט", limit=0) == []
    assert matcher.find_candidates("אנטריקוט", limit=-1) == []


def test_known_variation_is_returned_first(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("אנטרקוט")

    assert candidates[0].match_type == "variation"
    assert candidates[0].confidence == 1.0
    assert candidates[0].cut.name == "אנטריקוט"
    assert candidates[0].variation is not None


def test_unverified_variation_uses_stored_confidence(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")
    store.create_variation(original_name="ריב איי", normalized_cut_id=cut.id, confidence_score=0.6)
    matcher = CutMatcher(store)

    candidates = matcher.find_candidates("ריב איי")

    assert candidates[0].match_type == "variation"
    assert candidates[0].confidence == 0.6


def test_exact_canonical_name_is_never_fuzzy(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("  חזה   עוף ")

    assert candidates[0].cut.name == "חזה עוף"
    assert candidates[0].match_type in {"exact", "variation"}
    assert candidates[0].confidence == 1.0
    assert has_exact_match(candidates)


def test_exact_beats_weaker_unverified_variation(store):
    cut = store.create_cut(name="סינטה", category="בקר")
    other = store.create_cut(name="ויסבול", category="בקר")
    store.create_variation(original_name="סינטה", normalized_cut_id=other.id, confidence_score=0.5)
    matcher = CutMatcher(store)

    candidates = matcher.find_candidates("סינטה")

    assert candidates[0].cut.id == cut.id
    assert candidates[0].match_type == "exact"


def test_category_filter_excludes_other_categories(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("פילה", category="דגים", min_confidence=0.0, limit=50)

    assert candidates
    assert all(c.cut.category == "דגים" for c in candidates)


def test_fuzzy_candidates_respect_floor(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("אנטריקוט מיושן", min_confidence=0.5, limit=50)

    assert candidates
    assert all(c.confidence >= 0.5 for c in candidates)
    assert not has_exact_match(candidates)


def test_results_are_deduplicated_per_cut(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("סלמון", min_confidence=0.0, limit=100)

    ids = [c.cut.id for c in candidates]
    assert len(ids) == len(set(ids))


def test_ties_prefer_shorter_cut_name(store):
    store.create_cut(name="צלי מובחרים", category="בקר")
    store.create_cut(name="צלי בקר", category="בקר")
    matcher = CutMatcher(store)

    candidates = matcher.find_candidates("צלי")

    assert [c.cut.name for c in candidates] == ["צלי בקר", "צלי מובחרים"]
    assert candidates[0].confidence == candidates[1].confidence == 0.5


def test_ties_on_equal_names_fall_back_to_id(store):
    first = store.create_cut(name="פילה", category="בקר")
    second = store.create_cut(name="פילה", category="דגים")
    matcher = CutMatcher(store)

    candidates = matcher.find_candidates("פילה")

    assert [c.cut.id for c in candidates] == [first.id, second.id]


def test_limit_truncates(seeded_store):
    matcher = CutMatcher(seeded_store)

    candidates = matcher.find_candidates("פילה", min_confidence=0.0, limit=2)

    assert len(candidates) == 2


def test_fuzzy_on_variations_can_be_disabled(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")
    store.create_variation(original_name="ribeye", normalized_cut_id=cut.id, confidence_score=1.0, verified=True)

    with_variations = CutMatcher(store).find_candidates("ribeyes")
    without_variations = CutMatcher(store, match_variations=False).find_candidates("ribeyes")

    assert with_variations[0].cut.id == cut.id
    assert with_variations[0].matched_text == "ribeye"
    assert without_variations == []


def test_find_candidates_is_deterministic(seeded_store):
    matcher = CutMatcher(seeded_store)

    first = matcher.find_candidates("צלעות", min_confidence=0.0, limit=20)
    second = matcher.find_candidates("צלעות", min_confidence=0.0, limit=20)

    assert [(c.cut.id, c.confidence, c.match_type) for c in first] == [
        (c.cut.id, c.confidence, c.match_type) for c in second
    ]


def test_confidence_is_always_bounded(seeded_store):
    matcher = CutMatcher(seeded_store)

    for query in ["אנטריקוט", "chicken", "סטייק טונה", "x", "פילה בקר פרמיום", "ribs"]:
        for candidate in matcher.find_candidates(query, min_confidence=0.0, limit=100):
            assert 0.0 <= candidate.confidence <= 1.0


def test_floor_does_not_hide_known_variation(store):
    cut = store.create_cut(name="אנטריקוט", category="בקר")
    store.create_variation(original_name="ריב איי", normalized_cut_id=cut.id, confidence_score=0.2)
    matcher = CutMatcher(store)

    candidates = matcher.find_candidates("ריב איי", min_confidence=0.3)

    assert [(c.cut.id, c.match_type, c.confidence) for c in candidates] == [(cut.id, "variation", 0.2)]
    assert has_exact_match(candidates)


def test_rewritten_name_is_looked_up_alongside_raw_name(store):
    cut = store.create_cut(name="חזה עוף", category="עוף")
    matcher = CutMatcher(store, rewrite=lambda text: "חזה עוף")

    candidates = matcher.find_candidates("חזה עוף טרי")

    assert candidates[0].cut.id == cut.id
    assert candidates[0].match_type == "exact"
    assert candidates[0].confidence == 1.0
