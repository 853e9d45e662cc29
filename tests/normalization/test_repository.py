"""Tests for the packaged seed taxonomy."""

from cut_lens.normalization.repository import SeedCut, TaxonomyRepository
from cut_lens.stores import InMemoryCutStore


def test_v1_taxonomy_is_consistent():
    assert TaxonomyRepository(version="v1").validate() == []


def test_detect_category_and_cut_type():
    repo = TaxonomyRepository()

    assert repo.detect_category("כנפיים של עוף") == "עוף"
    assert repo.detect_category("Beef Ribs") == "בקר"
    assert repo.detect_cut_type("סטייק סינטה") == "סטייק"
    assert repo.detect_cut_type("Lamb Chops") is None
    assert repo.detect_category("") is None


def test_is_premium():
    repo = TaxonomyRepository()

    assert repo.is_premium("אנטריקוט וואגיו") is True
    assert repo.is_premium("Black  Angus ribeye") is True
    assert repo.is_premium("בקר טחון") is False


def test_seed_loads_verified_variations():
    store = InMemoryCutStore()
    repo = TaxonomyRepository()

    cuts, variations = repo.seed(store)

    assert cuts == len(repo.cuts)
    assert variations == sum(len(seed.variations) for seed in repo.cuts)
    assert all(v.verified and v.confidence_score == 1.0 for v in store.list_variations())


def test_seed_is_repeatable():
    store = InMemoryCutStore()
    repo = TaxonomyRepository()
    repo.seed(store)

    assert repo.seed(store) == (0, 0)


def test_validate_reports_problems():
    repo = TaxonomyRepository()
    repo.cuts = [
        SeedCut(name="סינטה", category="בקר", variations=["סירליין"]),
        SeedCut(name="ויסבול", category="בקר", variations=["סירליין", "סינטה"]),
        SeedCut(name="סינטה", category="בקר"),
        SeedCut(name="ברווז", category="duck", cut_type="confit"),
    ]

    problems = repo.validate()

    assert any("ambiguous variation" in p for p in problems)
    assert any("collides with cut" in p for p in problems)
    assert any("duplicate cut" in p for p in problems)
    assert any("unknown category" in p for p in problems)
    assert any("unknown cut type" in p for p in problems)


def test_clean_for_matching_drops_noise_and_applies_corrections():
    repo = TaxonomyRepository()

    assert repo.clean_for_matching("חזה עוף טרי") == "חזה עוף"
    assert repo.clean_for_matching("Chicken Breast") == "עוף חזה"
    assert repo.clean_for_matching("שוק טלה ללא עצם") == "שוק טלה"
    assert repo.clean_for_matching("כנפיים עוף") == "כנפיים עוף"
    assert repo.clean_for_matching("אנטרקוט") == "אנטריקוט"
    assert repo.clean_for_matching("אנטריקוטים") == "אנטריקוטים"
    assert repo.clean_for_matching("טרי קפוא") == ""


def test_short_keywords_match_whole_words_only():
    repo = TaxonomyRepository()

    assert repo.detect_category("smoked ham") == "חזיר"
    assert repo.detect_category("hamburger") is None
    assert repo.detect_category("בשר עז") == "טלה"
    assert repo.detect_cut_type("מנה אנטריקוט") == "סטייק"
    assert repo.detect_cut_type("כתף שמנה") is None
    assert repo.detect_cut_type("עוף מלא") == "שלם"
    assert repo.detect_cut_type("pork ribs") == "צלעות"


def test_origin_keywords_mark_premium():
    repo = TaxonomyRepository()

    assert repo.is_premium("סלמון נורווגי") is True
    assert repo.is_premium("דניס ים תיכוני") is True
    assert repo.is_premium("בשר איכות") is True
