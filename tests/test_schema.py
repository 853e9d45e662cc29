"""Tests for schema models."""

import pytest
from pydantic import ValidationError

from cut_lens import CutVariation, NormalizedCut
from cut_lens.normalization.types import BulkImportOptions, BulkImportRow


def test_normalized_cut_defaults():
    """NormalizedCut with only required fields should work."""
    cut = NormalizedCut(id=1, name="אנטריקוט", category="בקר")
    assert cut.cut_type is None
    assert cut.is_premium is False
    assert cut.cooking_methods == []


def test_english_labels_are_folded():
    cut = NormalizedCut(id=1, name="Ribeye", category=" Beef ", cut_type="STEAK")
    assert cut.category == "בקר"
    assert cut.cut_type == "סטייק"


def test_unknown_category_rejected():
    with pytest.raises(ValidationError):
        NormalizedCut(id=1, name="x", category="goat")


def test_confidence_score_bounds():
    with pytest.raises(ValidationError):
        CutVariation(id=1, original_name="x", normalized_cut_id=1, confidence_score=1.2)


def test_camel_case_wire_format():
    """Both spellings are accepted on input; output uses camelCase."""
    variation = CutVariation.model_validate(
        {"id": 1, "originalName": "אנטרקוט", "normalizedCutId": 2, "confidenceScore": 0.5}
    )
    data = variation.model_dump(by_alias=True)
    assert data["originalName"] == "אנטרקוט"
    assert data["normalizedCutId"] == 2
    assert "original_name" not in data


def test_verified_variation_counts_as_exact():
    variation = CutVariation(id=1, original_name="x", normalized_cut_id=1, confidence_score=0.4, verified=True)
    assert variation.effective_confidence == 1.0


def test_legacy_source_labels_are_folded():
    row = BulkImportRow.model_validate({"originalName": "x", "source": "csv_import"})
    assert row.source == "bulk_import"
    assert BulkImportRow(original_name="x", source="bulk-import").source == "bulk_import"


def test_bulk_options_defaults():
    options = BulkImportOptions()
    assert options.dry_run is False
    assert options.skip_existing is False
    assert options.auto_verify is None
