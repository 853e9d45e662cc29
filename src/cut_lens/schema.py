"""Data models for cut-lens."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

MeatCategory = Literal["בקר", "עוף", "טלה", "חזיר", "דגים", "אחר"]
CutType = Literal["סטייק", "צלי", "טחון", "פילה", "שוק", "כנף", "חזה", "צלעות", "גיד", "שלם", "אחר"]
VariationSource = Literal["manual", "automatic", "bulk_import", "api"]

MEAT_CATEGORIES: tuple[str, ...] = ("בקר", "עוף", "טלה", "חזיר", "דגים", "אחר")
CUT_TYPES: tuple[str, ...] = ("סטייק", "צלי", "טחון", "פילה", "שוק", "כנף", "חזה", "צלעות", "גיד", "שלם", "אחר")

CATEGORY_ALIASES = {
    "beef": "בקר",
    "chicken": "עוף",
    "lamb": "טלה",
    "pork": "חזיר",
    "fish": "דגים",
    "other": "אחר",
}
CUT_TYPE_ALIASES = {
    "steak": "סטייק",
    "roast": "צלי",
    "ground": "טחון",
    "fillet": "פילה",
    "shank": "שוק",
    "wing": "כנף",
    "breast": "חזה",
    "ribs": "צלעות",
    "tendon": "גיד",
    "whole": "שלם",
    "other": "אחר",
}
SOURCE_ALIASES = {
    "bulk-import": "bulk_import",
    "csv_import": "bulk_import",
}


def fold_category(value: object) -> object:
    if isinstance(value, str):
        text = value.strip()
        return CATEGORY_ALIASES.get(text.lower(), text) or None
    return value


def fold_cut_type(value: object) -> object:
    if isinstance(value, str):
        text = value.strip()
        return CUT_TYPE_ALIASES.get(text.lower(), text) or None
    return value


def fold_source(value: object) -> object:
    if isinstance(value, str):
        text = value.strip().lower()
        return SOURCE_ALIASES.get(text, text)
    return value


CategoryField = Annotated[MeatCategory, BeforeValidator(fold_category)]
CutTypeField = Annotated[CutType, BeforeValidator(fold_cut_type)]
SourceField = Annotated[VariationSource, BeforeValidator(fold_source)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NormalizedCut(CamelModel):
    """Canonical taxonomy entry for a meat cut."""

    id: int
    name: str
    category: CategoryField
    cut_type: CutTypeField | None = None
    subcategory: str | None = None
    description: str | None = None
    is_premium: bool = False
    typical_weight_range: str | None = None
    cooking_methods: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CutVariation(CamelModel):
    """Observed raw name mapped onto a canonical cut."""

    id: int
    original_name: str
    normalized_cut_id: int
    confidence_score: float = Field(ge=0.0, le=1.0)
    source: SourceField = "manual"
    verified: bool = False
    created_by: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def effective_confidence(self) -> float:
        # Verified variations count as exact matches.
        return 1.0 if self.verified else self.confidence_score


class CategoryStats(CamelModel):
    """Per-category normalization aggregate."""

    category: MeatCategory
    normalized_cuts_count: int = 0
    variations_count: int = 0
    avg_confidence: float | None = None
    verified_variations: int = 0
