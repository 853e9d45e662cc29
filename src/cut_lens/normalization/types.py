"""Data models for normalization output."""

from typing import Literal

from pydantic import Field

from cut_lens.schema import CamelModel, CategoryField, CutTypeField, CutVariation, NormalizedCut, SourceField

MatchType = Literal["variation", "exact", "fuzzy"]
Outcome = Literal["created_cut", "attached", "existing", "ambiguous"]
BulkAction = Literal["created", "updated", "skipped", "error"]

MATCH_TYPE_RANK: dict[str, int] = {"variation": 0, "exact": 1, "fuzzy": 2}


class CutCandidate(CamelModel):
    """One ranked match for a raw cut name."""

    cut: NormalizedCut
    confidence: float = Field(ge=0.0, le=1.0)
    match_type: MatchType
    matched_text: str
    variation: CutVariation | None = None


class NormalizeResult(CamelModel):
    """Outcome of normalizing a single raw cut name."""

    original_name: str
    normalized_cut: NormalizedCut | None = None
    variation: CutVariation | None = None
    is_new_cut: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    match_type: MatchType | None = None
    outcome: Outcome
    alternatives: list[CutCandidate] = Field(default_factory=list)
    message: str | None = None


class PossibleMatch(CamelModel):
    normalized_cut: NormalizedCut
    confidence: float = Field(ge=0.0, le=1.0)
    match_type: MatchType
    reasons: list[str] = Field(default_factory=list)


class CutAnalysisResult(CamelModel):
    """Advisory analysis of a raw cut name. Never persisted."""

    original_name: str
    cleaned_name: str
    suggested_category: CategoryField | None = None
    suggested_cut_type: CutTypeField | None = None
    suggested_normalized_name: str
    is_premium: bool = False
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasons: list[str] = Field(default_factory=list)
    possible_matches: list[PossibleMatch] = Field(default_factory=list)


class BulkImportRow(CamelModel):
    original_name: str
    category: CategoryField | None = None
    cut_type: CutTypeField | None = None
    description: str | None = None
    source: SourceField | None = None


class BulkImportOptions(CamelModel):
    skip_existing: bool = False
    min_confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    auto_verify: bool | None = None
    dry_run: bool = False


class BulkImportRowResult(CamelModel):
    original_name: str
    action: BulkAction
    normalized_cut: NormalizedCut | None = None
    variation: CutVariation | None = None
    confidence: float | None = None
    reason: str | None = None
    error: str | None = None


class BulkImportError(CamelModel):
    original_name: str
    error: str


class BulkImportResponse(CamelModel):
    dry_run: bool = False
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[BulkImportError] = Field(default_factory=list)
    results: list[BulkImportRowResult] = Field(default_factory=list)


class CutSuggestionsResponse(CamelModel):
    query: str
    suggestions: list[CutCandidate] = Field(default_factory=list)
    has_exact_match: bool = False
