"""Normalization engine for raw meat cut names."""

from __future__ import annotations

import json
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator
from urllib import error, request

from cut_lens.exceptions import ConflictError, CutLensError, NotFoundError, ValidationError
from cut_lens.normalization.matcher import CutMatcher, has_exact_match
from cut_lens.normalization.repository import TaxonomyRepository
from cut_lens.normalization.similarity import SimilarityScorer, build_scorer, preprocess
from cut_lens.normalization.types import (
    BulkImportError,
    BulkImportOptions,
    BulkImportResponse,
    BulkImportRow,
    BulkImportRowResult,
    CutAnalysisResult,
    CutCandidate,
    CutSuggestionsResponse,
    NormalizeResult,
    PossibleMatch,
)
from cut_lens.schema import (
    CUT_TYPES,
    MEAT_CATEGORIES,
    CategoryStats,
    CutVariation,
    NormalizedCut,
    fold_category,
    fold_cut_type,
    fold_source,
)
from cut_lens.stores.base import CutStore

logger = logging.getLogger(__name__)

NO_CONFIDENT_MATCH = "no confident match - choose a category to create a new cut"
NOT_NULL_CUT_FIELDS = ("name", "category", "is_premium", "cooking_methods")


def _parse_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class NormalizationConfig:
    taxonomy_version: str = "v1"
    scorer: str = "hybrid"
    min_confidence: float = 0.3
    candidate_limit: int = 5
    attach_threshold: float = 0.75
    auto_verify_threshold: float = 0.9
    analysis_min_confidence: float = 0.4
    analysis_name_threshold: float = 0.7
    match_variations: bool = True
    apply_corrections: bool = True
    bulk_max_workers: int = 1
    unknown_queue_path: str | None = None
    unknown_queue_webhook_url: str | None = None
    unknown_queue_webhook_timeout_sec: float = 2.0
    unknown_queue_webhook_token: str | None = None

    @classmethod
    def from_env(cls) -> NormalizationConfig:
        defaults = cls()
        return cls(
            taxonomy_version=os.getenv("CUT_LENS_TAXONOMY_VERSION", defaults.taxonomy_version),
            scorer=os.getenv("CUT_LENS_SCORER", defaults.scorer),
            min_confidence=_parse_float(os.getenv("CUT_LENS_MIN_CONFIDENCE"), defaults.min_confidence),
            candidate_limit=_parse_int(os.getenv("CUT_LENS_CANDIDATE_LIMIT"), defaults.candidate_limit),
            attach_threshold=_parse_float(os.getenv("CUT_LENS_ATTACH_THRESHOLD"), defaults.attach_threshold),
            auto_verify_threshold=_parse_float(
                os.getenv("CUT_LENS_AUTO_VERIFY_THRESHOLD"), defaults.auto_verify_threshold
            ),
            match_variations=_parse_bool(os.getenv("CUT_LENS_MATCH_VARIATIONS"), defaults.match_variations),
            apply_corrections=_parse_bool(
                os.getenv("CUT_LENS_APPLY_CORRECTIONS"), defaults.apply_corrections
            ),
            bulk_max_workers=max(1, _parse_int(os.getenv("CUT_LENS_BULK_MAX_WORKERS"), defaults.bulk_max_workers)),
            unknown_queue_path=os.getenv("CUT_LENS_UNKNOWN_QUEUE_PATH") or None,
            unknown_queue_webhook_url=os.getenv("CUT_LENS_UNKNOWN_QUEUE_WEBHOOK_URL") or None,
            unknown_queue_webhook_timeout_sec=_parse_float(
                os.getenv("CUT_LENS_UNKNOWN_QUEUE_WEBHOOK_TIMEOUT_SEC"),
                defaults.unknown_queue_webhook_timeout_sec,
            ),
            unknown_queue_webhook_token=os.getenv("CUT_LENS_UNKNOWN_QUEUE_WEBHOOK_TOKEN") or None,
        )


class KeyedLocks:
    """One lock per key, dropped once no caller holds or waits on it."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (threading.Lock(), 0))
            self._locks[key] = (lock, users + 1)
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                lock, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)


class CutNormalizer:
    """Maps raw cut names onto the canonical taxonomy.

    Either attaches a new variation to an existing cut, creates a new cut
    when asked to, or hands the ranked alternatives back to the caller.
    """

    def __init__(
        self,
        store: CutStore,
        config: NormalizationConfig | None = None,
        *,
        scorer: SimilarityScorer | None = None,
        repository: TaxonomyRepository | None = None,
    ):
        self.config = config or NormalizationConfig()
        self.store = store
        self.repo = repository or TaxonomyRepository(version=self.config.taxonomy_version)
        self.matcher = CutMatcher(
            store,
            scorer or build_scorer(self.config.scorer),
            match_variations=self.config.match_variations,
            rewrite=self.repo.clean_for_matching if self.config.apply_corrections else None,
        )
        self._locks = KeyedLocks()

    def find_candidates(
        self,
        raw_name: str,
        *,
        category: str | None = None,
        limit: int | None = None,
        min_confidence: float | None = None,
    ) -> list[CutCandidate]:
        return self.matcher.find_candidates(
            raw_name,
            category=_check_category(category),
            limit=self.config.candidate_limit if limit is None else limit,
            min_confidence=self.config.min_confidence if min_confidence is None else min_confidence,
        )

    def suggest(
        self,
        query: str,
        *,
        category: str | None = None,
        limit: int | None = None,
        min_confidence: float | None = None,
    ) -> CutSuggestionsResponse:
        candidates = self.find_candidates(
            query, category=category, limit=limit, min_confidence=min_confidence
        )
        return CutSuggestionsResponse(
            query=query,
            suggestions=candidates,
            has_exact_match=has_exact_match(candidates),
        )

    def normalize(
        self,
        raw_name: str,
        *,
        force_create: bool = False,
        category: str | None = None,
        cut_type: str | None = None,
        description: str | None = None,
        source: str = "manual",
        created_by: int | None = None,
        auto_verify: bool | None = None,
        min_confidence: float | None = None,
    ) -> NormalizeResult:
        value = _clean_name(raw_name)
        key = preprocess(value)
        if not key:
            raise ValidationError("cut name is required")
        category = _check_category(category)
        cut_type = _check_cut_type(cut_type)
        source = _check_source(source)

        with self._locks.hold(key):
            floor = self.config.min_confidence if min_confidence is None else min_confidence
            candidates = self.matcher.find_candidates(
                value,
                category=category,
                limit=self.config.candidate_limit,
                min_confidence=floor,
            )
            top = candidates[0] if candidates else None

            if top is not None and top.confidence >= self.config.attach_threshold:
                return self._attach(
                    value,
                    top,
                    candidates[1:],
                    source=source,
                    created_by=created_by,
                    auto_verify=auto_verify,
                )

            if force_create:
                if category is None:
                    raise ValidationError(f"{NO_CONFIDENT_MATCH}: category is required to create a new cut")
                mapped = self.store.find_variation(value)
                if mapped is not None:
                    return self._mapped_result(value, mapped, category=category, alternatives=candidates)
                return self._create(
                    value,
                    category=category,
                    cut_type=cut_type,
                    description=description,
                    source=source,
                    created_by=created_by,
                    alternatives=candidates,
                )

        self._enqueue_unknown(
            raw=value,
            category=category,
            confidence=top.confidence if top else 0.0,
            reason="low_confidence" if top else "no_match",
            top_cut_id=top.cut.id if top else None,
        )
        return NormalizeResult(
            original_name=value,
            confidence=top.confidence if top else 0.0,
            match_type=top.match_type if top else None,
            outcome="ambiguous",
            alternatives=candidates,
            message=NO_CONFIDENT_MATCH,
        )

    def analyze(self, raw_name: str) -> CutAnalysisResult:
        value = _clean_name(raw_name)
        cleaned = preprocess(value)
        category = self.repo.detect_category(value)
        cut_type = self.repo.detect_cut_type(value)
        premium = self.repo.is_premium(value)

        matches: list[CutCandidate] = []
        if cleaned:
            matches = self.matcher.find_candidates(
                value,
                category=category,
                limit=self.config.candidate_limit,
                min_confidence=self.config.analysis_min_confidence,
            )
        best = matches[0] if matches else None

        if best is not None and best.confidence > self.config.analysis_name_threshold:
            suggested_name = best.cut.name
        elif category and cut_type:
            suggested_name = f"{cut_type} {category}"
        else:
            suggested_name = value

        reasons: list[str] = []
        if category:
            reasons.append(f"category_detected:{category}")
        if cut_type:
            reasons.append(f"cut_type_detected:{cut_type}")
        if premium:
            reasons.append("premium_detected")
        if best is not None:
            reasons.append(f"match_found:{best.confidence:.2f}")

        if best is not None:
            confidence = best.confidence
        else:
            confidence = 0.5 if category else 0.0

        return CutAnalysisResult(
            original_name=value,
            cleaned_name=cleaned,
            suggested_category=category,
            suggested_cut_type=cut_type,
            suggested_normalized_name=suggested_name,
            is_premium=premium,
            confidence=confidence,
            reasons=reasons,
            possible_matches=[
                PossibleMatch(
                    normalized_cut=match.cut,
                    confidence=match.confidence,
                    match_type=match.match_type,
                    reasons=[f"matched_text:{match.matched_text}"],
                )
                for match in matches
            ],
        )

    def bulk_import(
        self,
        rows: Iterable[BulkImportRow],
        options: BulkImportOptions | None = None,
        *,
        created_by: int | None = None,
    ) -> BulkImportResponse:
        options = options or BulkImportOptions()
        rows = list(rows)
        worker = self
        if options.dry_run:
            worker = CutNormalizer(
                self.store.snapshot(),
                replace(self.config, unknown_queue_path=None, unknown_queue_webhook_url=None),
                scorer=self.matcher.scorer,
                repository=self.repo,
            )

        def run(row: BulkImportRow) -> BulkImportRowResult:
            return worker._import_row(row, options, created_by=created_by)

        if self.config.bulk_max_workers > 1 and len(rows) > 1:
            with ThreadPoolExecutor(max_workers=self.config.bulk_max_workers) as pool:
                results = list(pool.map(run, rows))
        else:
            results = [run(row) for row in rows]

        response = BulkImportResponse(dry_run=options.dry_run, processed=len(results), results=results)
        for item in results:
            if item.action == "created":
                response.created += 1
            elif item.action == "updated":
                response.updated += 1
            elif item.action == "skipped":
                response.skipped += 1
            else:
                response.errors.append(BulkImportError(original_name=item.original_name, error=item.error or ""))
        logger.info(
            "bulk import%s: processed=%d created=%d updated=%d skipped=%d errors=%d",
            " (dry run)" if options.dry_run else "",
            response.processed,
            response.created,
            response.updated,
            response.skipped,
            len(response.errors),
        )
        return response

    def create_cut(
        self,
        *,
        name: str,
        category: str,
        cut_type: str | None = None,
        subcategory: str | None = None,
        description: str | None = None,
        is_premium: bool | None = None,
        typical_weight_range: str | None = None,
        cooking_methods: list[str] | None = None,
    ) -> NormalizedCut:
        value = _clean_name(name)
        if not preprocess(value):
            raise ValidationError("cut name is required")
        checked_category = _check_category(category)
        if checked_category is None:
            raise ValidationError("category is required")
        cut = self.store.create_cut(
            name=value,
            category=checked_category,
            cut_type=_check_cut_type(cut_type),
            subcategory=subcategory,
            description=description,
            is_premium=self.repo.is_premium(value) if is_premium is None else is_premium,
            typical_weight_range=typical_weight_range,
            cooking_methods=cooking_methods,
        )
        logger.info("created cut %s (%s) id=%d", cut.name, cut.category, cut.id)
        return cut

    def update_cut(self, cut_id: int, **changes: object) -> NormalizedCut:
        for field_name in NOT_NULL_CUT_FIELDS:
            if field_name in changes and changes[field_name] is None:
                raise ValidationError(f"{field_name} cannot be null")
        if "name" in changes:
            changes["name"] = _clean_name(changes["name"])
            if not preprocess(changes["name"]):
                raise ValidationError("cut name is required")
        if "category" in changes:
            changes["category"] = _check_category(changes["category"])
            if changes["category"] is None:
                raise ValidationError("category is required")
        if "cut_type" in changes:
            changes["cut_type"] = _check_cut_type(changes["cut_type"])
        return self.store.update_cut(cut_id, **changes)

    def delete_cut(self, cut_id: int) -> None:
        self.store.delete_cut(cut_id)
        logger.info("deleted cut id=%d", cut_id)

    def verify_variation(self, variation_id: int, verified: bool = True) -> CutVariation:
        return self.store.update_variation(variation_id, verified=verified)

    def reassign_variation(self, variation_id: int, normalized_cut_id: int) -> CutVariation:
        """Point a variation at another cut. It goes back to unverified."""

        if self.store.get_cut(normalized_cut_id) is None:
            raise NotFoundError(f"normalized cut not found: {normalized_cut_id}")
        variation = self.store.update_variation(
            variation_id,
            normalized_cut_id=normalized_cut_id,
            verified=False,
        )
        logger.info("reassigned variation %d to cut %d", variation_id, normalized_cut_id)
        return variation

    def remove_variation(self, variation_id: int) -> None:
        self.store.delete_variation(variation_id)

    def stats(self) -> list[CategoryStats]:
        return self.store.stats()

    def _attach(
        self,
        value: str,
        top: CutCandidate,
        alternatives: list[CutCandidate],
        *,
        source: str,
        created_by: int | None,
        auto_verify: bool | None,
    ) -> NormalizeResult:
        if top.variation is not None and preprocess(top.variation.original_name) == preprocess(value):
            return NormalizeResult(
                original_name=value,
                normalized_cut=top.cut,
                variation=top.variation,
                confidence=top.confidence,
                match_type=top.match_type,
                outcome="existing",
                alternatives=alternatives,
            )

        if auto_verify is None:
            verified = top.match_type == "exact" or top.confidence >= self.config.auto_verify_threshold
        else:
            verified = auto_verify

        try:
            variation = self.store.create_variation(
                original_name=value,
                normalized_cut_id=top.cut.id,
                confidence_score=round(top.confidence, 4),
                source=source,
                verified=verified,
                created_by=created_by,
            )
        except ConflictError:
            existing = self.store.find_variation(value)
            if existing is None:
                raise
            logger.warning("variation %r was mapped concurrently, reusing it", value)
            return NormalizeResult(
                original_name=value,
                normalized_cut=self.store.get_cut(existing.normalized_cut_id) or top.cut,
                variation=existing,
                confidence=existing.effective_confidence,
                match_type="variation",
                outcome="existing",
                alternatives=alternatives,
            )

        logger.info(
            "attached %r to cut %d (%s, confidence=%.2f, verified=%s)",
            value,
            top.cut.id,
            top.match_type,
            top.confidence,
            verified,
        )
        return NormalizeResult(
            original_name=value,
            normalized_cut=top.cut,
            variation=variation,
            confidence=top.confidence,
            match_type=top.match_type,
            outcome="attached",
            alternatives=alternatives,
        )

    def _create(
        self,
        value: str,
        *,
        category: str,
        cut_type: str | None,
        description: str | None,
        source: str,
        created_by: int | None,
        alternatives: list[CutCandidate],
    ) -> NormalizeResult:
        is_new_cut = True
        try:
            cut = self.store.create_cut(
                name=value,
                category=category,
                cut_type=cut_type,
                description=description,
                is_premium=self.repo.is_premium(value),
            )
        except ConflictError:
            cut = self.store.find_cut(value, category)
            if cut is None:
                raise
            logger.warning("cut %r was created concurrently, attaching to it", value)
            is_new_cut = False

        try:
            variation = self.store.create_variation(
                original_name=value,
                normalized_cut_id=cut.id,
                confidence_score=1.0,
                source=source,
                verified=True,
                created_by=created_by,
            )
        except ConflictError:
            variation = self.store.find_variation(value)
            if variation is None:
                raise
            if is_new_cut:
                self.store.delete_cut(cut.id)
                logger.warning("variation %r was mapped concurrently, dropped new cut %d", value, cut.id)
            return self._mapped_result(value, variation, category=category, alternatives=alternatives)

        if is_new_cut:
            logger.info("created cut %r in %s id=%d", value, category, cut.id)
        return NormalizeResult(
            original_name=value,
            normalized_cut=cut,
            variation=variation,
            is_new_cut=is_new_cut,
            confidence=1.0,
            match_type=None if is_new_cut else "exact",
            outcome="created_cut" if is_new_cut else "attached",
            alternatives=alternatives,
        )

    def _mapped_result(
        self,
        value: str,
        variation: CutVariation,
        *,
        category: str,
        alternatives: list[CutCandidate],
    ) -> NormalizeResult:
        """Result for a name that already has a variation row.

        A name maps to a single cut; a mapping under another category is a
        conflict.
        """

        cut = self.store.get_cut(variation.normalized_cut_id)
        if cut is None or cut.category != category:
            owner = f"cut {cut.id} in {cut.category}" if cut else f"missing cut {variation.normalized_cut_id}"
            raise ConflictError(f"{value!r} is already mapped to {owner}")
        return NormalizeResult(
            original_name=value,
            normalized_cut=cut,
            variation=variation,
            confidence=variation.effective_confidence,
            match_type="variation",
            outcome="existing",
            alternatives=alternatives,
        )

    def _import_row(
        self,
        row: BulkImportRow,
        options: BulkImportOptions,
        *,
        created_by: int | None,
    ) -> BulkImportRowResult:
        try:
            if options.skip_existing:
                mapped = self._find_mapping(row.original_name, row.category)
                if mapped is not None:
                    cut, variation = mapped
                    return BulkImportRowResult(
                        original_name=row.original_name,
                        action="skipped",
                        normalized_cut=cut,
                        variation=variation,
                        confidence=variation.effective_confidence if variation else 1.0,
                        reason="already_mapped",
                    )

            result = self.normalize(
                row.original_name,
                force_create=row.category is not None,
                category=row.category,
                cut_type=row.cut_type,
                description=row.description,
                source=row.source or "bulk_import",
                created_by=created_by,
                auto_verify=options.auto_verify,
                min_confidence=options.min_confidence,
            )
        except CutLensError as exc:
            return BulkImportRowResult(original_name=row.original_name, action="error", error=str(exc))
        except Exception as exc:
            logger.exception("bulk import row failed: %r", row.original_name)
            return BulkImportRowResult(original_name=row.original_name, action="error", error=str(exc))

        if result.outcome == "created_cut":
            action, reason = "created", None
        elif result.outcome == "attached":
            action, reason = "updated", None
        elif result.outcome == "existing":
            action, reason = "skipped", "already_mapped"
        else:
            action, reason = "skipped", "low_confidence" if result.alternatives else "no_match"
        return BulkImportRowResult(
            original_name=row.original_name,
            action=action,
            normalized_cut=result.normalized_cut,
            variation=result.variation,
            confidence=result.confidence,
            reason=reason,
        )

    def _find_mapping(
        self, raw_name: str, category: str | None
    ) -> tuple[NormalizedCut | None, CutVariation | None] | None:
        variation = self.store.find_variation(raw_name)
        if variation is not None:
            return self.store.get_cut(variation.normalized_cut_id), variation
        cut = self.store.find_cut(raw_name, category)
        if cut is not None:
            return cut, None
        return None

    def _enqueue_unknown(
        self,
        *,
        raw: str,
        category: str | None,
        confidence: float,
        reason: str,
        top_cut_id: int | None,
    ) -> None:
        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "raw": raw,
            "category": category,
            "confidence": round(confidence, 4),
            "reason": reason,
            "top_cut_id": top_cut_id,
            "taxonomy_version": self.config.taxonomy_version,
        }
        path_value = self.config.unknown_queue_path
        if path_value:
            path = Path(path_value)
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(payload, ensure_ascii=False) + "\n")

        webhook_url = self.config.unknown_queue_webhook_url
        if webhook_url:
            _send_unknown_webhook(
                webhook_url,
                payload,
                timeout_sec=self.config.unknown_queue_webhook_timeout_sec,
                token=self.config.unknown_queue_webhook_token,
            )


def normalize_cut(
    store: CutStore,
    raw_name: str,
    *,
    force_create: bool = False,
    category: str | None = None,
    cut_type: str | None = None,
    config: NormalizationConfig | None = None,
) -> NormalizeResult:
    """Normalize one raw cut name against a store with default settings."""

    return CutNormalizer(store, config).normalize(
        raw_name,
        force_create=force_create,
        category=category,
        cut_type=cut_type,
    )


def _send_unknown_webhook(
    url: str,
    payload: dict,
    *,
    timeout_sec: float,
    token: str | None,
) -> None:
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    headers = {"Content-Type": "application/json"}
    if token:
        headers["x-webhook-token"] = token
    req = request.Request(
        url,
        data=data,
        headers=headers,
        method="POST",
    )
    try:
        with request.urlopen(req, timeout=timeout_sec):
            pass
    except (error.URLError, TimeoutError, ValueError):
        # Unknown queue should never break the normalize path.
        logger.warning("unknown queue webhook failed: %s", url)
        return


def _clean_name(value: str | None) -> str:
    return " ".join((value or "").split())


def _check_category(value: object) -> str | None:
    folded = fold_category(value)
    if folded is None:
        return None
    if folded not in MEAT_CATEGORIES:
        raise ValidationError(f"unknown category: {value}")
    return folded


def _check_cut_type(value: object) -> str | None:
    folded = fold_cut_type(value)
    if folded is None:
        return None
    if folded not in CUT_TYPES:
        raise ValidationError(f"unknown cut type: {value}")
    return folded


def _check_source(value: object) -> str:
    folded = fold_source(value)
    if folded not in {"manual", "automatic", "bulk_import", "api"}:
        raise ValidationError(f"unknown variation source: {value}")
    return folded
