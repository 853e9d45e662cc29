from contextlib import contextmanager
from dataclasses import replace
from functools import lru_cache
import logging
import os
from pathlib import Path
import sys
from typing import Iterator

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

# Ensure local src package is importable in serverless runtime.
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cut_lens import __version__  # noqa: E402
from cut_lens.exceptions import (  # noqa: E402
    ConflictError,
    CutLensError,
    NotFoundError,
    StoreTimeoutError,
    ValidationError,
)
from cut_lens.normalization import CutNormalizer, NormalizationConfig  # noqa: E402
from cut_lens.normalization.repository import TaxonomyRepository  # noqa: E402
from cut_lens.normalization.types import (  # noqa: E402
    BulkImportOptions,
    BulkImportResponse,
    BulkImportRow,
    CutAnalysisResult,
    CutSuggestionsResponse,
    NormalizeResult,
)
from cut_lens.schema import (  # noqa: E402
    CamelModel,
    CategoryField,
    CategoryStats,
    CutTypeField,
    CutVariation,
    NormalizedCut,
    SourceField,
)
from cut_lens.stores import CutStore, InMemoryCutStore  # noqa: E402

app = FastAPI(title="cut-lens API", version=__version__)
logger = logging.getLogger(__name__)

raw_origins = os.getenv("FRONTEND_ORIGINS", "*")
allow_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
DATABASE_URL = os.getenv("DATABASE_URL")
TAXONOMY_VERSION = os.getenv("TAXONOMY_VERSION", "v1")
store_timeout_raw = os.getenv("STORE_TIMEOUT_SEC")
try:
    STORE_TIMEOUT_SEC = float(store_timeout_raw) if store_timeout_raw else 5.0
except ValueError:
    STORE_TIMEOUT_SEC = 5.0

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_normalizer() -> CutNormalizer:
    config = replace(NormalizationConfig.from_env(), taxonomy_version=TAXONOMY_VERSION)
    store: CutStore
    if DATABASE_URL:
        from cut_lens.stores.postgres import PostgresCutStore

        store = PostgresCutStore(DATABASE_URL, timeout_sec=STORE_TIMEOUT_SEC)
        store.init_schema()
    else:
        store = InMemoryCutStore(timeout_sec=STORE_TIMEOUT_SEC)
        TaxonomyRepository(version=TAXONOMY_VERSION).seed(store)
    return CutNormalizer(store, config)


class NormalizeCutRequest(CamelModel):
    cut_name: str
    force_create: bool = False
    category: CategoryField | None = None
    cut_type: CutTypeField | None = None
    description: str | None = None
    source: SourceField = "manual"


class AnalyzeCutRequest(CamelModel):
    cut_name: str


class BulkImportRequest(CamelModel):
    cuts: list[BulkImportRow]
    options: BulkImportOptions = Field(default_factory=BulkImportOptions)


class CreateCutRequest(CamelModel):
    name: str
    category: CategoryField
    cut_type: CutTypeField | None = None
    subcategory: str | None = None
    description: str | None = None
    is_premium: bool | None = None
    typical_weight_range: str | None = None
    cooking_methods: list[str] = Field(default_factory=list)


class UpdateCutRequest(CamelModel):
    name: str | None = None
    category: CategoryField | None = None
    cut_type: CutTypeField | None = None
    subcategory: str | None = None
    description: str | None = None
    is_premium: bool | None = None
    typical_weight_range: str | None = None
    cooking_methods: list[str] | None = None


class UpdateVariationRequest(CamelModel):
    verified: bool | None = None
    normalized_cut_id: int | None = None


def _http_error(exc: CutLensError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StoreTimeoutError):
        return HTTPException(status_code=503, detail="store_timeout")
    return HTTPException(status_code=500, detail="internal_error")


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except HTTPException:
        raise
    except CutLensError as exc:
        if isinstance(exc, StoreTimeoutError):
            logger.warning("%s timed out: %s", action, exc)
        raise _http_error(exc) from exc
    except Exception as exc:
        logger.exception("%s failed", action)
        raise HTTPException(status_code=500, detail="internal_error") from exc


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get("/cuts/suggest/{query}", response_model=CutSuggestionsResponse)
def suggest_cuts(
    query: str,
    min_confidence: float = Query(default=0.3, ge=0.0, le=1.0, alias="minConfidence"),
    limit: int = Query(default=5, ge=1, le=50),
    category: CategoryField | None = Query(default=None),
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> CutSuggestionsResponse:
    try:
        return normalizer.suggest(query, category=category, limit=limit, min_confidence=min_confidence)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception:
        logger.warning("suggest degraded for %r", query, exc_info=True)
        return CutSuggestionsResponse(query=query)


@app.post("/cuts/normalize", response_model=NormalizeResult)
def normalize_cut(
    body: NormalizeCutRequest,
    actor_id: int | None = Header(default=None, alias="X-Actor-Id"),
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> NormalizeResult:
    with _translate_errors("normalize"):
        return normalizer.normalize(
            body.cut_name,
            force_create=body.force_create,
            category=body.category,
            cut_type=body.cut_type,
            description=body.description,
            source=body.source,
            created_by=actor_id,
        )


@app.post("/cuts/analyze", response_model=CutAnalysisResult)
def analyze_cut(
    body: AnalyzeCutRequest,
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> CutAnalysisResult:
    try:
        return normalizer.analyze(body.cut_name)
    except Exception:
        logger.warning("analyze degraded for %r", body.cut_name, exc_info=True)
        value = " ".join(body.cut_name.split())
        return CutAnalysisResult(
            original_name=value,
            cleaned_name=value,
            suggested_normalized_name=value,
        )


@app.post("/cuts/bulk-import", response_model=BulkImportResponse)
def bulk_import(
    body: BulkImportRequest,
    actor_id: int | None = Header(default=None, alias="X-Actor-Id"),
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> BulkImportResponse:
    with _translate_errors("bulk import"):
        return normalizer.bulk_import(body.cuts, body.options, created_by=actor_id)


@app.get("/cuts/stats", response_model=list[CategoryStats])
def cut_stats(normalizer: CutNormalizer = Depends(get_normalizer)) -> list[CategoryStats]:
    with _translate_errors("stats"):
        return normalizer.stats()


@app.get("/cuts/variations", response_model=list[CutVariation])
def list_variations(
    normalized_cut_id: int | None = Query(default=None, alias="normalizedCutId"),
    verified: bool | None = Query(default=None),
    category: CategoryField | None = Query(default=None),
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> list[CutVariation]:
    with _translate_errors("list variations"):
        return normalizer.store.list_variations(
            category=category,
            normalized_cut_id=normalized_cut_id,
            verified=verified,
        )


@app.put("/cuts/variations/{variation_id}", response_model=CutVariation)
def update_variation(
    variation_id: int,
    body: UpdateVariationRequest,
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> CutVariation:
    if body.verified is None and body.normalized_cut_id is None:
        raise HTTPException(status_code=400, detail="verified or normalizedCutId is required")

    with _translate_errors("update variation"):
        variation = None
        if body.normalized_cut_id is not None:
            variation = normalizer.reassign_variation(variation_id, body.normalized_cut_id)
        if body.verified is not None:
            variation = normalizer.verify_variation(variation_id, verified=body.verified)
        return variation


@app.delete("/cuts/variations/{variation_id}", status_code=204)
def delete_variation(
    variation_id: int,
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> Response:
    with _translate_errors("delete variation"):
        normalizer.remove_variation(variation_id)
    return Response(status_code=204)


@app.get("/cuts", response_model=list[NormalizedCut])
def list_cuts(
    category: CategoryField | None = Query(default=None),
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> list[NormalizedCut]:
    with _translate_errors("list cuts"):
        return normalizer.store.list_cuts(category)


@app.post("/cuts", response_model=NormalizedCut, status_code=201)
def create_cut(
    body: CreateCutRequest,
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> NormalizedCut:
    with _translate_errors("create cut"):
        return normalizer.create_cut(
            name=body.name,
            category=body.category,
            cut_type=body.cut_type,
            subcategory=body.subcategory,
            description=body.description,
            is_premium=body.is_premium,
            typical_weight_range=body.typical_weight_range,
            cooking_methods=body.cooking_methods,
        )


@app.get("/cuts/{cut_id}", response_model=NormalizedCut)
def get_cut(cut_id: int, normalizer: CutNormalizer = Depends(get_normalizer)) -> NormalizedCut:
    with _translate_errors("get cut"):
        cut = normalizer.store.get_cut(cut_id)
    if cut is None:
        raise HTTPException(status_code=404, detail=f"normalized cut not found: {cut_id}")
    return cut


@app.delete("/cuts/{cut_id}", status_code=204)
def delete_cut(cut_id: int, normalizer: CutNormalizer = Depends(get_normalizer)) -> Response:
    with _translate_errors("delete cut"):
        normalizer.delete_cut(cut_id)
    return Response(status_code=204)


@app.put("/cuts/{cut_id}", response_model=NormalizedCut)
def update_cut(
    cut_id: int,
    body: UpdateCutRequest,
    normalizer: CutNormalizer = Depends(get_normalizer),
) -> NormalizedCut:
    changes = body.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=400, detail="no fields to update")
    with _translate_errors("update cut"):
        return normalizer.update_cut(cut_id, **changes)
