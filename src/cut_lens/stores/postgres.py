"""PostgreSQL store backed by psycopg."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import psycopg
from psycopg import errors
from psycopg.rows import dict_row

from cut_lens.exceptions import ConflictError, NotFoundError, StoreTimeoutError
from cut_lens.normalization.similarity import preprocess
from cut_lens.schema import CategoryStats, CutVariation, NormalizedCut
from cut_lens.stores.base import CutStore, check_cut_changes

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    create table if not exists normalized_cuts (
      id bigserial primary key,
      name text not null,
      name_key text not null,
      category text not null,
      cut_type text null,
      subcategory text null,
      description text null,
      is_premium boolean not null default false,
      typical_weight_range text null,
      cooking_methods text[] not null default '{}',
      created_at timestamptz not null default now(),
      updated_at timestamptz not null default now(),
      unique (category, name_key)
    )
    """,
    """
    create table if not exists cut_variations (
      id bigserial primary key,
      original_name text not null,
      name_key text not null unique,
      normalized_cut_id bigint not null references normalized_cuts(id) on delete restrict,
      confidence_score double precision not null check (confidence_score between 0 and 1),
      source text not null default 'manual',
      verified boolean not null default false,
      created_by bigint null,
      created_at timestamptz not null default now(),
      updated_at timestamptz not null default now()
    )
    """,
    "create index if not exists idx_normalized_cuts_category on normalized_cuts(category)",
    "create index if not exists idx_cut_variations_cut on cut_variations(normalized_cut_id)",
)

CUT_COLUMNS = (
    "id, name, category, cut_type, subcategory, description, is_premium, "
    "typical_weight_range, cooking_methods, created_at, updated_at"
)
VARIATION_COLUMNS = (
    "id, original_name, normalized_cut_id, confidence_score, source, verified, "
    "created_by, created_at, updated_at"
)


class PostgresCutStore(CutStore):
    """Store over the normalized_cuts / cut_variations tables."""

    def __init__(self, database_url: str, *, timeout_sec: float | None = 5.0):
        if not database_url:
            raise ValueError("database_url is required for PostgresCutStore")
        self.database_url = database_url
        self.timeout_sec = timeout_sec

    def _conn(self) -> psycopg.Connection:
        kwargs: dict[str, Any] = {"row_factory": dict_row}
        if self.timeout_sec is not None:
            kwargs["connect_timeout"] = max(1, int(round(self.timeout_sec)))
            kwargs["options"] = f"-c statement_timeout={int(self.timeout_sec * 1000)}"
        return psycopg.connect(self.database_url, **kwargs)

    @contextmanager
    def _cursor(self) -> Iterator[psycopg.Cursor]:
        try:
            with self._conn() as conn:
                with conn.cursor() as cur:
                    yield cur
                conn.commit()
        except errors.UniqueViolation as exc:
            raise ConflictError(str(exc).strip()) from exc
        except errors.ForeignKeyViolation as exc:
            raise ConflictError(str(exc).strip()) from exc
        except errors.QueryCanceled as exc:
            raise StoreTimeoutError(f"statement exceeded {self.timeout_sec}s") from exc
        except psycopg.OperationalError as exc:
            if "timeout" in str(exc).lower():
                raise StoreTimeoutError(str(exc).strip()) from exc
            raise

    def init_schema(self) -> None:
        with self._cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
        logger.info("cut store schema ready")

    def get_cut(self, cut_id: int) -> NormalizedCut | None:
        with self._cursor() as cur:
            cur.execute(f"select {CUT_COLUMNS} from normalized_cuts where id = %s", (cut_id,))
            row = cur.fetchone()
        return _cut_from_row(row) if row else None

    def find_cut(self, name: str, category: str | None = None) -> NormalizedCut | None:
        query = f"select {CUT_COLUMNS} from normalized_cuts where name_key = %s"
        params: list[Any] = [preprocess(name)]
        if category is not None:
            query += " and category = %s"
            params.append(category)
        query += " order by id limit 1"
        with self._cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        return _cut_from_row(row) if row else None

    def list_cuts(self, category: str | None = None) -> list[NormalizedCut]:
        query = f"select {CUT_COLUMNS} from normalized_cuts"
        params: list[Any] = []
        if category is not None:
            query += " where category = %s"
            params.append(category)
        query += " order by id"
        with self._cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [_cut_from_row(row) for row in rows]

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
        with self._cursor() as cur:
            cur.execute(
                f"""
                insert into normalized_cuts (
                  name, name_key, category, cut_type, subcategory, description,
                  is_premium, typical_weight_range, cooking_methods
                ) values (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                returning {CUT_COLUMNS}
                """,
                (
                    name,
                    preprocess(name),
                    category,
                    cut_type,
                    subcategory,
                    description,
                    is_premium,
                    typical_weight_range,
                    list(cooking_methods or []),
                ),
            )
            row = cur.fetchone()
        return _cut_from_row(row)

    def update_cut(self, cut_id: int, **changes: object) -> NormalizedCut:
        check_cut_changes(changes)
        if not changes:
            cut = self.get_cut(cut_id)
            if cut is None:
                raise NotFoundError(f"normalized cut not found: {cut_id}")
            return cut

        columns = dict(changes)
        if "name" in columns:
            columns["name_key"] = preprocess(str(columns["name"]))
        assignments = ", ".join(f"{column} = %s" for column in columns)
        with self._cursor() as cur:
            cur.execute(
                f"""
                update normalized_cuts set {assignments}, updated_at = now()
                where id = %s
                returning {CUT_COLUMNS}
                """,
                [*columns.values(), cut_id],
            )
            row = cur.fetchone()
        if not row:
            raise NotFoundError(f"normalized cut not found: {cut_id}")
        return _cut_from_row(row)

    def delete_cut(self, cut_id: int) -> None:
        with self._cursor() as cur:
            cur.execute("delete from normalized_cuts where id = %s returning id", (cut_id,))
            row = cur.fetchone()
        if not row:
            raise NotFoundError(f"normalized cut not found: {cut_id}")

    def get_variation(self, variation_id: int) -> CutVariation | None:
        with self._cursor() as cur:
            cur.execute(f"select {VARIATION_COLUMNS} from cut_variations where id = %s", (variation_id,))
            row = cur.fetchone()
        return _variation_from_row(row) if row else None

    def find_variation(self, name: str) -> CutVariation | None:
        with self._cursor() as cur:
            cur.execute(
                f"select {VARIATION_COLUMNS} from cut_variations where name_key = %s",
                (preprocess(name),),
            )
            row = cur.fetchone()
        return _variation_from_row(row) if row else None

    def list_variations(
        self,
        *,
        category: str | None = None,
        normalized_cut_id: int | None = None,
        verified: bool | None = None,
    ) -> list[CutVariation]:
        columns = ", ".join(f"cv.{column.strip()}" for column in VARIATION_COLUMNS.split(","))
        query = f"select {columns} from cut_variations cv join normalized_cuts nc on nc.id = cv.normalized_cut_id"
        clauses: list[str] = []
        params: list[Any] = []
        if category is not None:
            clauses.append("nc.category = %s")
            params.append(category)
        if normalized_cut_id is not None:
            clauses.append("cv.normalized_cut_id = %s")
            params.append(normalized_cut_id)
        if verified is not None:
            clauses.append("cv.verified = %s")
            params.append(verified)
        if clauses:
            query += " where " + " and ".join(clauses)
        query += " order by cv.id"
        with self._cursor() as cur:
            cur.execute(query, params)
            rows = cur.fetchall()
        return [_variation_from_row(row) for row in rows]

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
        try:
            with self._cursor() as cur:
                cur.execute(
                    f"""
                    insert into cut_variations (
                      original_name, name_key, normalized_cut_id, confidence_score,
                      source, verified, created_by
                    ) values (%s, %s, %s, %s, %s, %s, %s)
                    returning {VARIATION_COLUMNS}
                    """,
                    (
                        original_name,
                        preprocess(original_name),
                        normalized_cut_id,
                        confidence_score,
                        source,
                        verified,
                        created_by,
                    ),
                )
                row = cur.fetchone()
        except ConflictError as exc:
            # Foreign key failures on insert mean the target cut is gone.
            if isinstance(exc.__cause__, errors.ForeignKeyViolation):
                raise NotFoundError(f"normalized cut not found: {normalized_cut_id}") from exc
            raise
        return _variation_from_row(row)

    def update_variation(
        self,
        variation_id: int,
        *,
        normalized_cut_id: int | None = None,
        confidence_score: float | None = None,
        verified: bool | None = None,
    ) -> CutVariation:
        columns: dict[str, Any] = {}
        if normalized_cut_id is not None:
            columns["normalized_cut_id"] = normalized_cut_id
        if confidence_score is not None:
            columns["confidence_score"] = confidence_score
        if verified is not None:
            columns["verified"] = verified
        if not columns:
            variation = self.get_variation(variation_id)
            if variation is None:
                raise NotFoundError(f"variation not found: {variation_id}")
            return variation

        assignments = ", ".join(f"{column} = %s" for column in columns)
        try:
            with self._cursor() as cur:
                cur.execute(
                    f"""
                    update cut_variations set {assignments}, updated_at = now()
                    where id = %s
                    returning {VARIATION_COLUMNS}
                    """,
                    [*columns.values(), variation_id],
                )
                row = cur.fetchone()
        except ConflictError as exc:
            if isinstance(exc.__cause__, errors.ForeignKeyViolation):
                raise NotFoundError(f"normalized cut not found: {normalized_cut_id}") from exc
            raise
        if not row:
            raise NotFoundError(f"variation not found: {variation_id}")
        return _variation_from_row(row)

    def delete_variation(self, variation_id: int) -> None:
        with self._cursor() as cur:
            cur.execute("delete from cut_variations where id = %s returning id", (variation_id,))
            row = cur.fetchone()
        if not row:
            raise NotFoundError(f"variation not found: {variation_id}")

    def stats(self) -> list[CategoryStats]:
        with self._cursor() as cur:
            cur.execute(
                """
                select
                  nc.category,
                  count(distinct nc.id) as normalized_cuts_count,
                  count(cv.id) as variations_count,
                  avg(cv.confidence_score) as avg_confidence,
                  count(cv.id) filter (where cv.verified) as verified_variations
                from normalized_cuts nc
                left join cut_variations cv on cv.normalized_cut_id = nc.id
                group by nc.category
                order by nc.category
                """
            )
            rows = cur.fetchall()
        return [
            CategoryStats(
                category=row["category"],
                normalized_cuts_count=int(row["normalized_cuts_count"]),
                variations_count=int(row["variations_count"]),
                avg_confidence=round(float(row["avg_confidence"]), 4) if row["avg_confidence"] is not None else None,
                verified_variations=int(row["verified_variations"]),
            )
            for row in rows
        ]


def _cut_from_row(row: dict[str, Any]) -> NormalizedCut:
    data = dict(row)
    data["cooking_methods"] = list(data.get("cooking_methods") or [])
    return NormalizedCut.model_validate(data)


def _variation_from_row(row: dict[str, Any]) -> CutVariation:
    return CutVariation.model_validate(dict(row))
