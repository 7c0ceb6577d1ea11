"""
SQLite repositories for governance data: brands, compliance rules, scores,
change requests, five-star ratings, share of voice and reach planning rows.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from src.adapters.sqlite.repos import SQLiteRepoBase, _placeholders, _to_db
from src.domain.entities import (
    Brand,
    ChangeRequest,
    ComplianceRule,
    FiveStarsCriterion,
    FiveStarsRating,
    MediaSufficiency,
    Score,
    ShareOfVoice,
    utc_now,
)


def _where(clauses: list[str]) -> str:
    return (" WHERE " + " AND ".join(clauses)) if clauses else ""


def _country_restriction(
    column: str, country_ids: list[int] | None, clauses: list[str], params: list[Any]
) -> None:
    if country_ids is None:
        return
    if not country_ids:
        clauses.append("1 = 0")
        return
    clauses.append(f"{column} IN ({_placeholders(country_ids)})")
    params.extend(country_ids)


class SQLiteBrandRepo(SQLiteRepoBase):
    def list_all(self) -> list[Brand]:
        return [Brand.model_validate(r) for r in self._fetch_all("SELECT * FROM brands ORDER BY name")]

    def get_by_id(self, brand_id: int) -> Brand | None:
        return self._get_model(Brand, "brands", brand_id)

    def get_by_name(self, name: str) -> Brand | None:
        return self._get_model_by_name(Brand, "brands", name)

    def save(self, brand: Brand) -> Brand:
        return self._save_model("brands", brand)


class SQLiteComplianceRuleRepo(SQLiteRepoBase):
    def list_all(self, platform: str | None = None, status: str | None = None) -> list[ComplianceRule]:
        clauses: list[str] = []
        params: list[Any] = []
        if platform:
            clauses.append("platform = ?")
            params.append(platform)
        if status:
            clauses.append("status = ?")
            params.append(status)
        rows = self._fetch_all(f"SELECT * FROM rules{_where(clauses)} ORDER BY platform, id", params)
        return [ComplianceRule.model_validate(r) for r in rows]

    def get_by_id(self, rule_id: int) -> ComplianceRule | None:
        return self._get_model(ComplianceRule, "rules", rule_id)

    def save(self, rule: ComplianceRule) -> ComplianceRule:
        rule.updated_at = utc_now()
        return self._save_model("rules", rule)

    def delete(self, rule_id: int) -> None:
        self._execute("DELETE FROM rules WHERE id = ?", (rule_id,))


class SQLiteScoreRepo(SQLiteRepoBase):
    _SELECT = """
        SELECT s.*, r.title AS rule_title, c.name AS country, b.name AS brand
        FROM scores s
        LEFT JOIN rules r ON r.id = s.rule_id
        LEFT JOIN countries c ON c.id = s.country_id
        LEFT JOIN brands b ON b.id = s.brand_id
    """

    def list_filtered(
        self,
        platform: str | None = None,
        country_id: int | None = None,
        brand_id: int | None = None,
        rule_id: int | None = None,
        month: str | None = None,
        limit: int | None = None,
        country_ids: list[int] | None = None,
    ) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("s.platform", platform),
            ("s.country_id", country_id),
            ("s.brand_id", brand_id),
            ("s.rule_id", rule_id),
            ("s.month", month),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        _country_restriction("s.country_id", country_ids, clauses, params)

        sql = self._SELECT + _where(clauses) + " ORDER BY s.month DESC, s.id"
        if limit:
            sql += " LIMIT ?"
            params.append(limit)
        return self._fetch_all(sql, params)

    def get_by_id(self, score_id: int) -> Score | None:
        return self._get_model(Score, "scores", score_id)

    def save(self, score: Score) -> Score:
        score.updated_at = utc_now()
        return self._save_model("scores", score)


class SQLiteChangeRequestRepo(SQLiteRepoBase):
    def list_filtered(
        self,
        status: str | None = None,
        score_id: int | None = None,
        month: str | None = None,
        country_id: int | None = None,
        brand_id: int | None = None,
        platform: str | None = None,
        since: datetime | None = None,
        country_ids: list[int] | None = None,
    ) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("cr.status", status),
            ("cr.score_id", score_id),
            ("s.month", month),
            ("s.country_id", country_id),
            ("s.brand_id", brand_id),
            ("s.platform", platform),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if since is not None:
            clauses.append("cr.created_at >= ?")
            params.append(since.isoformat())
        _country_restriction("s.country_id", country_ids, clauses, params)

        return self._fetch_all(
            """
            SELECT cr.*, s.score AS current_score, s.platform, s.month,
                   s.country_id, s.brand_id, s.rule_id,
                   c.name AS country, b.name AS brand, u.email AS user_email
            FROM change_requests cr
            JOIN scores s ON s.id = cr.score_id
            LEFT JOIN countries c ON c.id = s.country_id
            LEFT JOIN brands b ON b.id = s.brand_id
            LEFT JOIN users u ON u.id = cr.user_id
            """
            + _where(clauses)
            + " ORDER BY cr.created_at DESC",
            params,
        )

    def get_by_id(self, request_id: int) -> ChangeRequest | None:
        return self._get_model(ChangeRequest, "change_requests", request_id)

    def save(self, request: ChangeRequest) -> ChangeRequest:
        request.updated_at = utc_now()
        return self._save_model("change_requests", request)


class SQLiteFiveStarsRepo(SQLiteRepoBase):
    def list_criteria(self) -> list[FiveStarsCriterion]:
        rows = self._fetch_all("SELECT * FROM five_stars_criteria ORDER BY id")
        return [FiveStarsCriterion.model_validate(r) for r in rows]

    def get_criterion(self, criterion_id: int) -> FiveStarsCriterion | None:
        return self._get_model(FiveStarsCriterion, "five_stars_criteria", criterion_id)

    def get_rating(self, rating_id: int) -> FiveStarsRating | None:
        return self._get_model(FiveStarsRating, "five_stars_ratings", rating_id)

    def list_ratings(
        self,
        month: str | None = None,
        brand_id: int | None = None,
        country_id: int | None = None,
        criterion_id: int | None = None,
        country_ids: list[int] | None = None,
    ) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("fr.month", month),
            ("fr.brand_id", brand_id),
            ("fr.country_id", country_id),
            ("fr.criterion_id", criterion_id),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        _country_restriction("fr.country_id", country_ids, clauses, params)
        return self._fetch_all(
            """
            SELECT fr.*, c.name AS country, b.name AS brand, fc.name AS criterion
            FROM five_stars_ratings fr
            LEFT JOIN countries c ON c.id = fr.country_id
            LEFT JOIN brands b ON b.id = fr.brand_id
            LEFT JOIN five_stars_criteria fc ON fc.id = fr.criterion_id
            """
            + _where(clauses)
            + " ORDER BY c.name, fr.criterion_id",
            params,
        )

    def upsert_rating(self, rating: FiveStarsRating) -> FiveStarsRating:
        now = utc_now()
        self._execute(
            """
            INSERT INTO five_stars_ratings
                (criterion_id, country_id, brand_id, rating, month, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (criterion_id, country_id, brand_id, month)
            DO UPDATE SET rating = excluded.rating, updated_at = excluded.updated_at
            """,
            (
                rating.criterion_id,
                rating.country_id,
                rating.brand_id,
                rating.rating,
                rating.month,
                _to_db(rating.created_at),
                _to_db(now),
            ),
        )
        row = self._fetch_one(
            """
            SELECT * FROM five_stars_ratings
            WHERE criterion_id = ? AND country_id = ? AND brand_id = ? AND month = ?
            """,
            (rating.criterion_id, rating.country_id, rating.brand_id, rating.month),
        )
        return FiveStarsRating.model_validate(row)

    def delete_rating(self, rating_id: int) -> bool:
        cursor = self._execute("DELETE FROM five_stars_ratings WHERE id = ?", (rating_id,))
        return cursor.rowcount > 0


class SQLiteShareOfVoiceRepo(SQLiteRepoBase):
    _COLUMNS = (
        "country_id",
        "business_unit_id",
        "category",
        "company",
        "position",
        "total_tv_investment",
        "total_tv_trps",
        "total_digital_spend",
        "total_digital_impressions",
        "uploaded_by",
        "upload_session",
        "created_at",
    )

    def replace_for(self, country_id: int, business_unit_id: int, rows: list[ShareOfVoice]) -> int:
        """Delete existing rows for the country/BU pair and insert ``rows`` atomically."""
        insert_sql = (
            f"INSERT INTO share_of_voice ({', '.join(self._COLUMNS)}) "
            f"VALUES ({_placeholders(self._COLUMNS)})"
        )
        statements: list[tuple[str, list[Any]]] = [
            (
                "DELETE FROM share_of_voice WHERE country_id = ? AND business_unit_id = ?",
                [country_id, business_unit_id],
            )
        ]
        for row in rows:
            data = row.model_dump()
            statements.append((insert_sql, [_to_db(data[c]) for c in self._COLUMNS]))
        self._execute_many(statements)
        return len(rows)

    def list_filtered(
        self,
        country_id: int | None = None,
        business_unit_id: int | None = None,
        category: str | None = None,
        country_ids: list[int] | None = None,
    ) -> list[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (
            ("sv.country_id", country_id),
            ("sv.business_unit_id", business_unit_id),
            ("sv.category", category),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        _country_restriction("sv.country_id", country_ids, clauses, params)
        return self._fetch_all(
            """
            SELECT sv.*, c.name AS country, bu.name AS business_unit
            FROM share_of_voice sv
            LEFT JOIN countries c ON c.id = sv.country_id
            LEFT JOIN business_units bu ON bu.id = sv.business_unit_id
            """
            + _where(clauses)
            + " ORDER BY sv.category, sv.position",
            params,
        )


class SQLiteMediaSufficiencyRepo(SQLiteRepoBase):
    def save(self, row: MediaSufficiency) -> MediaSufficiency:
        return self._save_model("media_sufficiency", row)

    def list_filtered(
        self,
        last_updates: list[str] | None = None,
        country_ids: list[int] | None = None,
    ) -> list[MediaSufficiency]:
        clauses: list[str] = []
        params: list[Any] = []
        if last_updates:
            clauses.append(f"last_update IN ({_placeholders(last_updates)})")
            params.extend(last_updates)
        _country_restriction("country_id", country_ids, clauses, params)
        rows = self._fetch_all(
            f"SELECT * FROM media_sufficiency{_where(clauses)} ORDER BY country, campaign", params
        )
        return [MediaSufficiency.model_validate(r) for r in rows]

    def count_for_session(self, session_id: str) -> int:
        return int(
            self._scalar(
                "SELECT COUNT(*) FROM media_sufficiency WHERE upload_session = ?", (session_id,)
            )
        )
