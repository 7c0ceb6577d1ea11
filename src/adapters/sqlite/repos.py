"""
SQLite repositories for users, the organisational hierarchy, the product
and media taxonomies, financial cycles and game plans.

All writes run inside try/commit/rollback/close; reads return pydantic
entities or plain dicts for joined listing queries.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel

from src.domain.entities import (
    BusinessUnit,
    Campaign,
    Category,
    Cluster,
    Country,
    GamePlan,
    LastUpdate,
    MediaSubType,
    MediaType,
    PMType,
    Range,
    Region,
    SubRegion,
    User,
    utc_now,
)

M = TypeVar("M", bound=BaseModel)


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def _to_db(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    return value


def _placeholders(values: Sequence[Any]) -> str:
    return ", ".join("?" for _ in values)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        return self._external_conn is None

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, tuple(params)).fetchall()
            return rows
        finally:
            if self._should_close():
                conn.close()

    def _fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, tuple(params)).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _scalar(self, sql: str, params: Sequence[Any] = ()) -> Any:
        row = self._fetch_one(sql, params)
        if not row:
            return None
        return next(iter(row.values()))

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, tuple(params))
            if self._should_close():
                conn.commit()
            return cursor
        except Exception:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()

    def _execute_many(self, statements: Iterable[tuple[str, Sequence[Any]]]) -> None:
        conn = self._get_conn()
        try:
            for sql, params in statements:
                conn.execute(sql, tuple(params))
            if self._should_close():
                conn.commit()
        except Exception:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()

    def _save_model(self, table: str, model: M, exclude: set[str] | None = None) -> M:
        """Insert when ``model.id`` is None, otherwise update by id."""
        data = model.model_dump(exclude={"id", *(exclude or set())})
        columns = list(data.keys())
        values = [_to_db(data[c]) for c in columns]

        if getattr(model, "id", None) is None:
            cursor = self._execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({_placeholders(columns)})",
                values,
            )
            model.id = cursor.lastrowid  # type: ignore[attr-defined]
        else:
            assignments = ", ".join(f"{c} = ?" for c in columns)
            self._execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                [*values, model.id],  # type: ignore[attr-defined]
            )
        return model

    def _get_model(self, cls: type[M], table: str, item_id: int) -> M | None:
        row = self._fetch_one(f"SELECT * FROM {table} WHERE id = ?", (item_id,))
        return cls.model_validate(row) if row else None

    def _get_model_by_name(self, cls: type[M], table: str, name: str) -> M | None:
        row = self._fetch_one(
            f"SELECT * FROM {table} WHERE lower(name) = lower(?)", (name.strip(),)
        )
        return cls.model_validate(row) if row else None


# --- Users ---


class SQLiteUserRepo(SQLiteRepoBase):
    def _map(self, row: dict[str, Any] | None) -> User | None:
        return User.model_validate(row) if row else None

    def get_by_id(self, user_id: int) -> User | None:
        return self._map(self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,)))

    def get_by_email(self, email: str) -> User | None:
        return self._map(
            self._fetch_one(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            )
        )

    def get_by_verification_token(self, token: str) -> User | None:
        return self._map(
            self._fetch_one("SELECT * FROM users WHERE verification_token = ?", (token,))
        )

    def get_by_reset_token(self, token: str) -> User | None:
        return self._map(
            self._fetch_one("SELECT * FROM users WHERE password_reset_token = ?", (token,))
        )

    def save(self, user: User) -> User:
        user.email = user.email.strip().lower()
        return self._save_model("users", user, exclude={"is_demo"})

    def delete(self, user_id: int) -> None:
        self._execute("DELETE FROM users WHERE id = ?", (user_id,))

    def list_all(self) -> list[User]:
        rows = self._fetch_all("SELECT * FROM users ORDER BY email")
        return [User.model_validate(r) for r in rows]


# --- Organisational hierarchy ---


class SQLiteRegionRepo(SQLiteRepoBase):
    """Regions, sub-regions and clusters."""

    def list_regions(self) -> list[Region]:
        return [Region.model_validate(r) for r in self._fetch_all("SELECT * FROM regions ORDER BY name")]

    def get_region(self, region_id: int) -> Region | None:
        return self._get_model(Region, "regions", region_id)

    def get_region_by_name(self, name: str) -> Region | None:
        return self._get_model_by_name(Region, "regions", name)

    def save_region(self, region: Region) -> Region:
        return self._save_model("regions", region)

    def list_sub_regions(self) -> list[dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT s.id, s.name, s.region_id, r.name AS region
            FROM sub_regions s LEFT JOIN regions r ON r.id = s.region_id
            ORDER BY s.name
            """
        )

    def get_sub_region(self, sub_region_id: int) -> SubRegion | None:
        return self._get_model(SubRegion, "sub_regions", sub_region_id)

    def get_sub_region_by_name(self, name: str) -> SubRegion | None:
        return self._get_model_by_name(SubRegion, "sub_regions", name)

    def save_sub_region(self, sub_region: SubRegion) -> SubRegion:
        return self._save_model("sub_regions", sub_region)

    def list_clusters(self) -> list[Cluster]:
        return [Cluster.model_validate(r) for r in self._fetch_all("SELECT * FROM clusters ORDER BY name")]

    def get_cluster(self, cluster_id: int) -> Cluster | None:
        return self._get_model(Cluster, "clusters", cluster_id)

    def save_cluster(self, cluster: Cluster) -> Cluster:
        return self._save_model("clusters", cluster)


class SQLiteCountryRepo(SQLiteRepoBase):
    _DETAIL_SQL = """
        SELECT c.id, c.name, c.region_id, r.name AS region,
               c.sub_region_id, s.name AS sub_region,
               c.cluster_id, cl.name AS cluster,
               c.created_at, c.updated_at,
               (SELECT COUNT(*) FROM game_plans g WHERE g.country_id = c.id) AS game_plans_count
        FROM countries c
        LEFT JOIN regions r ON r.id = c.region_id
        LEFT JOIN sub_regions s ON s.id = c.sub_region_id
        LEFT JOIN clusters cl ON cl.id = c.cluster_id
    """

    def list_with_details(self, country_ids: list[int] | None = None) -> list[dict[str, Any]]:
        if country_ids is None:
            return self._fetch_all(self._DETAIL_SQL + " ORDER BY c.name")
        if not country_ids:
            return []
        return self._fetch_all(
            self._DETAIL_SQL + f" WHERE c.id IN ({_placeholders(country_ids)}) ORDER BY c.name",
            country_ids,
        )

    def get_details(self, country_id: int) -> dict[str, Any] | None:
        return self._fetch_one(self._DETAIL_SQL + " WHERE c.id = ?", (country_id,))

    def list_all(self) -> list[Country]:
        return [Country.model_validate(r) for r in self._fetch_all("SELECT * FROM countries ORDER BY name")]

    def get_by_id(self, country_id: int) -> Country | None:
        return self._get_model(Country, "countries", country_id)

    def get_by_name(self, name: str) -> Country | None:
        return self._get_model_by_name(Country, "countries", name)

    def save(self, country: Country) -> Country:
        country.updated_at = utc_now()
        return self._save_model("countries", country)

    def delete(self, country_id: int) -> None:
        self._execute("DELETE FROM countries WHERE id = ?", (country_id,))

    def count_game_plans(self, country_id: int) -> int:
        return int(self._scalar("SELECT COUNT(*) FROM game_plans WHERE country_id = ?", (country_id,)))


# --- Product taxonomy ---


class SQLiteBusinessUnitRepo(SQLiteRepoBase):
    def list_all(self) -> list[BusinessUnit]:
        return [
            BusinessUnit.model_validate(r)
            for r in self._fetch_all("SELECT * FROM business_units ORDER BY name")
        ]

    def get_by_id(self, bu_id: int) -> BusinessUnit | None:
        return self._get_model(BusinessUnit, "business_units", bu_id)

    def get_by_name(self, name: str) -> BusinessUnit | None:
        return self._get_model_by_name(BusinessUnit, "business_units", name)

    def save(self, bu: BusinessUnit) -> BusinessUnit:
        return self._save_model("business_units", bu)

    def link_category(self, bu_id: int, category_id: int) -> None:
        self._execute(
            "INSERT OR IGNORE INTO business_unit_categories (business_unit_id, category_id) "
            "VALUES (?, ?)",
            (bu_id, category_id),
        )

    def category_names(self, bu_id: int) -> list[str]:
        rows = self._fetch_all(
            """
            SELECT c.name FROM categories c
            JOIN business_unit_categories bc ON bc.category_id = c.id
            WHERE bc.business_unit_id = ? ORDER BY c.name
            """,
            (bu_id,),
        )
        return [r["name"] for r in rows]


class SQLiteCategoryRepo(SQLiteRepoBase):
    def list_all(self) -> list[Category]:
        return [Category.model_validate(r) for r in self._fetch_all("SELECT * FROM categories ORDER BY name")]

    def get_by_id(self, category_id: int) -> Category | None:
        return self._get_model(Category, "categories", category_id)

    def get_by_name(self, name: str) -> Category | None:
        return self._get_model_by_name(Category, "categories", name)

    def find_in_business_unit(self, name: str, bu_id: int) -> Category | None:
        row = self._fetch_one(
            """
            SELECT c.* FROM categories c
            JOIN business_unit_categories bc ON bc.category_id = c.id
            WHERE bc.business_unit_id = ? AND lower(c.name) = lower(?)
            """,
            (bu_id, name.strip()),
        )
        return Category.model_validate(row) if row else None

    def save(self, category: Category) -> Category:
        category.updated_at = utc_now()
        return self._save_model("categories", category)

    def delete(self, category_id: int) -> None:
        self._execute("DELETE FROM categories WHERE id = ?", (category_id,))

    def count_ranges(self, category_id: int) -> int:
        return int(
            self._scalar("SELECT COUNT(*) FROM category_ranges WHERE category_id = ?", (category_id,))
        )

    def count_game_plans(self, category_id: int) -> int:
        return int(
            self._scalar("SELECT COUNT(*) FROM game_plans WHERE category_id = ?", (category_id,))
        )

    def hierarchy(self) -> list[dict[str, Any]]:
        """Business units with their categories, each category with its ranges."""
        rows = self._fetch_all(
            """
            SELECT bu.id AS bu_id, bu.name AS bu_name,
                   c.id AS category_id, c.name AS category_name,
                   r.id AS range_id, r.name AS range_name,
                   (SELECT COUNT(*) FROM campaigns cp WHERE cp.range_id = r.id) AS campaigns_count
            FROM business_units bu
            LEFT JOIN business_unit_categories bc ON bc.business_unit_id = bu.id
            LEFT JOIN categories c ON c.id = bc.category_id
            LEFT JOIN category_ranges cr ON cr.category_id = c.id
            LEFT JOIN ranges r ON r.id = cr.range_id
            ORDER BY bu.name, c.name, r.name
            """
        )
        units: dict[int, dict[str, Any]] = {}
        for row in rows:
            unit = units.setdefault(
                row["bu_id"], {"id": row["bu_id"], "name": row["bu_name"], "categories": []}
            )
            if row["category_id"] is None:
                continue
            categories: list[dict[str, Any]] = unit["categories"]
            if not categories or categories[-1]["id"] != row["category_id"]:
                categories.append(
                    {"id": row["category_id"], "name": row["category_name"], "ranges": []}
                )
            if row["range_id"] is not None:
                categories[-1]["ranges"].append(
                    {
                        "id": row["range_id"],
                        "name": row["range_name"],
                        "campaignsCount": row["campaigns_count"],
                    }
                )
        return list(units.values())


class SQLiteRangeRepo(SQLiteRepoBase):
    def list_with_details(self) -> list[dict[str, Any]]:
        rows = self._fetch_all(
            """
            SELECT r.*,
                   (SELECT COUNT(*) FROM campaigns cp WHERE cp.range_id = r.id) AS campaigns_count,
                   (SELECT group_concat(c.name, '|') FROM category_ranges cr
                      JOIN categories c ON c.id = cr.category_id
                     WHERE cr.range_id = r.id) AS category_names
            FROM ranges r ORDER BY r.name
            """
        )
        for row in rows:
            names = row.pop("category_names")
            row["categories"] = sorted(names.split("|")) if names else []
            row["categories_count"] = len(row["categories"])
        return rows

    def list_all(self) -> list[Range]:
        return [Range.model_validate(r) for r in self._fetch_all("SELECT * FROM ranges ORDER BY name")]

    def get_by_id(self, range_id: int) -> Range | None:
        return self._get_model(Range, "ranges", range_id)

    def get_by_name(self, name: str) -> Range | None:
        return self._get_model_by_name(Range, "ranges", name)

    def save(self, item: Range) -> Range:
        item.updated_at = utc_now()
        return self._save_model("ranges", item)

    def delete(self, range_id: int) -> None:
        self._execute("DELETE FROM ranges WHERE id = ?", (range_id,))

    def category_ids(self, range_id: int) -> list[int]:
        rows = self._fetch_all(
            "SELECT category_id FROM category_ranges WHERE range_id = ? ORDER BY category_id",
            (range_id,),
        )
        return [r["category_id"] for r in rows]

    def add_category(self, range_id: int, category_id: int) -> None:
        self._execute(
            "INSERT OR IGNORE INTO category_ranges (category_id, range_id) VALUES (?, ?)",
            (category_id, range_id),
        )

    def set_categories(self, range_id: int, category_ids: list[int]) -> None:
        statements: list[tuple[str, Sequence[Any]]] = [
            ("DELETE FROM category_ranges WHERE range_id = ?", (range_id,))
        ]
        statements.extend(
            ("INSERT INTO category_ranges (category_id, range_id) VALUES (?, ?)", (cid, range_id))
            for cid in dict.fromkeys(category_ids)
        )
        self._execute_many(statements)

    def count_campaigns(self, range_id: int) -> int:
        return int(self._scalar("SELECT COUNT(*) FROM campaigns WHERE range_id = ?", (range_id,)))


class SQLiteCampaignRepo(SQLiteRepoBase):
    def list_with_details(self) -> list[dict[str, Any]]:
        rows = self._fetch_all(
            """
            SELECT cp.*, r.name AS range,
                   (SELECT COUNT(*) FROM game_plans g WHERE g.campaign_id = cp.id) AS game_plans_count,
                   (SELECT group_concat(DISTINCT c.name) FROM category_ranges cr
                      JOIN categories c ON c.id = cr.category_id
                     WHERE cr.range_id = cp.range_id) AS category_names,
                   (SELECT group_concat(DISTINCT bu.name) FROM category_ranges cr
                      JOIN business_unit_categories bc ON bc.category_id = cr.category_id
                      JOIN business_units bu ON bu.id = bc.business_unit_id
                     WHERE cr.range_id = cp.range_id) AS business_unit_names
            FROM campaigns cp
            LEFT JOIN ranges r ON r.id = cp.range_id
            ORDER BY cp.name
            """
        )
        for row in rows:
            cats = row.pop("category_names")
            bus = row.pop("business_unit_names")
            row["categories"] = sorted(cats.split(",")) if cats else []
            row["business_units"] = sorted(bus.split(",")) if bus else []
        return rows

    def list_all(self) -> list[Campaign]:
        return [Campaign.model_validate(r) for r in self._fetch_all("SELECT * FROM campaigns ORDER BY name")]

    def get_by_id(self, campaign_id: int) -> Campaign | None:
        return self._get_model(Campaign, "campaigns", campaign_id)

    def get_by_name(self, name: str) -> Campaign | None:
        return self._get_model_by_name(Campaign, "campaigns", name)

    def save(self, campaign: Campaign) -> Campaign:
        campaign.updated_at = utc_now()
        return self._save_model("campaigns", campaign)

    def delete(self, campaign_id: int) -> None:
        self._execute("DELETE FROM campaigns WHERE id = ?", (campaign_id,))

    def count_game_plans(self, campaign_id: int) -> int:
        return int(
            self._scalar("SELECT COUNT(*) FROM game_plans WHERE campaign_id = ?", (campaign_id,))
        )


# --- Media taxonomy ---


class SQLiteMediaRepo(SQLiteRepoBase):
    """Media types, media sub types and PM types."""

    def list_media_types(self) -> list[MediaType]:
        return [MediaType.model_validate(r) for r in self._fetch_all("SELECT * FROM media_types ORDER BY name")]

    def get_media_type(self, media_type_id: int) -> MediaType | None:
        return self._get_model(MediaType, "media_types", media_type_id)

    def get_media_type_by_name(self, name: str) -> MediaType | None:
        return self._get_model_by_name(MediaType, "media_types", name)

    def save_media_type(self, media_type: MediaType) -> MediaType:
        return self._save_model("media_types", media_type)

    def list_sub_types(self) -> list[dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT s.*, m.name AS media_type,
                   (SELECT COUNT(*) FROM game_plans g WHERE g.media_sub_type_id = s.id) AS game_plans_count
            FROM media_sub_types s LEFT JOIN media_types m ON m.id = s.media_type_id
            ORDER BY m.name, s.name
            """
        )

    def get_sub_type(self, sub_type_id: int) -> MediaSubType | None:
        return self._get_model(MediaSubType, "media_sub_types", sub_type_id)

    def get_sub_type_by_name(self, name: str) -> MediaSubType | None:
        return self._get_model_by_name(MediaSubType, "media_sub_types", name)

    def find_sub_type(self, name: str, media_type_id: int) -> MediaSubType | None:
        row = self._fetch_one(
            "SELECT * FROM media_sub_types WHERE lower(name) = lower(?) AND media_type_id = ?",
            (name.strip(), media_type_id),
        )
        return MediaSubType.model_validate(row) if row else None

    def save_sub_type(self, sub_type: MediaSubType) -> MediaSubType:
        sub_type.updated_at = utc_now()
        return self._save_model("media_sub_types", sub_type)

    def delete_sub_type(self, sub_type_id: int) -> None:
        self._execute("DELETE FROM media_sub_types WHERE id = ?", (sub_type_id,))

    def count_sub_type_game_plans(self, sub_type_id: int) -> int:
        return int(
            self._scalar(
                "SELECT COUNT(*) FROM game_plans WHERE media_sub_type_id = ?", (sub_type_id,)
            )
        )

    def list_pm_types(self) -> list[PMType]:
        return [PMType.model_validate(r) for r in self._fetch_all("SELECT * FROM pm_types ORDER BY name")]

    def get_pm_type_by_name(self, name: str) -> PMType | None:
        return self._get_model_by_name(PMType, "pm_types", name)

    def save_pm_type(self, pm_type: PMType) -> PMType:
        return self._save_model("pm_types", pm_type)


# --- Planning ---


class SQLiteLastUpdateRepo(SQLiteRepoBase):
    def list_with_counts(self) -> list[dict[str, Any]]:
        return self._fetch_all(
            """
            SELECT l.*, (SELECT COUNT(*) FROM game_plans g WHERE g.last_update_id = l.id)
                   AS game_plans_count
            FROM last_updates l ORDER BY l.name DESC
            """
        )

    def get_by_id(self, last_update_id: int) -> LastUpdate | None:
        return self._get_model(LastUpdate, "last_updates", last_update_id)

    def get_by_name(self, name: str) -> LastUpdate | None:
        return self._get_model_by_name(LastUpdate, "last_updates", name)

    def save(self, item: LastUpdate) -> LastUpdate:
        item.updated_at = utc_now()
        return self._save_model("last_updates", item)

    def delete(self, last_update_id: int) -> None:
        self._execute("DELETE FROM last_updates WHERE id = ?", (last_update_id,))

    def count_game_plans(self, last_update_id: int) -> int:
        return int(
            self._scalar(
                "SELECT COUNT(*) FROM game_plans WHERE last_update_id = ?", (last_update_id,)
            )
        )


class SQLiteGamePlanRepo(SQLiteRepoBase):
    _FILTER_COLUMNS = ("country_id", "last_update_id", "campaign_id", "category_id", "year")

    def get_by_id(self, plan_id: int) -> GamePlan | None:
        return self._get_model(GamePlan, "game_plans", plan_id)

    def save(self, plan: GamePlan) -> GamePlan:
        plan.updated_at = utc_now()
        return self._save_model("game_plans", plan)

    def delete(self, plan_id: int) -> None:
        self._execute("DELETE FROM game_plans WHERE id = ?", (plan_id,))

    def find_duplicate(
        self,
        campaign_id: int,
        media_sub_type_id: int,
        start_date: str,
        end_date: str,
        last_update_id: int | None,
        country_id: int | None,
    ) -> GamePlan | None:
        row = self._fetch_one(
            """
            SELECT * FROM game_plans
            WHERE campaign_id = ? AND media_sub_type_id = ?
              AND start_date = ? AND end_date = ?
              AND last_update_id IS ? AND country_id IS ?
            """,
            (campaign_id, media_sub_type_id, start_date, end_date, last_update_id, country_id),
        )
        return GamePlan.model_validate(row) if row else None

    def delete_for_countries(self, country_ids: list[int], last_update_id: int) -> int:
        if not country_ids:
            return 0
        cursor = self._execute(
            f"DELETE FROM game_plans WHERE last_update_id = ? "
            f"AND country_id IN ({_placeholders(country_ids)})",
            [last_update_id, *country_ids],
        )
        return cursor.rowcount

    def list_filtered(
        self,
        filters: dict[str, Any] | None = None,
        country_ids: list[int] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Game plans joined with their taxonomy names.

        ``country_ids`` restricts to accessible countries; None means unrestricted.
        """
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (filters or {}).items():
            if column in self._FILTER_COLUMNS and value is not None:
                clauses.append(f"g.{column} = ?")
                params.append(value)
        if country_ids is not None:
            if not country_ids:
                return []
            clauses.append(f"g.country_id IN ({_placeholders(country_ids)})")
            params.extend(country_ids)

        sql = """
            SELECT g.*, cp.name AS campaign, ms.name AS media_sub_type, mt.name AS media_type,
                   pm.name AS pm_type, co.name AS country, ca.name AS category,
                   r.name AS range, bu.name AS business_unit, lu.name AS last_update
            FROM game_plans g
            JOIN campaigns cp ON cp.id = g.campaign_id
            JOIN media_sub_types ms ON ms.id = g.media_sub_type_id
            LEFT JOIN media_types mt ON mt.id = ms.media_type_id
            LEFT JOIN pm_types pm ON pm.id = g.pm_type_id
            LEFT JOIN countries co ON co.id = g.country_id
            LEFT JOIN categories ca ON ca.id = g.category_id
            LEFT JOIN ranges r ON r.id = g.range_id
            LEFT JOIN business_units bu ON bu.id = g.business_unit_id
            LEFT JOIN last_updates lu ON lu.id = g.last_update_id
        """
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY g.start_date, g.id"
        if limit:
            sql += " LIMIT ?"
            params.append(limit)
        return self._fetch_all(sql, params)


class SQLiteMasterDataRepo(SQLiteRepoBase):
    """Read-only relationship rows used to build the master data snapshot."""

    def names(self, table: str) -> list[str]:
        if table not in {
            "categories", "ranges", "campaigns", "countries", "sub_regions",
            "media_types", "media_sub_types", "pm_types", "business_units",
        }:
            raise ValueError(f"Unknown master data table: {table}")
        rows = self._fetch_all(f"SELECT DISTINCT name FROM {table} ORDER BY name")
        return [r["name"] for r in rows]

    def category_ranges(self) -> list[tuple[str, str]]:
        rows = self._fetch_all(
            """
            SELECT c.name AS category, r.name AS range FROM category_ranges cr
            JOIN categories c ON c.id = cr.category_id
            JOIN ranges r ON r.id = cr.range_id
            ORDER BY c.name, r.name
            """
        )
        return [(r["category"], r["range"]) for r in rows]

    def range_campaigns(self) -> list[tuple[str, str]]:
        rows = self._fetch_all(
            """
            SELECT r.name AS range, cp.name AS campaign FROM campaigns cp
            JOIN ranges r ON r.id = cp.range_id
            ORDER BY r.name, cp.name
            """
        )
        return [(r["range"], r["campaign"]) for r in rows]

    def country_sub_regions(self) -> list[tuple[str, str]]:
        rows = self._fetch_all(
            """
            SELECT c.name AS country, s.name AS sub_region FROM countries c
            JOIN sub_regions s ON s.id = c.sub_region_id
            ORDER BY c.name
            """
        )
        return [(r["country"], r["sub_region"]) for r in rows]

    def media_sub_types(self) -> list[tuple[str, str]]:
        rows = self._fetch_all(
            """
            SELECT m.name AS media, s.name AS sub_type FROM media_sub_types s
            JOIN media_types m ON m.id = s.media_type_id
            ORDER BY m.name, s.name
            """
        )
        return [(r["media"], r["sub_type"]) for r in rows]
