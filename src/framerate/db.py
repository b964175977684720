from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .schemas import BuildAnalysis, Product, ValidationIssue

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS products (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  category TEXT,
  brand TEXT,
  specs_json TEXT,
  updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quotes (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  compatibility_status TEXT,
  estimated_wattage INTEGER,
  validation_errors_json TEXT,
  last_analyzed_at TEXT,
  created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS quote_items (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  quote_id TEXT NOT NULL REFERENCES quotes(id) ON DELETE CASCADE,
  product_id TEXT NOT NULL REFERENCES products(id),
  quantity INTEGER NOT NULL DEFAULT 1
);
"""


class QuoteRecord(BaseModel):
    """A saved quote plus the last analysis stored on it, if any."""

    id: str
    name: str
    compatibility_status: Optional[str] = None
    estimated_wattage: Optional[int] = None
    validation_errors: List[ValidationIssue] = Field(default_factory=list)
    last_analyzed_at: Optional[datetime] = None


def _load_specs(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        specs = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    return specs if isinstance(specs, dict) else {}


def _row_to_product(row: sqlite3.Row) -> Product:
    return Product(
        id=row["id"],
        name=row["name"],
        category=row["category"],
        brand=row["brand"],
        specs=_load_specs(row["specs_json"]),
    )


class CatalogRepository:
    """
    SQLite-backed store for products, quotes and the analysis cached on each quote.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def upsert_product(self, product: Product) -> str:
        """Insert or replace a product; generates an id when it has none."""
        product_id = product.id or str(uuid.uuid4())
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO products (id, name, category, brand, specs_json, updated_at)
                VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    category = excluded.category,
                    brand = excluded.brand,
                    specs_json = excluded.specs_json,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    product_id,
                    product.name,
                    product.category,
                    product.brand,
                    json.dumps(product.specs, ensure_ascii=False),
                ),
            )
            conn.commit()
        return product_id

    def find_product(self, product_id: str) -> Product | None:
        found = self.find_products([product_id])
        return found[0] if found else None

    def find_products(self, product_ids: Sequence[str]) -> List[Product]:
        """Products for ``product_ids`` in request order; unknown ids are left out."""
        ids = list(dict.fromkeys(product_ids))
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT id, name, category, brand, specs_json
                FROM products
                WHERE id IN ({placeholders})
                """,
                tuple(ids),
            ).fetchall()
        by_id = {row["id"]: _row_to_product(row) for row in rows}
        return [by_id[i] for i in ids if i in by_id]

    def create_quote(self, name: str, quote_id: str | None = None) -> str:
        quote_id = quote_id or str(uuid.uuid4())
        with self._connect() as conn:
            conn.execute("INSERT INTO quotes (id, name) VALUES (?, ?)", (quote_id, name))
            conn.commit()
        return quote_id

    def add_quote_item(self, quote_id: str, product_id: str, quantity: int = 1) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO quote_items (quote_id, product_id, quantity) VALUES (?, ?, ?)",
                (quote_id, product_id, max(1, int(quantity))),
            )
            conn.commit()

    def quote_products(self, quote_id: str) -> List[Product]:
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT p.id, p.name, p.category, p.brand, p.specs_json
                FROM quote_items qi
                JOIN products p ON p.id = qi.product_id
                WHERE qi.quote_id = ?
                ORDER BY qi.id
                """,
                (quote_id,),
            ).fetchall()
        return [_row_to_product(row) for row in rows]

    def get_quote(self, quote_id: str) -> QuoteRecord | None:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, name, compatibility_status, estimated_wattage,
                       validation_errors_json, last_analyzed_at
                FROM quotes
                WHERE id = ?
                """,
                (quote_id,),
            ).fetchone()
        if row is None:
            return None
        issues = json.loads(row["validation_errors_json"]) if row["validation_errors_json"] else []
        return QuoteRecord(
            id=row["id"],
            name=row["name"],
            compatibility_status=row["compatibility_status"],
            estimated_wattage=row["estimated_wattage"],
            validation_errors=[ValidationIssue.model_validate(item) for item in issues],
            last_analyzed_at=row["last_analyzed_at"],
        )

    def save_analysis(self, quote_id: str, analysis: BuildAnalysis) -> None:
        """Overwrite the analysis cached on a quote."""
        payload = analysis.as_dict()
        with self._connect() as conn:
            conn.execute(
                """
                UPDATE quotes SET
                    compatibility_status = ?,
                    estimated_wattage = ?,
                    validation_errors_json = ?,
                    last_analyzed_at = ?
                WHERE id = ?
                """,
                (
                    payload["status"],
                    payload["estimatedWattage"],
                    json.dumps(payload["issues"], ensure_ascii=False),
                    payload["analyzedAt"],
                    quote_id,
                ),
            )
            conn.commit()
        logger.debug("Stored analysis for quote %s: %s", quote_id, payload["status"])
