import sqlite3
from datetime import datetime, timezone

from framerate.db import CatalogRepository
from framerate.schemas import BuildAnalysis, Product, ValidationIssue


def test_schema_is_created_in_missing_directory(tmp_path):
    repo = CatalogRepository(tmp_path / "nested" / "dir" / "catalog.db")
    assert repo.db_path.exists()


def test_upsert_generates_id_and_updates_in_place(repo):
    product_id = repo.upsert_product(Product(name="RM750e", category="psu", specs={"power_output": "750W"}))
    assert product_id

    repo.upsert_product(Product(id=product_id, name="RM750e v2", category="psu", specs={"power_output": "750 W"}))
    stored = repo.find_product(product_id)
    assert stored.name == "RM750e v2"
    assert stored.specs == {"power_output": "750 W"}


def test_find_products_keeps_request_order_and_skips_unknown(repo):
    for pid in ("a", "b", "c"):
        repo.upsert_product(Product(id=pid, name=pid.upper(), category="ssd"))

    found = repo.find_products(["c", "missing", "a", "c"])

    assert [p.id for p in found] == ["c", "a"]
    assert repo.find_products([]) == []
    assert repo.find_product("missing") is None


def test_malformed_specs_read_as_empty(repo):
    with sqlite3.connect(repo.db_path) as conn:
        conn.execute(
            "INSERT INTO products (id, name, category, specs_json) VALUES (?, ?, ?, ?)",
            ("broken", "Broken", "cpu", "{not json"),
        )
        conn.execute(
            "INSERT INTO products (id, name, category, specs_json) VALUES (?, ?, ?, ?)",
            ("listy", "Listy", "cpu", "[1, 2]"),
        )
        conn.commit()

    assert repo.find_product("broken").specs == {}
    assert repo.find_product("listy").specs == {}


def test_quote_items_come_back_in_insertion_order(repo):
    repo.upsert_product(Product(id="cpu-1", name="CPU", category="cpu"))
    repo.upsert_product(Product(id="gpu-1", name="GPU", category="gpu"))
    quote_id = repo.create_quote("Gaming build")
    repo.add_quote_item(quote_id, "gpu-1")
    repo.add_quote_item(quote_id, "cpu-1", quantity=0)

    assert [p.id for p in repo.quote_products(quote_id)] == ["gpu-1", "cpu-1"]


def test_get_quote_unknown_returns_none(repo):
    assert repo.get_quote("nope") is None


def test_save_analysis_round_trips_through_quote(repo):
    quote_id = repo.create_quote("Office build", quote_id="q-1")
    analysis = BuildAnalysis(
        status="incompatible",
        estimated_wattage=315,
        issues=[ValidationIssue(code="INSUFFICIENT_WATTAGE", severity="error", message="short", component_a="psu")],
        analyzed_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
    )

    repo.save_analysis(quote_id, analysis)
    quote = repo.get_quote(quote_id)

    assert quote.compatibility_status == "incompatible"
    assert quote.estimated_wattage == 315
    assert quote.validation_errors == list(analysis.issues)
    assert quote.last_analyzed_at == analysis.analyzed_at


def test_fresh_quote_has_no_analysis(repo):
    quote = repo.get_quote(repo.create_quote("Empty"))
    assert quote.compatibility_status is None
    assert quote.estimated_wattage is None
    assert quote.validation_errors == []
    assert quote.last_analyzed_at is None
