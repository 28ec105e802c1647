import sqlite3

from stock_tracker.repositories.stock_repository import StockRepository

from conftest import stock_payload


def _get_all(client, headers):
    resp = client.get("/api/v1/stocks/", headers=headers)
    assert resp.status_code == 200
    return resp.json()


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_defaults_quantity_sold_to_zero(client, auth_headers):
    resp = client.post("/api/v1/stocks/add", json=stock_payload(), headers=auth_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["itemName"] == "Widget"
    assert body["quantityReceived"] == 10
    assert body["quantitySold"] == 0
    assert body["unitPrice"] == 2
    assert body["sellingPrice"] == 3
    assert (body["week"], body["year"]) == (1, 2024)
    assert body["createdAt"] and body["updatedAt"]


def test_create_ignores_caller_supplied_quantity_sold(client, auth_headers):
    resp = client.post(
        "/api/v1/stocks/add",
        json=stock_payload(quantitySold=7),
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["quantitySold"] == 0


def test_create_sets_owner_from_token(client, auth_headers):
    me = client.get("/api/v1/auth/me", headers=auth_headers).json()
    resp = client.post(
        "/api/v1/stocks/add",
        json=stock_payload(ownerId=me["id"] + 100),
        headers=auth_headers,
    )
    assert resp.json()["ownerId"] == me["id"]


def test_create_allows_identical_records(client, auth_headers, add_stock):
    add_stock(auth_headers)
    add_stock(auth_headers)
    assert len(_get_all(client, auth_headers)) == 2


def test_create_without_selling_price(client, auth_headers):
    payload = stock_payload()
    del payload["sellingPrice"]
    resp = client.post("/api/v1/stocks/add", json=payload, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["sellingPrice"] is None


def test_create_rejects_missing_and_invalid_fields(client, auth_headers):
    payload = stock_payload()
    del payload["itemName"]
    assert client.post("/api/v1/stocks/add", json=payload, headers=auth_headers).status_code == 422

    for bad in (
        {"itemName": "   "},
        {"quantityReceived": -1},
        {"week": 0},
        {"week": 55},
    ):
        resp = client.post("/api/v1/stocks/add", json=stock_payload(**bad), headers=auth_headers)
        assert resp.status_code == 422, bad


# ---------------------------------------------------------------------------
# List
# ---------------------------------------------------------------------------

def test_list_only_returns_callers_records(client, auth_headers, other_headers, add_stock):
    mine = add_stock(auth_headers, itemName="Apples")
    add_stock(other_headers, itemName="Pears")

    records = _get_all(client, auth_headers)
    assert [r["id"] for r in records] == [mine["id"]]
    assert all(r["ownerId"] == mine["ownerId"] for r in records)


# ---------------------------------------------------------------------------
# Update sales
# ---------------------------------------------------------------------------

def test_update_sales_sets_quantity_sold(client, auth_headers, add_stock):
    record = add_stock(auth_headers)
    resp = client.put(
        f"/api/v1/stocks/update-sales/{record['id']}",
        json={"quantitySold": 10},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["quantitySold"] == 10


def test_update_sales_rejects_oversell_without_mutation(client, auth_headers, add_stock):
    record = add_stock(auth_headers)
    client.put(
        f"/api/v1/stocks/update-sales/{record['id']}",
        json={"quantitySold": 4},
        headers=auth_headers,
    )

    resp = client.put(
        f"/api/v1/stocks/update-sales/{record['id']}",
        json={"quantitySold": 11},
        headers=auth_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot sell more than received quantity"

    stored = _get_all(client, auth_headers)[0]
    assert stored["quantitySold"] == 4
    assert stored["quantitySold"] <= stored["quantityReceived"]


def test_update_sales_rejects_negative_quantity(client, auth_headers, add_stock):
    record = add_stock(auth_headers)
    resp = client.put(
        f"/api/v1/stocks/update-sales/{record['id']}",
        json={"quantitySold": -1},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_update_sales_unknown_id_is_not_found(client, auth_headers, add_stock):
    record = add_stock(auth_headers)
    resp = client.put(
        "/api/v1/stocks/update-sales/9999",
        json={"quantitySold": 1},
        headers=auth_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Stock not found"
    assert _get_all(client, auth_headers)[0]["quantitySold"] == record["quantitySold"]


def test_update_sales_on_another_users_record_is_not_found(
    client, auth_headers, other_headers, add_stock
):
    record = add_stock(auth_headers)
    resp = client.put(
        f"/api/v1/stocks/update-sales/{record['id']}",
        json={"quantitySold": 5},
        headers=other_headers,
    )
    assert resp.status_code == 404
    assert _get_all(client, auth_headers)[0]["quantitySold"] == 0


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

def _seed_weeks(add_stock, headers):
    for week in (6, 2, 5, 3, 7, 4):
        add_stock(headers, itemName=f"w{week}", week=week, year=2024)
    add_stock(headers, itemName="last-year", week=4, year=2023)


def test_filter_by_range_is_inclusive_and_ascending(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get(
        "/api/v1/stocks/filter",
        params={"year": 2024, "startWeek": 3, "endWeek": 5},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    records = resp.json()
    assert [r["week"] for r in records] == [3, 4, 5]
    assert all(r["year"] == 2024 for r in records)


def test_filter_by_single_week(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get(
        "/api/v1/stocks/filter",
        params={"year": 2024, "week": 7},
        headers=auth_headers,
    )
    assert [(r["week"], r["year"]) for r in resp.json()] == [(7, 2024)]


def test_filter_range_takes_precedence_over_week(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get(
        "/api/v1/stocks/filter",
        params={"year": 2024, "week": 7, "startWeek": 2, "endWeek": 3},
        headers=auth_headers,
    )
    assert [r["week"] for r in resp.json()] == [2, 3]


def test_filter_half_range_falls_back_to_week(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get(
        "/api/v1/stocks/filter",
        params={"year": 2024, "week": 6, "startWeek": 2},
        headers=auth_headers,
    )
    assert [r["week"] for r in resp.json()] == [6]


def test_filter_whole_year(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get("/api/v1/stocks/filter", params={"year": 2023}, headers=auth_headers)
    assert [r["itemName"] for r in resp.json()] == ["last-year"]

    resp = client.get("/api/v1/stocks/filter", params={"year": 2024}, headers=auth_headers)
    assert [r["week"] for r in resp.json()] == [2, 3, 4, 5, 6, 7]


def test_filter_requires_year(client, auth_headers):
    resp = client.get("/api/v1/stocks/filter", params={"week": 3}, headers=auth_headers)
    assert resp.status_code == 422


def test_filter_never_returns_other_users_records(client, auth_headers, other_headers, add_stock):
    add_stock(other_headers, week=3)
    resp = client.get(
        "/api/v1/stocks/filter",
        params={"year": 2024, "startWeek": 1, "endWeek": 54},
        headers=auth_headers,
    )
    assert resp.json() == []


# ---------------------------------------------------------------------------
# Report and failures
# ---------------------------------------------------------------------------

def test_pdf_report(client, auth_headers, add_stock):
    _seed_weeks(add_stock, auth_headers)
    resp = client.get(
        "/api/v1/stocks/report/pdf",
        params={"year": 2024, "startWeek": 3, "endWeek": 5},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert "stock_report_weeks_3-5_2024.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_pdf_report_for_empty_period(client, auth_headers):
    resp = client.get("/api/v1/stocks/report/pdf", params={"year": 1999}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")


def test_database_failure_is_reported_generically(client, auth_headers, monkeypatch):
    def broken(self, owner_id):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(StockRepository, "list_for_owner", broken)
    resp = client.get("/api/v1/stocks/", headers=auth_headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Server error"}
