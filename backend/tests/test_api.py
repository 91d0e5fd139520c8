from backend.app.core.config import LOW_STOCK_THRESHOLD_KEY

I1 = 1001
I2 = 1002


def _stock_in(client, warehouse_id, item_id, quantity, **extra):
    return client.post(
        "/v1/stock-movements/stock-in",
        json={"warehouse_id": warehouse_id, "item_id": item_id, "quantity": quantity, **extra},
    )


def test_health(client):
    res = client.get("/v1/health")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


def test_warehouse_directory_lists_active_only(client, make_warehouse):
    make_warehouse("B-ACTIVE")
    closed = make_warehouse("A-CLOSED", is_active=False)

    res = client.get("/v1/warehouses")
    assert res.status_code == 200
    assert [w["code"] for w in res.json()] == ["B-ACTIVE"]

    # GetById voit aussi les entrepôts désactivés (historique)
    res = client.get(f"/v1/warehouses/{closed.id}")
    assert res.status_code == 200
    assert res.json()["is_active"] is False

    assert client.get("/v1/warehouses/by-code/B-ACTIVE").status_code == 200
    assert client.get("/v1/warehouses/by-code/A-CLOSED").status_code == 404
    assert client.get("/v1/warehouses/424242").status_code == 404


def test_stock_in_out_round(client, w1):
    res = _stock_in(client, w1.id, I1, 10, note="supplier delivery", created_by=5)
    assert res.status_code == 200
    body = res.json()
    assert (body["quantity"], body["reserved_quantity"], body["available_quantity"]) == (10, 0, 10)

    res = client.post(
        "/v1/stock-movements/stock-out",
        json={"warehouse_id": w1.id, "item_id": I1, "quantity": 4},
    )
    assert res.status_code == 200
    assert res.json()["quantity"] == 6

    res = client.post(
        "/v1/stock-movements/stock-out",
        json={"warehouse_id": w1.id, "item_id": I1, "quantity": 10},
    )
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "INSUFFICIENT_STOCK"

    res = client.get(f"/v1/stock/warehouse/{w1.id}/item/{I1}")
    assert res.status_code == 200
    assert res.json()["quantity"] == 6


def test_stock_in_errors(client, make_warehouse):
    closed = make_warehouse("CLOSED", is_active=False)

    res = _stock_in(client, closed.id, I1, 1)
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "WAREHOUSE_INACTIVE_OR_NOT_FOUND"

    assert _stock_in(client, closed.id, I1, 0).status_code == 422
    assert _stock_in(client, closed.id, I1, -3).status_code == 422


def test_get_stock_record_absent(client, w1):
    res = client.get(f"/v1/stock/warehouse/{w1.id}/item/{I1}")

    assert res.status_code == 404


def test_adjust(client, w1):
    res = client.post(
        "/v1/stock-movements/adjust",
        json={"warehouse_id": w1.id, "item_id": I1, "new_quantity": 3},
    )
    assert res.status_code == 404
    assert res.json()["detail"]["code"] == "STOCK_RECORD_NOT_FOUND"

    _stock_in(client, w1.id, I1, 1)
    res = client.post(
        "/v1/stock-movements/adjust",
        json={"warehouse_id": w1.id, "item_id": I1, "new_quantity": 0, "note": "stock-take correction"},
    )
    assert res.status_code == 200
    assert res.json()["quantity"] == 0

    (entry, _) = client.get("/v1/stock-movements/logs", params={"item_id": I1}).json()
    assert (entry["movement_type"], entry["quantity_delta"]) == ("adjustment", -1)


def test_transfer_and_logs(client, w1, w2):
    _stock_in(client, w1.id, I1, 6)

    res = client.post(
        "/v1/stock-movements/transfer",
        json={"from_warehouse_id": w1.id, "to_warehouse_id": w2.id, "item_id": I1, "quantity": 5},
    )
    assert res.status_code == 200
    assert res.json() == {"success": True}

    by_item = client.get(f"/v1/stock/item/{I1}").json()
    assert [(r["warehouse_id"], r["quantity"]) for r in by_item] == [(w1.id, 1), (w2.id, 5)]

    logs = client.get("/v1/stock-movements/logs", params={"item_id": I1, "limit": 3}).json()
    assert [(e["movement_type"], e["warehouse_id"]) for e in logs] == [
        ("transfer", w1.id),
        ("in", w2.id),
        ("out", w1.id),
    ]

    w2_logs = client.get("/v1/stock-movements/logs", params={"warehouse_id": w2.id}).json()
    assert len(w2_logs) == 1


def test_transfer_errors(client, w1, w2):
    _stock_in(client, w1.id, I1, 2)

    res = client.post(
        "/v1/stock-movements/transfer",
        json={"from_warehouse_id": w1.id, "to_warehouse_id": w2.id, "item_id": I1, "quantity": 3},
    )
    assert res.status_code == 409
    assert res.json()["detail"]["code"] == "INSUFFICIENT_STOCK_FOR_TRANSFER"

    res = client.post(
        "/v1/stock-movements/transfer",
        json={"from_warehouse_id": w1.id, "to_warehouse_id": w1.id, "item_id": I1, "quantity": 1},
    )
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_TRANSFER"

    res = client.post(
        "/v1/stock-movements/transfer",
        json={"from_warehouse_id": w1.id, "to_warehouse_id": 9999, "item_id": I1, "quantity": 1},
    )
    assert res.status_code == 404

    # rien n'a bougé
    assert client.get(f"/v1/stock/warehouse/{w1.id}/item/{I1}").json()["quantity"] == 2


def test_low_stock_uses_configured_threshold(client, w1, put_stock, put_setting):
    put_stock(w1.id, I1, 2)
    put_stock(w1.id, I2, 5)
    put_setting(LOW_STOCK_THRESHOLD_KEY, "3")

    res = client.get("/v1/stock/low-stock")
    assert res.status_code == 200
    assert [r["item_id"] for r in res.json()] == [I1]

    res = client.get("/v1/stock/low-stock", params={"threshold": 10})
    assert [r["item_id"] for r in res.json()] == [I1, I2]

    assert client.get("/v1/stock/low-stock", params={"threshold": -1}).status_code == 422


def test_logs_limit_is_validated(client):
    assert client.get("/v1/stock-movements/logs", params={"limit": 0}).status_code == 422
    assert client.get("/v1/stock-movements/logs", params={"limit": 5000}).status_code == 422


def test_oversized_quantities_are_rejected(client, w1, put_stock):
    assert _stock_in(client, w1.id, I1, 2**63).status_code == 422
    assert _stock_in(client, w1.id, I1, 2**31).status_code == 422
    res = client.post(
        "/v1/stock-movements/adjust",
        json={"warehouse_id": w1.id, "item_id": I1, "new_quantity": 2**31},
    )
    assert res.status_code == 422

    put_stock(w1.id, I2, 2**31 - 10)
    res = _stock_in(client, w1.id, I2, 11)
    assert res.status_code == 400
    assert res.json()["detail"]["code"] == "INVALID_QUANTITY"
    assert client.get(f"/v1/stock/warehouse/{w1.id}/item/{I2}").json()["quantity"] == 2**31 - 10
