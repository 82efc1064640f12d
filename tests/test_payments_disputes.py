import pytest


@pytest.fixture
def placed_order(client, make_user, make_medicine):
    customer, headers = make_user("user")
    med = make_medicine(price=25.0, stock=20)
    client.post("/api/cart/items", headers=headers, json={"medicine_id": med.id, "quantity": 4})
    order = client.post("/api/orders/", headers=headers, json={"payment_method": "card"}).json()
    return customer, headers, order


def _deliver(client, order_id, staff_headers):
    for status in ("confirmed", "shipped", "delivered"):
        client.put(f"/api/orders/{order_id}/status", headers=staff_headers, json={"status": status})


def test_payment_must_match_order_total(client, placed_order):
    _, headers, order = placed_order
    r = client.post("/api/payments/", headers=headers, json={"order_id": order["id"], "amount": 10, "method": "card"})
    assert r.status_code == 400

    bad_method = client.post(
        "/api/payments/", headers=headers, json={"order_id": order["id"], "amount": 100, "method": "barter"}
    )
    assert bad_method.status_code == 400


def test_payment_confirm_refund_and_revenue(client, placed_order, pharmacy_headers, admin_headers):
    _, headers, order = placed_order
    created = client.post(
        "/api/payments/", headers=headers, json={"order_id": order["id"], "amount": 100, "method": "card"}
    )
    assert created.status_code == 201
    payment = created.json()
    assert payment["status"] == "pending"
    assert payment["transaction_id"].startswith("TXN-")

    duplicate = client.post(
        "/api/payments/", headers=headers, json={"order_id": order["id"], "amount": 100, "method": "card"}
    )
    assert duplicate.status_code == 400

    assert client.put(f"/api/payments/{payment['id']}/confirm", headers=headers).status_code == 403
    confirmed = client.put(f"/api/payments/{payment['id']}/confirm", headers=pharmacy_headers)
    assert confirmed.json()["status"] == "completed"
    assert client.get(f"/api/orders/{order['id']}", headers=headers).json()["payment_status"] == "paid"

    _deliver(client, order["id"], pharmacy_headers)
    summary = client.get("/api/revenue-adjustments/summary", headers=admin_headers).json()
    assert summary["gross_revenue"] == 100.0
    assert summary["delivered_orders"] == 1
    assert summary["net_revenue"] == 100.0

    refunded = client.put(f"/api/payments/{payment['id']}/refund", headers=pharmacy_headers)
    assert refunded.json()["status"] == "refunded"

    adjustments = client.get("/api/revenue-adjustments/", headers=admin_headers).json()
    assert [a["amount"] for a in adjustments] == [-100.0]


def test_revenue_endpoints_are_admin_only(client, pharmacy_headers, admin_headers):
    assert client.get("/api/revenue-adjustments/summary", headers=pharmacy_headers).status_code == 403

    r = client.post(
        "/api/revenue-adjustments/",
        headers=admin_headers,
        json={"amount": -15.5, "reason": "Courier damage write-off"},
    )
    assert r.status_code == 201
    summary = client.get("/api/revenue-adjustments/summary", headers=admin_headers).json()
    assert summary["adjustments_total"] == -15.5
    assert summary["net_revenue"] == -15.5
    assert summary["adjustment_count"] == 1


def test_dispute_lifecycle_with_refund(client, placed_order, make_user, pharmacy_headers, admin_headers):
    _, headers, order = placed_order
    _, stranger = make_user("user")

    foreign = client.post("/api/disputes/", headers=stranger, json={"order_id": order["id"], "reason": "Damaged"})
    assert foreign.status_code == 404

    opened = client.post(
        "/api/disputes/",
        headers=headers,
        json={"order_id": order["id"], "reason": "Damaged box", "description": "Two strips were crushed"},
    )
    assert opened.status_code == 201
    dispute = opened.json()
    assert dispute["status"] == "open"

    second = client.post("/api/disputes/", headers=headers, json={"order_id": order["id"], "reason": "Again"})
    assert second.status_code == 400

    evidence = client.post(
        f"/api/disputes/{dispute['id']}/evidence",
        headers=headers,
        files={"file": ("box.jpg", b"\xff\xd8 jpeg", "image/jpeg")},
    )
    assert evidence.status_code == 200
    assert evidence.json()["evidence_url"].startswith("/uploads/disputes/")

    too_much = client.put(
        f"/api/disputes/{dispute['id']}/resolve",
        headers=pharmacy_headers,
        json={"status": "resolved", "resolution": "Refund", "refund_amount": 1000},
    )
    assert too_much.status_code == 400

    resolved = client.put(
        f"/api/disputes/{dispute['id']}/resolve",
        headers=pharmacy_headers,
        json={"status": "resolved", "resolution": "Partial refund for damaged strips", "refund_amount": 30},
    )
    assert resolved.status_code == 200
    assert resolved.json()["status"] == "resolved"
    assert resolved.json()["refund_amount"] == 30.0

    closed = client.put(
        f"/api/disputes/{dispute['id']}/resolve",
        headers=pharmacy_headers,
        json={"status": "rejected", "resolution": "Changed mind"},
    )
    assert closed.status_code == 400

    adjustments = client.get("/api/revenue-adjustments/", headers=admin_headers).json()
    assert adjustments[0]["amount"] == -30.0

    notifications = client.get("/api/users/me/notifications", headers=headers).json()
    assert any(n["title"] == "Dispute Update" for n in notifications)


def _pay(client, headers, order, staff_headers):
    payment = client.post(
        "/api/payments/", headers=headers, json={"order_id": order["id"], "amount": order["total"], "method": "card"}
    ).json()
    client.put(f"/api/payments/{payment['id']}/confirm", headers=staff_headers)
    return payment


def test_refund_is_counted_once_in_net_revenue(client, placed_order, pharmacy_headers, admin_headers):
    _, headers, order = placed_order
    payment = _pay(client, headers, order, pharmacy_headers)
    _deliver(client, order["id"], pharmacy_headers)

    assert client.put(f"/api/payments/{payment['id']}/refund", headers=pharmacy_headers).status_code == 200

    summary = client.get("/api/revenue-adjustments/summary", headers=admin_headers).json()
    assert summary["gross_revenue"] == 100.0
    assert summary["adjustments_total"] == -100.0
    assert summary["net_revenue"] == 0.0
    assert summary["delivered_orders"] == 1


def test_dispute_refunds_are_capped_across_disputes(client, placed_order, pharmacy_headers, admin_headers):
    _, headers, order = placed_order

    def open_and_resolve(amount):
        dispute = client.post(
            "/api/disputes/", headers=headers, json={"order_id": order["id"], "reason": "Damaged"}
        ).json()
        return client.put(
            f"/api/disputes/{dispute['id']}/resolve",
            headers=pharmacy_headers,
            json={"status": "resolved", "resolution": "Refund", "refund_amount": amount},
        )

    assert open_and_resolve(60).status_code == 200
    assert open_and_resolve(60).status_code == 400
    # the rejected attempt left its dispute open; close it before the next one
    pending = client.get("/api/disputes/?status=open", headers=headers).json()
    client.put(
        f"/api/disputes/{pending[0]['id']}/resolve",
        headers=pharmacy_headers,
        json={"status": "rejected", "resolution": "Over the order total"},
    )
    assert open_and_resolve(40).status_code == 200

    adjustments = client.get(f"/api/revenue-adjustments/?order_id={order['id']}", headers=admin_headers).json()
    assert sorted(a["amount"] for a in adjustments) == [-60.0, -40.0]


def test_payment_refund_respects_earlier_dispute_refunds(client, placed_order, pharmacy_headers):
    _, headers, order = placed_order
    payment = _pay(client, headers, order, pharmacy_headers)
    dispute = client.post(
        "/api/disputes/", headers=headers, json={"order_id": order["id"], "reason": "Missing strip"}
    ).json()
    client.put(
        f"/api/disputes/{dispute['id']}/resolve",
        headers=pharmacy_headers,
        json={"status": "resolved", "resolution": "Partial refund", "refund_amount": 25},
    )

    r = client.put(f"/api/payments/{payment['id']}/refund", headers=pharmacy_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == "Refund cannot exceed the order total"
