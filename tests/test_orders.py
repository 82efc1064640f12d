from models.medicine import Medicine
from models.notification import Notification


def _add(client, headers, medicine_id, quantity=1):
    return client.post("/api/cart/items", headers=headers, json={"medicine_id": medicine_id, "quantity": quantity})


def test_cart_merges_lines_and_totals(client, user_headers, make_medicine):
    med = make_medicine(price=12.5, stock=10)
    _add(client, user_headers, med.id, 2)
    cart = _add(client, user_headers, med.id, 3).json()
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 5
    assert cart["subtotal"] == 62.5

    too_many = _add(client, user_headers, med.id, 6)
    assert too_many.status_code == 400
    assert "Insufficient stock" in too_many.json()["detail"]


def test_checkout_creates_order_and_decrements_stock(client, db_session, user_headers, make_medicine):
    med = make_medicine(price=20.0, stock=8)
    _add(client, user_headers, med.id, 3)

    r = client.post(
        "/api/orders/",
        headers=user_headers,
        json={"delivery_address": "Mirpur 10", "payment_method": "cash_on_delivery"},
    )
    assert r.status_code == 201
    order = r.json()
    assert order["status"] == "pending"
    assert order["payment_status"] == "unpaid"
    assert order["total"] == 60.0
    assert order["order_uid"].startswith("ORD-")
    assert order["items"][0]["quantity"] == 3

    db_session.expire_all()
    assert db_session.get(Medicine, med.id).stock == 5
    assert client.get("/api/cart/", headers=user_headers).json()["items"] == []


def test_checkout_empty_cart(client, user_headers):
    r = client.post("/api/orders/", headers=user_headers, json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "Cart is empty"


def test_checkout_requires_prescription(client, user_headers, make_medicine):
    med = make_medicine(name="Amoxicillin 500mg", rx_required=True)
    _add(client, user_headers, med.id)

    missing = client.post("/api/orders/", headers=user_headers, json={})
    assert missing.status_code == 400
    assert missing.json()["detail"]["medicines"] == ["Amoxicillin 500mg"]

    ok = client.post(
        "/api/orders/",
        headers=user_headers,
        json={"prescriptions": {str(med.id): "/uploads/prescriptions/rx.jpg"}},
    )
    assert ok.status_code == 201
    assert ok.json()["items"][0]["prescription_file"] == "/uploads/prescriptions/rx.jpg"


def test_status_flow_awards_points_on_delivery(client, db_session, make_user, pharmacy_headers, make_medicine):
    customer, headers = make_user("user")
    med = make_medicine(price=55.0, stock=10)
    _add(client, headers, med.id, 2)
    order = client.post("/api/orders/", headers=headers, json={}).json()

    assert client.put(f"/api/orders/{order['id']}/status", headers=headers, json={"status": "confirmed"}).status_code == 403

    skip = client.put(f"/api/orders/{order['id']}/status", headers=pharmacy_headers, json={"status": "delivered"})
    assert skip.status_code == 400

    for status in ("confirmed", "shipped", "delivered"):
        r = client.put(f"/api/orders/{order['id']}/status", headers=pharmacy_headers, json={"status": status})
        assert r.status_code == 200
        assert r.json()["status"] == status

    delivered = client.get(f"/api/orders/{order['id']}", headers=headers).json()
    assert delivered["points_awarded"] == 11
    assert delivered["last_status_updated_by_role"] == "pharmacy"

    points = client.get("/api/customer-points/", headers=headers).json()
    assert points["balance"] == 11

    titles = [n.title for n in db_session.query(Notification).filter(Notification.user_id == customer.id)]
    assert "Order Placed" in titles
    assert "Order Update" in titles


def test_cancel_restocks(client, db_session, user_headers, make_medicine):
    med = make_medicine(stock=4)
    _add(client, user_headers, med.id, 4)
    order = client.post("/api/orders/", headers=user_headers, json={}).json()

    r = client.post(f"/api/orders/{order['id']}/cancel", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"

    db_session.expire_all()
    assert db_session.get(Medicine, med.id).stock == 4

    again = client.post(f"/api/orders/{order['id']}/cancel", headers=user_headers)
    assert again.status_code == 200


def test_orders_are_private(client, make_user, make_medicine):
    _, alice = make_user("user")
    _, bob = make_user("user")
    med = make_medicine()
    _add(client, alice, med.id)
    order = client.post("/api/orders/", headers=alice, json={}).json()

    assert client.get(f"/api/orders/{order['id']}", headers=bob).status_code == 404
    assert client.get("/api/orders/", headers=bob).json() == []


def test_paid_order_must_be_refunded_before_cancel(client, db_session, user_headers, pharmacy_headers, make_medicine):
    med = make_medicine(price=10.0, stock=5)
    _add(client, user_headers, med.id, 2)
    order = client.post("/api/orders/", headers=user_headers, json={}).json()
    payment = client.post(
        "/api/payments/", headers=user_headers, json={"order_id": order["id"], "amount": 20, "method": "card"}
    ).json()
    client.put(f"/api/payments/{payment['id']}/confirm", headers=pharmacy_headers)

    blocked = client.post(f"/api/orders/{order['id']}/cancel", headers=user_headers)
    assert blocked.status_code == 400
    db_session.expire_all()
    assert db_session.get(Medicine, med.id).stock == 3

    assert client.put(f"/api/payments/{payment['id']}/refund", headers=pharmacy_headers).status_code == 200
    cancelled = client.post(f"/api/orders/{order['id']}/cancel", headers=user_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["payment_status"] == "refunded"
    db_session.expire_all()
    assert db_session.get(Medicine, med.id).stock == 5
