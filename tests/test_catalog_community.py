from datetime import date, timedelta


def test_medicine_catalog_permissions(client, user_headers, pharmacy_headers, admin_headers):
    payload = {"name": "Ace 500mg", "generic_name": "Paracetamol", "category": "Pain & Fever", "price": 10, "stock": 3}
    assert client.post("/api/medicines/", headers=user_headers, json=payload).status_code == 403

    created = client.post("/api/medicines/", headers=pharmacy_headers, json=payload)
    assert created.status_code == 201
    med_id = created.json()["id"]

    listed = client.get("/api/medicines/", params={"search": "paracetamol"}).json()
    assert [m["id"] for m in listed] == [med_id]

    updated = client.put(f"/api/medicines/{med_id}", headers=pharmacy_headers, json={"stock": 0})
    assert updated.json()["stock"] == 0
    assert client.get("/api/medicines/", params={"in_stock": True}).json() == []

    assert client.delete(f"/api/medicines/{med_id}", headers=pharmacy_headers).status_code == 403
    assert client.delete(f"/api/medicines/{med_id}", headers=admin_headers).status_code == 200


def test_medicine_image_upload(client, pharmacy_headers, make_medicine):
    med = make_medicine()
    r = client.post(
        f"/api/medicines/{med.id}/image",
        headers=pharmacy_headers,
        files={"file": ("strip.webp", b"RIFF webp", "image/webp")},
    )
    assert r.status_code == 200
    assert r.json()["image_url"].startswith("/uploads/medicines/")
    assert r.json()["image_url"].endswith(".webp")


def test_reviews_one_per_user_and_average(client, make_user, make_medicine):
    med = make_medicine()
    _, alice = make_user("user")
    _, bob = make_user("user")

    assert client.post("/api/reviews/", headers=alice, json={"medicine_id": med.id, "rating": 5}).status_code == 201
    dup = client.post("/api/reviews/", headers=alice, json={"medicine_id": med.id, "rating": 1})
    assert dup.status_code == 400
    review = client.post("/api/reviews/", headers=bob, json={"medicine_id": med.id, "rating": 4, "comment": "Works"})

    summary = client.get(f"/api/reviews/medicine/{med.id}").json()
    assert summary["count"] == 2
    assert summary["average_rating"] == 4.5

    assert client.delete(f"/api/reviews/{review.json()['id']}", headers=alice).status_code == 403
    assert client.delete(f"/api/reviews/{review.json()['id']}", headers=bob).status_code == 200
    assert client.post("/api/reviews/", headers=bob, json={"medicine_id": 999999, "rating": 3}).status_code == 404
    assert client.post("/api/reviews/", headers=bob, json={"medicine_id": med.id, "rating": 6}).status_code == 422


def test_service_review_summary(client, user_headers):
    for rating in (5, 5, 3):
        client.post("/api/service-reviews/", headers=user_headers, json={"rating": rating})
    summary = client.get("/api/service-reviews/summary").json()
    assert summary["count"] == 3
    assert summary["average_rating"] == 4.33
    assert summary["distribution"] == {"1": 0, "2": 0, "3": 1, "4": 0, "5": 2}
    assert len(client.get("/api/service-reviews/").json()) == 3


def test_donation_flow(client, user_headers, pharmacy_headers):
    expired = client.post(
        "/api/donations/",
        headers=user_headers,
        json={"medicine_name": "Old syrup", "quantity": 1, "expiry_date": date.today().isoformat()},
    )
    assert expired.status_code == 400

    created = client.post(
        "/api/donations/",
        headers=user_headers,
        json={
            "medicine_name": "Insulin pen",
            "quantity": 2,
            "expiry_date": (date.today() + timedelta(days=90)).isoformat(),
        },
    )
    assert created.status_code == 201
    donation_id = created.json()["id"]

    skip = client.put(f"/api/donations/{donation_id}/status", headers=pharmacy_headers, json={"status": "collected"})
    assert skip.status_code == 400
    for status in ("approved", "collected"):
        r = client.put(f"/api/donations/{donation_id}/status", headers=pharmacy_headers, json={"status": status})
        assert r.json()["status"] == status


def test_medicine_request_flow(client, user_headers, pharmacy_headers):
    created = client.post("/api/medicine-requests/", headers=user_headers, json={"medicine_name": "Rare eye drops"})
    assert created.status_code == 201
    req_id = created.json()["id"]

    assert client.put(f"/api/medicine-requests/{req_id}/status", headers=user_headers, json={"status": "fulfilled"}).status_code == 403
    done = client.put(
        f"/api/medicine-requests/{req_id}/status",
        headers=pharmacy_headers,
        json={"status": "fulfilled", "staff_note": "Now in stock"},
    )
    assert done.json()["status"] == "fulfilled"
    assert done.json()["staff_note"] == "Now in stock"

    notifications = client.get("/api/users/me/notifications", headers=user_headers).json()
    assert notifications[0]["title"] == "Medicine Request Update"


def test_daily_updates_admin_only(client, user_headers, admin_headers):
    payload = {"title": "Stay hydrated", "body": "Drink at least 8 glasses of water a day."}
    assert client.post("/api/daily-updates/", headers=user_headers, json=payload).status_code == 403
    created = client.post("/api/daily-updates/", headers=admin_headers, json=payload)
    assert created.status_code == 201
    assert client.get("/api/daily-updates/").json()[0]["title"] == "Stay hydrated"
    assert client.delete(f"/api/daily-updates/{created.json()['id']}", headers=admin_headers).status_code == 200


def test_support_ticket_reply(client, user_headers, pharmacy_headers):
    ticket = client.post(
        "/api/support/", headers=user_headers, json={"subject": "Late delivery", "message": "Order is late"}
    ).json()
    replied = client.put(
        f"/api/support/{ticket['id']}", headers=pharmacy_headers, json={"reply": "Rider is on the way"}
    )
    assert replied.json()["status"] == "in_progress"
    mine = client.get("/api/support/", headers=user_headers).json()
    assert mine[0]["reply"] == "Rider is on the way"
