def test_medical_profile_created_on_first_access(client, user_headers):
    r = client.get("/api/medical-profile/", headers=user_headers)
    assert r.status_code == 200
    assert r.json()["blood_group"] is None
    assert r.json()["bmi"] is None


def test_medical_profile_update_computes_bmi(client, user_headers):
    r = client.put(
        "/api/medical-profile/",
        headers=user_headers,
        json={"blood_group": "o+", "height_cm": 175, "weight_kg": 70, "allergies": "penicillin"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["blood_group"] == "O+"
    assert body["bmi"] == 22.9
    assert body["allergies"] == "penicillin"


def test_medical_profile_rejects_unknown_blood_group(client, user_headers):
    r = client.put("/api/medical-profile/", headers=user_headers, json={"blood_group": "C+"})
    assert r.status_code == 422


def test_points_redeem_and_admin_adjust(client, make_user, admin_headers):
    customer, headers = make_user("user")
    assert client.get("/api/customer-points/", headers=headers).json()["balance"] == 0

    over = client.post("/api/customer-points/redeem", headers=headers, json={"points": 5})
    assert over.status_code == 400

    forbidden = client.post(
        "/api/customer-points/adjust", headers=headers, json={"user_id": customer.id, "points": 50, "reason": "Self gift"}
    )
    assert forbidden.status_code == 403

    adjusted = client.post(
        "/api/customer-points/adjust",
        headers=admin_headers,
        json={"user_id": customer.id, "points": 50, "reason": "Welcome bonus"},
    )
    assert adjusted.status_code == 200
    assert adjusted.json()["balance"] == 50

    redeemed = client.post("/api/customer-points/redeem", headers=headers, json={"points": 20, "reason": "Discount"})
    assert redeemed.status_code == 200
    assert redeemed.json()["balance"] == 30

    history = client.get("/api/customer-points/history", headers=headers).json()
    assert sorted(e["points"] for e in history) == [-20, 50]
