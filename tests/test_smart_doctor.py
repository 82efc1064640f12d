import services.smart_doctor as smart_doctor
from services.smart_doctor import Assessment, assess, keyword_assessment


def test_keyword_assessment_matches_rules():
    result = keyword_assessment("I have a fever and a bad headache since last night")
    assert "Fever or viral infection" in result.conditions
    assert "Tension headache or migraine" in result.conditions
    assert result.medicines == ["Paracetamol", "Ibuprofen"]
    assert result.urgent is False


def test_red_flag_is_urgent_and_drops_medicines():
    result = keyword_assessment("sudden chest pain and shortness of breath")
    assert result.urgent is True
    assert result.medicines == []
    assert result.advice[0] == "Seek emergency medical care immediately."


def test_infant_fever_is_urgent():
    assert keyword_assessment("fever since morning", age=1).urgent is True
    assert keyword_assessment("fever since morning", age=30).urgent is False


def test_unmatched_symptoms_advise_doctor():
    result = keyword_assessment("feeling a bit strange")
    assert result.conditions == []
    assert "consult a doctor" in result.advice[-1]


def test_model_cannot_clear_a_red_flag(monkeypatch):
    monkeypatch.setattr(
        smart_doctor,
        "call_gemini",
        lambda symptoms, age=None: Assessment(
            conditions=["Anxiety"], advice=["Breathe slowly."], medicines=["Something"], urgent=False, source="gemini"
        ),
    )
    result = assess("chest pain after climbing stairs")
    assert result.source == "gemini"
    assert result.urgent is True
    assert result.medicines == []


def test_gemini_is_skipped_without_key():
    assert smart_doctor.call_gemini("headache") is None


def test_extract_json_blob_handles_wrapped_output():
    raw = 'Sure!\n```json\n{"conditions": ["Cold"], "urgent": false}\n```'
    assert smart_doctor._extract_json_blob(raw) == {"conditions": ["Cold"], "urgent": False}
    assert smart_doctor._extract_json_blob("no json here") == {}


def test_consult_endpoint_matches_catalog_and_keeps_history(client, user_headers, make_medicine):
    make_medicine(name="Napa 500mg", generic_name="Paracetamol", stock=5)
    r = client.post("/api/smart-doctor/consult", headers=user_headers, json={"symptoms": "high fever and chills"})
    assert r.status_code == 200
    body = r.json()
    assert body["source"] == "keyword"
    assert body["disclaimer"]
    suggested = {m["name"]: m for m in body["suggested_medicines"]}
    assert suggested["Napa 500mg"]["in_stock"] is True

    history = client.get("/api/smart-doctor/history", headers=user_headers).json()
    assert len(history) == 1
    assert history[0]["symptoms"] == "high fever and chills"
    assert history[0]["result"]["conditions"] == body["conditions"]
