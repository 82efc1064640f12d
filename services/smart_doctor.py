import json
import logging
import re
from dataclasses import dataclass, field

import requests
from sqlalchemy.orm import Session

from config import GEMINI_API_KEY, GEMINI_MODEL
from models.medicine import Medicine

logger = logging.getLogger(__name__)

RED_FLAGS = [
    "chest pain",
    "difficulty breathing",
    "shortness of breath",
    "can't breathe",
    "unconscious",
    "fainted",
    "seizure",
    "severe bleeding",
    "blood in vomit",
    "vomiting blood",
    "slurred speech",
    "face drooping",
    "suicidal",
]


@dataclass
class SymptomRule:
    condition: str
    keywords: list[str]
    advice: list[str]
    medicines: list[str] = field(default_factory=list)


RULES = [
    SymptomRule(
        "Fever or viral infection",
        ["fever", "temperature", "chills", "shivering"],
        ["Rest and drink plenty of fluids.", "Check your temperature every 4 to 6 hours."],
        ["Paracetamol"],
    ),
    SymptomRule(
        "Tension headache or migraine",
        ["headache", "migraine", "head ache"],
        ["Rest in a quiet, dark room.", "Stay hydrated and limit screen time."],
        ["Paracetamol", "Ibuprofen"],
    ),
    SymptomRule(
        "Common cold or upper respiratory infection",
        ["cough", "sneez", "runny nose", "sore throat", "cold", "blocked nose"],
        ["Drink warm fluids and try steam inhalation.", "Gargle with warm salt water for a sore throat."],
        ["Cetirizine", "Dextromethorphan"],
    ),
    SymptomRule(
        "Acidity or indigestion",
        ["heartburn", "acidity", "indigestion", "acid reflux", "bloating"],
        ["Eat smaller meals and avoid spicy or oily food.", "Do not lie down right after eating."],
        ["Antacid", "Omeprazole"],
    ),
    SymptomRule(
        "Gastroenteritis",
        ["diarrhea", "diarrhoea", "loose motion", "stomach upset", "vomiting"],
        ["Take oral rehydration solution after every loose stool.", "Eat light food such as rice and bananas."],
        ["Oral Rehydration Salts"],
    ),
    SymptomRule(
        "Allergic reaction",
        ["itch", "rash", "hives", "allergy", "allergic"],
        ["Avoid the suspected trigger.", "Keep the skin cool and avoid scratching."],
        ["Cetirizine", "Loratadine"],
    ),
    SymptomRule(
        "Muscle or joint pain",
        ["back pain", "joint pain", "muscle pain", "body ache", "sprain"],
        ["Rest the affected area and apply a cold pack for 15 minutes.", "Avoid heavy lifting for a few days."],
        ["Ibuprofen", "Diclofenac"],
    ),
]


@dataclass
class Assessment:
    conditions: list[str] = field(default_factory=list)
    advice: list[str] = field(default_factory=list)
    medicines: list[str] = field(default_factory=list)
    urgent: bool = False
    source: str = "keyword"


def has_red_flag(text: str) -> bool:
    t = (text or "").lower()
    return any(flag in t for flag in RED_FLAGS)


def keyword_assessment(symptoms: str, age: int | None = None) -> Assessment:
    t = (symptoms or "").lower()
    result = Assessment(urgent=has_red_flag(t))
    for rule in RULES:
        if any(k in t for k in rule.keywords):
            result.conditions.append(rule.condition)
            result.advice.extend(rule.advice)
            for med in rule.medicines:
                if med not in result.medicines:
                    result.medicines.append(med)
    if age is not None and age < 2 and "Fever or viral infection" in result.conditions:
        result.urgent = True
    if result.urgent:
        result.advice.insert(0, "Seek emergency medical care immediately.")
        # No self-medication advice when a red flag is present.
        result.medicines = []
    elif not result.conditions:
        result.advice.append("Your symptoms did not match a common condition. Please consult a doctor.")
    elif re.search(r"\b(week|weeks|month|months)\b", t):
        result.advice.append("Symptoms lasting more than a few days should be checked by a doctor.")
    return result


def _extract_json_blob(raw: str) -> dict:
    text = (raw or "").strip()
    if not text:
        return {}
    try:
        loaded = json.loads(text)
        if isinstance(loaded, dict):
            return loaded
    except ValueError:
        pass
    m = re.search(r"\{[\s\S]*\}", text)
    if not m:
        return {}
    try:
        loaded = json.loads(m.group(0))
    except ValueError:
        return {}
    return loaded if isinstance(loaded, dict) else {}


def _str_list(value, limit: int = 6) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if str(v).strip()][:limit]


def call_gemini(symptoms: str, age: int | None = None) -> Assessment | None:
    if not GEMINI_API_KEY:
        return None
    prompt = (
        "You are a cautious triage helper for a pharmacy app. "
        "Return STRICT JSON only with keys: conditions (list of strings), advice (list of strings), "
        "medicines (list of over-the-counter generic names), urgent (boolean). "
        "Set urgent=true for any emergency sign.\n"
        f"age: {age if age is not None else 'unknown'}\n"
        f"symptoms: {symptoms}"
    )
    body = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {"temperature": 0.2, "maxOutputTokens": 400},
    }
    endpoint = f"https://generativelanguage.googleapis.com/v1beta/models/{GEMINI_MODEL}:generateContent"
    try:
        resp = requests.post(endpoint, params={"key": GEMINI_API_KEY}, json=body, timeout=8)
    except requests.RequestException as exc:
        logger.warning("Gemini request failed: %s", exc)
        return None
    if resp.status_code < 200 or resp.status_code >= 300:
        logger.warning("Gemini returned HTTP %s", resp.status_code)
        return None
    cands = resp.json().get("candidates") or []
    if not cands:
        return None
    parts = (cands[0].get("content") or {}).get("parts") or []
    text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
    parsed = _extract_json_blob(text)
    if not parsed:
        return None
    return Assessment(
        conditions=_str_list(parsed.get("conditions")),
        advice=_str_list(parsed.get("advice")),
        medicines=_str_list(parsed.get("medicines")),
        urgent=bool(parsed.get("urgent")),
        source="gemini",
    )


def assess(symptoms: str, age: int | None = None) -> Assessment:
    baseline = keyword_assessment(symptoms, age)
    model = call_gemini(symptoms, age)
    if model is None or not (model.conditions or model.advice):
        return baseline
    # The model may add a red flag but never clear one.
    if baseline.urgent and not model.urgent:
        model.urgent = True
        model.advice.insert(0, "Seek emergency medical care immediately.")
        model.medicines = []
    return model


def match_catalog(db: Session, names: list[str]) -> list[dict]:
    matched = []
    for name in names:
        med = (
            db.query(Medicine)
            .filter(Medicine.name.ilike(f"%{name}%") | Medicine.generic_name.ilike(f"%{name}%"))
            .order_by(Medicine.stock.desc(), Medicine.price.asc())
            .first()
        )
        if med:
            matched.append({"name": med.name, "medicine_id": med.id, "price": med.price, "in_stock": (med.stock or 0) > 0})
        else:
            matched.append({"name": name, "medicine_id": None, "price": None, "in_stock": False})
    return matched
