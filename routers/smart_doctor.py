import json
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.consultation import Consultation
from models.user import User
from schemas.smart_doctor import ConsultationOut, ConsultRequest, ConsultResponse
from services.smart_doctor import assess, match_catalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/smart-doctor", tags=["Smart Doctor"])


@router.post("/consult", response_model=ConsultResponse)
def consult(
    data: ConsultRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Symptom triage with catalogue suggestions. Not a diagnosis."""
    assessment = assess(data.symptoms, data.age)
    response = ConsultResponse(
        conditions=assessment.conditions,
        advice=assessment.advice,
        suggested_medicines=match_catalog(db, assessment.medicines),
        urgent=assessment.urgent,
        source=assessment.source,
    )
    db.add(
        Consultation(
            user_id=current_user.id,
            symptoms=data.symptoms.strip(),
            result=json.dumps(response.model_dump()),
            urgent=response.urgent,
            source=response.source,
        )
    )
    db.commit()
    if response.urgent:
        logger.warning("Urgent symptoms reported by user #%s", current_user.id)
    return response


@router.get("/history", response_model=list[ConsultationOut])
def consultation_history(
    limit: int = 20,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(Consultation)
        .filter(Consultation.user_id == current_user.id)
        .order_by(Consultation.created_at.desc(), Consultation.id.desc())
        .limit(max(1, min(limit, 100)))
        .all()
    )
    return [
        ConsultationOut(
            id=row.id,
            symptoms=row.symptoms,
            urgent=bool(row.urgent),
            source=row.source or "keyword",
            result=ConsultResponse(**json.loads(row.result or "{}")),
            created_at=row.created_at,
        )
        for row in rows
    ]
