from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from dependencies import get_current_user
from models.medical_profile import MedicalProfile
from models.user import User
from schemas.medical_profile import MedicalProfileOut, MedicalProfileUpdate

router = APIRouter(prefix="/api/medical-profile", tags=["Medical Profile"])


def _bmi(height_cm: float | None, weight_kg: float | None) -> float | None:
    if not height_cm or not weight_kg:
        return None
    meters = height_cm / 100.0
    return round(weight_kg / (meters * meters), 1)


def _get_or_create(db: Session, user: User) -> MedicalProfile:
    profile = db.query(MedicalProfile).filter(MedicalProfile.user_id == user.id).first()
    if profile is None:
        profile = MedicalProfile(user_id=user.id)
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


def _serialize(profile: MedicalProfile) -> MedicalProfileOut:
    return MedicalProfileOut(
        id=profile.id,
        user_id=profile.user_id,
        date_of_birth=profile.date_of_birth,
        gender=profile.gender,
        blood_group=profile.blood_group,
        height_cm=profile.height_cm,
        weight_kg=profile.weight_kg,
        bmi=_bmi(profile.height_cm, profile.weight_kg),
        allergies=profile.allergies,
        conditions=profile.conditions,
        current_medications=profile.current_medications,
        emergency_contact_name=profile.emergency_contact_name,
        emergency_contact_phone=profile.emergency_contact_phone,
        updated_at=profile.updated_at,
    )


@router.get("/", response_model=MedicalProfileOut)
def get_medical_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _serialize(_get_or_create(db, current_user))


@router.put("/", response_model=MedicalProfileOut)
def update_medical_profile(
    data: MedicalProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    profile = _get_or_create(db, current_user)
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    return _serialize(profile)
