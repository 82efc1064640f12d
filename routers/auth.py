import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from firebase_admin import auth as firebase_auth

from database import get_db
from dependencies import get_current_user
from models.user import User
from schemas.auth import RegisterRequest, LoginRequest, GoogleAuthRequest, TokenResponse
from schemas.user import UserOut
from services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
SELF_SERVICE_ROLES = {"user", "pharmacy"}


def _token_response(user: User) -> TokenResponse:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
    return TokenResponse(
        access_token=token,
        user_id=user.id,
        role=user.role,
        name=user.name,
        email=user.email,
        profile_picture=user.profile_picture,
    )


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@router.post("/register", response_model=TokenResponse, status_code=201)
def register(req: RegisterRequest, db: Session = Depends(get_db)):
    """Create a customer or pharmacy account and return a JWT."""
    email = normalize_email(req.email)
    if "@" not in email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    role = (req.role or "user").strip().lower()
    if role not in SELF_SERVICE_ROLES:
        raise HTTPException(status_code=400, detail="Invalid role")
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(req.password),
        name=req.name.strip(),
        phone=req.phone,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered %s account #%s", user.role, user.id)
    return _token_response(user)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == normalize_email(req.email)).first()
    if not user or not verify_password(req.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return _token_response(user)


# ─── Google Sign-In via Firebase ───────────────────────────
@router.post("/google", response_model=TokenResponse)
def google_auth(req: GoogleAuthRequest, db: Session = Depends(get_db)):
    """Verify a Firebase ID token and return a backend JWT."""
    try:
        decoded_token = firebase_auth.verify_id_token(req.id_token)
        firebase_uid = decoded_token["uid"]
        email = normalize_email(decoded_token.get("email") or "")
        name = decoded_token.get("name")
        picture = decoded_token.get("picture")
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Firebase token",
        )
    if not email:
        raise HTTPException(status_code=400, detail="Google account has no email")

    user = db.query(User).filter(User.google_id == firebase_uid).first()
    if not user:
        user = db.query(User).filter(User.email == email).first()

    if user:
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
        if not user.google_id:
            user.google_id = firebase_uid
        if not user.profile_picture and picture:
            user.profile_picture = picture
        if not user.name and name:
            user.name = name
    else:
        user = User(
            google_id=firebase_uid,
            email=email,
            name=name,
            profile_picture=picture,
            role="user",
        )
        db.add(user)

    db.commit()
    db.refresh(user)
    return _token_response(user)


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
