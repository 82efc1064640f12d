import os
import shutil
import sys
import tempfile

import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

# Settings are read at import time, so the environment must be in place
# before anything from the app is imported.
TEST_ROOT = tempfile.mkdtemp(prefix="medzy_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(TEST_ROOT, "uploads")
os.environ["LOG_DIR"] = os.path.join(TEST_ROOT, "logs")
os.environ["APP_ENV"] = "test"
os.environ["JOB_RUN_KEY"] = "test-job-key"
os.environ["REMINDER_TIMEZONE"] = "UTC"
os.environ["FIREBASE_SERVICE_ACCOUNT"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["SMTP_HOST"] = ""
os.environ.pop("VERCEL", None)
os.environ.pop("VERCEL_ENV", None)

from fastapi.testclient import TestClient  # noqa: E402

from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.medicine import Medicine  # noqa: E402
from models.user import User  # noqa: E402
from services.security import create_access_token, hash_password  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(TEST_ROOT, ignore_errors=True)


@pytest.fixture(autouse=True)
def clean_tables():
    Base.metadata.create_all(bind=engine)
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client():
    # No context manager: the lifespan (reminder loop, Firebase) stays off.
    return TestClient(app)


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role: str = "user", **fields) -> tuple[User, dict]:
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"{role}{counter['n']}@medzy.test"),
            name=fields.pop("name", f"{role.title()} {counter['n']}"),
            password_hash=hash_password(fields.pop("password", "secret123")),
            role=role,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role})
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def user_headers(make_user):
    return make_user("user")[1]


@pytest.fixture
def pharmacy_headers(make_user):
    return make_user("pharmacy")[1]


@pytest.fixture
def admin_headers(make_user):
    return make_user("admin")[1]


@pytest.fixture
def make_medicine(db_session):
    def _make(**fields) -> Medicine:
        data = {"name": "Napa 500mg", "generic_name": "Paracetamol", "price": 12.0, "stock": 50, "rx_required": False}
        data.update(fields)
        med = Medicine(**data)
        db_session.add(med)
        db_session.commit()
        db_session.refresh(med)
        return med

    return _make
