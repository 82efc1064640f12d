"""Seed the database with sample medicines and an admin account."""

import os

from database import SessionLocal, Base, engine
from models.medicine import Medicine
from models.user import User
from services.security import hash_password

Base.metadata.create_all(bind=engine)

MEDICINES = [
    {"name": "Napa 500mg", "generic_name": "Paracetamol", "category": "Pain & Fever", "manufacturer": "Beximco", "price": 12.00, "stock": 250, "rx_required": False},
    {"name": "Ibuprofen 400mg", "generic_name": "Ibuprofen", "category": "Pain & Fever", "manufacturer": "Square", "price": 18.50, "stock": 120, "rx_required": False},
    {"name": "Cetirizine 10mg", "generic_name": "Cetirizine", "category": "Allergy", "manufacturer": "Incepta", "price": 8.00, "stock": 180, "rx_required": False},
    {"name": "Seclo 20mg", "generic_name": "Omeprazole", "category": "Gastro", "manufacturer": "Square", "price": 35.00, "stock": 90, "rx_required": False},
    {"name": "ORSaline-N", "generic_name": "Oral Rehydration Salts", "category": "Gastro", "manufacturer": "SMC", "price": 6.00, "stock": 300, "rx_required": False},
    {"name": "Amoxicillin 500mg", "generic_name": "Amoxicillin", "category": "Antibiotic", "manufacturer": "Renata", "price": 55.00, "stock": 60, "rx_required": True},
    {"name": "Metformin 500mg", "generic_name": "Metformin", "category": "Diabetes", "manufacturer": "Aristopharma", "price": 40.00, "stock": 75, "rx_required": True},
    {"name": "Vitamin D3 1000 IU", "generic_name": "Cholecalciferol", "category": "Supplements", "manufacturer": "Healthcare", "price": 95.00, "stock": 140, "rx_required": False},
]


def seed():
    db = SessionLocal()
    try:
        existing = db.query(Medicine).count()
        if existing > 0:
            print(f"Database already has {existing} medicines, skipping medicines.")
        else:
            for m in MEDICINES:
                db.add(Medicine(**m))
            print(f"Seeded {len(MEDICINES)} medicines.")

        admin_email = os.getenv("ADMIN_EMAIL", "admin@medzy.app").strip().lower()
        if db.query(User).filter(User.email == admin_email).first():
            print(f"Admin {admin_email} already exists.")
        else:
            db.add(
                User(
                    email=admin_email,
                    name="Medzy Admin",
                    password_hash=hash_password(os.getenv("ADMIN_PASSWORD", "admin123")),
                    role="admin",
                )
            )
            print(f"Created admin {admin_email}.")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
