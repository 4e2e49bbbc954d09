# create_tables.py
import os
import sys

from taskpulse.database import Base, SessionLocal, engine
from taskpulse.models import Role, User
from taskpulse.utils.security import hash_password


def create_tables(drop: bool = False):
    """Create all tables, optionally dropping the existing ones first"""
    try:
        if drop:
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Existing tables dropped")
        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")

        create_default_admin()
    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        raise


def create_default_admin():
    """Create a default admin user"""
    email = os.getenv("ADMIN_EMAIL", "admin@example.com")
    password = os.getenv("ADMIN_PASSWORD", "admin123")

    db = SessionLocal()
    try:
        if db.query(User).filter(User.email == email).first():
            print("ℹ️  Admin user already exists")
            return

        db.add(User(
            email=email,
            password_hash=hash_password(password),
            display_name="System Administrator",
            role=Role.ADMIN,
            matricule="ADM-0001",
            phone_number="+1-555-0000",
        ))
        db.commit()
        print("✅ Default admin user created!")
        print(f"   Email: {email}")
        print(f"   Password: {password}")
    finally:
        db.close()


if __name__ == "__main__":
    create_tables(drop="--drop" in sys.argv)
