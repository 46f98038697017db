#!/usr/bin/env python3
"""
Admin Seed Script

Creates the database tables and the first admin identity, or promotes an
existing identity to admin. This is the bootstrap path for a fresh install:
every later admin is created through POST /admin/users by an existing admin.

Usage:
    python seed_admin_data.py --email admin@example.com --password 'S3cret!' [--name "Site Admin"]
"""

import argparse
import sys
from typing import Optional

from sqlalchemy import text

from booking_api.auth.schemas import UserCreate
from booking_api.auth.service import UserService
from booking_api.auth.utils import PasswordHasher, TokenService
from booking_api.config import get_settings
from booking_api.database import SessionLocal, engine, init_db
from booking_api.exceptions import DomainException
from booking_api.models import Role


def verify_database_connection() -> bool:
    """Verify database connection"""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1")).fetchone()
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False


def create_or_promote_admin(db, email: str, password: str, name: Optional[str] = None) -> bool:
    settings = get_settings()
    service = UserService(
        db,
        PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        TokenService.from_settings(settings),
        password_min_length=settings.PASSWORD_MIN_LENGTH,
    )

    existing = service.store.find_by_email(email)
    if existing:
        if existing.role == Role.ADMIN:
            print(f"✅ {existing.email} is already an admin, skipping...")
            return True
        service.store.update(existing, role=Role.ADMIN, is_active=True)
        print(f"✅ Promoted {existing.email} to admin")
        return True

    admin = service.create_user(UserCreate(email=email, password=password, name=name), role=Role.ADMIN)
    print(f"✅ Created admin {admin.email} ({admin.id})")
    return True


def main(argv=None) -> bool:
    parser = argparse.ArgumentParser(description="Create or promote the first admin identity")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--name", default=None)
    args = parser.parse_args(argv)

    print("🚀 Seeding admin identity...")
    if not verify_database_connection():
        print("❌ Aborting due to database connection issues")
        return False

    init_db()
    db = SessionLocal()
    try:
        return create_or_promote_admin(db, args.email, args.password, args.name)
    except DomainException as e:
        print(f"❌ {e.code}: {e.message}")
        db.rollback()
        return False
    finally:
        db.close()


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
