#!/usr/bin/env python3
"""
Demo Data Seed Script
Creates a demo organization, an admin user and one high-risk AI system
with its EU AI Act requirement checklist.

Usage:
    python -m scripts.seed_demo <email> <username> <password> [organization name]

Example:
    python -m scripts.seed_demo admin@acme.example admin securepassword123 "Acme AI"
"""
import sys
import os
from uuid import uuid4

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from protectron.database import SessionLocal, init_db
from protectron.models.db_models import (
    AISystemDB,
    HITLRuleDB,
    LifecycleStatus,
    OrganizationDB,
    RequirementDB,
    RequirementStatus,
    RiskLevel,
    UserDB,
)
from protectron.auth import hash_password
from protectron.routers.auth import slugify


# High-risk checklist (Chapter III, Section 2)
HIGH_RISK_REQUIREMENTS = [
    ("Risk management system", "Art. 9"),
    ("Data and data governance", "Art. 10"),
    ("Technical documentation", "Art. 11"),
    ("Record-keeping", "Art. 12"),
    ("Transparency and provision of information to deployers", "Art. 13"),
    ("Human oversight", "Art. 14"),
    ("Accuracy, robustness and cybersecurity", "Art. 15"),
]


def seed_demo(email: str, username: str, password: str, organization_name: str) -> bool:
    """Create the demo organization, admin and AI system."""
    init_db()

    db: Session = SessionLocal()
    try:
        existing = db.query(UserDB).filter(
            (UserDB.email == email) | (UserDB.username == username)
        ).first()
        if existing:
            print(f"Error: User '{existing.email}' already exists.")
            return False

        organization = OrganizationDB(id=str(uuid4()), name=organization_name, slug=slugify(organization_name))
        admin_user = UserDB(
            id=str(uuid4()),
            email=email,
            username=username,
            password_hash=hash_password(password),
            role="admin",
            organization_id=organization.id,
        )
        system = AISystemDB(
            id=str(uuid4()),
            organization_id=organization.id,
            name="Customer Support Agent",
            description="LLM agent answering customer tickets",
            risk_level=RiskLevel.HIGH,
            lifecycle_status=LifecycleStatus.ACTIVE,
            sdk_connected=False,
        )
        db.add_all([organization, admin_user, system])

        for title, article in HIGH_RISK_REQUIREMENTS:
            db.add(RequirementDB(
                id=str(uuid4()),
                ai_system_id=system.id,
                title=title,
                article=article,
                status=RequirementStatus.NOT_STARTED,
            ))
        db.add(HITLRuleDB(
            id=str(uuid4()),
            ai_system_id=system.id,
            name="Approve refunds over 500 EUR",
            action_type="refund",
            is_active=True,
        ))
        db.commit()

        print(f"Demo data created successfully!")
        print(f"  Organization: {organization_name} ({organization.id})")
        print(f"  Trust center: /trust-center/{organization.slug}")
        print(f"  Admin: {email}")
        print(f"  AI system: {system.name} ({system.id})")
        return True

    except Exception as e:
        print(f"Error seeding demo data: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    if len(sys.argv) not in (4, 5):
        print(__doc__)
        sys.exit(1)

    email = sys.argv[1]
    username = sys.argv[2]
    password = sys.argv[3]
    organization_name = sys.argv[4] if len(sys.argv) == 5 else "Demo Organization"

    # Basic validation
    if len(password) < 8:
        print("Error: Password must be at least 8 characters.")
        sys.exit(1)

    if "@" not in email:
        print("Error: Invalid email format.")
        sys.exit(1)

    success = seed_demo(email, username, password, organization_name)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
