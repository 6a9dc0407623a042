"""
Seed script to create an admin user, sample candidates, holidays and a group.
Safe to run repeatedly.
"""
import sys
import os
from datetime import date
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from recruiting.core.logging import configure_logging
from recruiting.core.permissions import require_admin
from recruiting.db.session import SessionLocal, init_db
from recruiting.models import Candidate, CandidateGroup, Holiday, User, UserRole
from recruiting.schemas import CandidateCreate, CandidateGroupCreate, HolidayCreate
from recruiting.services import candidate_group_service, candidate_service, holiday_service


def seed_database():
    init_db()
    db = SessionLocal()

    try:
        admin = db.query(User).filter(User.email == "admin@recruiting.com").first()

        if not admin:
            admin = User(
                name="Admin User",
                email="admin@recruiting.com",
                role=UserRole.ADMIN,
                is_active=True
            )
            db.add(admin)
            db.commit()
            print("✓ Created admin user (email: admin@recruiting.com)")
        else:
            print("✓ Admin user already exists")

        capability = require_admin(admin)

        candidates_data = [
            {"full_name": "Jane Smith", "email": "jane@candidates.com", "employee_id": "EMP-001"},
            {"full_name": "Bob Johnson", "email": "bob@candidates.com", "employee_id": "EMP-002"},
            {"full_name": "Alice Williams", "email": "alice@candidates.com", "employee_id": "EMP-003"},
        ]

        candidate_ids = []
        for candidate_data in candidates_data:
            existing = db.query(Candidate).filter(Candidate.email == candidate_data["email"]).first()
            if existing:
                candidate_ids.append(existing.id)
                continue
            candidate = candidate_service.create_candidate(db, capability, CandidateCreate(**candidate_data))
            candidate_ids.append(candidate.id)
            print(f"✓ Created candidate: {candidate.full_name}")

        year = date.today().year
        holidays_data = [
            {"title": "New Year's Day", "date": date(year, 1, 1)},
            {"title": "Independence Day", "date": date(year, 7, 4)},
            {"title": "Christmas Day", "date": date(year, 12, 25)},
        ]

        holiday_ids = []
        for holiday_data in holidays_data:
            existing = db.query(Holiday).filter(
                Holiday.title == holiday_data["title"],
                Holiday.date == holiday_data["date"]
            ).first()
            if existing:
                holiday_ids.append(existing.id)
                continue
            holiday = holiday_service.create_holiday(db, capability, HolidayCreate(**holiday_data))
            holiday_ids.append(holiday.id)
            print(f"✓ Created holiday: {holiday.title} ({holiday.date})")

        group = db.query(CandidateGroup).filter(CandidateGroup.name == "US Team").first()
        if not group:
            group = candidate_group_service.create_candidate_group(
                db, capability, CandidateGroupCreate(name="US Team", candidate_ids=candidate_ids[:2])
            )
            result = candidate_group_service.assign_holidays_to_group(db, capability, group.id, holiday_ids)
            print(f"✓ Created group: {group.name}")
            print(f"  {result.message}")
        else:
            print("✓ Group already exists")

        print("\n✅ Database seeded successfully!")

    except Exception as e:
        print(f"❌ Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    print("🌱 Seeding database...")
    seed_database()
