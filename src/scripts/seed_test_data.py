#!/usr/bin/env python3
"""
PPE Safety Violation Tracker - Test Data Seed Script
Populates the database with realistic test data for dashboard development.

This script creates:
- One admin and a handful of safety specialists
- 25 employees
- Violation reports spread over the last 60 days
- Edge cases: a repeat offender, an employee with a clean record,
  multi-label reports

Usage:
    python -m scripts.seed_test_data [--days 60] [--violations 400] [--seed 42]
"""

import argparse
import random
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path
backend_src = Path(__file__).parent.parent
sys.path.insert(0, str(backend_src.absolute()))

from sqlalchemy import delete

from database.connection import db, get_db_session
from models.orm_user import User, Role
from models.orm_violation import Violation, ViolationLabel
from utils.config import load_statistics_settings
from utils.time_windows import get_now

FIRST_NAMES = [
    "Amelia", "Ben", "Carla", "Diego", "Elif", "Farid", "Grace", "Hiro", "Ines",
    "Jonas", "Kofi", "Lena", "Mateo", "Nadia", "Owen", "Priya", "Quinn", "Rosa",
    "Sami", "Tariq", "Uma", "Viktor", "Wen", "Yara", "Zane",
]

LOCATIONS = ["Dock A", "Dock B", "Assembly Line 1", "Assembly Line 2", "Warehouse", "Paint Shop"]

# Labels a detector reports for a missing piece of equipment
VIOLATION_LABELS = ["No Helmet", "No Vest"]
CONTEXT_LABELS = ["Person", "Head"]


class TestDataSeeder:
    """Seeds the database with users and violation reports."""

    def __init__(self, days: int, violation_count: int, seed: int):
        self.days = days
        self.violation_count = violation_count
        self.random = random.Random(seed)
        self.settings = load_statistics_settings()
        self.stats = {
            'users_inserted': 0,
            'violations_inserted': 0,
            'labels_inserted': 0,
        }

    def run(self):
        """Main execution method."""
        print("=" * 60)
        print("TEST DATA SEEDING - Starting")
        print("=" * 60)

        with get_db_session() as session:
            self._clear_existing_data(session)
            reporters, employees = self._seed_users(session)
            self._seed_violations(session, reporters, employees)

        self._print_summary()
        print("=" * 60)
        print("TEST DATA SEEDING - Complete")
        print("=" * 60)

    def _clear_existing_data(self, session):
        """Clear all existing data from relevant tables."""
        print("\nClearing existing data...")
        for model in (ViolationLabel, Violation, User):
            result = session.execute(delete(model))
            print(f"  Cleared {model.__tablename__} ({result.rowcount} rows)")

    def _seed_users(self, session):
        print("\nSeeding users...")
        admin = User(username="admin", email="admin@example.com", full_name="Site Admin", role=Role.ADMIN)
        reporters = [
            User(
                username=f"specialist{i}",
                email=f"specialist{i}@example.com",
                full_name=f"Safety Specialist {i}",
                role=Role.SAFETY_SPECIALIST
            )
            for i in range(1, 4)
        ]
        employees = [
            User(
                username=name.lower(),
                email=f"{name.lower()}@example.com",
                full_name=f"{name} Worker",
                role=Role.EMPLOYEE
            )
            for name in FIRST_NAMES
        ]
        session.add_all([admin, *reporters, *employees])
        session.flush()
        self.stats['users_inserted'] = 1 + len(reporters) + len(employees)
        return [admin, *reporters], employees

    def _seed_violations(self, session, reporters, employees):
        print("\nSeeding violations...")
        now = get_now(self.settings.timezone)

        # Edge cases: first employee is a repeat offender, last one stays clean
        offenders = employees[:-1]
        weights = [6] + [1] * (len(offenders) - 1)

        for _ in range(self.violation_count):
            employee = self.random.choices(offenders, weights=weights)[0]
            timestamp = now - timedelta(
                days=self.random.randint(0, self.days),
                minutes=self.random.randint(0, 8 * 60)
            )
            labels = self._pick_labels()

            violation = Violation(
                image_url=f"https://images.example.com/violations/{self.random.getrandbits(48):012x}.jpg",
                employee_id=employee.user_id,
                reported_by_id=self.random.choice(reporters).user_id,
                location=self.random.choice(LOCATIONS),
                timestamp=timestamp,
                labels=[ViolationLabel(label=label, position=i) for i, label in enumerate(labels)]
            )
            session.add(violation)
            self.stats['violations_inserted'] += 1
            self.stats['labels_inserted'] += len(labels)

        session.flush()

    def _pick_labels(self):
        labels = [self.random.choice(VIOLATION_LABELS)]
        if self.random.random() < 0.25:
            labels.append(self.random.choice(CONTEXT_LABELS))
        if self.random.random() < 0.1:
            labels.extend(label for label in VIOLATION_LABELS if label not in labels)
        return [label for label in labels if label in self.settings.allowed_labels]

    def _print_summary(self):
        print("\nSummary:")
        for key, value in self.stats.items():
            print(f"  {key}: {value}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Seed PPE violation test data')
    parser.add_argument('--days', type=int, default=60, help='Spread violations over this many days')
    parser.add_argument('--violations', type=int, default=400, help='Number of violations to create')
    parser.add_argument('--seed', type=int, default=42, help='Random seed for reproducible data')
    args = parser.parse_args()

    seeder = TestDataSeeder(days=args.days, violation_count=args.violations, seed=args.seed)
    try:
        seeder.run()
    finally:
        db.close()


if __name__ == '__main__':
    main()
