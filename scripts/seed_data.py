"""Seed script to populate the database with a sample yard."""

from datetime import timedelta
from decimal import Decimal

from yardops.core.clock import utc_now
from yardops.core.config import settings
from yardops.core.database import build_engine, build_session_factory, init_db
from yardops.models import (
    Location,
    Meter,
    MeterAssignment,
    MeterType,
    Reading,
    ScheduledReading,
    User,
)
from yardops.models.enums import ReadingFrequency, UserRole


def seed_database() -> None:
    """Seed the database with sample data."""
    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    session_factory = build_session_factory(engine)

    with session_factory() as db:
        # Check if data already exists
        if db.query(Location).first():
            print("Database already has data. Skipping seed.")
            return

        print("Seeding database...")
        now = utc_now()

        locations = {
            name: Location(name=name)
            for name in ["North Yard", "South Yard", "Maintenance Shed"]
        }
        meter_types = {
            name: MeterType(name=name)
            for name in ["Electricity", "Water", "Gas", "Fuel"]
        }
        db.add_all([*locations.values(), *meter_types.values()])

        admin = User(
            email="admin@yardops.example.com",
            first_name="Ada",
            last_name="Admin",
            role=UserRole.ADMIN,
        )
        readers = [
            User(email="rita@yardops.example.com", first_name="Rita", last_name="Reader"),
            User(email="sam@yardops.example.com", first_name="Sam", last_name="Reader"),
        ]
        db.add_all([admin, *readers])
        db.flush()

        print(f"Created {len(locations)} locations, {len(meter_types)} meter types, 3 users")

        # (number, type, location, frequency, days since last reading or None)
        meter_specs = [
            ("EL-001", "Electricity", "North Yard", ReadingFrequency.DAILY, 0),
            ("EL-002", "Electricity", "South Yard", ReadingFrequency.DAILY, 3),
            ("WA-001", "Water", "North Yard", ReadingFrequency.WEEKLY, 5),
            ("WA-002", "Water", "Maintenance Shed", ReadingFrequency.WEEKLY, 12),
            ("GA-001", "Gas", "South Yard", ReadingFrequency.MONTHLY, 40),
            ("FU-001", "Fuel", "Maintenance Shed", ReadingFrequency.AD_HOC, 90),
            ("FU-002", "Fuel", "North Yard", ReadingFrequency.MONTHLY, None),
        ]

        for index, (number, type_name, location_name, frequency, age) in enumerate(meter_specs):
            meter = Meter(
                meter_number=number,
                meter_type=meter_types[type_name],
                location=locations[location_name],
                frequency=frequency,
            )
            db.add(meter)
            db.flush()

            reader = readers[index % len(readers)]
            db.add(
                MeterAssignment(
                    meter_id=meter.id,
                    user_id=reader.id,
                    assigned_by_id=admin.id,
                    assigned_at=now - timedelta(days=120),
                )
            )

            if age is not None:
                # A short history ending ``age`` days ago
                for step in range(3):
                    db.add(
                        Reading(
                            meter_id=meter.id,
                            user_id=reader.id,
                            value=Decimal(1000 + index * 100 + step * 25) + Decimal("0.5"),
                            reading_date=now - timedelta(days=age + step * 7),
                            comment="Seeded reading" if step == 0 else None,
                        )
                    )

            db.add(
                ScheduledReading(
                    meter_id=meter.id,
                    scheduled_date=now - timedelta(days=1),
                    due_date=now if index % 2 == 0 else now + timedelta(days=7),
                )
            )
            print(f"Created meter: {number} ({frequency.value}) assigned to {reader.full_name}")

        db.commit()
        print("Seeding complete!")


if __name__ == "__main__":
    seed_database()
