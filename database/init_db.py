"""
Database initialization and seed data
"""
from database.config import DB_PATH, DEFAULT_EXCHANGE_RATE, DEFAULT_OWNER
from database.db import Database
from database.models import SCHEMA


def init_database(db: Database, owner_id: str = DEFAULT_OWNER):
    """Initialize database with schema"""
    print("🔧 Initializing database...")

    db.execute_script(SCHEMA)

    print("✅ Database schema created")

    seed_settings(db, owner_id)

    print("✅ Database initialized successfully!")


def seed_settings(db: Database, owner_id: str):
    """Seed the owner's default settings without overwriting existing ones"""
    print("⚙️  Seeding settings...")

    settings = [
        ("exchange_rate", str(DEFAULT_EXCHANGE_RATE)),
    ]

    for key, value in settings:
        db.write_execute(
            """
            INSERT OR IGNORE INTO settings (owner_id, key, value)
            VALUES (?, ?, ?)
        """,
            (owner_id, key, value),
        )

    print(f"✅ Seeded settings for owner '{owner_id}'")


if __name__ == "__main__":
    init_database(Database(DB_PATH))
