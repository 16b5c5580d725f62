"""Create missing tables and bring a legacy database up to the current schema.

The first schema had no review moderation and no account blocking. Reviews
that already existed there were public, so they are migrated as approved.
"""
import logging
from typing import List

from sqlalchemy import inspect, text

from . import models  # noqa: F401  (registers tables on Base)
from .config import configure_logging
from .database import Base, engine

logger = logging.getLogger(__name__)

# table -> [(column, DDL type and default)]
ADDED_COLUMNS = {
    "users": [
        ("is_blocked", "BOOLEAN NOT NULL DEFAULT FALSE"),
        ("last_active_at", "TIMESTAMP"),
    ],
    "reviews": [
        ("status", "VARCHAR(16) NOT NULL DEFAULT 'pending'"),
        ("image_urls", "JSON NOT NULL DEFAULT '[]'"),
        ("dish_names", "JSON NOT NULL DEFAULT '[]'"),
    ],
}


def migrate(bind=engine) -> List[str]:
    """Apply the migration and return the columns that were added"""
    # Create tables if they don't exist
    Base.metadata.create_all(bind=bind)

    inspector = inspect(bind)
    applied = []
    with bind.begin() as conn:
        for table, columns in ADDED_COLUMNS.items():
            existing = {column["name"] for column in inspector.get_columns(table)}
            for name, ddl in columns:
                if name in existing:
                    continue
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                applied.append(f"{table}.{name}")
                logger.info("Added %s.%s column", table, name)

                if (table, name) == ("reviews", "status"):
                    result = conn.execute(text("UPDATE reviews SET status = 'approved'"))
                    logger.info("Marked %s legacy review(s) as approved", result.rowcount)
    return applied


def main():
    configure_logging()
    applied = migrate()
    if applied:
        logger.info("Database migration completed: %s", ", ".join(applied))
    else:
        logger.info("Database already up to date")


if __name__ == "__main__":
    main()
