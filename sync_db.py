from sqlalchemy import inspect

from app.core.database import Base, engine
from app import models  # noqa: F401  registers the tables on Base.metadata


def sync_db():
    print("Connecting to database...")
    existing = set(inspect(engine).get_table_names())
    missing = [t for t in Base.metadata.sorted_tables if t.name not in existing]

    if not missing:
        print("All tables already exist.")
        return

    print("Creating missing tables...")
    Base.metadata.create_all(bind=engine, tables=missing)
    for table in missing:
        print(f"  Table '{table.name}' ensured.")
    print("Database sync completed successfully.")


if __name__ == "__main__":
    sync_db()
