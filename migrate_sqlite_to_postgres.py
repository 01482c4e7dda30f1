"""
Migración única: DATA_DIR/data.db (SQLite) -> DATABASE_URL (PostgreSQL).

Uso:
    DATABASE_URL=postgresql://... python migrate_sqlite_to_postgres.py
"""
import os
import sys

from sqlalchemy import create_engine

from config import Config
from services.migration import copy_database


def run(source_path: str | None = None, target_url: str | None = None) -> dict:
    source_path = source_path or Config.DB_PATH
    target_url = target_url or Config.SQLALCHEMY_DATABASE_URI

    if not os.path.exists(source_path):
        raise FileNotFoundError(f"No existe la base SQLite: {source_path}")

    source = create_engine(f"sqlite:///{source_path}")
    target = create_engine(target_url)
    if source.url == target.url:
        raise ValueError("Origen y destino son la misma base; define DATABASE_URL.")

    try:
        return copy_database(source, target)
    finally:
        source.dispose()
        target.dispose()


if __name__ == "__main__":
    try:
        summary = run()
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)
    print("✅ Migración completada", summary)
