"""
Copia SQLite (data.db) -> PostgreSQL.

- units / users: conserva ids, INSERT ... ON CONFLICT DO NOTHING
- counts: upsert por (unit_id, date), nulos -> 0
- locks: ON CONFLICT DO NOTHING
- esquema: create_all + alembic_version en head (si no estaba marcada)

Todo en una sola transacción del destino.
"""
import logging
import os

from alembic.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from models import db
from models.count import DailyCount
from models.lock import DateLock
from models.unit import Unit
from models.user import User

log = logging.getLogger(__name__)

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "migrations")

_DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _rows(conn, sql: str) -> list[dict]:
    return [dict(r._mapping) for r in conn.execute(text(sql))]


def copy_database(source: Engine, target: Engine) -> dict[str, int]:
    insert = _DIALECT_INSERTS.get(target.dialect.name)
    if insert is None:
        raise ValueError(f"Dialecto destino no soportado: {target.dialect.name}")

    with source.connect() as src:
        units = _rows(src, "SELECT id, area_id, name FROM units")
        users = _rows(src, "SELECT id, username, password_hash, role, unit_id FROM users")
        counts = _rows(src, "SELECT unit_id, date, manual, electronic FROM counts")
        locks = _rows(src, "SELECT date FROM locks")

    for c in counts:
        c["manual"] = c["manual"] if isinstance(c["manual"], int) else 0
        c["electronic"] = c["electronic"] if isinstance(c["electronic"], int) else 0

    db.metadata.create_all(target)

    with target.begin() as conn:
        for u in units:
            conn.execute(insert(Unit.__table__).values(**u).on_conflict_do_nothing(index_elements=["id"]))

        for us in users:
            conn.execute(insert(User.__table__).values(**us).on_conflict_do_nothing(index_elements=["id"]))

        for c in counts:
            stmt = insert(DailyCount.__table__).values(**c)
            stmt = stmt.on_conflict_do_update(
                index_elements=["unit_id", "date"],
                set_={"manual": stmt.excluded.manual, "electronic": stmt.excluded.electronic},
            )
            conn.execute(stmt)

        for lk in locks:
            conn.execute(insert(DateLock.__table__).values(**lk).on_conflict_do_nothing(index_elements=["date"]))

        # create_all no deja rastro en Alembic: marcar head para que
        # un `flask db upgrade` posterior no recree las tablas
        ctx = MigrationContext.configure(conn)
        if ctx.get_current_revision() is None:
            ctx.stamp(ScriptDirectory(MIGRATIONS_DIR), "head")

        if target.dialect.name == "postgresql":
            # Los ids copiados no avanzan la secuencia SERIAL
            for table in ("users", "counts"):
                conn.execute(text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                    f"COALESCE((SELECT MAX(id) FROM {table}), 0) + 1, false)"
                ))

    summary = {"units": len(units), "users": len(users), "counts": len(counts), "locks": len(locks)}
    log.info("Migración completada: %s", summary)
    return summary
