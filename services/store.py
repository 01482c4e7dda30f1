from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.count import DailyCount
from models.lock import DateLock
from models.unit import Unit
from models.user import Role, User
from services.calendar import days_of_month, month_of, parse_ym
from services.catalog import RURAL_UNIT_ID, CatalogUnit
from services.errors import DuplicateUsername, RuralEditorExists, UnknownUnit

# INSERT ... ON CONFLICT por dialecto (SQLite embebido / PostgreSQL en red)
_DIALECT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def count_key(unit_id: int, iso: str) -> str:
    return f"{unit_id}|{iso}"


def _month_pattern(ym: str) -> str:
    # parse_ym garantiza solo dígitos: sin comodines extra en el LIKE
    year, month = parse_ym(ym)
    return f"{year:04d}-{month:02d}-%"


class Store:
    """
    Acceso a datos de boletas (users / units / counts / locks).

    Mismo contrato para SQLite (archivo en DATA_DIR) y PostgreSQL
    (DATABASE_URL). No hace commit: la transacción la cierra quien llama,
    así las operaciones masivas (bloquear mes, reset) son atómicas.
    """

    def __init__(self, session: Session):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        return _DIALECT_INSERTS.get(dialect)

    # -------------------------
    # Usuarios
    # -------------------------
    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.session.query(User).filter(User.username == username).first()

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_all_users(self):
        """Usuarios con el nombre de su unidad (LEFT JOIN), ordenados por id."""
        return (
            self.session.query(
                User.id,
                User.username,
                User.role,
                User.unit_id,
                Unit.name.label("unit_name"),
            )
            .outerjoin(Unit, Unit.id == User.unit_id)
            .order_by(User.id.asc())
            .all()
        )

    def count_users_by_unit(self, unit_id: int) -> int:
        return (
            self.session.query(func.count(User.id))
            .filter(User.unit_id == unit_id)
            .scalar()
        ) or 0

    def create_editor(self, username: str, password: str, unit_id: int) -> User:
        """
        Crea un editor para una unidad.
        - UnknownUnit: la unidad no existe.
        - DuplicateUsername: el nombre de usuario ya está tomado.
        - RuralEditorExists: Policía Rural admite un solo editor.
        """
        if self.get_unit_by_id(unit_id) is None:
            raise UnknownUnit()

        if self.get_user_by_username(username) is not None:
            raise DuplicateUsername()

        if unit_id == RURAL_UNIT_ID and self.count_users_by_unit(unit_id) > 0:
            raise RuralEditorExists()

        user = User(username=username, role=Role.EDITOR, unit_id=unit_id)
        user.set_password(password)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as e:
            # Otro request creó el mismo username entre el chequeo y el insert
            self.session.rollback()
            raise DuplicateUsername() from e
        return user

    def update_user_password(self, user_id: int, password: str) -> bool:
        user = self.get_user_by_id(user_id)
        if not user:
            return False
        user.set_password(password)
        self.session.flush()
        return True

    def delete_user_by_id(self, user_id: int) -> bool:
        """Borra un usuario. Los admin no se borran (devuelve False)."""
        user = self.get_user_by_id(user_id)
        if not user or user.role == Role.ADMIN:
            return False
        self.session.delete(user)
        self.session.flush()
        return True

    def ensure_admin(self, password: str, username: str = "admin") -> bool:
        if self.get_user_by_username(username) is not None:
            return False
        user = User(username=username, role=Role.ADMIN, unit_id=None)
        user.set_password(password)
        self.session.add(user)
        self.session.flush()
        return True

    # -------------------------
    # Unidades
    # -------------------------
    def get_unit_by_id(self, unit_id: int) -> Optional[Unit]:
        return self.session.get(Unit, unit_id)

    def seed_units(self, units: Iterable[tuple[int, CatalogUnit]]) -> int:
        """Inserta las unidades del catálogo que falten. Devuelve cuántas agregó."""
        added = 0
        for area_id, u in units:
            if self.session.get(Unit, u.id) is None:
                self.session.add(Unit(id=u.id, area_id=area_id, name=u.name))
                added += 1
        self.session.flush()
        return added

    # -------------------------
    # Boletas
    # -------------------------
    def get_counts_for_month(self, ym: str) -> dict[str, dict[str, int]]:
        rows = (
            self.session.query(
                DailyCount.unit_id,
                DailyCount.date,
                func.coalesce(DailyCount.manual, 0),
                func.coalesce(DailyCount.electronic, 0),
            )
            .filter(DailyCount.date.like(_month_pattern(ym)))
            .all()
        )
        return {
            count_key(unit_id, d): {"manual": manual, "electronic": electronic}
            for unit_id, d, manual, electronic in rows
        }

    def get_counts_for_unit_month(self, unit_id: int, ym: str) -> dict[str, dict[str, int]]:
        rows = (
            self.session.query(
                DailyCount.date,
                func.coalesce(DailyCount.manual, 0),
                func.coalesce(DailyCount.electronic, 0),
            )
            .filter(
                DailyCount.unit_id == unit_id,
                DailyCount.date.like(_month_pattern(ym)),
            )
            .all()
        )
        return {d: {"manual": manual, "electronic": electronic} for d, manual, electronic in rows}

    def upsert_count(self, unit_id: int, date: str, manual: int, electronic: int) -> None:
        """Inserta o reemplaza la boleta de (unit_id, date). Último en escribir gana."""
        insert = self._insert()
        if insert is not None:
            stmt = insert(DailyCount).values(
                unit_id=unit_id, date=date, manual=manual, electronic=electronic
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["unit_id", "date"],
                set_={"manual": stmt.excluded.manual, "electronic": stmt.excluded.electronic},
            )
            self.session.execute(stmt)
            return

        row = (
            self.session.query(DailyCount)
            .filter(DailyCount.unit_id == unit_id, DailyCount.date == date)
            .first()
        )
        if row:
            row.manual = manual
            row.electronic = electronic
        else:
            self.session.add(
                DailyCount(unit_id=unit_id, date=date, manual=manual, electronic=electronic)
            )
        self.session.flush()

    # -------------------------
    # Bloqueos
    # -------------------------
    def lock_date(self, date: str) -> None:
        month_of(date)
        insert = self._insert()
        if insert is not None:
            self.session.execute(insert(DateLock).values(date=date).on_conflict_do_nothing())
            return
        if self.session.get(DateLock, date) is None:
            self.session.add(DateLock(date=date))
            self.session.flush()

    def unlock_date(self, date: str) -> None:
        self.session.query(DateLock).filter(DateLock.date == date).delete(
            synchronize_session=False
        )

    def is_date_locked(self, date: str) -> bool:
        return (
            self.session.query(DateLock.date).filter(DateLock.date == date).first()
            is not None
        )

    def get_locked_dates_for_month(self, ym: str) -> list[str]:
        rows = (
            self.session.query(DateLock.date)
            .filter(DateLock.date.like(_month_pattern(ym)))
            .order_by(DateLock.date.asc())
            .all()
        )
        return [r[0] for r in rows]

    def lock_month(self, ym: str) -> int:
        days = days_of_month(ym)
        for d in days:
            self.lock_date(d.iso)
        return len(days)

    def unlock_month(self, ym: str) -> int:
        return (
            self.session.query(DateLock)
            .filter(DateLock.date.like(_month_pattern(ym)))
            .delete(synchronize_session=False)
        )

    # -------------------------
    # Reset
    # -------------------------
    def reset_app(self) -> dict[str, int]:
        """Borra boletas, bloqueos y usuarios no-admin. Irreversible."""
        counts = self.session.query(DailyCount).delete(synchronize_session=False)
        locks = self.session.query(DateLock).delete(synchronize_session=False)
        users = (
            self.session.query(User)
            .filter(User.role != Role.ADMIN)
            .delete(synchronize_session=False)
        )
        return {"counts": counts, "locks": locks, "users": users}
