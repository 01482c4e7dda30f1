from dataclasses import dataclass

from flask import abort, current_app, g, request
from flask_login import current_user

from models import db
from services.calendar import current_ym, parse_ym
from services.store import Store

STORE_FACTORY_KEY = "boletas.store_factory"


@dataclass(frozen=True)
class Principal:
    """Quién hace el request: se arma una vez desde el usuario logueado."""

    user_id: int
    username: str
    role: str
    unit_id: int | None

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(user_id=user.id, username=user.username, role=user.role, unit_id=user.unit_id)


def default_store_factory() -> Store:
    return Store(db.session)


def get_store() -> Store:
    factory = current_app.extensions.get(STORE_FACTORY_KEY, default_store_factory)
    return factory()


def current_principal() -> Principal | None:
    if "principal" not in g:
        g.principal = Principal.from_user(current_user) if current_user.is_authenticated else None
    return g.principal


def wants_json() -> bool:
    """Clientes programáticos: body JSON o Accept: application/json."""
    return request.is_json or request.accept_mimetypes.best == "application/json"


def month_from(value: str | None) -> str:
    """Mes del query/form; vacío -> mes actual; mal formado -> 400."""
    ym = str(value or "").strip()
    if not ym:
        return current_ym()
    try:
        parse_ym(ym)
    except ValueError:
        abort(400, description="Mes inválido (use YYYY-MM).")
    return ym
