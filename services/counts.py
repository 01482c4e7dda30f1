"""
Guardado de boletas desde la grilla del editor.

Reglas:
- Fecha bloqueada: no se toca.
- Valor enviado y no vacío: se convierte a entero (no numérico -> 0, tope MAX_COUNT) y se guarda.
- Valor ausente o vacío: se conserva lo que ya estaba (0 si no había nada).

Así un formulario parcial no pisa con ceros los campos que no envió.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, NamedTuple

from services.calendar import days_of_month
from services.catalog import RURAL_UNIT_ID, rural_member_units
from services.errors import InvalidSubmission
from services.store import Store, count_key

KINDS = ("manual", "electronic")

# Columna INTEGER (int4 en PostgreSQL)
MAX_COUNT = 2**31 - 1

# manual[2024-03-05]  |  manual[4001][2024-03-05]
_FIELD_RE = re.compile(r"^(manual|electronic)\[([^\[\]]+)\](?:\[([^\[\]]+)\])?$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class SaveResult(NamedTuple):
    units: list[int]
    written: int
    skipped_locked: int


@dataclass(frozen=True)
class Submission:
    """Valores crudos validados: {kind: {unit_id: {fecha: valor}}}."""

    ym: str
    values: dict[str, dict[int, dict[str, Any]]] = field(default_factory=dict)

    def raw(self, kind: str, unit_id: int, iso: str):
        return self.values.get(kind, {}).get(unit_id, {}).get(iso)


def parse_form_fields(form: Mapping[str, Any]) -> dict[str, dict]:
    """
    Convierte campos planos con corchetes en mapas anidados.
    Campos que no son manual/electronic se ignoran (ej. 'month').
    """
    out: dict[str, dict] = {k: {} for k in KINDS}
    for name in form.keys():
        m = _FIELD_RE.match(name)
        if not m:
            if name.startswith(KINDS):
                raise InvalidSubmission(f"Campo inválido: {name}")
            continue
        kind, first, second = m.group(1), m.group(2), m.group(3)
        value = form.get(name)
        if second is None:
            out[kind][first] = value
        else:
            out[kind].setdefault(first, {})
            if not isinstance(out[kind][first], dict):
                raise InvalidSubmission(f"Campo inválido: {name}")
            out[kind][first][second] = value
    return out


def scope_units(unit_id: int) -> list[int]:
    """Unidades que guarda un editor: la propia, o las del área rural."""
    if unit_id == RURAL_UNIT_ID:
        return [u.id for u in rural_member_units()]
    return [unit_id]


def build_submission(raw: Mapping[str, Any], ym: str, unit_id: int) -> Submission:
    """
    Valida los mapas enviados contra los días del mes y las unidades del editor.
    - Editor normal: {fecha: valor}
    - Editor rural:  {unidad: {fecha: valor}}
    Cualquier clave desconocida -> InvalidSubmission.
    """
    valid_days = {d.iso for d in days_of_month(ym)}
    nested = unit_id == RURAL_UNIT_ID
    allowed_units = set(scope_units(unit_id))

    def _check_days(by_date, kind):
        if not isinstance(by_date, Mapping):
            raise InvalidSubmission(f"Formato inválido en {kind}")
        unknown = [k for k in by_date if k not in valid_days]
        if unknown:
            raise InvalidSubmission(f"Fecha fuera del mes {ym}: {unknown[0]}")
        return dict(by_date)

    values: dict[str, dict[int, dict[str, Any]]] = {}
    for kind in KINDS:
        given = raw.get(kind) or {}
        if not isinstance(given, Mapping):
            raise InvalidSubmission(f"Formato inválido en {kind}")

        if not nested:
            values[kind] = {unit_id: _check_days(given, kind)}
            continue

        per_unit: dict[int, dict[str, Any]] = {}
        for unit_key, by_date in given.items():
            try:
                uid = int(unit_key)
            except (TypeError, ValueError):
                raise InvalidSubmission(f"Unidad inválida: {unit_key}") from None
            if uid not in allowed_units:
                raise InvalidSubmission(f"Unidad inválida: {unit_key}")
            per_unit[uid] = _check_days(by_date, kind)
        values[kind] = per_unit

    return Submission(ym=ym, values=values)


def to_count(value) -> int | None:
    """
    None si no se envió nada (conservar valor previo).
    Si se envió: entero inicial del texto, no numérico -> 0, negativos -> 0,
    y nunca más que MAX_COUNT.
    """
    if value is None or isinstance(value, bool):
        return None
    s = str(value)
    if s.strip() == "":
        return None
    m = _LEADING_INT_RE.match(s)
    if not m:
        return 0
    return min(MAX_COUNT, max(0, int(m.group(1))))


def save_submission(store: Store, submission: Submission, unit_id: int) -> SaveResult:
    """Aplica el envío del editor sobre el mes. No hace commit."""
    ym = submission.ym
    locked = set(store.get_locked_dates_for_month(ym))
    days = days_of_month(ym)
    units = scope_units(unit_id)

    if unit_id == RURAL_UNIT_ID:
        stored = store.get_counts_for_month(ym)
    else:
        by_date = store.get_counts_for_unit_month(unit_id, ym)
        stored = {count_key(unit_id, iso): c for iso, c in by_date.items()}

    written = 0
    skipped = 0
    for uid in units:
        for d in days:
            if d.iso in locked:
                skipped += 1
                continue
            prev = stored.get(count_key(uid, d.iso)) or {"manual": 0, "electronic": 0}

            manual = to_count(submission.raw("manual", uid, d.iso))
            electronic = to_count(submission.raw("electronic", uid, d.iso))
            store.upsert_count(
                uid,
                d.iso,
                prev["manual"] if manual is None else manual,
                prev["electronic"] if electronic is None else electronic,
            )
            written += 1

    return SaveResult(units=units, written=written, skipped_locked=skipped)
