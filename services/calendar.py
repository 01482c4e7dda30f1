import calendar
import re
from datetime import date
from typing import NamedTuple

_YM_RE = re.compile(r"^(\d{4})-(\d{2})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class Day(NamedTuple):
    d: int        # 1..31
    label: str    # DD/MM/YYYY (para mostrar)
    iso: str      # YYYY-MM-DD (clave de almacenamiento)


def parse_ym(value: str | None) -> tuple[int, int]:
    """Valida 'YYYY-MM' y devuelve (año, mes). ValueError si no es válido."""
    m = _YM_RE.match((value or "").strip())
    if not m:
        raise ValueError(f"mes inválido: {value!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if year < 1 or not 1 <= month <= 12:
        raise ValueError(f"mes inválido: {value!r}")
    return year, month


def current_ym(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def days_of_month(ym: str) -> list[Day]:
    """Todos los días del mes, en orden."""
    year, month = parse_ym(ym)
    last = calendar.monthrange(year, month)[1]
    return [
        Day(
            d=d,
            label=f"{d:02d}/{month:02d}/{year:04d}",
            iso=f"{year:04d}-{month:02d}-{d:02d}",
        )
        for d in range(1, last + 1)
    ]


def month_of(iso: str) -> str:
    """'YYYY-MM-DD' -> 'YYYY-MM'. ValueError si la fecha no existe."""
    m = _ISO_RE.match((iso or "").strip())
    if not m:
        raise ValueError(f"fecha inválida: {iso!r}")
    # date() valida día/mes reales (ej. 2023-02-29 falla)
    d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    return f"{d.year:04d}-{d.month:02d}"
