"""
Catálogo fijo de áreas y unidades.

Se define al desplegar y se siembra en la tabla `units` (insert-or-ignore).
La unidad 4000 (Policía Rural) no reporta por sí misma: es el alcance del
editor que carga las boletas de todas las demás unidades del área 4.
"""
from typing import NamedTuple


class Area(NamedTuple):
    id: int
    name: str


class CatalogUnit(NamedTuple):
    id: int
    name: str


RURAL_UNIT_ID = 4000
RURAL_AREA_ID = 4


AREAS = [
    Area(1, "UNIDAD REGIONAL CAPITAL"),
    Area(2, "UNIDAD REGIONAL NORTE"),
    Area(3, "UNIDAD REGIONAL SUR"),
    Area(RURAL_AREA_ID, "POLICIA RURAL"),
]

UNITS_BY_AREA = {
    1: [
        CatalogUnit(1001, "COMISARIA PRIMERA"),
        CatalogUnit(1002, "COMISARIA SEGUNDA"),
        CatalogUnit(1003, "COMISARIA TERCERA"),
        CatalogUnit(1004, "COMISARIA CUARTA"),
    ],
    2: [
        CatalogUnit(2001, "COMISARIA NORTE I"),
        CatalogUnit(2002, "COMISARIA NORTE II"),
        CatalogUnit(2003, "SUBCOMISARIA NORTE"),
    ],
    3: [
        CatalogUnit(3001, "COMISARIA SUR I"),
        CatalogUnit(3002, "COMISARIA SUR II"),
        CatalogUnit(3003, "SUBCOMISARIA SUR"),
    ],
    RURAL_AREA_ID: [
        CatalogUnit(RURAL_UNIT_ID, "POLICIA RURAL"),
        CatalogUnit(4001, "DESTACAMENTO RURAL NORTE"),
        CatalogUnit(4002, "DESTACAMENTO RURAL SUR"),
        CatalogUnit(4003, "DESTACAMENTO RURAL ESTE"),
    ],
}


def all_units():
    """(area_id, unit) para todas las unidades del catálogo, en orden."""
    for area in AREAS:
        for unit in UNITS_BY_AREA.get(area.id, []):
            yield area.id, unit


def unit_ids() -> set[int]:
    return {u.id for _, u in all_units()}


def rural_member_units() -> list[CatalogUnit]:
    """Unidades que carga el editor rural (área 4 sin la 4000)."""
    return [u for u in UNITS_BY_AREA.get(RURAL_AREA_ID, []) if u.id != RURAL_UNIT_ID]


def reporting_units(area_id: int) -> list[CatalogUnit]:
    """Unidades de un área que efectivamente reportan boletas."""
    return [u for u in UNITS_BY_AREA.get(area_id, []) if u.id != RURAL_UNIT_ID]
