from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from services.calendar import days_of_month
from services.catalog import AREAS, UNITS_BY_AREA, RURAL_UNIT_ID
from services.store import count_key

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Límite de Excel para nombres de hoja
SHEET_NAME_MAX = 31

_KIND_LABELS = (
    ("manual", "MANUALES"),
    ("electronic", "ELECTRÓNICAS"),
)


def export_filename(ym: str) -> str:
    return f"boletas-{ym}.xlsx"


def area_rows(area_id: int, days, counts: dict) -> list[list]:
    """
    Filas de la hoja de un área:
    - encabezado: UNIDAD, TIPO, <días>, TOTAL
    - dos filas por unidad (manuales / electrónicas) con total al final
    - fila TOTAL: manuales + electrónicas de las unidades de esta hoja, por día
      (cada área tiene su propio total; no suma otras áreas)
    """
    header = ["UNIDAD", "TIPO"] + [d.label for d in days] + ["TOTAL"]
    rows = [header]
    day_totals = [0] * len(days)

    for unit in UNITS_BY_AREA.get(area_id, []):
        if unit.id == RURAL_UNIT_ID:
            continue
        for kind, label in _KIND_LABELS:
            values = []
            for i, d in enumerate(days):
                c = counts.get(count_key(unit.id, d.iso)) or {}
                v = c.get(kind) or 0
                values.append(v)
                day_totals[i] += v
            rows.append([unit.name, label] + values + [sum(values)])

    rows.append(["TOTAL", ""] + day_totals + [sum(day_totals)])
    return rows


def build_workbook(ym: str, counts: dict) -> Workbook:
    days = days_of_month(ym)
    wb = Workbook()
    wb.remove(wb.active)

    for area in AREAS:
        ws = wb.create_sheet(title=area.name[:SHEET_NAME_MAX])
        for row in area_rows(area.id, days, counts):
            ws.append(row)

        bold = Font(bold=True)
        for cell in ws[1]:
            cell.font = bold
        for cell in ws[ws.max_row]:
            cell.font = bold

        ws.column_dimensions["A"].width = 32
        ws.column_dimensions["B"].width = 14
        for i in range(3, len(days) + 4):
            ws.column_dimensions[get_column_letter(i)].width = 12
        ws.freeze_panes = "C2"

    return wb


def workbook_bytes(ym: str, counts: dict) -> BytesIO:
    bio = BytesIO()
    build_workbook(ym, counts).save(bio)
    bio.seek(0)
    return bio
