from io import BytesIO

from openpyxl import load_workbook

from services.calendar import days_of_month
from services.catalog import AREAS, CatalogUnit, Area
from services.export import area_rows, build_workbook, export_filename, workbook_bytes


COUNTS = {
    "1001|2024-03-05": {"manual": 3, "electronic": 1},
    "1002|2024-03-05": {"manual": 0, "electronic": 2},
    "1001|2024-03-10": {"manual": 4, "electronic": 0},
}


def test_area_rows_totals():
    days = days_of_month("2024-03")
    rows = area_rows(1, days, COUNTS)

    header = rows[0]
    assert header[:2] == ["UNIDAD", "TIPO"]
    assert header[2] == "01/03/2024"
    assert header[-1] == "TOTAL"
    assert len(header) == 2 + 31 + 1

    # 4 unidades en el área 1 -> 8 filas + encabezado + total
    assert len(rows) == 1 + 8 + 1

    manual_1001 = rows[1]
    assert manual_1001[:2] == ["COMISARIA PRIMERA", "MANUALES"]
    assert manual_1001[2 + 4] == 3
    assert manual_1001[-1] == 7

    electronic_1002 = rows[4]
    assert electronic_1002[:2] == ["COMISARIA SEGUNDA", "ELECTRÓNICAS"]
    assert electronic_1002[-1] == 2

    totals = rows[-1]
    assert totals[0] == "TOTAL"
    assert totals[2 + 4] == 6
    assert totals[2 + 9] == 4
    assert totals[-1] == 10
    assert totals[-1] == sum(totals[2:-1])


def test_rural_sheet_skips_virtual_unit():
    rows = area_rows(4, days_of_month("2024-03"), {"4000|2024-03-01": {"manual": 99, "electronic": 99}})
    names = {r[0] for r in rows[1:-1]}
    assert "POLICIA RURAL" not in names
    assert len(rows) == 1 + 3 * 2 + 1
    assert rows[-1][-1] == 0


def test_workbook_has_one_sheet_per_area():
    wb = load_workbook(workbook_bytes("2024-03", COUNTS))
    assert wb.sheetnames == [a.name[:31] for a in AREAS]

    ws = wb[AREAS[0].name]
    assert ws.cell(row=1, column=1).value == "UNIDAD"
    assert ws.cell(row=ws.max_row, column=1).value == "TOTAL"
    assert ws.cell(row=ws.max_row, column=ws.max_column).value == 10


def test_sheet_names_are_truncated(monkeypatch):
    long_name = "UNIDAD REGIONAL CON UN NOMBRE DEMASIADO LARGO"
    monkeypatch.setattr("services.export.AREAS", [Area(9, long_name)])
    monkeypatch.setattr("services.export.UNITS_BY_AREA", {9: [CatalogUnit(9001, "UNA")]})

    wb = build_workbook("2024-02", {})
    assert wb.sheetnames == [long_name[:31]]

    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    ws = load_workbook(bio).active
    assert ws.max_column == 2 + 29 + 1


def test_export_filename():
    assert export_filename("2024-03") == "boletas-2024-03.xlsx"


def test_total_row_is_per_area():
    counts = dict(COUNTS)
    counts["2001|2024-03-05"] = {"manual": 50, "electronic": 50}
    days = days_of_month("2024-03")

    assert area_rows(1, days, counts)[-1][-1] == 10
    north = area_rows(2, days, counts)[-1]
    assert north[2 + 4] == 100
    assert north[-1] == 100
