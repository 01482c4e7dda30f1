from flask import Blueprint, abort, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_login import login_required

from models import db
from models.user import Role
from routes.context import current_principal, get_store, month_from, wants_json
from routes.guards import require_roles
from services.calendar import days_of_month
from services.catalog import RURAL_AREA_ID, RURAL_UNIT_ID, rural_member_units
from services.counts import build_submission, parse_form_fields, save_submission
from services.errors import InvalidSubmission

editor_bp = Blueprint("editor", __name__, url_prefix="/editor")


@editor_bp.get("")
@login_required
@require_roles(Role.EDITOR)
def home():
    """
    Grilla del mes para el editor.
    - Editor de unidad: una fila por día.
    - Policía Rural: una columna por cada unidad del área 4.
    """
    principal = current_principal()
    ym = month_from(request.args.get("month"))
    store = get_store()
    days = days_of_month(ym)
    locks = set(store.get_locked_dates_for_month(ym))

    if principal.unit_id == RURAL_UNIT_ID:
        return render_template(
            "editor.html",
            unit={"id": RURAL_UNIT_ID, "name": "POLICIA RURAL"},
            rural=True,
            area_id=RURAL_AREA_ID,
            area_units=rural_member_units(),
            days=days,
            counts=store.get_counts_for_month(ym),
            locks=locks,
            ym=ym,
        )

    unit = store.get_unit_by_id(principal.unit_id) if principal.unit_id is not None else None
    if unit is None:
        abort(404)

    return render_template(
        "editor.html",
        unit=unit,
        rural=False,
        days=days,
        counts=store.get_counts_for_unit_month(unit.id, ym),
        locks=locks,
        ym=ym,
    )


@editor_bp.post("/save")
@login_required
@require_roles(Role.EDITOR)
def save():
    principal = current_principal()
    if principal.unit_id is None:
        abort(403)

    if request.is_json:
        raw = request.get_json(silent=True)
        if not isinstance(raw, dict):
            return jsonify({"ok": False, "error": "Se esperaba un objeto JSON."}), 400
    else:
        raw = request.form

    ym = month_from(raw.get("month"))

    try:
        values = raw if request.is_json else parse_form_fields(request.form)
        submission = build_submission(values, ym, principal.unit_id)
    except InvalidSubmission as e:
        if wants_json():
            return jsonify({"ok": False, "error": e.message}), 400
        flash(e.message, "error")
        return redirect(url_for("editor.home", month=ym))

    result = save_submission(get_store(), submission, principal.unit_id)
    db.session.commit()
    current_app.logger.info(
        "%s guardó %s (unidades=%s, días=%s, bloqueados=%s)",
        principal.username, ym, result.units, result.written, result.skipped_locked,
    )

    if wants_json():
        return jsonify({
            "ok": True,
            "month": ym,
            "units": result.units,
            "written": result.written,
            "skipped_locked": result.skipped_locked,
        })
    flash("Boletas guardadas.", "message")
    return redirect(url_for("editor.home", month=ym))
