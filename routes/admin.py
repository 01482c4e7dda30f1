from flask import Blueprint, abort, current_app, flash, redirect, render_template, request, send_file, url_for
from flask_login import login_required

from models import db
from models.user import Role
from routes.context import current_principal, get_store, month_from
from routes.guards import require_roles
from services.calendar import days_of_month, month_of, parse_ym
from services.catalog import AREAS, UNITS_BY_AREA, RURAL_UNIT_ID
from services.errors import BoletasError
from services.export import XLSX_MIMETYPE, export_filename, workbook_bytes

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

RESET_CONFIRMATION = "RESET"


# -------------------------
# Helpers
# -------------------------
def _clean_str(value: str | None) -> str:
    return (value or "").strip()


def _to_int(val: str | None) -> int | None:
    try:
        return int(_clean_str(val))
    except ValueError:
        return None


def _path_date(date: str) -> str:
    """Fecha de la URL -> su mes. 404 si no es YYYY-MM-DD válida."""
    try:
        return month_of(date)
    except ValueError:
        abort(404)


def _path_month(ym: str) -> str:
    try:
        parse_ym(ym)
    except ValueError:
        abort(404)
    return ym


def _admin_name() -> str:
    principal = current_principal()
    return principal.username if principal else "?"


# =========================
# GRILLA / BLOQUEOS
# =========================
@admin_bp.get("")
@login_required
@require_roles(Role.ADMIN)
def home():
    ym = month_from(request.args.get("month"))
    store = get_store()
    return render_template(
        "admin.html",
        areas=AREAS,
        units=UNITS_BY_AREA,
        rural_unit_id=RURAL_UNIT_ID,
        days=days_of_month(ym),
        counts=store.get_counts_for_month(ym),
        locked_dates=set(store.get_locked_dates_for_month(ym)),
        ym=ym,
    )


@admin_bp.get("/locks/")
@admin_bp.get("/locks")
@login_required
@require_roles(Role.ADMIN)
def locks():
    ym = month_from(request.args.get("month"))
    return render_template(
        "admin_locks.html",
        days=days_of_month(ym),
        locked_dates=set(get_store().get_locked_dates_for_month(ym)),
        ym=ym,
    )


@admin_bp.post("/lock/<date>")
@login_required
@require_roles(Role.ADMIN)
def lock_date(date: str):
    ym = _path_date(date)
    get_store().lock_date(date)
    db.session.commit()
    current_app.logger.info("%s bloqueó %s", _admin_name(), date)
    return redirect(url_for("admin.locks", month=ym))


@admin_bp.post("/unlock/<date>")
@login_required
@require_roles(Role.ADMIN)
def unlock_date(date: str):
    ym = _path_date(date)
    get_store().unlock_date(date)
    db.session.commit()
    current_app.logger.info("%s desbloqueó %s", _admin_name(), date)
    return redirect(url_for("admin.locks", month=ym))


@admin_bp.post("/lock-month/<ym>")
@login_required
@require_roles(Role.ADMIN)
def lock_month(ym: str):
    ym = _path_month(ym)
    n = get_store().lock_month(ym)
    db.session.commit()
    current_app.logger.info("%s bloqueó el mes %s (%s días)", _admin_name(), ym, n)
    return redirect(url_for("admin.locks", month=ym))


@admin_bp.post("/unlock-month/<ym>")
@login_required
@require_roles(Role.ADMIN)
def unlock_month(ym: str):
    ym = _path_month(ym)
    n = get_store().unlock_month(ym)
    db.session.commit()
    current_app.logger.info("%s desbloqueó el mes %s (%s días)", _admin_name(), ym, n)
    return redirect(url_for("admin.locks", month=ym))


# =========================
# EXPORTAR
# =========================
@admin_bp.get("/export")
@login_required
@require_roles(Role.ADMIN)
def export():
    ym = month_from(request.args.get("month"))
    counts = get_store().get_counts_for_month(ym)
    current_app.logger.info("%s exportó %s", _admin_name(), ym)
    return send_file(
        workbook_bytes(ym, counts),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=export_filename(ym),
    )


# =========================
# USUARIOS
# =========================
@admin_bp.get("/users")
@login_required
@require_roles(Role.ADMIN)
def users_list():
    return render_template(
        "admin_users.html",
        areas=AREAS,
        units=UNITS_BY_AREA,
        users=get_store().get_all_users(),
    )


@admin_bp.post("/users")
@login_required
@require_roles(Role.ADMIN)
def users_create():
    username = _clean_str(request.form.get("username"))
    password = request.form.get("password") or ""
    unit_id = _to_int(request.form.get("unit_id"))

    if not username or not password or unit_id is None:
        flash("Datos incompletos", "error")
        return redirect(url_for("admin.users_list"))

    try:
        get_store().create_editor(username, password, unit_id)
    except BoletasError as e:
        db.session.rollback()
        flash(e.message, "error")
        return redirect(url_for("admin.users_list"))

    db.session.commit()
    current_app.logger.info("%s creó el editor %s (unidad %s)", _admin_name(), username, unit_id)
    flash("Usuario creado.", "message")
    return redirect(url_for("admin.users_list"))


@admin_bp.post("/users/update")
@login_required
@require_roles(Role.ADMIN)
def users_update():
    user_id = _to_int(request.form.get("id"))
    password = request.form.get("password") or ""
    if user_id is None or not password:
        flash("Datos incompletos", "error")
        return redirect(url_for("admin.users_list"))

    if not get_store().update_user_password(user_id, password):
        flash("Usuario no encontrado.", "error")
        return redirect(url_for("admin.users_list"))

    db.session.commit()
    current_app.logger.info("%s cambió la contraseña del usuario %s", _admin_name(), user_id)
    flash("Contraseña actualizada.", "message")
    return redirect(url_for("admin.users_list"))


@admin_bp.post("/users/delete/<int:user_id>")
@login_required
@require_roles(Role.ADMIN)
def users_delete(user_id: int):
    if get_store().delete_user_by_id(user_id):
        db.session.commit()
        current_app.logger.info("%s eliminó el usuario %s", _admin_name(), user_id)
        flash("Usuario eliminado.", "message")
    return redirect(url_for("admin.users_list"))


# =========================
# RESET
# =========================
@admin_bp.post("/reset")
@login_required
@require_roles(Role.ADMIN)
def reset():
    if _clean_str(request.form.get("confirm")) != RESET_CONFIRMATION:
        flash(f"Escribe {RESET_CONFIRMATION} para confirmar.", "error")
        return redirect(url_for("admin.home"))

    summary = get_store().reset_app()
    db.session.commit()
    current_app.logger.warning("%s reinició la aplicación: %s", _admin_name(), summary)
    flash("Aplicación reiniciada.", "message")
    return redirect(url_for("admin.home"))
