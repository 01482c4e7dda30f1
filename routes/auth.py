from collections.abc import Mapping

from flask import current_app, jsonify, redirect, render_template, request, session, url_for
from flask_login import login_user, logout_user

from models.user import Role
from routes import auth_bp
from routes.context import current_principal, get_store, wants_json

INVALID_CREDENTIALS = "Usuario o contraseña inválidos"


def _field(data: Mapping, name: str) -> str:
    # JSON puede traer números, listas o null: solo cuentan los textos
    value = data.get(name)
    return value if isinstance(value, str) else ""


def _home_url(role: str) -> str:
    if role == Role.ADMIN:
        return url_for("admin.home")
    return url_for("editor.home")


@auth_bp.get("/")
def index():
    principal = current_principal()
    if principal is None:
        return redirect(url_for("auth.login_get"))
    return redirect(_home_url(principal.role))


@auth_bp.get("/login")
def login_get():
    principal = current_principal()
    if principal is not None:
        return redirect(_home_url(principal.role))
    return render_template("login.html", error=None)


@auth_bp.post("/login")
def login_post():
    data = request.get_json(silent=True) if request.is_json else request.form
    if not isinstance(data, Mapping):
        data = {}
    username = _field(data, "username").strip()
    password = _field(data, "password")

    user = get_store().get_user_by_username(username) if username else None

    # Mismo mensaje para usuario inexistente y contraseña incorrecta
    if not user or not user.check_password(password):
        current_app.logger.info("Login fallido para %r", username)
        if wants_json():
            return jsonify({"ok": False, "error": INVALID_CREDENTIALS}), 401
        return render_template("login.html", error=INVALID_CREDENTIALS), 401

    session.clear()
    login_user(user)
    session.permanent = True
    current_app.logger.info("Login %s (%s)", user.username, user.role)

    if wants_json():
        return jsonify({"ok": True, "role": user.role, "unit_id": user.unit_id})
    return redirect(_home_url(user.role))


@auth_bp.get("/logout")
def logout():
    logout_user()
    session.clear()
    return redirect(url_for("auth.login_get"))
