from functools import wraps

from flask import flash, jsonify, redirect, url_for

from routes.context import current_principal, wants_json


def require_roles(*allowed_roles):
    """Valida el rol del usuario logueado.

    - Anónimo: 401 (JSON) o redirect a /login.
    - Rol no permitido: 403 (JSON) o redirect a /login.
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = current_principal()
            if principal is None:
                if wants_json():
                    return jsonify({"ok": False, "error": "No autenticado."}), 401
                return redirect(url_for("auth.login_get"))

            if principal.role not in allowed_roles:
                if wants_json():
                    return jsonify({"ok": False, "error": "Sin permisos."}), 403
                flash("No tienes permisos para acceder a esta sección.", "error")
                return redirect(url_for("auth.login_get"))

            return fn(*args, **kwargs)

        return wrapper

    return decorator
