import os
import logging
from logging.handlers import RotatingFileHandler

import click
from flask import Flask, flash, jsonify, redirect, render_template, request, url_for
from flask_migrate import Migrate

from config import Config
from models import db, login_manager


migrate = Migrate()


def _configure_logging(app: Flask) -> None:
    log_dir = app.config.get("LOG_DIR") or os.path.join(os.path.dirname(__file__), "logs")
    os.makedirs(log_dir, exist_ok=True)

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "app.log"),
        maxBytes=2_000_000,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))

    if not any(isinstance(h, RotatingFileHandler) for h in app.logger.handlers):
        app.logger.addHandler(file_handler)
    app.logger.setLevel(logging.INFO)


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)

    # -------------------------
    # Extensiones
    # -------------------------
    db.init_app(app)
    migrate.init_app(app, db)

    login_manager.init_app(app)
    login_manager.login_view = "auth.login_get"

    # -------------------------
    # Importar modelos (Alembic)
    # -------------------------
    from models.unit import Unit  # noqa: F401
    from models.user import User  # noqa: F401
    from models.count import DailyCount  # noqa: F401
    from models.lock import DateLock  # noqa: F401

    # Acceso a datos: reemplazable en tests
    from routes.context import STORE_FACTORY_KEY, default_store_factory, wants_json
    app.extensions.setdefault(STORE_FACTORY_KEY, default_store_factory)

    # -------------------------
    # Blueprints
    # -------------------------
    from routes.auth import auth_bp
    from routes.admin import admin_bp
    from routes.editor import editor_bp

    for bp in (auth_bp, admin_bp, editor_bp):
        app.register_blueprint(bp)

    # -------------------------
    # Logging + manejo global de errores
    # -------------------------
    _configure_logging(app)

    @login_manager.unauthorized_handler
    def _unauthorized():
        if wants_json():
            return jsonify({"ok": False, "error": "No autenticado."}), 401
        return redirect(url_for("auth.login_get"))

    @app.errorhandler(500)
    def _handle_500(e):
        app.logger.exception("Error 500 no manejado: %s %s", request.method, request.path)
        db.session.rollback()
        if wants_json():
            return jsonify({"ok": False, "error": "Error interno."}), 500
        flash("Ocurrió un error interno. El problema fue registrado.", "error")
        return render_template("error.html", message=None), 500

    @app.errorhandler(400)
    def _handle_400(e):
        if wants_json():
            return jsonify({"ok": False, "error": e.description}), 400
        return render_template("error.html", message=e.description), 400

    @app.errorhandler(403)
    def _handle_403(e):
        if wants_json():
            return jsonify({"ok": False, "error": "Sin permisos."}), 403
        flash("No tienes permisos para acceder.", "error")
        return render_template("error.html", message="Acceso denegado."), 403

    @app.errorhandler(404)
    def _handle_404(e):
        if wants_json():
            return jsonify({"ok": False, "error": "No encontrado."}), 404
        return render_template("404.html"), 404

    # -------------------------
    # Comandos CLI
    # -------------------------
    @app.cli.command("seed")
    def seed_command():
        """Siembra unidades del catálogo y el usuario admin."""
        from seed import seed_reference_data

        summary = seed_reference_data()
        click.echo(f"Seed listo: {summary}")

    @app.cli.command("migrate-sqlite")
    @click.option("--source", default=None, help="Archivo SQLite origen (default: DATA_DIR/data.db)")
    def migrate_sqlite_command(source):
        """Copia data.db (SQLite) a la base de DATABASE_URL."""
        from migrate_sqlite_to_postgres import run

        summary = run(source_path=source, target_url=app.config["SQLALCHEMY_DATABASE_URI"])
        click.echo(f"Migración completada: {summary}")

    return app


if __name__ == "__main__":
    app = create_app()
    # Debug controlado por config / variables de entorno
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.config.get("DEBUG", False))
