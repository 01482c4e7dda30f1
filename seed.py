from flask import current_app

from models import db
from services.catalog import all_units
from services.store import Store


def seed_reference_data(store: Store | None = None, admin_password: str | None = None) -> dict:
    """Unidades del catálogo + usuario admin. Se puede correr varias veces."""
    store = store or Store(db.session)
    if admin_password is None:
        admin_password = current_app.config.get("ADMIN_PASSWORD", "admin")

    units_added = store.seed_units(all_units())
    admin_created = store.ensure_admin(admin_password)
    store.session.commit()

    current_app.logger.info("Seed: unidades nuevas=%s admin creado=%s", units_added, admin_created)
    return {"units_added": units_added, "admin_created": admin_created}


def run():
    from app import create_app

    app = create_app()
    with app.app_context():
        # No usamos db.create_all(): el esquema lo maneja Flask-Migrate.
        # Asegúrate de haber corrido: flask db upgrade
        summary = seed_reference_data()

        print("✅ Seed listo.", summary)
        if summary["admin_created"]:
            print("Login: admin / (ADMIN_PASSWORD, por defecto 'admin')")


if __name__ == "__main__":
    run()
