import pytest

from app import create_app
from config import Config
from models import db
from seed import seed_reference_data
from services.store import Store


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    ADMIN_PASSWORD = "admin"


@pytest.fixture
def app(tmp_path):
    class _Config(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        LOG_DIR = str(tmp_path / "logs")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        seed_reference_data()

    yield app

    with app.app_context():
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    """Store sobre la sesión de un app context propio (tests de servicios)."""
    with app.app_context():
        yield Store(db.session)
        db.session.rollback()


@pytest.fixture
def make_editor(app):
    def _make(username: str, unit_id: int, password: str = "secret") -> int:
        with app.app_context():
            user = Store(db.session).create_editor(username, password, unit_id)
            db.session.commit()
            return user.id

    return _make


def login(client, username: str, password: str):
    return client.post("/login", data={"username": username, "password": password})
