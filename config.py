import os
from datetime import timedelta

basedir = os.path.abspath(os.path.dirname(__file__))


def _database_url(default: str) -> str:
    url = os.environ.get("DATABASE_URL") or default
    # Heroku/Render entregan postgres://, SQLAlchemy exige postgresql://
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


class Config:
    SECRET_KEY = os.environ.get("SESSION_SECRET") or os.environ.get("SECRET_KEY", "boletas-secret")

    PORT = int(os.environ.get("PORT", "3000"))

    # SQLite embebido en DATA_DIR, o PostgreSQL con DATABASE_URL
    DATA_DIR = os.environ.get("DATA_DIR", basedir)
    DB_PATH = os.path.join(DATA_DIR, "data.db")
    SQLALCHEMY_DATABASE_URI = _database_url(f"sqlite:///{DB_PATH}")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin")

    LOG_DIR = os.environ.get("LOG_DIR", os.path.join(basedir, "logs"))

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
