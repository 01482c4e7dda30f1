from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from . import db, login_manager


class Role:
    ADMIN = "admin"
    EDITOR = "editor"

    ALL = {ADMIN, EDITOR}


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(120), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(20), nullable=False)  # admin / editor

    # Admin: NULL. Editor: su unidad (4000 = Policía Rural, alcance virtual)
    unit_id = db.Column(db.Integer, db.ForeignKey("units.id"), nullable=True, index=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.username} role={self.role} unit={self.unit_id}>"


@login_manager.user_loader
def load_user(user_id: str):
    return db.session.get(User, int(user_id))
