from . import db


class Unit(db.Model):
    """
    Unidad que reporta boletas diarias.
    Datos de referencia: se siembran desde el catálogo y no se editan.
    """
    __tablename__ = "units"

    id = db.Column(db.Integer, primary_key=True, autoincrement=False)
    area_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)

    def __repr__(self) -> str:
        return f"<Unit {self.id} {self.name} area={self.area_id}>"
