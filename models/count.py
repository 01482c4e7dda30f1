from . import db


class DailyCount(db.Model):
    """Boletas del día para una unidad.

    Un registro por (unit_id, date). La fecha se guarda como texto
    YYYY-MM-DD para filtrar el mes por prefijo.
    """

    __tablename__ = "counts"

    id = db.Column(db.Integer, primary_key=True)

    unit_id = db.Column(db.Integer, nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True)

    manual = db.Column(db.Integer, nullable=False, default=0)
    electronic = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("unit_id", "date", name="uq_counts_unit_date"),
    )

    def __repr__(self) -> str:
        return f"<DailyCount unit={self.unit_id} {self.date} m={self.manual} e={self.electronic}>"
