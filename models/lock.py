from . import db


class DateLock(db.Model):
    """Fecha bloqueada: las boletas de ese día quedan de solo lectura."""

    __tablename__ = "locks"

    date = db.Column(db.String(10), primary_key=True)

    def __repr__(self) -> str:
        return f"<DateLock {self.date}>"
