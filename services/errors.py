class BoletasError(Exception):
    """Error de dominio que se muestra al usuario (no es un 500)."""

    message = "Operación inválida"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateUsername(BoletasError):
    message = "El usuario ya existe"


class RuralEditorExists(BoletasError):
    message = "Ya existe un editor para Policía Rural"


class UnknownUnit(BoletasError):
    message = "Unidad inválida"


class InvalidSubmission(BoletasError):
    message = "Datos enviados inválidos"
