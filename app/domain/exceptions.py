# app/domain/exceptions.py


class CobranzaError(Exception):
    """Error base del dominio de cobranza."""


class InvalidRequestError(CobranzaError):
    """Datos de entrada inválidos (id faltante, monto no positivo, sin PDF)."""


class NotaNotFoundError(CobranzaError):
    def __init__(self, nota_id: str):
        super().__init__(f"Nota no encontrada: {nota_id}")
        self.nota_id = nota_id
