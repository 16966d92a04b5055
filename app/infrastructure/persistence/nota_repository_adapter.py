# app/infrastructure/persistence/nota_repository_adapter.py
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session

from app.domain.models.nota import Nota
from app.domain.ports.nota_repository import NotaRepository
from app.domain.services.reconciler import find_in_batch
from .models import NotaRow

# Campos que pueden cambiar después del alta (sustitución, entrega, pagos)
_MUTABLE_FIELDS = (
    "filename", "cliente", "total", "pagado",
    "delivered_at", "due_at", "first_payment_at", "uploaded_at",
)


def _to_column(value):
    # Las columnas DateTime de SQLite no guardan la zona: todo se guarda en UTC
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value


class SQLAlchemyNotaRepository(NotaRepository):
    def __init__(self, db: Session):
        self.db = db

    def _to_domain(self, row: NotaRow) -> Nota:
        return Nota(
            id=row.id,
            batch_key=row.batch_key,
            original_name=row.original_name,
            **{field: getattr(row, field) for field in _MUTABLE_FIELDS},
        )

    def load_all(self) -> List[Nota]:
        rows = self.db.query(NotaRow).order_by(NotaRow.created_at, NotaRow.id).all()
        return [self._to_domain(row) for row in rows]

    def get(self, nota_id: str, for_update: bool = False) -> Optional[Nota]:
        """Busca una nota por su ID en la tabla 'notas'."""
        query = self.db.query(NotaRow).filter(NotaRow.id == str(nota_id))
        if for_update:
            query = query.with_for_update()
        row = query.first()
        return self._to_domain(row) if row else None

    def find_in_batch(self, batch_key: str, original_name: str) -> Optional[Nota]:
        # La comparación sin mayúsculas se hace en Python: lower() de SQLite solo entiende ASCII
        rows = self.db.query(NotaRow).filter(NotaRow.batch_key == str(batch_key)).order_by(NotaRow.created_at).all()
        return find_in_batch((self._to_domain(row) for row in rows), batch_key, original_name)

    def add(self, nota: Nota) -> Nota:
        row = NotaRow(
            id=nota.id,
            batch_key=nota.batch_key,
            original_name=nota.original_name,
            created_at=_to_column(nota.uploaded_at),
            **{field: _to_column(getattr(nota, field)) for field in _MUTABLE_FIELDS},
        )
        self.db.add(row)
        self.db.flush()
        return nota

    def save(self, nota: Nota) -> Nota:
        row = self.db.query(NotaRow).filter(NotaRow.id == nota.id).first()
        if row is None:
            raise ValueError(f"No existe la nota {nota.id} para actualizar.")
        for field in _MUTABLE_FIELDS:
            setattr(row, field, _to_column(getattr(nota, field)))
        self.db.flush()
        return nota
