# app/infrastructure/persistence/models.py
from sqlalchemy import Column, DateTime, Float, String

from .database import Base


class NotaRow(Base):
    __tablename__ = "notas"

    id = Column(String(36), primary_key=True)
    batch_key = Column(String(10), nullable=False, index=True)
    original_name = Column(String(255), nullable=False)
    filename = Column(String(400))
    cliente = Column(String(255))
    total = Column(Float)
    pagado = Column(Float, nullable=False, default=0.0)
    delivered_at = Column(DateTime(timezone=True))
    due_at = Column(DateTime(timezone=True))
    first_payment_at = Column(DateTime(timezone=True))
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
    # Solo para ordenar el listado por fecha de alta
    created_at = Column(DateTime(timezone=True), nullable=False)
