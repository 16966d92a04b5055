# app/domain/models/nota.py
from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CreditStatus(str, Enum):
    """Estado de crédito derivado. Nunca se persiste."""
    PRE_ENTREGA = "PRE_ENTREGA"
    EN_PLAZO = "EN_PLAZO"
    POR_VENCER = "POR_VENCER"
    VENCIDO = "VENCIDO"
    LIQUIDADO = "LIQUIDADO"


class Nota(BaseModel):
    """
    Nota (factura en papel) en seguimiento de cobranza. Los nombres en el
    JSON van en camelCase (batchKey, deliveredAt, ...).
    """
    id: str
    batch_key: str
    original_name: str
    filename: Optional[str] = None
    cliente: Optional[str] = None
    total: Optional[float] = None
    pagado: float = 0.0
    delivered_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    first_payment_at: Optional[datetime] = None
    uploaded_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("delivered_at", "due_at", "first_payment_at", "uploaded_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Siempre en UTC; SQLite devuelve datetimes sin zona horaria
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Credito(BaseModel):
    saldo: Optional[float] = None
    status_credito: CreditStatus

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotaConCredito(Nota):
    """Nota más los campos de crédito calculados al momento de leerla."""
    saldo: Optional[float] = None
    status_credito: CreditStatus

    @classmethod
    def from_nota(cls, nota: Nota, credito: Credito) -> "NotaConCredito":
        return cls(**nota.model_dump(), saldo=credito.saldo, status_credito=credito.status_credito)


class KpiResumen(BaseModel):
    total_cobrable: float = 0.0
    total_cobrado: float = 0.0
    total_saldo: float = 0.0
    pct_cobranza: float = 0.0
    utilidad_cobrada: float = 0.0
    utilidad_por_cobrar: float = 0.0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
