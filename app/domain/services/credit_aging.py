# app/domain/services/credit_aging.py
"""
Estado de crédito en tiempo real y transiciones de una nota (entrega y pagos).

El estado (`statusCredito`) y el saldo se derivan SIEMPRE al leer, a partir de
deliveredAt, dueAt, total, pagado y la hora actual. No se guardan.
"""
import math
from datetime import datetime, timedelta, timezone
from typing import Optional

import config
from app.domain.exceptions import InvalidRequestError
from app.domain.models.nota import CreditStatus, Credito, Nota, NotaConCredito

CREDIT_TERM = timedelta(days=config.CREDIT_DAYS)
POR_VENCER_WINDOW = timedelta(days=config.POR_VENCER_DAYS)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _finite_or(value: Optional[float], default: Optional[float]) -> Optional[float]:
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return default


def compute_credito(nota: Nota, now: datetime) -> Credito:
    now = _as_utc(now)
    total = _finite_or(nota.total, None)
    pagado = _finite_or(nota.pagado, 0.0)

    saldo = max(total - pagado, 0.0) if total is not None else None

    if nota.delivered_at is None:
        status = CreditStatus.PRE_ENTREGA
    elif total is not None and saldo == 0:
        status = CreditStatus.LIQUIDADO
    elif nota.due_at is not None:
        due_at = _as_utc(nota.due_at)
        if now >= due_at:
            status = CreditStatus.VENCIDO
        elif due_at - now <= POR_VENCER_WINDOW:
            status = CreditStatus.POR_VENCER
        else:
            status = CreditStatus.EN_PLAZO
    else:
        # Entregada sin fecha de vencimiento (estado inconsistente)
        status = CreditStatus.EN_PLAZO

    return Credito(saldo=saldo, status_credito=status)


def with_credito(nota: Nota, now: datetime) -> NotaConCredito:
    return NotaConCredito.from_nota(nota, compute_credito(nota, now))


def mark_delivered(nota: Nota, now: datetime) -> Nota:
    """Inicia el crédito. Si la nota ya estaba entregada no cambia nada."""
    if nota.delivered_at is not None:
        return nota
    now = _as_utc(now)
    return nota.model_copy(update={"delivered_at": now, "due_at": now + CREDIT_TERM})


def validate_amount(amount) -> float:
    """Un abono debe ser un número finito mayor que cero."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidRequestError("Monto inválido")
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidRequestError("Monto inválido")
    return float(amount)


def apply_payment(nota: Nota, amount: float, now: datetime) -> Nota:
    """
    Suma un abono a `pagado`, sin tope contra el total. `firstPaymentAt` se
    marca solo con el primer abono posterior a la entrega.
    """
    amount = validate_amount(amount)

    update = {"pagado": _finite_or(nota.pagado, 0.0) + amount}
    if nota.delivered_at is not None and nota.first_payment_at is None:
        update["first_payment_at"] = _as_utc(now)
    return nota.model_copy(update=update)
