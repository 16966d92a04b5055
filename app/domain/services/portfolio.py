# app/domain/services/portfolio.py
"""KPIs de cartera y ranking de notas por cobrar (solo notas entregadas)."""
import math
from datetime import datetime
from typing import Iterable, List

import config
from app.domain.models.nota import CreditStatus, KpiResumen, Nota, NotaConCredito
from app.domain.services.credit_aging import with_credito

_STATUS_RANK = {
    CreditStatus.VENCIDO: 0,
    CreditStatus.POR_VENCER: 1,
    CreditStatus.EN_PLAZO: 2,
}


def _amount(value) -> float:
    return float(value) if isinstance(value, (int, float)) and math.isfinite(value) else 0.0


def compute_kpis(notas: Iterable[Nota], margen: float = config.MARGEN_UTILIDAD) -> KpiResumen:
    total_cobrable = 0.0
    total_cobrado = 0.0

    for nota in notas:
        if nota.delivered_at is None:
            continue
        total = _amount(nota.total)
        pagado = _amount(nota.pagado)
        total_cobrable += total
        # Un sobrepago no infla lo cobrado de la cartera
        total_cobrado += min(pagado, total)

    total_saldo = max(total_cobrable - total_cobrado, 0.0)
    return KpiResumen(
        total_cobrable=total_cobrable,
        total_cobrado=total_cobrado,
        total_saldo=total_saldo,
        pct_cobranza=total_cobrado / total_cobrable if total_cobrable > 0 else 0.0,
        utilidad_cobrada=total_cobrado * margen,
        utilidad_por_cobrar=total_saldo * margen,
    )


def _sort_key(nota: NotaConCredito):
    rank = _STATUS_RANK.get(nota.status_credito, 3)
    due = nota.due_at.timestamp() if nota.due_at is not None else math.inf
    return rank, due


def rank_faltantes(notas: Iterable[Nota], now: datetime) -> List[NotaConCredito]:
    """
    Entregadas que aún deben algo: primero vencidas, luego por vencer, luego
    en plazo; dentro de cada grupo, la que vence antes va primero.

    Las notas sin total (saldo desconocido) también se incluyen.
    """
    faltantes = []
    for nota in notas:
        if nota.delivered_at is None:
            continue
        view = with_credito(nota, now)
        if view.saldo is None or view.saldo > 0:
            faltantes.append(view)
    return sorted(faltantes, key=_sort_key)
