# app/application/use_cases/portfolio_queries.py
from datetime import tzinfo
from typing import List, Tuple

from app.domain.models.nota import KpiResumen, NotaConCredito
from app.domain.ports.nota_repository import NotaRepository
from app.domain.services.batch_key import BATCH_TZ, current_batch_key
from app.domain.services.clock import Clock, utc_now
from app.domain.services.credit_aging import with_credito
from app.domain.services.portfolio import compute_kpis, rank_faltantes


class ListNotasUseCase:
    """Todas las notas con su crédito calculado al momento, más el lote actual."""

    def __init__(self, nota_repo: NotaRepository, clock: Clock = utc_now, batch_tz: tzinfo = BATCH_TZ):
        self.nota_repo = nota_repo
        self.clock = clock
        self.batch_tz = batch_tz

    def execute(self) -> Tuple[str, List[NotaConCredito]]:
        now = self.clock()
        notas = [with_credito(nota, now) for nota in self.nota_repo.load_all()]
        return current_batch_key(now, self.batch_tz), notas


class KpisUseCase:
    def __init__(self, nota_repo: NotaRepository):
        self.nota_repo = nota_repo

    def execute(self) -> KpiResumen:
        return compute_kpis(self.nota_repo.load_all())


class FaltantesUseCase:
    def __init__(self, nota_repo: NotaRepository, clock: Clock = utc_now):
        self.nota_repo = nota_repo
        self.clock = clock

    def execute(self) -> List[NotaConCredito]:
        return rank_faltantes(self.nota_repo.load_all(), self.clock())
