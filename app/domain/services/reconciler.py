# app/domain/services/reconciler.py
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from app.domain.models.nota import Nota

DEFAULT_ORIGINAL_NAME = "nota.pdf"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.\-() À-ſ]", re.ASCII)


class UploadAction(str, Enum):
    CREATE = "create"
    SUBSTITUTE = "substitute"
    DUPLICATE = "duplicate"


@dataclass
class UploadDecision:
    action: UploadAction
    nota: Nota


def safe_filename(batch_key: str, nota_id: str, original_name: str) -> str:
    """Llave de almacenamiento del PDF: `batchKey__id__originalName` saneado."""
    return _UNSAFE_FILENAME_CHARS.sub("_", f"{batch_key}__{nota_id}__{original_name}")


def find_in_batch(notas: Iterable[Nota], batch_key: str, original_name: str) -> Optional[Nota]:
    """Misma semana y mismo nombre de archivo (sin distinguir mayúsculas)."""
    wanted = (original_name or "").lower()
    for nota in notas:
        if str(nota.batch_key) == str(batch_key) and (nota.original_name or "").lower() == wanted:
            return nota
    return None


def reconcile_upload(
    existing: Optional[Nota],
    batch_key: str,
    original_name: str,
    cliente: Optional[str],
    total: Optional[float],
    now: datetime,
) -> UploadDecision:
    """
    Decide qué hacer con un PDF subido:
    - no existe en el lote -> nota nueva
    - existe y ya se entregó -> duplicado, no se toca
    - existe y no se ha entregado -> se sustituye (mismo id, mismo pagado)
    """
    if existing is None:
        nota_id = str(uuid.uuid4())
        nota = Nota(
            id=nota_id,
            batch_key=batch_key,
            original_name=original_name,
            filename=safe_filename(batch_key, nota_id, original_name),
            cliente=cliente,
            total=total,
            pagado=0.0,
            delivered_at=None,
            due_at=None,
            first_payment_at=None,
            uploaded_at=now,
        )
        return UploadDecision(UploadAction.CREATE, nota)

    if existing.delivered_at is not None:
        return UploadDecision(UploadAction.DUPLICATE, existing)

    substituted = existing.model_copy(update={
        "cliente": cliente,
        "total": total,
        "uploaded_at": now,
        "filename": existing.filename or safe_filename(existing.batch_key, existing.id, original_name),
    })
    return UploadDecision(UploadAction.SUBSTITUTE, substituted)
