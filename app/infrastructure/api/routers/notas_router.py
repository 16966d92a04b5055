# app/infrastructure/api/routers/notas_router.py
import logging
from typing import Optional, Union
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, File, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

import config
from app.application.use_cases.portfolio_queries import FaltantesUseCase, KpisUseCase, ListNotasUseCase
from app.application.use_cases.register_delivery import RegisterDeliveryUseCase
from app.application.use_cases.register_payment import RegisterPaymentUseCase
from app.application.use_cases.upload_nota import UploadNotaUseCase
from app.domain.exceptions import CobranzaError, InvalidRequestError, NotaNotFoundError
from app.domain.ports.document_storage import DocumentStorage
from app.domain.ports.text_extractor import DocumentTextExtractor
from app.domain.services.clock import Clock, utc_now
from app.domain.services.reconciler import UploadAction
from app.infrastructure.external.pdf_text_extractor import PdfPlumberTextExtractor
from app.infrastructure.persistence.database import SessionLocal, unit_of_work
from app.infrastructure.persistence.nota_repository_adapter import SQLAlchemyNotaRepository
from app.infrastructure.storage.local_document_storage import LocalDocumentStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notas"])


class EntregaRequest(BaseModel):
    id: Optional[Union[str, int]] = None


class PagoRequest(BaseModel):
    id: Optional[Union[str, int]] = None
    monto: Optional[float] = None


# --- Dependencias (se sustituyen en las pruebas) ---

def get_session_factory():
    return SessionLocal


def get_document_storage() -> DocumentStorage:
    return LocalDocumentStorage(config.UPLOADS_DIR)


def get_text_extractor() -> DocumentTextExtractor:
    return PdfPlumberTextExtractor()


def get_clock() -> Clock:
    return utc_now


def _dump(nota) -> dict:
    return nota.model_dump(mode="json", by_alias=True)


def _server_error(message: str) -> JSONResponse:
    logger.error(message, exc_info=True)
    return JSONResponse(status_code=500, content={"ok": False, "message": message})


@router.get("/notas", summary="Listar notas con su estado de crédito")
def list_notas(session_factory=Depends(get_session_factory), clock: Clock = Depends(get_clock)):
    with unit_of_work(session_factory) as db:
        batch_key, notas = ListNotasUseCase(SQLAlchemyNotaRepository(db), clock).execute()
    return {"batchKey": batch_key, "notas": [_dump(n) for n in notas]}


@router.post("/upload", summary="Subir el PDF de una nota")
def upload_nota(
    pdf: Optional[UploadFile] = File(None, description="PDF de la nota."),
    session_factory=Depends(get_session_factory),
    document_storage: DocumentStorage = Depends(get_document_storage),
    text_extractor: DocumentTextExtractor = Depends(get_text_extractor),
    clock: Clock = Depends(get_clock),
):
    """
    Crea la nota en el lote de la semana. Si ya existe una con el mismo nombre
    en el lote: se sustituye si no se ha entregado, o se rechaza como duplicada.
    """
    content = pdf.file.read() if pdf is not None else None
    if not content:
        raise InvalidRequestError("No se recibió PDF")
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise InvalidRequestError("El PDF excede el tamaño máximo permitido")

    use_case = None
    outcome = None
    try:
        # El PDF se lee fuera del candado de escritura
        text = text_extractor.extract_text(content) or ""
        with unit_of_work(session_factory, exclusive=True) as db:
            use_case = UploadNotaUseCase(
                nota_repo=SQLAlchemyNotaRepository(db),
                document_storage=document_storage,
                text_extractor=text_extractor,
                clock=clock,
            )
            outcome = use_case.execute(pdf.filename, content, text=text)
        use_case.publish(outcome)
    except CobranzaError:
        raise
    except Exception:
        if use_case is not None:
            use_case.discard(outcome)
        return _server_error("Error al subir PDF")

    if outcome.duplicate:
        return {"ok": False, "duplicate": True, "message": "Nota duplicada (ya entregada)"}
    if outcome.action == UploadAction.SUBSTITUTE:
        return {"ok": True, "replaced": True, "nota": _dump(outcome.nota)}
    return {"ok": True, "nota": _dump(outcome.nota)}


@router.post("/entregar", summary="Marcar una nota como entregada (inicio del crédito)")
def entregar_nota(
    body: Optional[EntregaRequest] = Body(None),
    session_factory=Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
):
    nota_id = str(body.id) if body is not None and body.id is not None else None
    try:
        with unit_of_work(session_factory, exclusive=True) as db:
            nota = RegisterDeliveryUseCase(SQLAlchemyNotaRepository(db), clock).execute(nota_id)
    except CobranzaError:
        raise
    except Exception:
        return _server_error("Error al marcar entregado")
    return {"ok": True, "nota": _dump(nota)}


@router.post("/pago", summary="Registrar un abono")
def registrar_pago(
    body: Optional[PagoRequest] = Body(None),
    session_factory=Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
):
    nota_id = str(body.id) if body is not None and body.id is not None else None
    monto = body.monto if body is not None else None
    try:
        with unit_of_work(session_factory, exclusive=True) as db:
            nota = RegisterPaymentUseCase(SQLAlchemyNotaRepository(db), clock).execute(nota_id, monto)
    except CobranzaError:
        raise
    except Exception:
        return _server_error("Error al registrar pago")
    return {"ok": True, "nota": _dump(nota)}


@router.get("/kpis", summary="KPIs globales de cobranza (solo entregadas)")
def kpis(session_factory=Depends(get_session_factory)):
    with unit_of_work(session_factory) as db:
        resumen = KpisUseCase(SQLAlchemyNotaRepository(db)).execute()
    return {"ok": True, **resumen.model_dump(by_alias=True)}


@router.get("/faltantes", summary="Notas entregadas con saldo, por urgencia")
def faltantes(session_factory=Depends(get_session_factory), clock: Clock = Depends(get_clock)):
    with unit_of_work(session_factory) as db:
        notas = FaltantesUseCase(SQLAlchemyNotaRepository(db), clock).execute()
    return {"ok": True, "faltantes": [_dump(n) for n in notas]}


@router.get("/notas/{nota_id}/documento", summary="Descargar el PDF de una nota")
def documento_nota(
    nota_id: str,
    session_factory=Depends(get_session_factory),
    document_storage: DocumentStorage = Depends(get_document_storage),
):
    with unit_of_work(session_factory) as db:
        nota = SQLAlchemyNotaRepository(db).get(nota_id)
    if nota is None:
        raise NotaNotFoundError(nota_id)

    content = document_storage.read(nota.filename) if nota.filename else None
    if content is None:
        raise NotaNotFoundError(nota_id)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(nota.filename)}"},
    )
