# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from app.domain.exceptions import InvalidRequestError, NotaNotFoundError
from app.domain.services.batch_key import current_batch_key
from app.infrastructure.api.routers import notas_router
from app.infrastructure.persistence.database import init_db

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s')
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.USE_PERSISTENT:
        logger.info(f"[System] Usando Persistent Disk en: {config.PERSISTENT_DISK_PATH}")
    else:
        logger.info(f"[System] Usando almacenamiento local: {config.DATA_DIR}")
    init_db()
    logger.info(f"Batch actual (lunes 00:00): {current_batch_key()}")
    yield


app = FastAPI(
    title="API de Cobranza de Notas",
    description="Seguimiento de notas: carga de PDF, entrega, abonos y estado de crédito.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(notas_router.router)


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError):
    return JSONResponse(status_code=400, content={"ok": False, "message": str(exc)})


@app.exception_handler(NotaNotFoundError)
async def not_found_handler(request: Request, exc: NotaNotFoundError):
    return JSONResponse(status_code=404, content={"ok": False, "message": "Nota no encontrada"})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"ok": False, "message": "Datos inválidos"})


@app.get("/", tags=["Health Check"])
def read_root():
    return {"status": "ok", "message": "API de Cobranza de Notas"}


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Error inesperado en {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "message": "Error interno del servidor"})
