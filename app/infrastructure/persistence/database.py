# app/infrastructure/persistence/database.py
import os
import logging
import threading
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

import config

logger = logging.getLogger(__name__)

# La URL viene del .env; por defecto, SQLite dentro de DATA_DIR
DATABASE_URL = config.DATABASE_URL
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)

SessionLocal = sessionmaker(autoflush=False, bind=engine)
Base = declarative_base()

# Un solo escritor a la vez dentro del proceso: leer-modificar-guardar no se
# intercala entre dos peticiones.
_write_lock = threading.Lock()


def init_db(bind=None):
    """Crea las carpetas de datos y las tablas si no existen."""
    for directory in (config.DATA_DIR, config.UPLOADS_DIR):
        os.makedirs(directory, exist_ok=True)
    # Registra los modelos en Base.metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


@contextmanager
def unit_of_work(session_factory=SessionLocal, exclusive: bool = False):
    """
    Abre una sesión, hace commit al salir y rollback si hubo excepción.
    Con `exclusive=True` toma el candado de escritura durante toda la operación.
    """
    lock = _write_lock if exclusive else None
    if lock:
        lock.acquire()
    db_session = session_factory()
    try:
        yield db_session
        db_session.commit()
    except Exception:
        logger.warning("Rollback de la unidad de trabajo.")
        db_session.rollback()
        raise
    finally:
        db_session.close()
        if lock:
            lock.release()
