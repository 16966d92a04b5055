import logging
from celery import Celery

import config

# Broker configurable; por defecto Google Cloud Pub/Sub como en producción.
celery_app = Celery(
    'tasks',
    broker=config.CELERY_BROKER_URL,
    backend=None  # No se guardan resultados de las tareas.
)

celery_app.conf.update(
    broker_transport_options={
        'visibility_timeout': 600,
        'topic': config.CELERY_PUBSUB_TOPIC,
        'subscription_name_prefix': 'celery-worker-sub'
    },
    task_ignore_result=True,
    timezone='UTC',
    # Respaldo periódico (cada BACKUP_INTERVAL_HOURS, 24h por defecto)
    beat_schedule={
        'backup-store': {
            'task': 'tasks.backup_store',
            'schedule': config.BACKUP_INTERVAL_HOURS * 60 * 60,
        },
    },
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s')

from celery.signals import worker_ready
from app.application.use_cases.backup_store import BackupStoreUseCase
from app.infrastructure.persistence.database import SessionLocal, init_db, unit_of_work
from app.infrastructure.persistence.nota_repository_adapter import SQLAlchemyNotaRepository
from app.infrastructure.external.google_drive_adapter import GoogleDriveAdapter

# Primer respaldo poco después de arrancar
INITIAL_BACKUP_DELAY_SECONDS = 30


@celery_app.task(name="tasks.backup_store")
def backup_store():
    if not config.BACKUP_ENABLED:
        logging.warning("Respaldo omitido: falta DRIVE_BACKUP_FOLDER_ID.")
        return None

    logging.info(">>> INICIO DEL RESPALDO.")
    try:
        with unit_of_work(SessionLocal) as db_session:
            use_case = BackupStoreUseCase(
                nota_repo=SQLAlchemyNotaRepository(db_session),
                file_storage=GoogleDriveAdapter(),
                uploads_dir=config.UPLOADS_DIR,
                system_name=config.SYSTEM_NAME,
            )
            url = use_case.execute()
        logging.info(f"¡ÉXITO! Respaldo disponible en {url}")
        return url
    except Exception:
        logging.error("¡ERROR! Falló el respaldo.", exc_info=True)
        raise


@worker_ready.connect
def schedule_initial_backup(sender=None, **kwargs):
    init_db()
    if config.BACKUP_ENABLED:
        backup_store.apply_async(countdown=INITIAL_BACKUP_DELAY_SECONDS)
