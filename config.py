# config.py
import os
from dotenv import load_dotenv

load_dotenv()

# --- ALMACENAMIENTO ---
# Si existe el Persistent Disk (Render) se usa; si no, carpetas locales.
ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
PERSISTENT_DISK_PATH = os.getenv("PERSISTENT_DISK_PATH", "/var/data/cobranza")
USE_PERSISTENT = os.path.isdir(PERSISTENT_DISK_PATH)

if USE_PERSISTENT:
    DATA_DIR = os.path.join(PERSISTENT_DISK_PATH, "data")
    UPLOADS_DIR = os.path.join(PERSISTENT_DISK_PATH, "uploads")
else:
    DATA_DIR = os.getenv("DATA_DIR", os.path.join(ROOT_DIR, "data"))
    UPLOADS_DIR = os.getenv("UPLOADS_DIR", os.path.join(ROOT_DIR, "uploads"))

DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{os.path.join(DATA_DIR, 'notas.db')}"

# --- REGLAS DE COBRANZA ---
BATCH_TIMEZONE = os.getenv("BATCH_TIMEZONE", "America/Mexico_City")
CREDIT_DAYS = int(os.getenv("CREDIT_DAYS", "15"))
POR_VENCER_DAYS = int(os.getenv("POR_VENCER_DAYS", "3"))
MARGEN_UTILIDAD = float(os.getenv("MARGEN_UTILIDAD", "0.4"))

# --- API ---
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(15 * 1024 * 1024)))  # 15MB
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- RESPALDO EN GOOGLE DRIVE ---
SYSTEM_NAME = os.getenv("SYSTEM_NAME", "cobranza-desconocido")
DRIVE_BACKUP_FOLDER_ID = os.getenv("DRIVE_BACKUP_FOLDER_ID")
BACKUP_INTERVAL_HOURS = int(os.getenv("BACKUP_INTERVAL_HOURS", "24"))
BACKUP_ENABLED = bool(DRIVE_BACKUP_FOLDER_ID)

# Alcances requeridos por la API de Google Drive
SCOPES = ["https://www.googleapis.com/auth/drive.file"]
TOKEN_FILE = os.getenv("GOOGLE_TOKEN_FILE", "token.json")
SERVICE_ACCOUNT_FILE = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE")

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "pubsub://")
CELERY_PUBSUB_TOPIC = os.getenv("CELERY_PUBSUB_TOPIC", "cobranza-backups")
