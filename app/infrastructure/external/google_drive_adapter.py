# app/infrastructure/external/google_drive_adapter.py
import os
import logging
from googleapiclient.discovery import build
from googleapiclient.http import MediaFileUpload
from app.domain.ports.file_storage import FileStorage
from .google_auth import get_google_credentials
import config

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'


def _quote(value: str) -> str:
    """Escapa un literal para el parámetro `q` de la API de Drive."""
    return value.replace('\\', '\\\\').replace("'", "\\'")


class GoogleDriveAdapter(FileStorage):
    """
    Sube los respaldos a Google Drive, organizados en una carpeta por sistema
    dentro de la carpeta principal (DRIVE_BACKUP_FOLDER_ID).
    """
    def __init__(self, service=None, parent_folder_id: str = None):
        self.service = service or build('drive', 'v3', credentials=get_google_credentials())
        self.parent_folder_id = parent_folder_id or config.DRIVE_BACKUP_FOLDER_ID

    def _find_or_create_folder(self, name: str) -> str:
        query = (
            f"name = '{_quote(name)}' and mimeType = '{FOLDER_MIME_TYPE}' "
            f"and '{_quote(self.parent_folder_id)}' in parents and trashed = false"
        )
        found = self.service.files().list(q=query, fields='files(id)').execute().get('files', [])
        if found:
            return found[0]['id']

        folder_metadata = {
            'name': name,
            'mimeType': FOLDER_MIME_TYPE,
            'parents': [self.parent_folder_id]
        }
        folder = self.service.files().create(body=folder_metadata, fields='id').execute()
        logger.info(f"Carpeta '{name}' creada en Drive. ID: {folder.get('id')}")
        return folder.get('id')

    def upload_backup(self, archive_path: str, system_name: str) -> str:
        folder_id = self._find_or_create_folder(system_name)
        file_metadata = {'name': os.path.basename(archive_path), 'parents': [folder_id]}
        media = MediaFileUpload(archive_path, mimetype='application/gzip', resumable=True)

        logger.info(f"Subiendo {file_metadata['name']} a Google Drive...")
        uploaded = self.service.files().create(
            body=file_metadata,
            media_body=media,
            fields='id, webViewLink'
        ).execute()
        return uploaded.get('webViewLink') or uploaded.get('id')
