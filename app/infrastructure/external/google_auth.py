# app/infrastructure/external/google_auth.py
import os
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
import config # Usamos el config.py del root

def get_google_credentials():
    """
    Credenciales para Drive. En el servidor se prefiere una cuenta de servicio
    (GOOGLE_SERVICE_ACCOUNT_FILE); si no hay, se usa el token OAuth guardado.
    """
    if config.SERVICE_ACCOUNT_FILE and os.path.exists(config.SERVICE_ACCOUNT_FILE):
        return service_account.Credentials.from_service_account_file(
            config.SERVICE_ACCOUNT_FILE, scopes=config.SCOPES
        )

    if not os.path.exists(config.TOKEN_FILE):
        raise FileNotFoundError(
            f"No se encontró '{config.TOKEN_FILE}' ni una cuenta de servicio para Google Drive."
        )

    creds = Credentials.from_authorized_user_file(config.TOKEN_FILE, config.SCOPES)
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())
    return creds
