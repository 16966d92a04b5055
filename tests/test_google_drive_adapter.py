"""Adaptador de Google Drive con el servicio simulado."""
from app.infrastructure.external.google_drive_adapter import GoogleDriveAdapter


def _archive(tmp_path):
    path = tmp_path / "backup-s-2026-10-14.tar.gz"
    path.write_bytes(b"\x1f\x8b")
    return str(path)


def test_sube_a_carpeta_existente(tmp_path, mocker):
    service = mocker.MagicMock()
    service.files().list().execute.return_value = {"files": [{"id": "folder-1"}]}
    service.files().create().execute.return_value = {"id": "file-1", "webViewLink": "https://drive/file-1"}

    adapter = GoogleDriveAdapter(service=service, parent_folder_id="parent")
    url = adapter.upload_backup(_archive(tmp_path), "cobranza")

    assert url == "https://drive/file-1"
    body = service.files().create.call_args.kwargs["body"]
    assert body == {"name": "backup-s-2026-10-14.tar.gz", "parents": ["folder-1"]}


def test_crea_la_carpeta_del_sistema(tmp_path, mocker):
    service = mocker.MagicMock()
    service.files().list().execute.return_value = {"files": []}
    service.files().create().execute.side_effect = [
        {"id": "folder-nuevo"},
        {"id": "file-2"},
    ]

    adapter = GoogleDriveAdapter(service=service, parent_folder_id="parent")
    url = adapter.upload_backup(_archive(tmp_path), "cobranza")

    assert url == "file-2"
    folder_body = service.files().create.call_args_list[-2].kwargs["body"]
    assert folder_body["name"] == "cobranza"
    assert folder_body["parents"] == ["parent"]


def test_escapa_comillas_en_la_consulta(tmp_path, mocker):
    service = mocker.MagicMock()
    service.files().list().execute.return_value = {"files": [{"id": "folder-1"}]}
    service.files().create().execute.return_value = {"id": "file-3"}

    adapter = GoogleDriveAdapter(service=service, parent_folder_id="parent")
    adapter.upload_backup(_archive(tmp_path), "cobranza d'Ana")

    query = service.files().list.call_args.kwargs["q"]
    assert query.startswith("name = 'cobranza d\\'Ana' and ")
