import io

import pytest
from botocore.exceptions import ClientError
from sqlmodel import select

from app.core.config import settings
from app.core.exceptions import InvalidInput, StorageError
from app.models import TicketAttachment
from app.services.attachments import SUPPORTED_TYPES, read_upload, validate_upload
from conftest import auth


def _attach(client, ticket, actor, **payload):
    body = {"type": "image/png", "link": "https://cdn.example.com/screen.png", **payload}
    return client.post(f"/api/tickets/{ticket['id']}/files", json=body, headers=auth(actor))


def test_owner_and_staff_can_attach(client, ticket, user, agent):
    for actor in (user, agent):
        response = _attach(client, ticket, actor)
        assert response.status_code == 201
        assert response.json()["file"]["ticket_id"] == ticket["id"]

    files = client.get(f"/api/tickets/{ticket['id']}/files", headers=auth(user)).json()["files"]
    assert len(files) == 2


@pytest.mark.parametrize("payload", [{"link": "  "}, {"type": ""}])
def test_attach_requires_type_and_link(client, ticket, user, payload):
    assert _attach(client, ticket, user, **payload).status_code == 400


def test_attach_missing_field_is_invalid_input(client, ticket, user):
    response = client.post(f"/api/tickets/{ticket['id']}/files", json={"type": "image/png"}, headers=auth(user))
    assert response.status_code == 400


def test_stranger_cannot_attach_or_read(client, ticket, user, other_user):
    assert _attach(client, ticket, other_user).status_code == 403
    file_id = _attach(client, ticket, user).json()["file"]["id"]

    assert client.get(f"/api/files/{file_id}", headers=auth(other_user)).status_code == 403
    assert client.get(f"/api/tickets/{ticket['id']}/files", headers=auth(other_user)).status_code == 403
    assert client.delete(f"/api/files/{file_id}", headers=auth(other_user)).status_code == 403


def test_get_file(client, ticket, user, agent):
    file_id = _attach(client, ticket, user).json()["file"]["id"]
    response = client.get(f"/api/files/{file_id}", headers=auth(agent))
    assert response.status_code == 200
    assert response.json()["file"]["link"] == "https://cdn.example.com/screen.png"


def test_unknown_file_is_not_found(client, user):
    response = client.get("/api/files/00000000-0000-0000-0000-000000000000", headers=auth(user))
    assert response.status_code == 404


def test_upload_and_delete_removes_stored_object(client, session, ticket, user, s3_client):
    response = client.post(
        f"/api/tickets/{ticket['id']}/upload",
        files={"file": ("screen shot.png", b"\x89PNG data", "image/png")},
        headers=auth(user),
    )
    assert response.status_code == 201
    uploaded = response.json()["file"]
    assert uploaded["type"] == "image/png"
    assert uploaded["link"].endswith("-screen_shot.png")
    assert len(s3_client.objects) == 1

    assert client.delete(f"/api/files/{uploaded['id']}", headers=auth(user)).status_code == 200
    assert s3_client.objects == {}
    assert session.exec(select(TicketAttachment)).all() == []


def test_delete_survives_storage_failure(client, session, ticket, user, s3_client):
    uploaded = client.post(
        f"/api/tickets/{ticket['id']}/upload",
        files={"file": ("a.pdf", b"%PDF", "application/pdf")},
        headers=auth(user),
    ).json()["file"]
    s3_client.fail_delete = True

    assert client.delete(f"/api/files/{uploaded['id']}", headers=auth(user)).status_code == 200
    assert session.exec(select(TicketAttachment)).all() == []


def test_delete_of_external_link_leaves_storage_alone(client, ticket, user, s3_client):
    s3_client.objects["keep"] = {"body": b"", "content_type": "text/plain"}
    file_id = _attach(client, ticket, user).json()["file"]["id"]
    assert client.delete(f"/api/files/{file_id}", headers=auth(user)).status_code == 200
    assert "keep" in s3_client.objects


def test_upload_rejects_disallowed_type(client, ticket, user, s3_client):
    response = client.post(
        f"/api/tickets/{ticket['id']}/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth(user),
    )
    assert response.status_code == 400
    assert s3_client.objects == {}


def test_supported_types_is_public(client):
    response = client.get("/api/files/supported-types")
    assert response.status_code == 200
    assert response.json() == {"success": True, "types": SUPPORTED_TYPES}


def test_validate_upload():
    validate_upload("photo.webp", "image/webp", 1024)
    validate_upload("scan.pdf", "APPLICATION/PDF", 5 * 1024 * 1024)

    with pytest.raises(InvalidInput):
        validate_upload("big.png", "image/png", 5 * 1024 * 1024 + 1)
    with pytest.raises(InvalidInput):
        validate_upload("doc.docx", SUPPORTED_TYPES[5], 100)
    with pytest.raises(InvalidInput):
        validate_upload("empty.png", "image/png", 0)
    with pytest.raises(InvalidInput):
        validate_upload(None, "image/png", 10)


def test_read_upload_stops_past_the_limit(monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 10)
    stream = io.BytesIO(b"x" * 64)

    content = read_upload(stream)
    assert len(content) == 11
    assert stream.tell() == 11
    with pytest.raises(InvalidInput):
        validate_upload("big.png", "image/png", len(content))


def test_upload_rejects_oversized_file(client, ticket, user, s3_client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 10)
    response = client.post(
        f"/api/tickets/{ticket['id']}/upload",
        files={"file": ("big.png", b"\x89PNG" + b"0" * 64, "image/png")},
        headers=auth(user),
    )
    assert response.status_code == 400
    assert s3_client.objects == {}


# === OBJECT STORAGE ===


def test_storage_keys_and_urls(storage):
    key = storage.build_key("my report (final).pdf")
    prefix, name = key.split("-", 1)
    assert prefix.isdigit()
    assert name == "my_report__final_.pdf"
    assert storage.key_from_url(storage.url_for(key)) == key
    assert storage.key_from_url("https://elsewhere.example.com/x.png") is None
    assert storage.delete("https://elsewhere.example.com/x.png") is False


def test_storage_upload_failure_raises(storage, s3_client, monkeypatch):
    def _fail(**kwargs):
        raise ClientError({"Error": {"Code": "403", "Message": "denied"}}, "PutObject")

    monkeypatch.setattr(s3_client, "put_object", _fail)
    with pytest.raises(StorageError):
        storage.upload(b"data", "a.png", "image/png")
