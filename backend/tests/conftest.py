import os
import time

# Must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EMAIL_PROVIDER"] = "log"
os.environ["AUTH_JWT_SECRET"] = "test-secret"
os.environ["STORAGE_PUBLIC_URL"] = "https://files.test/helpdesk"

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.models  # noqa: F401
from app.api.deps import get_email_transport, get_storage
from app.core.config import settings
from app.core.exceptions import DeliveryError
from app.db import get_session
from app.main import app as fastapi_app
from app.models import TicketCategory, User, UserRole
from app.services.email import EmailTransport
from app.services.notifications import NotificationDispatcher
from app.services.storage import ObjectStorage


class FakeTransport(EmailTransport):
    def __init__(self):
        self.sent = []
        self.fail = False

    def deliver(self, to, subject, html):
        if self.fail:
            raise DeliveryError("provider unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


class RecordingDispatcher(NotificationDispatcher):
    """Records ``send`` calls instead of rendering and delivering."""

    def __init__(self):
        super().__init__(FakeTransport())
        self.calls = []

    def send(self, to, template, data):
        self.calls.append((to, template, data))

    def templates(self):
        return [template for _, template, _ in self.calls]


class FakeS3Client:
    def __init__(self):
        self.objects = {}
        self.fail_delete = False

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = {"body": Body, "content_type": ContentType}

    def delete_object(self, Bucket, Key):
        if self.fail_delete:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "DeleteObject")
        self.objects.pop(Key, None)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def notifier():
    return RecordingDispatcher()


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def storage(s3_client):
    return ObjectStorage(config=settings, client=s3_client)


@pytest.fixture
def client(session, transport, storage):
    fastapi_app.dependency_overrides[get_session] = lambda: session
    fastapi_app.dependency_overrides[get_email_transport] = lambda: transport
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(fastapi_app)
    fastapi_app.dependency_overrides.clear()


def make_token(sub, email, name=None, expires_in=3600, secret=None, audience=None):
    claims = {
        "sub": sub,
        "email": email,
        "aud": audience or settings.AUTH_JWT_AUDIENCE,
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"full_name": name} if name else {},
    }
    return jwt.encode(claims, secret or settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def auth(user):
    return {"Authorization": f"Bearer {make_token(user.id, user.email, user.name)}"}


def _add_user(session, user_id, name, email, role_id, is_active=True):
    user = User(id=user_id, name=name, email=email, role_id=role_id, is_active=is_active)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def user(session):
    return _add_user(session, "user-1", "Uma User", "uma@example.com", UserRole.USER)


@pytest.fixture
def other_user(session):
    return _add_user(session, "user-2", "Otto Other", "otto@example.com", UserRole.USER)


@pytest.fixture
def agent(session):
    return _add_user(session, "agent-1", "Alice Agent", "alice@example.com", UserRole.AGENT)


@pytest.fixture
def admin(session):
    return _add_user(session, "admin-1", "Adam Admin", "adam@example.com", UserRole.ADMIN)


@pytest.fixture
def inactive_agent(session):
    return _add_user(session, "agent-9", "Ina Inactive", "ina@example.com", UserRole.AGENT, is_active=False)


@pytest.fixture
def category(session):
    category = TicketCategory(name="Hardware")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def ticket_payload(category):
    return {
        "title": "Printer broken",
        "description": "The third floor printer jams on every page",
        "category_id": category.id,
        "priority_id": 2,
    }


@pytest.fixture
def ticket(client, user, ticket_payload):
    response = client.post("/api/tickets", json=ticket_payload, headers=auth(user))
    assert response.status_code == 201
    return response.json()["ticket"]
