import pytest
from httpx import AsyncClient, ASGITransport
import os
from datetime import datetime, timedelta

# Set up test environment variables before anything else
os.environ["ENV"] = "testing"
os.environ["DB_NAME"] = "taskboard_test"
os.environ["SECRET_KEY"] = "test_secret_key_12345"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ.pop("RESEND_API_KEY", None)

from config import config
config.ENV = "testing"
config.ENABLE_SCHEDULER = False
config.REMINDER_GRACE_MINUTES = 10

from mongomock_motor import AsyncMongoMockClient

from main import app
from models.task import TaskModel
from routes.deps import create_access_token, get_db

# Fixed clock for engine tests (whole seconds, naive UTC like the driver returns)
NOW = datetime(2026, 3, 2, 9, 0, 0)


class RecordingMailer:
    """MailSender double: records every send, raises for addresses in `fail_for`."""

    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []
        self.attempts = []

    def send(self, to, subject, html):
        self.attempts.append(to)
        if to in self.fail_for:
            raise RuntimeError(f"SMTP rejected {to}")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"email-{len(self.sent)}"}


@pytest.fixture(scope="function")
def db():
    """Fresh in-memory database per test."""
    return AsyncMongoMockClient()[config.DB_NAME]


@pytest.fixture(scope="function")
def now():
    return NOW


@pytest.fixture(scope="function")
def mailer():
    return RecordingMailer()


@pytest.fixture(scope="function")
def failing_mailer():
    """Mailer that rejects Alice's address."""
    return RecordingMailer(fail_for={"alice@acme.co"})


@pytest.fixture(scope="function")
async def users(db):
    """Manager, two staff with email, one staff without."""
    docs = [
        {"id": "mgr", "name": "Mona Manager", "email": "mona@acme.co", "role": "Manager"},
        {"id": "alice", "name": "Alice Staff", "email": "alice@acme.co", "role": "Staff"},
        {"id": "bob", "name": "Bob Staff", "email": "bob@acme.co", "role": "Staff"},
        {"id": "carl", "name": "Carl NoMail", "email": None, "role": "Staff"},
    ]
    await db.users.insert_many([dict(d) for d in docs])
    return {d["id"]: d for d in docs}


@pytest.fixture(scope="function")
def make_task(db):
    """Insert a task built through TaskModel (normalized offsets, default reminders)."""
    async def _make(**fields):
        fields.setdefault("title", "Quarterly report")
        fields.setdefault("created_by", "mgr")
        fields.setdefault("status", "In Progress")
        doc = TaskModel(**fields).model_dump()
        await db.tasks.insert_one(dict(doc))
        return doc
    return _make


@pytest.fixture(scope="function")
async def async_client(db):
    app.dependency_overrides[get_db] = lambda: db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers(users):
    token = create_access_token(data={"sub": "alice"}, expires_delta=timedelta(minutes=60))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def bob_auth_headers(users):
    token = create_access_token(data={"sub": "bob"}, expires_delta=timedelta(minutes=60))
    return {"Authorization": f"Bearer {token}"}
