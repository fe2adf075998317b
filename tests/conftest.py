import os
import tempfile

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING CONFIG
# Must be set BEFORE importing bursary.main so settings and the DB
# engine pick up the throwaway SQLite database.
# ------------------------------------------------------------------
_TMP_DIR = tempfile.mkdtemp(prefix="bursary-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["LOGIN_RATE_LIMIT"] = "1000/minute"
os.environ["ENV"] = "test"
os.environ.pop("SMTP_HOST", None)
os.environ.pop("SUPER_ADMIN_EMAIL", None)

from bursary.core.config import settings  # noqa: E402
from bursary.core.database import AsyncSessionLocal, drop_db, init_db  # noqa: E402
from bursary.main import app  # noqa: E402
from bursary.services.email_service import EmailNotifier, get_notifier  # noqa: E402


class RecordingNotifier(EmailNotifier):
    """Renders real templates but records deliveries instead of talking SMTP."""

    def __init__(self):
        super().__init__(settings)
        self.attempts = []
        self.sent = []
        self.fail_delivery = False

    def notify(self, payload: dict) -> bool:
        self.attempts.append(payload)
        return super().notify(payload)

    def send_email_via_smtp(self, to_email, subject, html_content):
        if self.fail_delivery:
            raise ConnectionRefusedError("smtp down")
        self.sent.append({"to": to_email, "subject": subject, "html": html_content})
        return True


@pytest_asyncio.fixture
async def setup_db():
    await drop_db()
    await init_db()
    yield


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest_asyncio.fixture
async def client(setup_db, notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db_session(setup_db):
    async with AsyncSessionLocal() as session:
        yield session


# ------------------------------------------------------------------
# API helpers
# ------------------------------------------------------------------
@pytest.fixture
def create_student(client):
    counter = {"n": 0}

    async def _create(full_name="Thandi Mokoena", password="secret123", **extra):
        counter["n"] += 1
        payload = {
            "full_name": full_name,
            "email": extra.pop("email", f"student{counter['n']}@example.com"),
            "password": password,
            **extra,
        }
        res = await client.post("/students/register", json=payload)
        assert res.status_code == 201, res.text
        return res.json()

    return _create


@pytest.fixture
def create_admin(client):
    counter = {"n": 0}

    async def _create(full_name="Sipho Dlamini", password="adminpass"):
        counter["n"] += 1
        res = await client.post(
            "/admins/register",
            json={"full_name": full_name, "email": f"admin{counter['n']}@example.com", "password": password},
        )
        assert res.status_code == 201, res.text
        return res.json()

    return _create


@pytest.fixture
def create_bursary(client):
    async def _create(title="Engineering Excellence Bursary", **extra):
        res = await client.post("/bursaries", json={"title": title, **extra})
        assert res.status_code == 201, res.text
        return res.json()

    return _create
