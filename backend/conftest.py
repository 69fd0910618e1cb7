import os
import tempfile

# Point the app at a throwaway database before config is imported
_db_dir = tempfile.mkdtemp(prefix="confessions-test-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SEED_DATA"] = "true"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("STRIPE_WEBHOOK_SECRET", None)

import pytest
from fastapi.testclient import TestClient

from config import ADMIN_USERNAME, ADMIN_PASSWORD
from database import reset_db
from main import app
from services.seed import seed_defaults

SESSION_HEADER = "X-Session-Token"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        reset_db()
        seed_defaults()
        yield test_client


def headers_for(token):
    return {SESSION_HEADER: token}


@pytest.fixture
def new_session(client):
    """Factory returning (session_json, headers) for a fresh anonymous session"""
    def make(college_code="UCLA123", nickname=None):
        res = client.get("/api/session")
        assert res.status_code == 200
        session = res.json()["session"]
        headers = headers_for(session["token"])
        body = {"collegeCode": college_code}
        if nickname:
            body["nickname"] = nickname
        res = client.put("/api/session", json=body, headers=headers)
        assert res.status_code == 200
        return res.json(), headers
    return make


def login(client, username, password):
    res = client.post("/api/auth/login", json={"username": username, "password": password})
    assert res.status_code == 200, res.text
    # Login also sets a cookie; tests pass tokens explicitly
    client.cookies.clear()
    return headers_for(res.json()["sessionToken"])


@pytest.fixture
def chief_headers(client):
    return login(client, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def make_admin(client, chief_headers):
    """Factory creating an admin through the API and returning its login headers"""
    def make(username, role, college_code=None, password="moderator-pass"):
        res = client.post("/api/admins", json={
            "username": username,
            "password": password,
            "role": role,
            "collegeCode": college_code,
        }, headers=chief_headers)
        assert res.status_code == 200, res.text
        return res.json(), login(client, username, password)
    return make
