import pytest

from app import create_app
from config import TestConfig
from models import db
from seed_data import FACULTY_PASSWORD, STUDENT_PASSWORD, seed_sample_data

START_MS = 1_705_300_000_000  # 2024-01-15, during class

ON_CAMPUS = (22.3039, 73.3620)


class FakeClock:
    def __init__(self, now=START_MS):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(clock):
    app = create_app(TestConfig, clock=clock)
    with app.app_context():
        seed_sample_data()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def service(app):
    return app.extensions["attendance_service"]


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_id, password):
    resp = client.post("/auth/login", json={"id": user_id, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


@pytest.fixture
def faculty_headers(client):
    return _login(client, "FAC001", FACULTY_PASSWORD)


@pytest.fixture
def other_faculty_headers(client):
    return _login(client, "FAC002", FACULTY_PASSWORD)


@pytest.fixture
def student_headers(client):
    return _login(client, "STU001", STUDENT_PASSWORD)
