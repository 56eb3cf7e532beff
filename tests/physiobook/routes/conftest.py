from datetime import date

import pytest
from fastapi.testclient import TestClient

from physiobook.auth import jwt_handler
from physiobook.database import get_db
from physiobook.main import app
from physiobook.routes import common

FIXED_TODAY = date(2026, 1, 7)


@pytest.fixture
def client(db_session, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr('physiobook.routes.common.ensure_database_ready', lambda: None)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[common.get_today] = lambda: FIXED_TODAY
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_header():
    def _auth_header(user) -> dict[str, str]:
        return {'Authorization': f'Bearer {jwt_handler.create_access_token(user_id=user.id)}'}

    return _auth_header
