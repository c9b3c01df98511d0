import json
from datetime import datetime, timezone
from itertools import count

import httpx
import pytest
from fastapi.testclient import TestClient

from directory_auth.directory_auth.auth_service.config import Settings
from directory_auth.directory_auth.auth_service.db import init_db, make_engine, make_session_factory
from directory_auth.directory_auth.auth_service.directory import RestUserDirectory, SqlUserDirectory
from directory_auth.directory_auth.auth_service.main import create_app

SUPABASE_URL = "https://project.supabase.test"
SUPABASE_KEY = "anon-key"


class FakePostgrest:
    """Minimal in-memory stand-in for a PostgREST ``users`` table."""

    def __init__(self):
        self.rows = []
        self.requests = []
        self._ids = count(1)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            username = request.url.params["username"].removeprefix("eq.")
            matches = [row for row in self.rows if row["username"] == username]
            if not matches:
                return httpx.Response(406, json={
                    "code": "PGRST116",
                    "details": "The result contains 0 rows",
                    "hint": None,
                    "message": "JSON object requested, multiple (or no) rows returned",
                })
            return httpx.Response(200, json=matches[0])

        if request.method == "POST":
            body = json.loads(request.content)
            if any(row["username"] == body["username"] for row in self.rows):
                return httpx.Response(409, json={
                    "code": "23505",
                    "details": f"Key (username)=({body['username']}) already exists.",
                    "hint": None,
                    "message": 'duplicate key value violates unique constraint "users_username_key"',
                })
            row = {
                "id": next(self._ids),
                "username": body["username"],
                "password": body["password"],
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            self.rows.append(row)
            return httpx.Response(201, json=row)

        return httpx.Response(405, json={"message": "method not allowed"})


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        JWT_SECRET="test-secret",
        DIRECTORY_BACKEND="sql",
        DATABASE_URL="sqlite://",
    )


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sql_directory(engine):
    return SqlUserDirectory(make_session_factory(engine))


@pytest.fixture
def client(settings, sql_directory):
    app = create_app(settings, sql_directory)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def fake_postgrest():
    return FakePostgrest()


@pytest.fixture
def rest_directory(fake_postgrest):
    http_client = httpx.Client(transport=httpx.MockTransport(fake_postgrest))
    directory = RestUserDirectory(SUPABASE_URL, SUPABASE_KEY, client=http_client)
    yield directory
    directory.close()
