"""End-to-end tests through the HTTP API (FastAPI TestClient, in-memory SQLite)."""

import unittest
from collections.abc import Generator

from fastapi.testclient import TestClient
from pydantic import SecretStr

from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import ConfigurationError
from app.main import create_app
from app.models import SessionToken, User
from app.services.accounts import set_role
from tests.support import TEST_SECRET, memory_session_factory

PREFIX = "/api/v1"


def _settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "_env_file": None,
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": SecretStr(TEST_SECRET),
        "API_V1_PREFIX": PREFIX,
    }
    values.update(overrides)
    return Settings(**values)


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class ApiTestCase(unittest.TestCase):
    settings_overrides: dict[str, object] = {}

    def setUp(self) -> None:
        self.factory, self.engine = memory_session_factory()
        app = create_app(_settings(**self.settings_overrides))

        def override_get_db() -> Generator:
            db = self.factory()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        self.engine.dispose()

    def register(self, username: str = "alice", password: str = "password123", email: str = "a@x.com"):
        return self.client.post(
            f"{PREFIX}/register",
            json={"username": username, "password": password, "email": email},
        )

    def login(self, username: str = "alice", password: str = "password123"):
        return self.client.post(f"{PREFIX}/auth/login", json={"username": username, "password": password})

    def counts(self) -> tuple[int, int]:
        db = self.factory()
        try:
            return db.query(User).count(), db.query(SessionToken).count()
        finally:
            db.close()


class TestEndToEnd(ApiTestCase):
    def test_register_promote_login_list(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertIn("userId", body)
        first_token = body["token"]

        resp = self.client.get(f"{PREFIX}/users", headers=_bearer(first_token))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Forbidden: insufficient role")

        db = self.factory()
        try:
            set_role(db, "alice", "ADMIN")
        finally:
            db.close()

        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        admin_token = resp.json()["token"]
        self.assertEqual(resp.json()["userId"], body["userId"])

        resp = self.client.get(f"{PREFIX}/users", headers=_bearer(admin_token))
        self.assertEqual(resp.status_code, 200)
        users = resp.json()
        self.assertEqual([u["username"] for u in users], ["alice"])
        self.assertEqual(users[0]["role"], "ADMIN")
        self.assertNotIn("password_hash", users[0])

        resp = self.client.get(f"{PREFIX}/users", headers=_bearer(first_token))
        self.assertEqual(resp.status_code, 401)


class TestRegisterEndpoint(ApiTestCase):
    def test_missing_field_is_400(self) -> None:
        resp = self.client.post(f"{PREFIX}/register", json={"username": "alice", "password": "password123"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("email", resp.json()["detail"])

    def test_malformed_username_is_400(self) -> None:
        resp = self.register(username="no spaces allowed")
        self.assertEqual(resp.status_code, 400)

    def test_duplicate_email_is_400_and_writes_nothing(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        resp = self.register(username="alice_two")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Email is already taken.")
        self.assertEqual(self.counts(), (1, 1))

    def test_registration_token_is_immediately_usable(self) -> None:
        token = self.register().json()["token"]
        resp = self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(token))
        self.assertEqual(resp.status_code, 204)


class TestAuthFailures(ApiTestCase):
    def test_missing_token(self) -> None:
        resp = self.client.get(f"{PREFIX}/users")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Unauthorized: missing token")
        self.assertEqual(resp.headers["WWW-Authenticate"], "Bearer")

    def test_garbage_token(self) -> None:
        resp = self.client.get(f"{PREFIX}/users", headers=_bearer("abc.def.ghi"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Unauthorized: invalid or expired token")

    def test_wrong_password(self) -> None:
        self.register()
        resp = self.login(password="password124")
        self.assertEqual(resp.status_code, 401)

    def test_login_supersedes_previous_token(self) -> None:
        first = self.register().json()["token"]
        second = self.login().json()["token"]
        self.assertEqual(self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(first)).status_code, 401)
        self.assertEqual(self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(second)).status_code, 204)

    def test_logout_revokes(self) -> None:
        token = self.register().json()["token"]
        self.assertEqual(self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(token)).status_code, 204)
        self.assertEqual(self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(token)).status_code, 401)
        self.assertEqual(self.counts(), (1, 0))


class TestMultiSessionPolicy(ApiTestCase):
    settings_overrides = {"SESSION_POLICY": "multi"}

    def test_both_devices_stay_signed_in_until_logout_everywhere(self) -> None:
        laptop = self.register().json()["token"]
        phone = self.login().json()["token"]
        self.assertEqual(self.counts(), (1, 2))
        resp = self.client.post(f"{PREFIX}/auth/logout?everywhere=true", headers=_bearer(phone))
        self.assertEqual(resp.status_code, 204)
        self.assertEqual(self.client.post(f"{PREFIX}/auth/logout", headers=_bearer(laptop)).status_code, 401)


class TestHealth(ApiTestCase):
    def test_root(self) -> None:
        self.assertEqual(self.client.get("/").status_code, 200)

    def test_health_reports_database(self) -> None:
        resp = self.client.get(f"{PREFIX}/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertEqual(resp.json()["database"], "connected")
        self.assertEqual(resp.json()["session_policy"], "single")
        self.assertEqual(resp.json()["environment"], "dev")


class TestHealthWithAppSettings(ApiTestCase):
    settings_overrides = {"APP_ENV": "prod", "SESSION_POLICY": "multi"}

    def test_reports_settings_passed_to_create_app(self) -> None:
        body = self.client.get(f"{PREFIX}/health/").json()
        self.assertEqual(body["environment"], "prod")
        self.assertEqual(body["session_policy"], "multi")


class TestStartup(unittest.TestCase):
    def test_missing_secret_stops_startup(self) -> None:
        app = create_app(_settings(JWT_SECRET=None))
        with self.assertRaises(ConfigurationError):
            with TestClient(app):
                pass


if __name__ == "__main__":
    unittest.main()
