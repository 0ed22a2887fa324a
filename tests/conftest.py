import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from http.cookies import SimpleCookie
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi import Response
from fastapi.testclient import TestClient

from webapp.app import create_app
from webapp.config import AppConfig
from webapp.services import Services
from webapp.stores import build_stores


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def file_stores(data_dir: Path):
    return build_stores(db_connector="files", data_directory=data_dir)


@pytest.fixture()
def db_stores(tmp_path: Path):
    return build_stores(db_connector=f"sqlite:///{tmp_path / 'webapp.db'}", data_directory=tmp_path)


@pytest.fixture(params=["files", "db"])
def stores(request, file_stores, db_stores):
    """Runs the test once per storage backend."""
    return file_stores if request.param == "files" else db_stores


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        app_name="WebApp",
        data_directory=str(tmp_path / "data"),
        log_directory=str(tmp_path / "log"),
        open_registration=True,
        secret_key="test-secret-key",
    )


@pytest.fixture()
def services(app_config: AppConfig) -> Services:
    return Services.build(app_config)


@pytest.fixture()
def admin_password(services: Services) -> str:
    return services.credentials.ensure_admin_account()


@pytest.fixture()
def client(services: Services, admin_password: str) -> TestClient:
    return TestClient(create_app(services=services))


@pytest.fixture()
def make_user(services: Services):
    """Register and persist a standard user directly through the engine."""

    def _make(username: str, email: str, password: str = "password1"):
        user = services.credentials.register_user(username, email, password)
        services.stores.users.save(user)
        return user

    return _make


def login(client: TestClient, username: str, password: str, next_url: str = ""):
    return client.post(
        "/login",
        data={"username": username, "password": password, "next": next_url},
        follow_redirects=False,
    )


def fake_request(cookies: dict):
    return SimpleNamespace(cookies=cookies)


def cookie_from(response: Response, name: str) -> str:
    jar = SimpleCookie()
    jar.load(response.headers["set-cookie"])
    return jar[name].value
