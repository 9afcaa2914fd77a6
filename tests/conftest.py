# tests/conftest.py
# 测试环境变量要在导入 userhub.main 之前设置
import os

os.environ["LOG_TO_FILE"] = "false"   # 测试别落盘，减少噪音
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from userhub.core.config import Settings  # noqa: E402
from userhub.core.security import PasswordHasher  # noqa: E402
from userhub.main import create_app  # noqa: E402
from userhub.services.user_store import MemoryUserStore  # noqa: E402


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key="test-secret", password_hash_rounds=4, log_to_file=False, log_level="WARNING")


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture()
def store() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture()
def client(settings: Settings, store: MemoryUserStore):
    with TestClient(create_app(settings, user_store=store)) as c:
        yield c


def register(c: TestClient, name="testname", email="a@b.com", password="secret1"):
    r = c.post("/users", json={"name": name, "email": email, "password": password, "password2": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]


def login(c: TestClient, email="a@b.com", password="secret1") -> str:
    r = c.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["access_token"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
