"""
Shared pytest fixtures.

Provides:
- Settings bound to tmp_path (save/print/log dirs)
- FakeFtp: фабрика фейковых FTP-сессий для ConnectionPool
- Forwarder / UploadService wired on top of the fakes
- TestClient с подменёнными зависимостями
"""

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from upload_relay.core.config import Settings, get_settings
from upload_relay.core.deps import get_upload_service
from upload_relay.core.ftp import FtpConfig
from upload_relay.main import app
from upload_relay.services.forwarder import Forwarder
from upload_relay.services.pool import ConnectionPool
from upload_relay.services.uploads import UploadService

API_KEY = "test-key"


class FakeSession:
    def __init__(self, owner: "FakeFtp") -> None:
        self.owner = owner
        self.opened = False
        self.closed = False
        self.close_calls = 0

    async def open(self) -> None:
        self.opened = True
        self.owner.active += 1
        self.owner.max_active = max(self.owner.max_active, self.owner.active)
        try:
            if self.owner.delay:
                await asyncio.sleep(self.owner.delay)
            if self.owner.open_error:
                raise self.owner.open_error
        finally:
            self.owner.active -= 1

    async def put_bytes(self, remote_path: str, data: bytes) -> None:
        if self.owner.put_error:
            raise self.owner.put_error
        self.owner.uploads[remote_path] = data

    async def quit(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1
        if self.owner.close_error:
            raise self.owner.close_error


class FakeFtp:
    def __init__(self) -> None:
        self.sessions: list[FakeSession] = []
        self.uploads: dict[str, bytes] = {}
        self.delay = 0.0
        self.open_error: Exception | None = None
        self.put_error: Exception | None = None
        self.close_error: Exception | None = None
        self.active = 0
        self.max_active = 0

    def __call__(self) -> FakeSession:
        session = FakeSession(self)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_ftp() -> FakeFtp:
    return FakeFtp()


@pytest.fixture
def ftp_config() -> FtpConfig:
    return FtpConfig(
        host="ftp.example.com",
        port=21,
        username="user",
        password="secret",
        remote_path="/",
    )


@pytest.fixture
def pool(fake_ftp: FakeFtp) -> ConnectionPool:
    return ConnectionPool(fake_ftp, capacity=5)


@pytest.fixture
def forwarder(ftp_config: FtpConfig, pool: ConnectionPool) -> Forwarder:
    return Forwarder(ftp_config, pool, timeout_s=1.0)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        save_dir=str(tmp_path / "save"),
        print_dir=str(tmp_path / "print"),
        log_dir=str(tmp_path / "logs"),
        api_key=API_KEY,
        ftp_host="ftp.example.com",
        ftp_port=21,
        ftp_username="user",
        ftp_password="secret",
    )


@pytest.fixture
def service(settings: Settings, forwarder: Forwarder) -> UploadService:
    return UploadService(settings, forwarder)


@pytest.fixture
def client(settings: Settings, service: UploadService):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_upload_service] = lambda: service
    try:
        yield TestClient(app, headers={"X-API-Key": API_KEY})
    finally:
        app.dependency_overrides.clear()
