import secrets
from functools import lru_cache

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

from upload_relay.core.config import Settings, get_settings
from upload_relay.core.ftp import FtpConfig, FtpSession
from upload_relay.core.identity import derive_client_identity
from upload_relay.services.forwarder import Forwarder
from upload_relay.services.pool import ConnectionPool
from upload_relay.services.uploads import UploadService

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(
    key: str | None = Depends(api_key_header),
    settings: Settings = Depends(get_settings),
) -> None:
    if not key or not secrets.compare_digest(
        key.encode("utf-8"), settings.api_key.encode("utf-8")
    ):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def get_client_identity(request: Request) -> str:
    peer = request.client.host if request.client else None
    return derive_client_identity(request.headers, peer)


@lru_cache
def get_pool() -> ConnectionPool:
    settings = get_settings()
    cfg = FtpConfig.from_settings(settings)
    return ConnectionPool(lambda: FtpSession(cfg), capacity=settings.ftp_pool_size)


@lru_cache
def get_forwarder() -> Forwarder:
    settings = get_settings()
    return Forwarder(
        FtpConfig.from_settings(settings),
        get_pool(),
        timeout_s=settings.ftp_timeout_s,
    )


def get_upload_service() -> UploadService:
    return UploadService(get_settings(), get_forwarder())
