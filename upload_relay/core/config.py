from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_SIZE_MB = 10


def _detect_env_file() -> str | None:
    """
    Приоритет:
      1) ENV_FILE (если задан и файл существует)
      2) .env (если существует)
      3) None (только переменные окружения)
    """
    explicit = os.getenv("ENV_FILE")
    if explicit:
        p = Path(explicit)
        if p.exists():
            return str(p)

    p_local = Path(".env")
    if p_local.exists():
        return str(p_local)

    return None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_detect_env_file(),
        env_file_encoding="utf-8",
        env_prefix="UPLOAD_RELAY_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    api_key: str = "change_me"

    # ---------- Local storage ----------
    save_dir: str = "./uploads"
    print_dir: str = "./print"
    # None -> DEFAULT_MAX_SIZE_MB
    max_size_mb: float | None = None

    # ---------- FTP ----------
    # host/port/username/password обязательны для пересылки,
    # без них forward сразу возвращает ошибку
    ftp_host: str | None = None
    ftp_port: int | None = None
    ftp_username: str | None = None
    ftp_password: str | None = None
    ftp_remote_path: str = "/"
    ftp_sub_dir: str | None = None
    ftp_secure: bool = False
    ftp_timeout_s: float = 30.0
    ftp_pool_size: int = 5

    # ---------- Logging ----------
    log_dir: str = "./logs"
    log_level: str = "INFO"

    @property
    def max_size_bytes(self) -> int:
        mb = self.max_size_mb if self.max_size_mb else DEFAULT_MAX_SIZE_MB
        return int(mb * 1024 * 1024)


@lru_cache
def get_settings() -> Settings:
    return Settings()
