from __future__ import annotations

import hashlib
from typing import Mapping

UNKNOWN = "unknown"
IDENTITY_LENGTH = 12

# порядок важен: сначала то, что ставит доверенный прокси
_IP_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
    "x-client-ip",
)


def client_ip(headers: Mapping[str, str], peer_host: str | None = None) -> str:
    for name in _IP_HEADERS:
        value = headers.get(name)
        if not value:
            continue
        # X-Forwarded-For: client, proxy1, proxy2
        ip = value.split(",")[0].strip()
        if ip:
            return ip
    return peer_host or UNKNOWN


def derive_client_identity(
    headers: Mapping[str, str], peer_host: str | None = None
) -> str:
    """
    Короткий детерминированный токен клиента (ip + user-agent).
    Используется только для неймспейса папок, не для аутентификации.
    """
    ip = client_ip(headers, peer_host)
    agent = headers.get("user-agent") or UNKNOWN
    digest = hashlib.sha256(f"{ip}-{agent}".encode("utf-8")).hexdigest()
    return digest[:IDENTITY_LENGTH]
