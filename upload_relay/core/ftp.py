from __future__ import annotations

import posixpath
from dataclasses import dataclass

import aioftp

from upload_relay.core.config import Settings


@dataclass(frozen=True)
class FtpConfig:
    host: str | None
    port: int | None
    username: str | None
    password: str | None

    remote_path: str = "/"
    sub_dir: str | None = None
    # explicit TLS (AUTH TLS) после connect
    secure: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "FtpConfig":
        return cls(
            host=settings.ftp_host,
            port=settings.ftp_port,
            username=settings.ftp_username,
            password=settings.ftp_password,
            remote_path=settings.ftp_remote_path or "/",
            sub_dir=settings.ftp_sub_dir or None,
            secure=settings.ftp_secure,
        )

    def missing_fields(self) -> list[str]:
        required = {
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "password": self.password,
        }
        return [name for name, value in required.items() if not value]

    def remote_file_path(self, filename: str) -> str:
        parts = [self.remote_path or "/"]
        if self.sub_dir:
            parts.append(self.sub_dir.strip("/"))
        parts.append(filename)
        return posixpath.join(*parts)

    def public_url(self, filename: str) -> str:
        # только соглашение по именам, доступность не проверяется
        if self.sub_dir:
            return f"https://{self.host}/{self.sub_dir.strip('/')}/{filename}"
        return f"https://{self.host}/{filename}"


class FtpSession:
    """One outbound FTP session. Never reused: pool closes it on release."""

    def __init__(self, cfg: FtpConfig) -> None:
        self.cfg = cfg
        self._client = aioftp.Client()

    async def open(self) -> None:
        await self._client.connect(self.cfg.host, self.cfg.port)
        if self.cfg.secure:
            await self._client.upgrade_to_tls()
        await self._client.login(self.cfg.username, self.cfg.password)

    async def put_bytes(self, remote_path: str, data: bytes) -> None:
        directory = posixpath.dirname(remote_path)
        if directory and directory != "/":
            await self._client.make_directory(directory, parents=True)
        async with self._client.upload_stream(remote_path) as stream:
            await stream.write(data)

    async def quit(self) -> None:
        await self._client.quit()

    def close(self) -> None:
        self._client.close()
