from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from upload_relay.core.ftp import FtpConfig
from upload_relay.services.pool import ConnectionPool

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class ForwardResult:
    success: bool
    message: str
    remote_url: str | None = None
    # not_configured | timeout | transfer (только при ошибке)
    reason: str | None = None


class Forwarder:
    def __init__(
        self,
        config: FtpConfig,
        pool: ConnectionPool,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.config = config
        self.pool = pool
        self.timeout_s = timeout_s

    async def forward(self, data: bytes, filename: str) -> ForwardResult:
        """
        Push bytes to the FTP destination. Never raises: every failure
        becomes ForwardResult(success=False, message=...).
        """
        slot = await self.pool.acquire()
        try:
            missing = self.config.missing_fields()
            if missing:
                return ForwardResult(
                    success=False,
                    message=f"FTP is not configured (missing: {', '.join(missing)})",
                    reason="not_configured",
                )

            remote_path = self.config.remote_file_path(filename)
            url = self.config.public_url(filename)

            # wait_for отменяет передачу по таймауту, поэтому
            # исход ровно один и поздний успех не приходит
            try:
                await asyncio.wait_for(
                    self._transfer(slot.session, remote_path, data),
                    timeout=self.timeout_s,
                )
            except asyncio.TimeoutError:
                logger.error(
                    "FTP upload of %s timed out after %ss", remote_path, self.timeout_s
                )
                return ForwardResult(
                    success=False,
                    message=f"FTP upload timed out after {self.timeout_s:g}s",
                    reason="timeout",
                )
            except Exception as e:
                logger.error("FTP upload of %s failed: %s", remote_path, e)
                return ForwardResult(
                    success=False,
                    message=f"FTP upload failed: {e}",
                    reason="transfer",
                )

            logger.info("FTP upload of %s done", remote_path)
            return ForwardResult(
                success=True, message="Uploaded to FTP", remote_url=url
            )
        finally:
            # release идемпотентен и закрывает сессию (abort при таймауте)
            self.pool.release(slot)

    async def _transfer(self, session, remote_path: str, data: bytes) -> None:
        await session.open()
        await session.put_bytes(remote_path, data)
        await session.quit()
