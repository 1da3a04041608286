from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from upload_relay.services.forwarder import ForwardResult


class UploadError(Exception):
    """Base error: роутер превращает его в HTTPException с status_code."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidPayloadError(UploadError):
    status_code = 400


class PayloadTooLargeError(UploadError):
    status_code = 413


class PersistenceError(UploadError):
    status_code = 500


_FORWARD_STATUS = {
    "not_configured": 503,
    "timeout": 504,
    "transfer": 502,
}


class ForwardError(UploadError):
    """FTP failure surfaced as the request failure (remote-only uploads)."""

    def __init__(self, result: ForwardResult):
        super().__init__(
            result.message, status_code=_FORWARD_STATUS.get(result.reason or "", 502)
        )
        self.result = result
