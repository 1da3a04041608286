from __future__ import annotations

import logging

from upload_relay.core.config import Settings
from upload_relay.core.errors import (
    ForwardError,
    InvalidPayloadError,
    PayloadTooLargeError,
)
from upload_relay.schemas.uploads import (
    FileUploadOut,
    ForwardOut,
    FtpImageUploadIn,
    FtpUploadOut,
    ImageUploadIn,
    ImageUploadOut,
)
from upload_relay.services.forwarder import Forwarder, ForwardResult
from upload_relay.services.payloads import decode_data_uri
from upload_relay.services.storage import (
    ResolvedTarget,
    image_file_name,
    multipart_file_name,
    persist,
    resolve_directory,
    validate_size,
)

logger = logging.getLogger(__name__)


def _forward_out(result: ForwardResult) -> ForwardOut:
    return ForwardOut(
        success=result.success, message=result.message, url=result.remote_url
    )


def _saved_message(kind: str, result: ForwardResult | None) -> str:
    if result is None:
        return f"{kind} uploaded successfully"
    if result.success:
        return f"{kind} uploaded successfully and sent to FTP"
    # локальное сохранение прошло - ошибка FTP только понижает сообщение
    return f"{kind} saved locally, but FTP upload failed: {result.message}"


class UploadService:
    """Per-request composition: decode -> check size -> resolve -> save -> FTP."""

    def __init__(self, settings: Settings, forwarder: Forwarder) -> None:
        self.settings = settings
        self.forwarder = forwarder

    def _check_size(self, byte_length: int) -> None:
        check = validate_size(self.settings, byte_length)
        if not check.valid:
            raise PayloadTooLargeError(check.reason or "Payload too large")

    async def upload_inline(
        self, payload: ImageUploadIn, identity: str
    ) -> ImageUploadOut:
        image = decode_data_uri(payload.base64)
        self._check_size(len(image.data))

        directory = await resolve_directory(
            self.settings,
            is_print_job=payload.print_job,
            folder=payload.folder,
            identity=identity,
        )
        target = ResolvedTarget(
            directory=directory,
            file_name=image_file_name(image.subtype, payload.prefix_name),
        )
        path = await persist(target, image.data)
        logger.info("Saved image %s (%d bytes)", path, len(image.data))

        result = None
        if payload.ftp:
            result = await self.forwarder.forward(image.data, target.file_name)

        return ImageUploadOut(
            success=True,
            message=_saved_message("Image", result),
            local_path=str(path),
            file_name=target.file_name,
            ftp=_forward_out(result) if result else None,
        )

    async def upload_multipart(
        self,
        *,
        file_bytes: bytes,
        file_name: str | None,
        mime_type: str | None,
        identity: str,
        folder: str | None = None,
        prefix_name: str | None = None,
        is_print_job: bool = False,
        forward_remote: bool = False,
    ) -> FileUploadOut:
        if not file_bytes:
            raise InvalidPayloadError("No file uploaded or file is empty")
        self._check_size(len(file_bytes))

        directory = await resolve_directory(
            self.settings,
            is_print_job=is_print_job,
            folder=folder,
            identity=identity,
        )
        target = ResolvedTarget(
            directory=directory,
            file_name=multipart_file_name(
                file_name, mime_type, identity, prefix_name=prefix_name
            ),
        )
        path = await persist(target, file_bytes, verify=True)
        logger.info("Saved file %s (%d bytes)", path, len(file_bytes))

        result = None
        if forward_remote:
            result = await self.forwarder.forward(file_bytes, target.file_name)

        return FileUploadOut(
            success=True,
            message=_saved_message("File", result),
            local_path=str(path),
            file_name=target.file_name,
            ftp=_forward_out(result) if result else None,
            original_name=file_name or "",
            size=len(file_bytes),
            mime_type=mime_type or "application/octet-stream",
        )

    async def upload_remote_only(self, payload: FtpImageUploadIn) -> FtpUploadOut:
        image = decode_data_uri(payload.base64)
        self._check_size(len(image.data))

        file_name = image_file_name(image.subtype, payload.prefix_name)
        result = await self.forwarder.forward(image.data, file_name)
        if not result.success:
            # нет локальной копии - ошибка FTP и есть ошибка запроса
            raise ForwardError(result)

        return FtpUploadOut(
            success=True,
            message="Image uploaded to FTP successfully",
            file_name=file_name,
            ftp_url=result.remote_url or "",
        )
