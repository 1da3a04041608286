from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel, ValidationError

from upload_relay.core.deps import (
    get_client_identity,
    get_upload_service,
    require_api_key,
)
from upload_relay.core.errors import InvalidPayloadError, UploadError
from upload_relay.schemas.uploads import (
    FileUploadOut,
    FtpImageUploadIn,
    FtpUploadOut,
    ImageUploadIn,
    ImageUploadOut,
)
from upload_relay.services.payloads import parse_json_body
from upload_relay.services.uploads import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"], dependencies=[Depends(require_api_key)])

M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], raw: bytes) -> M:
    try:
        return model.model_validate(parse_json_body(raw))
    except ValidationError as e:
        raise InvalidPayloadError(f"Invalid request body: {e.errors()[0]['msg']}")


@router.post("/upload_image", response_model=ImageUploadOut)
async def upload_image(
    request: Request,
    identity: str = Depends(get_client_identity),
    service: UploadService = Depends(get_upload_service),
):
    try:
        payload = _parse(ImageUploadIn, await request.body())
        return await service.upload_inline(payload, identity)
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Unexpected error in /upload_image")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/upload_file", response_model=FileUploadOut)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    folder: Optional[str] = Form(None),
    prefix_name: Optional[str] = Form(None),
    print_job: bool = Form(False, alias="print"),
    ftp: bool = Form(False),
    identity: str = Depends(get_client_identity),
    service: UploadService = Depends(get_upload_service),
):
    try:
        if file is None:
            raise InvalidPayloadError("No file uploaded")
        data = await file.read()
        return await service.upload_multipart(
            file_bytes=data,
            file_name=file.filename,
            mime_type=file.content_type,
            identity=identity,
            folder=folder,
            prefix_name=prefix_name,
            is_print_job=print_job,
            forward_remote=ftp,
        )
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Unexpected error in /upload_file")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/upload_image_ftp", response_model=FtpUploadOut)
async def upload_image_ftp(
    request: Request,
    service: UploadService = Depends(get_upload_service),
):
    try:
        payload = _parse(FtpImageUploadIn, await request.body())
        return await service.upload_remote_only(payload)
    except UploadError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("Unexpected error in /upload_image_ftp")
        raise HTTPException(status_code=500, detail="Internal server error")
