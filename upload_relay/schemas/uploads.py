from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ImageUploadIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    base64: str | None = None  # data:image/<type>;base64,<data>
    prefix_name: str | None = None
    folder: str | None = None
    ftp: bool = False
    print_job: bool = Field(default=False, alias="print")


class FtpImageUploadIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    base64: str | None = None
    prefix_name: str | None = None


class ForwardOut(BaseModel):
    success: bool
    message: str
    url: str | None = None


class ImageUploadOut(BaseModel):
    success: bool = True
    message: str
    local_path: str
    file_name: str
    ftp: ForwardOut | None = None


class FileUploadOut(ImageUploadOut):
    original_name: str
    size: int
    mime_type: str


class FtpUploadOut(BaseModel):
    success: bool = True
    message: str
    file_name: str
    ftp_url: str
