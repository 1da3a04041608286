from .uploads import (
    FileUploadOut,
    ForwardOut,
    FtpImageUploadIn,
    FtpUploadOut,
    ImageUploadIn,
    ImageUploadOut,
)

__all__ = [
    "FileUploadOut",
    "ForwardOut",
    "FtpImageUploadIn",
    "FtpUploadOut",
    "ImageUploadIn",
    "ImageUploadOut",
]
