"""Local side of an upload: target directory, file names, size limit, write."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePath

import aiofiles
import aiofiles.os

from upload_relay.core.config import Settings
from upload_relay.core.errors import InvalidPayloadError, PersistenceError

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d-%b-%Y_%H-%M-%S"


@dataclass(frozen=True)
class ResolvedTarget:
    directory: Path
    file_name: str

    @property
    def path(self) -> Path:
        return self.directory / self.file_name


@dataclass(frozen=True)
class SizeCheck:
    valid: bool
    reason: str | None = None


def _safe_component(value: str) -> str:
    # минимальная защита от путей: никаких / \ и ..
    value = (value or "").replace("\\", "_").replace("/", "_").strip()
    if value in ("", ".", ".."):
        raise InvalidPayloadError(f"Invalid name: {value!r}")
    return value


def timestamp(now: datetime | None = None) -> str:
    # точность до секунды: два аплоада в одну секунду дадут одно имя
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


def image_file_name(
    subtype: str, prefix_name: str | None = None, now: datetime | None = None
) -> str:
    stem = timestamp(now)
    if prefix_name:
        stem = f"{_safe_component(prefix_name)}-{stem}"
    return f"{stem}.{subtype}"


def multipart_file_name(
    original_name: str | None,
    mime_type: str | None,
    identity: str,
    prefix_name: str | None = None,
    now: datetime | None = None,
) -> str:
    ext = PurePath(original_name or "").suffix.lstrip(".").strip()
    if not ext and mime_type and "/" in mime_type:
        ext = mime_type.split("/", 1)[1].split(";")[0].strip()
    ext = _safe_component(ext or "bin")

    stem = f"{timestamp(now)}-{identity}"
    if prefix_name:
        stem = f"{_safe_component(prefix_name)}-{stem}"
    return f"{stem}.{ext}"


def validate_size(settings: Settings, byte_length: int) -> SizeCheck:
    limit = settings.max_size_bytes
    if byte_length > limit:
        return SizeCheck(
            valid=False,
            reason=f"Payload is {byte_length} bytes, limit is {limit} bytes",
        )
    return SizeCheck(valid=True)


async def ensure_directory(path: Path) -> Path:
    await aiofiles.os.makedirs(path, exist_ok=True)
    return path


async def resolve_directory(
    settings: Settings,
    *,
    is_print_job: bool,
    folder: str | None,
    identity: str,
) -> Path:
    """
    1) print -> print_dir, folder игнорируется
    2) folder -> <save_dir>/<folder>_<identity> (создаётся)
    3) иначе save_dir
    """
    if is_print_job:
        return await ensure_directory(Path(settings.print_dir).resolve())

    save_root = Path(settings.save_dir).resolve()
    if folder:
        return await ensure_directory(
            save_root / f"{_safe_component(folder)}_{identity}"
        )
    return await ensure_directory(save_root)


async def persist(target: ResolvedTarget, data: bytes, *, verify: bool = False) -> Path:
    path = target.path
    try:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise PersistenceError(f"Failed to save file: {e}") from e

    if verify and not await aiofiles.os.path.exists(path):
        logger.error("File %s missing right after write", path)
        raise PersistenceError("File was not saved")

    return path
