from datetime import datetime
from pathlib import Path

import aiofiles.os
import pytest

from upload_relay.core.config import Settings
from upload_relay.core.errors import InvalidPayloadError, PersistenceError
from upload_relay.services.storage import (
    ResolvedTarget,
    image_file_name,
    multipart_file_name,
    persist,
    resolve_directory,
    validate_size,
)

NOW = datetime(2026, 10, 19, 14, 3, 22)


# ---------- size ----------
def test_validate_size_defaults_to_10_mb(tmp_path):
    settings = Settings(save_dir=str(tmp_path), max_size_mb=None)

    assert validate_size(settings, 10 * 1024 * 1024).valid
    check = validate_size(settings, 10 * 1024 * 1024 + 1)
    assert not check.valid
    assert "limit" in check.reason


def test_validate_size_uses_configured_megabytes(tmp_path):
    settings = Settings(save_dir=str(tmp_path), max_size_mb=1)

    assert validate_size(settings, 1_048_576).valid
    assert not validate_size(settings, 1_048_577).valid


# ---------- file names ----------
def test_image_file_name_with_prefix():
    assert image_file_name("png", "test", now=NOW) == "test-19-Oct-2026_14-03-22.png"


def test_image_file_name_without_prefix():
    assert image_file_name("jpeg", None, now=NOW) == "19-Oct-2026_14-03-22.jpeg"


def test_prefix_path_separators_are_flattened():
    assert image_file_name("png", "../etc/x", now=NOW).startswith(".._etc_x-")


def test_multipart_file_name_mixes_identity_and_extension():
    name = multipart_file_name("report.pdf", "application/pdf", "abc123def456", now=NOW)
    assert name == "19-Oct-2026_14-03-22-abc123def456.pdf"


def test_multipart_file_name_extension_fallbacks():
    assert multipart_file_name("noext", "image/webp", "id", now=NOW).endswith(".webp")
    assert multipart_file_name(None, None, "id", prefix_name="p", now=NOW) == (
        "p-19-Oct-2026_14-03-22-id.bin"
    )


# ---------- target directory ----------
@pytest.mark.asyncio
async def test_print_job_ignores_folder(settings):
    directory = await resolve_directory(
        settings, is_print_job=True, folder="albums", identity="abc"
    )
    assert directory == Path(settings.print_dir).resolve()
    assert directory.is_dir()


@pytest.mark.asyncio
async def test_folder_is_namespaced_by_identity_and_created(settings):
    directory = await resolve_directory(
        settings, is_print_job=False, folder="albums", identity="abc"
    )
    assert directory == Path(settings.save_dir).resolve() / "albums_abc"
    assert directory.is_dir()


@pytest.mark.asyncio
async def test_same_folder_same_identity_same_directory(settings):
    a = await resolve_directory(settings, is_print_job=False, folder="f", identity="x")
    b = await resolve_directory(settings, is_print_job=False, folder="f", identity="x")
    c = await resolve_directory(settings, is_print_job=False, folder="f", identity="y")

    assert a == b
    assert a != c


@pytest.mark.asyncio
async def test_no_folder_resolves_to_save_root(settings):
    directory = await resolve_directory(
        settings, is_print_job=False, folder=None, identity="abc"
    )
    assert directory == Path(settings.save_dir).resolve()


@pytest.mark.asyncio
async def test_dot_dot_folder_is_rejected(settings):
    with pytest.raises(InvalidPayloadError):
        await resolve_directory(settings, is_print_job=False, folder="..", identity="")


# ---------- persist ----------
@pytest.mark.asyncio
async def test_persist_writes_bytes(tmp_path):
    target = ResolvedTarget(directory=tmp_path, file_name="a.png")

    path = await persist(target, b"payload", verify=True)

    assert path == tmp_path / "a.png"
    assert path.read_bytes() == b"payload"


@pytest.mark.asyncio
async def test_persist_failure_is_persistence_error(tmp_path):
    target = ResolvedTarget(directory=tmp_path / "missing", file_name="a.png")

    with pytest.raises(PersistenceError) as exc:
        await persist(target, b"payload")
    assert exc.value.status_code == 500


def test_blank_extension_falls_back_to_mime_type():
    name = multipart_file_name("photo. ", "image/png", "id", now=NOW)
    assert name == "19-Oct-2026_14-03-22-id.png"


@pytest.mark.asyncio
async def test_persist_verify_fails_when_file_vanishes(tmp_path, monkeypatch):
    async def missing(path):
        return False

    monkeypatch.setattr(aiofiles.os.path, "exists", missing)
    target = ResolvedTarget(directory=tmp_path, file_name="a.bin")

    with pytest.raises(PersistenceError) as exc:
        await persist(target, b"payload", verify=True)
    assert exc.value.status_code == 500
