from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from upload_relay.core.errors import InvalidPayloadError

DATA_URI_RE = re.compile(r"^data:image/(\w+);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True)
class DecodedImage:
    subtype: str
    data: bytes


def parse_json_body(raw: bytes) -> dict[str, Any]:
    """Тело приходит как URL-encoded JSON текст: сначала unquote, потом json."""
    try:
        text = unquote(raw.decode("utf-8"))
        body = json.loads(text)
    except (UnicodeDecodeError, ValueError) as e:
        raise InvalidPayloadError(f"Invalid JSON body: {e}") from e
    if not isinstance(body, dict):
        raise InvalidPayloadError("JSON body must be an object")
    return body


def decode_data_uri(value: str | None) -> DecodedImage:
    if not value:
        raise InvalidPayloadError("base64 field is required")

    m = DATA_URI_RE.match(value.strip())
    if not m:
        raise InvalidPayloadError(
            "Invalid base64 format, expected data:image/<type>;base64,<data>"
        )

    subtype, payload = m.group(1).lower(), m.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayloadError(f"Invalid base64 data: {e}") from e

    if not data:
        raise InvalidPayloadError("Decoded image is empty")
    return DecodedImage(subtype=subtype, data=data)
