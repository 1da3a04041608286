from __future__ import annotations

import base64
from typing import Any, Dict, Optional

import httpx


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def _raise_for_error(r: httpx.Response) -> None:
    if r.is_success:
        return
    # сервер отвечает {"detail": "..."} (HTTPException)
    try:
        details = r.json()
    except ValueError:
        raise ApiError(r.status_code, r.text or r.reason_phrase, r.text)
    detail = details.get("detail") if isinstance(details, dict) else None
    raise ApiError(r.status_code, str(detail or r.text), details)


def to_data_uri(data: bytes, subtype: str = "png") -> str:
    return f"data:image/{subtype};base64,{base64.b64encode(data).decode('ascii')}"


class UploadRelayClient:
    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_s = timeout_s
        # transport подменяется в тестах (httpx.MockTransport)
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        h = {"Accept": "application/json"}
        if self.api_key:
            h["X-API-Key"] = self.api_key
        return h

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        with httpx.Client(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout_s,
            transport=self._transport,
        ) as client:
            r = client.request(method, path, **kwargs)
        _raise_for_error(r)
        return r.json()

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")

    # ---------- UPLOADS ----------
    def upload_image(
        self,
        data_uri: str,
        prefix_name: Optional[str] = None,
        folder: Optional[str] = None,
        ftp: bool = False,
        print_job: bool = False,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"base64": data_uri, "ftp": ftp, "print": print_job}
        if prefix_name:
            payload["prefix_name"] = prefix_name
        if folder:
            payload["folder"] = folder
        return self._request("POST", "/upload_image", json=payload)

    def upload_file(
        self,
        file_name: str,
        content: bytes,
        mime_type: str = "application/octet-stream",
        prefix_name: Optional[str] = None,
        folder: Optional[str] = None,
        ftp: bool = False,
        print_job: bool = False,
    ) -> Dict[str, Any]:
        form: Dict[str, str] = {
            "ftp": "true" if ftp else "false",
            "print": "true" if print_job else "false",
        }
        if prefix_name:
            form["prefix_name"] = prefix_name
        if folder:
            form["folder"] = folder
        files = {"file": (file_name, content, mime_type)}
        return self._request("POST", "/upload_file", data=form, files=files)

    def upload_image_ftp(
        self, data_uri: str, prefix_name: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"base64": data_uri}
        if prefix_name:
            payload["prefix_name"] = prefix_name
        return self._request("POST", "/upload_image_ftp", json=payload)
