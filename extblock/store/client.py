"""HTTP client for the remote extension store REST API."""

from __future__ import annotations

import http.client
import json
import logging
from typing import Any
from urllib import error, parse, request

from pydantic import ValidationError

from extblock.errors import StructuredServerError, TransportError
from extblock.models import AllExtensionsPayload, BlockedFixedPayload, FixedExtension

ALL_EXTENSIONS_PATH = "/v1/file/all/block-extensions"
BLOCKED_FIXED_PATH = "/v1/file/fixed/block-extensions"
CUSTOM_EXTENSIONS_PATH = "/v1/file/custom/block-extensions"
CUSTOM_EXTENSION_ITEM_PATH = "/v1/file/custom/{id}/block-extensions"
USER_AGENT = "extblock/1.0"

_LOG = logging.getLogger(__name__)


class ExtensionStoreClient:
    """Thin wrapper over the four store endpoints.

    Every method raises `TransportError` (or `StructuredServerError` when the
    error body carries a `statusMessage`) and returns normalized models.
    """

    def __init__(self, api_url: str, *, timeout_seconds: float = 10.0) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def list_all(self) -> AllExtensionsPayload:
        payload = self._request_json("GET", ALL_EXTENSIONS_PATH)
        try:
            return AllExtensionsPayload.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(f"invalid list-all response: {exc}") from exc

    def list_blocked_fixed(self) -> list[FixedExtension]:
        payload = self._request_json("GET", BLOCKED_FIXED_PATH)
        try:
            return BlockedFixedPayload.model_validate(payload).data
        except ValidationError as exc:
            raise TransportError(f"invalid blocked-fixed response: {exc}") from exc

    def add_custom(self, name: str) -> None:
        self._request_json("POST", CUSTOM_EXTENSIONS_PATH, data={"extensionName": name})

    def remove_custom(self, extension_id: int | str) -> None:
        path = CUSTOM_EXTENSION_ITEM_PATH.format(id=parse.quote(str(extension_id), safe=""))
        self._request_json("DELETE", path, headers={"Content-Type": "application/json"})

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        data: dict[str, object] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.api_url}{path}"
        payload: bytes | None = None
        request_headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if headers:
            request_headers.update(headers)
        if data is not None:
            payload = json.dumps(data, separators=(",", ":")).encode("utf-8")
            request_headers.setdefault("Content-Type", "application/json")

        _LOG.debug("%s %s", method, url)
        req = request.Request(url, data=payload, headers=request_headers, method=method)
        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                raw = response.read().decode("utf-8", errors="replace")
        except error.HTTPError as exc:
            try:
                body = exc.read().decode("utf-8", errors="replace")
            except (OSError, http.client.HTTPException):
                body = ""
            raise _error_from_response(method, url, exc.code, body) from exc
        except error.URLError as exc:
            raise TransportError(f"{method} {url} failed: {exc.reason}") from exc
        except http.client.HTTPException as exc:
            raise TransportError(f"{method} {url} failed: {exc!r}") from exc
        except OSError as exc:
            raise TransportError(f"{method} {url} failed: {exc.strerror or str(exc)}") from exc

        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TransportError(f"{method} {url}: invalid JSON response") from exc
        if not isinstance(parsed, dict):
            raise TransportError(f"{method} {url}: expected JSON object response")
        return parsed


def _error_from_response(method: str, url: str, status: int, body: str) -> TransportError:
    message = f"{method} {url} returned HTTP {status}"
    status_message = _extract_status_message(body)
    if status_message is not None:
        return StructuredServerError(
            f"{message}: {status_message}",
            status_message=status_message,
            status=status,
        )
    return TransportError(message, status=status)


def _extract_status_message(body: str) -> str | None:
    if not body.strip():
        return None
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict):
        return None
    status_message = parsed.get("statusMessage")
    if isinstance(status_message, str) and status_message:
        return status_message
    return None
