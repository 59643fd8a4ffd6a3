from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
import logging
import re
from typing import Any

import httpx


PostFunc = Callable[..., httpx.Response]
_log = logging.getLogger(__name__)

_FILENAME_PATTERN = re.compile(r'filename="?([^";]+)"?')
_HEADER_DEFAULTS = (
    ("projectName", "Untitled Project"),
    ("submittedTo", "N/A"),
    ("preparedBy", "N/A"),
    ("product", "N/A"),
)


@dataclass(frozen=True)
class SelectedDocument:
    id: str
    name: str
    url: str
    type: str
    order: int
    selected: bool = True


@dataclass(frozen=True)
class PacketGenerationResult:
    ok: bool
    payload: bytes | None = None
    filename: str | None = None
    page_count: int | None = None
    trace_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None


def build_packet_request(
    form_data: Mapping[str, Any],
    selected_documents: Sequence[SelectedDocument],
    *,
    today: date | None = None,
) -> dict[str, Any] | None:
    documents = sorted(
        (item for item in selected_documents if item.selected),
        key=lambda item: item.order,
    )
    if not documents:
        return None

    project_data: dict[str, str] = {}
    for key, fallback in _HEADER_DEFAULTS:
        value = form_data.get(key)
        project_data[key] = str(value).strip() if value and str(value).strip() else fallback
    raw_date = form_data.get("date")
    project_data["date"] = (
        str(raw_date).strip()
        if raw_date and str(raw_date).strip()
        else (today or date.today()).isoformat()
    )

    return {
        "projectData": project_data,
        "documents": [
            {
                "id": item.id,
                "name": item.name,
                "url": item.url,
                "type": item.type,
                "order": item.order,
            }
            for item in documents
        ],
    }


def _filename_from_disposition(value: str | None) -> str | None:
    if not value:
        return None
    match = _FILENAME_PATTERN.search(value)
    if match is None:
        return None
    return match.group(1).strip() or None


def _extract_error(payload: Any) -> tuple[str | None, str | None]:
    if not isinstance(payload, dict):
        return None, None
    error = payload.get("error") if isinstance(payload.get("error"), str) else None
    message = payload.get("message") if isinstance(payload.get("message"), str) else None
    return error, message


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class PacketApiClient:
    def __init__(
        self,
        *,
        api_base_url: str,
        timeout_seconds: float = 120.0,
        post_func: PostFunc | None = None,
    ) -> None:
        self.api_base_url = api_base_url.strip().rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._post_func = post_func or httpx.post

    def generate_packet(
        self,
        form_data: Mapping[str, Any],
        selected_documents: Sequence[SelectedDocument],
    ) -> PacketGenerationResult:
        payload = build_packet_request(form_data, selected_documents)
        if payload is None:
            return PacketGenerationResult(
                ok=False,
                error_code="NO_DOCUMENTS_SELECTED",
                error_message="No documents selected for packet generation",
            )

        try:
            response = self._post_func(
                f"{self.api_base_url}/generate-packet",
                json=payload,
                headers={"content-type": "application/json"},
                timeout=self.timeout_seconds,
            )
        except httpx.RequestError as exc:
            _log.warning("Packet API transport request failed: %s", exc, exc_info=True)
            return PacketGenerationResult(
                ok=False,
                error_code="TRANSPORT_ERROR",
                error_message="Unable to reach the packet builder endpoint.",
            )

        trace_id = response.headers.get("x-trace-id") or None
        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            error, message = _extract_error(body)
            return PacketGenerationResult(
                ok=False,
                trace_id=trace_id,
                error_code="REQUEST_FAILED",
                error_message=(
                    f"Worker request failed: {response.status_code} "
                    f"{error or response.reason_phrase} - {message or response.text}"
                ),
            )

        if not response.content:
            return PacketGenerationResult(
                ok=False,
                trace_id=trace_id,
                error_code="EMPTY_PACKET",
                error_message="Received empty PDF from packet builder",
            )

        _log.info("Packet generated successfully: %s bytes", len(response.content))
        return PacketGenerationResult(
            ok=True,
            payload=response.content,
            filename=_filename_from_disposition(response.headers.get("content-disposition"))
            or "packet.pdf",
            page_count=_parse_int(response.headers.get("x-packet-page-count")),
            trace_id=trace_id,
        )
