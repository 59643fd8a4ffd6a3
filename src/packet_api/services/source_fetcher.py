from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from urllib.parse import quote

import httpx

from packet_api.services.models import FetchResult

LOGGER = logging.getLogger(__name__)

_ABSOLUTE_URL_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
# Matches the characters encodeURIComponent leaves untouched.
_SEGMENT_SAFE_CHARACTERS = "!~*'()"


def is_absolute_url(location: str) -> bool:
    return bool(_ABSOLUTE_URL_PATTERN.match(location))


def encode_relative_path(location: str) -> str:
    path = location[1:] if location.startswith("/") else location
    return "/".join(
        quote(segment, safe=_SEGMENT_SAFE_CHARACTERS) for segment in path.split("/")
    )


def resolve_source_url(location: str, base_url: str | None) -> str | None:
    normalized_location = location.strip()
    if is_absolute_url(normalized_location):
        return normalized_location
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}/{encode_relative_path(normalized_location)}"


class SourceTooLargeError(Exception):
    pass


@dataclass
class SourceFetcher:
    base_url: str | None = None
    timeout_seconds: float = 15.0
    max_download_bytes: int = 50 * 1024 * 1024
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.max_download_bytes < 1:
            raise ValueError("max_download_bytes must be >= 1")

    def fetch(self, location: str) -> FetchResult:
        url = resolve_source_url(location, self.base_url)
        if url is None:
            return FetchResult(
                failure=f"No source base URL configured for relative location {location!r}"
            )

        try:
            with httpx.Client(
                timeout=self.timeout_seconds,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                with client.stream("GET", url) as response:
                    if not response.is_success:
                        return FetchResult(
                            failure=f"Failed to fetch PDF: {response.status_code}",
                            http_status=response.status_code,
                        )
                    payload = self._read_bounded(response)
                    status_code = response.status_code
        except httpx.TimeoutException as exc:
            LOGGER.warning("Source fetch timed out for %s", url, exc_info=exc)
            return FetchResult(failure=f"Timed out fetching PDF after {self.timeout_seconds:g}s")
        except httpx.HTTPError as exc:
            LOGGER.warning("Source fetch failed for %s", url, exc_info=exc)
            return FetchResult(failure=f"Failed to fetch PDF: {exc}")
        except SourceTooLargeError as exc:
            return FetchResult(failure=str(exc))

        if not payload:
            return FetchResult(
                failure="Failed to fetch PDF: empty response body",
                http_status=status_code,
            )
        return FetchResult(payload=payload, http_status=status_code)

    def _read_bounded(self, response: httpx.Response) -> bytes:
        content_length = response.headers.get("content-length")
        if content_length:
            try:
                if int(content_length) > self.max_download_bytes:
                    raise SourceTooLargeError(
                        "Source PDF exceeds configured maximum size"
                    )
            except ValueError:
                pass

        chunks: list[bytes] = []
        total_bytes = 0
        for chunk in response.iter_bytes():
            total_bytes += len(chunk)
            if total_bytes > self.max_download_bytes:
                raise SourceTooLargeError("Source PDF exceeds configured maximum size")
            chunks.append(chunk)
        return b"".join(chunks)
