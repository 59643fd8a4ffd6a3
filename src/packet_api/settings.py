from __future__ import annotations

from dataclasses import dataclass
import os

_HARDENED_ENVIRONMENTS = frozenset({"production", "prod", "ci"})
_DEVELOPMENT_SOURCE_BASE_URL = "http://localhost:5173"


@dataclass(frozen=True)
class Settings:
    app_name: str
    environment: str
    cors_allowed_origins: tuple[str, ...]
    source_base_url: str | None
    source_fetch_timeout_seconds: float
    source_max_download_bytes: int
    packet_title: str
    packet_footer: str
    packet_max_documents: int


def parse_str_env(name: str, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip()
    if not normalized:
        return default
    return normalized


def parse_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a numeric value, got {raw!r}") from exc


def parse_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer value, got {raw!r}") from exc


def parse_csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    values = tuple(item.strip() for item in raw.split(",") if item.strip())
    if not values:
        return default
    return values


def is_hardened_environment(environment: str) -> bool:
    return environment.strip().lower() in _HARDENED_ENVIRONMENTS


def load_settings() -> Settings:
    environment = parse_str_env("ENVIRONMENT", "development") or "development"
    hardened_environment = is_hardened_environment(environment)

    source_base_url = parse_str_env("SOURCE_BASE_URL")
    if source_base_url is None:
        if hardened_environment:
            raise ValueError(
                "SOURCE_BASE_URL is required when ENVIRONMENT is production/prod/ci"
            )
        source_base_url = _DEVELOPMENT_SOURCE_BASE_URL
    if not source_base_url.lower().startswith(("http://", "https://")):
        raise ValueError("SOURCE_BASE_URL must be an http(s) URL")

    source_fetch_timeout_seconds = parse_float_env("SOURCE_FETCH_TIMEOUT_SECONDS", 15.0)
    if source_fetch_timeout_seconds <= 0:
        raise ValueError("SOURCE_FETCH_TIMEOUT_SECONDS must be > 0")

    source_max_download_bytes = parse_int_env(
        "SOURCE_MAX_DOWNLOAD_BYTES", 50 * 1024 * 1024
    )
    if source_max_download_bytes < 1:
        raise ValueError("SOURCE_MAX_DOWNLOAD_BYTES must be >= 1")

    packet_max_documents = parse_int_env("PACKET_MAX_DOCUMENTS", 100)
    if packet_max_documents < 1:
        raise ValueError("PACKET_MAX_DOCUMENTS must be >= 1")

    return Settings(
        app_name=parse_str_env("API_APP_NAME", "PDF Packet Builder API")
        or "PDF Packet Builder API",
        environment=environment,
        cors_allowed_origins=parse_csv_env("CORS_ORIGIN", ("*",)),
        source_base_url=source_base_url,
        source_fetch_timeout_seconds=source_fetch_timeout_seconds,
        source_max_download_bytes=source_max_download_bytes,
        packet_title=parse_str_env("PACKET_TITLE", "MAXTERRA® PDF PACKET")
        or "MAXTERRA® PDF PACKET",
        packet_footer=parse_str_env(
            "PACKET_FOOTER", "Generated by MAXTERRA® PDF Packet Builder"
        )
        or "Generated by MAXTERRA® PDF Packet Builder",
        packet_max_documents=packet_max_documents,
    )
