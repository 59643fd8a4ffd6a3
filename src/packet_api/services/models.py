from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import fitz

MISSING_FIELD_PLACEHOLDER = "N/A"


class FailureKind(str, Enum):
    SOURCE_UNAVAILABLE = "source_unavailable"
    SOURCE_UNPARSEABLE = "source_unparseable"
    PAGE_COPY_FAILED = "page_copy_failed"


class DocumentStatus(str, Enum):
    MERGED = "merged"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class ProjectHeader:
    project_name: str = ""
    submitted_to: str = ""
    prepared_by: str = ""
    product: str = ""
    date: str = ""

    def display_fields(self) -> tuple[tuple[str, str], ...]:
        return tuple(
            (label, display_value(value))
            for label, value in (
                ("Project Name:", self.project_name),
                ("Submitted To:", self.submitted_to),
                ("Prepared By:", self.prepared_by),
                ("Product:", self.product),
                ("Date:", self.date),
            )
        )


@dataclass(frozen=True)
class DocumentDescriptor:
    document_id: str
    name: str
    url: str
    document_type: str = ""
    order: int = 0


@dataclass(frozen=True)
class FetchResult:
    payload: bytes | None = None
    failure: str | None = None
    http_status: int | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


@dataclass(frozen=True)
class LoadResult:
    document: "fitz.Document | None" = None
    failure: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


@dataclass(frozen=True)
class PageCopyResult:
    failure: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class PageFailureRecord:
    document_id: str
    document_name: str
    kind: FailureKind
    cause: str
    packet_page: int
    source_page: int | None = None


@dataclass(frozen=True)
class AssemblyTableOfContentsEntry:
    position: int
    document_id: str
    document_name: str
    document_type: str
    start_page: int
    end_page: int
    status: DocumentStatus
    pages_copied: int


@dataclass(frozen=True)
class AssemblyResult:
    payload: bytes
    page_count: int
    filename: str
    table_of_contents: tuple[AssemblyTableOfContentsEntry, ...]
    failures: tuple[PageFailureRecord, ...]


def display_value(value: object) -> str:
    if value is None:
        return MISSING_FIELD_PLACEHOLDER
    text = str(value).strip()
    return text or MISSING_FIELD_PLACEHOLDER
