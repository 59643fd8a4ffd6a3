from __future__ import annotations

import fitz
import httpx
import pytest

from packet_api.services import (
    DocumentDescriptor,
    DocumentStatus,
    FailureKind,
    PacketAssemblyService,
    ProjectHeader,
    SourceFetcher,
)
from packet_api.services.document_loader import copy_source_page
from packet_api.services.models import FetchResult, PageCopyResult
from packet_api.services.packet_assembly_service import order_documents, packet_filename

HEADER = ProjectHeader(
    project_name="Acme Floor",
    submitted_to="Acme Corp",
    prepared_by="J. Doe",
    product="20mm Panel",
    date="2025-01-01",
)


def _pdf_payload(text: str, *, page_count: int = 1) -> bytes:
    document = fitz.open()
    for page_index in range(page_count):
        page = document.new_page()
        page.insert_text((72, 72), f"{text} (page {page_index + 1})")
    payload = document.tobytes()
    document.close()
    return payload


def _fetcher(sources: dict[str, bytes]) -> SourceFetcher:
    def handler(request: httpx.Request) -> httpx.Response:
        payload = sources.get(request.url.path.lstrip("/"))
        if payload is None:
            return httpx.Response(404)
        return httpx.Response(200, content=payload)

    return SourceFetcher(
        base_url="https://assets.example",
        transport=httpx.MockTransport(handler),
    )


class _StaticFetcher:
    def __init__(self, sources: dict[str, bytes]) -> None:
        self._sources = sources
        self.requested: list[str] = []

    def fetch(self, location: str) -> FetchResult:
        self.requested.append(location)
        payload = self._sources.get(location)
        if payload is None:
            return FetchResult(failure="Failed to fetch PDF: 404", http_status=404)
        return FetchResult(payload=payload, http_status=200)


def _page_texts(payload: bytes) -> list[str]:
    document = fitz.open(stream=payload, filetype="pdf")
    try:
        return [page.get_text() for page in document]
    finally:
        document.close()


def _stamps(payload: bytes) -> list[list[str]]:
    document = fitz.open(stream=payload, filetype="pdf")
    try:
        stamps = []
        for page in document:
            rect = page.rect
            stamps.append(
                [
                    word[4]
                    for word in page.get_text("words")
                    if word[0] >= rect.width - 60 and word[1] >= rect.height - 50
                ]
            )
        return stamps
    finally:
        document.close()


def test_assemble_orders_documents_and_isolates_unreachable_source() -> None:
    service = PacketAssemblyService(
        fetcher=_fetcher({"valid-2page.pdf": _pdf_payload("Doc A source", page_count=2)})
    )
    documents = [
        DocumentDescriptor(
            document_id="a", name="Doc A", url="valid-2page.pdf", document_type="TDS", order=2
        ),
        DocumentDescriptor(
            document_id="b", name="Doc B", url="unreachable.pdf", document_type="ESR", order=1
        ),
    ]

    result = service.assemble(HEADER, documents)

    assert result.page_count == 6
    assert result.filename == "Acme-Floor.pdf"
    texts = _page_texts(result.payload)
    assert len(texts) == 6
    assert "MAXTERRA® PDF PACKET" in texts[0]
    assert "Acme Corp" in texts[0]
    assert "ESR" in texts[1] and "Doc B" in texts[1]
    assert "DOCUMENT ERROR" in texts[2]
    assert "Document: Doc B" in texts[2]
    assert "Failed to fetch PDF: 404" in texts[2]
    assert "TDS" in texts[3] and "Doc A" in texts[3]
    assert "Doc A source (page 1)" in texts[4]
    assert "Doc A source (page 2)" in texts[5]
    assert _stamps(result.payload) == [[], ["2"], ["3"], ["4"], ["5"], ["6"]]

    assert [(item.document_id, item.kind) for item in result.failures] == [
        ("b", FailureKind.SOURCE_UNAVAILABLE)
    ]
    assert result.failures[0].packet_page == 3
    assert [
        (entry.document_id, entry.start_page, entry.end_page, entry.status, entry.pages_copied)
        for entry in result.table_of_contents
    ] == [
        ("b", 2, 3, DocumentStatus.FAILED, 0),
        ("a", 4, 6, DocumentStatus.MERGED, 2),
    ]


def test_assemble_writes_bookmarks_for_each_divider() -> None:
    service = PacketAssemblyService(
        fetcher=_StaticFetcher({"a.pdf": _pdf_payload("A", page_count=2)})
    )
    documents = [
        DocumentDescriptor(document_id="a", name="Doc A", url="a.pdf", document_type="TDS"),
        DocumentDescriptor(document_id="b", name="Doc B", url="b.pdf"),
    ]

    result = service.assemble(HEADER, documents)

    document = fitz.open(stream=result.payload, filetype="pdf")
    try:
        assert document.get_toc() == [
            [1, "1. Doc A (TDS)", 2],
            [1, "2. Doc B", 5],
        ]
    finally:
        document.close()


def test_assemble_substitutes_error_page_for_single_failed_page() -> None:
    def flaky_copier(target: fitz.Document, source: fitz.Document, page_index: int):
        if page_index == 2:
            return PageCopyResult(failure="content stream is corrupt")
        return copy_source_page(target, source, page_index)

    service = PacketAssemblyService(
        fetcher=_StaticFetcher({"a.pdf": _pdf_payload("Doc A source", page_count=5)}),
        page_copier=flaky_copier,
    )

    result = service.assemble(
        HEADER,
        [DocumentDescriptor(document_id="a", name="Doc A", url="a.pdf", document_type="TDS")],
    )

    assert result.page_count == 7
    texts = _page_texts(result.payload)
    assert "Doc A source (page 1)" in texts[2]
    assert "Doc A source (page 2)" in texts[3]
    assert "DOCUMENT ERROR" in texts[4]
    assert "Document: Page 3 of Doc A" in texts[4]
    assert "content stream is corrupt" in texts[4]
    assert "Doc A source (page 4)" in texts[5]
    assert "Doc A source (page 5)" in texts[6]

    assert len(result.failures) == 1
    failure = result.failures[0]
    assert failure.kind is FailureKind.PAGE_COPY_FAILED
    assert failure.source_page == 3
    assert failure.packet_page == 5
    entry = result.table_of_contents[0]
    assert entry.status is DocumentStatus.PARTIAL
    assert entry.pages_copied == 4


def test_assemble_substitutes_error_page_for_unparseable_source() -> None:
    service = PacketAssemblyService(
        fetcher=_StaticFetcher({"broken.pdf": b"this is not a pdf"})
    )

    result = service.assemble(
        HEADER,
        [DocumentDescriptor(document_id="x", name="Broken", url="broken.pdf")],
    )

    assert result.page_count == 3
    texts = _page_texts(result.payload)
    assert "DOCUMENT ERROR" in texts[2]
    assert "Failed to load document" in texts[2]
    assert result.failures[0].kind is FailureKind.SOURCE_UNPARSEABLE
    assert result.table_of_contents[0].status is DocumentStatus.FAILED


@pytest.mark.parametrize(
    "source_pages",
    [
        [],
        [1],
        [3, None],
        [2, 1, None, 4],
    ],
)
def test_assemble_page_count_is_cover_plus_divider_and_units_per_document(
    source_pages: list[int | None],
) -> None:
    sources: dict[str, bytes] = {}
    documents = []
    for index, page_count in enumerate(source_pages):
        url = f"doc-{index}.pdf"
        if page_count is not None:
            sources[url] = _pdf_payload(f"Doc {index}", page_count=page_count)
        documents.append(
            DocumentDescriptor(document_id=str(index), name=f"Doc {index}", url=url)
        )
    service = PacketAssemblyService(fetcher=_StaticFetcher(sources))

    result = service.assemble(HEADER, documents)

    expected = 1 + sum(1 + max(1, page_count or 0) for page_count in source_pages)
    assert result.page_count == expected
    assert len(_page_texts(result.payload)) == expected


def test_assemble_without_documents_returns_cover_only_packet() -> None:
    service = PacketAssemblyService(fetcher=_StaticFetcher({}))

    result = service.assemble(ProjectHeader(), [])

    assert result.page_count == 1
    assert result.filename == "packet.pdf"
    assert result.table_of_contents == ()
    assert _stamps(result.payload) == [[]]


def test_assemble_keeps_request_order_for_equal_positions() -> None:
    fetcher = _StaticFetcher({})
    service = PacketAssemblyService(fetcher=fetcher)
    documents = [
        DocumentDescriptor(document_id="first", name="First", url="first.pdf", order=5),
        DocumentDescriptor(document_id="second", name="Second", url="second.pdf", order=5),
        DocumentDescriptor(document_id="zero", name="Zero", url="zero.pdf", order=0),
    ]

    result = service.assemble(HEADER, documents)

    assert fetcher.requested == ["zero.pdf", "first.pdf", "second.pdf"]
    assert [entry.document_id for entry in result.table_of_contents] == [
        "zero",
        "first",
        "second",
    ]


def test_order_documents_is_stable() -> None:
    documents = [
        DocumentDescriptor(document_id="b", name="B", url="b.pdf", order=1),
        DocumentDescriptor(document_id="a", name="A", url="a.pdf", order=1),
        DocumentDescriptor(document_id="c", name="C", url="c.pdf", order=-1),
    ]

    assert [item.document_id for item in order_documents(documents)] == ["c", "b", "a"]


@pytest.mark.parametrize(
    ("project_name", "expected"),
    [
        ("Acme Floor", "Acme-Floor.pdf"),
        ("  Acme / Floor #2 ", "Acme-Floor-2.pdf"),
        ("Café Tower", "Caf-Tower.pdf"),
        ("", "packet.pdf"),
        ("***", "packet.pdf"),
    ],
)
def test_packet_filename(project_name: str, expected: str) -> None:
    assert packet_filename(project_name) == expected


def test_assemble_runs_are_independent() -> None:
    service = PacketAssemblyService(
        fetcher=_StaticFetcher({"a.pdf": _pdf_payload("A", page_count=2)})
    )
    documents = [DocumentDescriptor(document_id="a", name="A", url="a.pdf")]

    first = service.assemble(HEADER, documents)
    second = service.assemble(HEADER, documents)

    assert first.page_count == second.page_count == 4
    assert _stamps(second.payload) == [[], ["2"], ["3"], ["4"]]
