from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import logging
from typing import Protocol

import fitz

from packet_api.errors import PacketAssemblyError
from packet_api.services.document_loader import copy_source_page, load_source_document
from packet_api.services.models import (
    AssemblyResult,
    AssemblyTableOfContentsEntry,
    DocumentDescriptor,
    DocumentStatus,
    FailureKind,
    FetchResult,
    LoadResult,
    PageCopyResult,
    PageFailureRecord,
    ProjectHeader,
)
from packet_api.services.page_canvas import PageCanvasBuilder
from packet_api.services.paginator import stamp_page_numbers
from packet_api.services.source_fetcher import SourceFetcher

LOGGER = logging.getLogger(__name__)

PageCopier = Callable[[fitz.Document, fitz.Document, int], PageCopyResult]
DocumentLoaderFunc = Callable[[bytes], LoadResult]


class Fetcher(Protocol):
    def fetch(self, location: str) -> FetchResult: ...


def order_documents(
    documents: Sequence[DocumentDescriptor],
) -> tuple[DocumentDescriptor, ...]:
    # sorted() is stable, so equal positions keep their request order.
    return tuple(sorted(documents, key=lambda item: item.order))


def packet_filename(project_name: str) -> str:
    safe_name = "".join(
        ch if (ch.isascii() and ch.isalnum()) or ch in {"-", "_"} else "-"
        for ch in project_name.strip()
    )
    while "--" in safe_name:
        safe_name = safe_name.replace("--", "-")
    safe_name = safe_name.strip("-_") or "packet"
    return f"{safe_name}.pdf"


def _bookmark_title(entry: AssemblyTableOfContentsEntry) -> str:
    label = entry.document_name or entry.document_id
    if entry.document_type:
        return f"{entry.position}. {label} ({entry.document_type})"
    return f"{entry.position}. {label}"


@dataclass
class _AssemblyRun:
    """Accumulator state owned by a single ``assemble`` call."""

    output: fitz.Document
    failures: list[PageFailureRecord] = field(default_factory=list)
    table_of_contents: list[AssemblyTableOfContentsEntry] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return self.output.page_count

    def append(self, page_document: fitz.Document) -> None:
        try:
            self.output.insert_pdf(page_document)
        finally:
            page_document.close()


class PacketAssemblyService:
    def __init__(
        self,
        *,
        fetcher: Fetcher | None = None,
        canvas: PageCanvasBuilder | None = None,
        loader: DocumentLoaderFunc | None = None,
        page_copier: PageCopier | None = None,
    ) -> None:
        self._fetcher = fetcher or SourceFetcher()
        self._canvas = canvas or PageCanvasBuilder()
        self._loader = loader or load_source_document
        self._page_copier = page_copier or copy_source_page

    def assemble(
        self,
        header: ProjectHeader,
        documents: Sequence[DocumentDescriptor],
    ) -> AssemblyResult:
        ordered_documents = order_documents(documents)
        run = _AssemblyRun(output=fitz.open())
        try:
            run.append(self._canvas.cover(header))
            for position, descriptor in enumerate(ordered_documents, start=1):
                self._assemble_document(run, position=position, descriptor=descriptor)

            stamp_page_numbers(run.output)
            self._apply_bookmarks(run)
            page_count = run.page_count
            try:
                payload = run.output.tobytes(garbage=4, deflate=True)
            except Exception as exc:
                raise PacketAssemblyError(f"Packet could not be serialized: {exc}") from exc
        finally:
            run.output.close()

        LOGGER.info(
            "packet_assembled documents=%s pages=%s failures=%s",
            len(ordered_documents),
            page_count,
            len(run.failures),
        )
        return AssemblyResult(
            payload=payload,
            page_count=page_count,
            filename=packet_filename(header.project_name),
            table_of_contents=tuple(run.table_of_contents),
            failures=tuple(run.failures),
        )

    def _assemble_document(
        self,
        run: _AssemblyRun,
        *,
        position: int,
        descriptor: DocumentDescriptor,
    ) -> None:
        run.append(
            self._canvas.divider(
                document_type=descriptor.document_type,
                document_name=descriptor.name,
            )
        )
        start_page = run.page_count

        fetch_result = self._fetcher.fetch(descriptor.url)
        if not fetch_result.ok:
            self._substitute_error_page(
                run,
                descriptor=descriptor,
                kind=FailureKind.SOURCE_UNAVAILABLE,
                cause=fetch_result.failure or "Failed to fetch PDF",
                label=descriptor.name,
            )
            self._record_entry(run, position, descriptor, start_page, DocumentStatus.FAILED, 0)
            return

        load_result = self._loader(fetch_result.payload or b"")
        if not load_result.ok:
            self._substitute_error_page(
                run,
                descriptor=descriptor,
                kind=FailureKind.SOURCE_UNPARSEABLE,
                cause=load_result.failure or "Failed to load document",
                label=descriptor.name,
            )
            self._record_entry(run, position, descriptor, start_page, DocumentStatus.FAILED, 0)
            return

        source = load_result.document
        pages_copied = 0
        try:
            for page_index in range(source.page_count):
                copy_result = self._page_copier(run.output, source, page_index)
                if copy_result.ok:
                    pages_copied += 1
                    continue
                self._substitute_error_page(
                    run,
                    descriptor=descriptor,
                    kind=FailureKind.PAGE_COPY_FAILED,
                    cause=copy_result.failure or "Failed to copy page",
                    label=f"Page {page_index + 1} of {descriptor.name}",
                    source_page=page_index + 1,
                )
        finally:
            source.close()

        if pages_copied == 0:
            status = DocumentStatus.FAILED
        elif run.page_count - start_page == pages_copied:
            status = DocumentStatus.MERGED
        else:
            status = DocumentStatus.PARTIAL
        self._record_entry(run, position, descriptor, start_page, status, pages_copied)

    def _substitute_error_page(
        self,
        run: _AssemblyRun,
        *,
        descriptor: DocumentDescriptor,
        kind: FailureKind,
        cause: str,
        label: str,
        source_page: int | None = None,
    ) -> None:
        run.append(self._canvas.error(document_name=label, cause=cause))
        record = PageFailureRecord(
            document_id=descriptor.document_id,
            document_name=descriptor.name,
            kind=kind,
            cause=cause,
            packet_page=run.page_count,
            source_page=source_page,
        )
        run.failures.append(record)
        LOGGER.warning(
            "packet_unit_substituted kind=%s document_id=%s source_page=%s packet_page=%s cause=%s",
            kind.value,
            descriptor.document_id,
            source_page,
            record.packet_page,
            cause,
        )

    @staticmethod
    def _record_entry(
        run: _AssemblyRun,
        position: int,
        descriptor: DocumentDescriptor,
        start_page: int,
        status: DocumentStatus,
        pages_copied: int,
    ) -> None:
        run.table_of_contents.append(
            AssemblyTableOfContentsEntry(
                position=position,
                document_id=descriptor.document_id,
                document_name=descriptor.name,
                document_type=descriptor.document_type,
                start_page=start_page,
                end_page=run.page_count,
                status=status,
                pages_copied=pages_copied,
            )
        )

    @staticmethod
    def _apply_bookmarks(run: _AssemblyRun) -> None:
        bookmark_spec = [
            [1, _bookmark_title(entry), entry.start_page]
            for entry in run.table_of_contents
        ]
        if bookmark_spec:
            run.output.set_toc(bookmark_spec)
