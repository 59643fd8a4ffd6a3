from __future__ import annotations

import logging

import fitz

from packet_api.services.models import LoadResult, PageCopyResult

LOGGER = logging.getLogger(__name__)


def load_source_document(payload_bytes: bytes) -> LoadResult:
    """Parse a fetched payload into a page-indexable PDF document.

    Encryption metadata is deliberately ignored: a document that opens
    without a password (owner-password-only restrictions, or an empty user
    password) is accepted as-is. This is a compatibility choice, not a
    security control. A document that still requires a password after that
    is a load failure, as is anything PyMuPDF cannot parse as a PDF.
    """
    if not payload_bytes:
        return LoadResult(failure="Failed to load document: empty payload")

    try:
        document = fitz.open(stream=payload_bytes, filetype="pdf")
    except Exception as exc:
        return LoadResult(failure=f"Failed to load document: {str(exc) or type(exc).__name__}")

    if document.needs_pass and not document.authenticate(""):
        document.close()
        return LoadResult(failure="Failed to load document: password required")
    encryption = (document.metadata or {}).get("encryption")
    if encryption:
        LOGGER.info("Accepting encrypted source document (%s) opened without a password", encryption)

    if document.page_count < 1:
        document.close()
        return LoadResult(failure="Failed to load document: document has no pages")
    return LoadResult(document=document)


def copy_source_page(
    target: fitz.Document,
    source: fitz.Document,
    page_index: int,
) -> PageCopyResult:
    page_count_before = target.page_count
    try:
        target.insert_pdf(source, from_page=page_index, to_page=page_index)
    except Exception as exc:
        while target.page_count > page_count_before:
            target.delete_page(-1)
        return PageCopyResult(failure=str(exc) or type(exc).__name__)
    if target.page_count != page_count_before + 1:
        while target.page_count > page_count_before:
            target.delete_page(-1)
        return PageCopyResult(failure="page was not copied")
    return PageCopyResult()
