from __future__ import annotations

from packet_api.catalog import (
    DEFAULT_DOCUMENT_CATALOG,
    PER_DOCUMENT_OVERHEAD_BYTES,
    CatalogDocument,
    estimate_packet_size_bytes,
    ordered_catalog,
    total_size_bytes,
    type_priority,
)


def _document(id: str, type: str, *, name: str | None = None, size_bytes: int = 100) -> CatalogDocument:
    return CatalogDocument(
        id=id,
        name=name or id,
        description="",
        filename=f"{id}.pdf",
        url=f"/PDFS/{id}.pdf",
        size_bytes=size_bytes,
        type=type,
    )


def test_default_catalog_ids_are_unique_and_served_from_pdfs_folder() -> None:
    ids = [item.id for item in DEFAULT_DOCUMENT_CATALOG]

    assert len(ids) == len(set(ids)) == 7
    assert all(item.url == f"/PDFS/{item.filename}" for item in DEFAULT_DOCUMENT_CATALOG)


def test_type_priority_ranks_unknown_types_last() -> None:
    assert type_priority("TDS") == 1
    assert type_priority("MSDS") == 8
    assert type_priority("Brochure") == 9


def test_ordered_catalog_sorts_by_priority_then_name() -> None:
    ordered = ordered_catalog(
        [
            _document("brochure", "Brochure"),
            _document("msds", "MSDS"),
            _document("tds-b", "TDS", name="b sheet"),
            _document("tds-a", "TDS", name="A sheet"),
        ]
    )

    assert [item.id for item in ordered] == ["tds-a", "tds-b", "msds", "brochure"]


def test_size_estimates_include_per_document_overhead() -> None:
    documents = [_document("a", "TDS", size_bytes=1_000), _document("b", "ESR", size_bytes=-5)]

    assert total_size_bytes(documents) == 1_000
    assert estimate_packet_size_bytes(documents) == 1_000 + 2 * PER_DOCUMENT_OVERHEAD_BYTES
