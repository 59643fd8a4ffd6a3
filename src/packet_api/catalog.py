from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

# Cover and divider overhead added per document when estimating packet size.
PER_DOCUMENT_OVERHEAD_BYTES = 50_000

DOCUMENT_TYPE_PRIORITY: dict[str, int] = {
    "TDS": 1,
    "ESR": 2,
    "Installation": 3,
    "Warranty": 4,
    "PartSpec": 5,
    "LEED": 6,
    "Acoustic": 7,
    "MSDS": 8,
}


@dataclass(frozen=True)
class CatalogDocument:
    id: str
    name: str
    description: str
    filename: str
    url: str
    size_bytes: int
    type: str
    required: bool = False

    @property
    def priority(self) -> int:
        return type_priority(self.type)


def _pdfs_entry(
    *,
    id: str,
    name: str,
    description: str,
    filename: str,
    size_bytes: int,
    type: str,
) -> CatalogDocument:
    return CatalogDocument(
        id=id,
        name=name,
        description=description,
        filename=filename,
        url=f"/PDFS/{filename}",
        size_bytes=size_bytes,
        type=type,
    )


DEFAULT_DOCUMENT_CATALOG: tuple[CatalogDocument, ...] = (
    _pdfs_entry(
        id="tds-maxterra",
        name="Technical Data Sheet",
        description="MAXTERRA® MgO Non-Combustible Single Layer Structural Floor Panels",
        filename=(
            "TDS - MAXTERRA® MgO Non-Combustible Single Layer Structural Floor Panels "
            "01-14-25 Version 1.2 Email (1) (1).pdf"
        ),
        size_bytes=1_769_344,
        type="TDS",
    ),
    _pdfs_entry(
        id="esr-5194",
        name="ESR-5194 Evaluation Report",
        description="MAXTERRA™ MgO Non-Combustible Single Layer Structural Floor Panels",
        filename=(
            "ESR-5194 - MAXTERRA™ MgO Non-Combustible Single Layer Structural Floor "
            "Panels - June 2024 (4) (1).pdf"
        ),
        size_bytes=660_331,
        type="ESR",
    ),
    _pdfs_entry(
        id="msds-safety",
        name="Material Safety Data Sheet",
        description="MAXTERRA™ MgO Non-Combustible Single Layer Structural Floor Panels",
        filename=(
            "MSDS - MAXTERRA™ MgO Non-Combustible Single Layer Structural Floor "
            "Panels - Version 1 Sept 2024.pdf"
        ),
        size_bytes=300_088,
        type="MSDS",
    ),
    _pdfs_entry(
        id="leed-credit-guide",
        name="LEED Credit Guide",
        description="LEED v4 Credit Information for MAXTERRA®",
        filename="LEED Credit Guide 7-16-25 (1).pdf",
        size_bytes=522_459,
        type="LEED",
    ),
    _pdfs_entry(
        id="installation-guide",
        name="Installation Guide",
        description=(
            "MAXTERRA™ MgO Non-Combustible Single-Layer Subfloor Installation Instructions"
        ),
        filename=(
            "Installation Guide - MAXTERRA™ MgO Non-Combustible Single-Layer "
            "Subfloor - V 1.02.pdf"
        ),
        size_bytes=2_699_385,
        type="Installation",
    ),
    _pdfs_entry(
        id="limited-warranty",
        name="Limited Warranty",
        description="Product Warranty Information",
        filename="Limited Warranty - 8-31-2023.pdf",
        size_bytes=123_375,
        type="Warranty",
    ),
    _pdfs_entry(
        id="acoustic-certification",
        name="Acoustic Certification",
        description="ESL-1645 Certified Floor/Ceiling Acoustical Performance",
        filename="ESL-1645 Certified FloorCeiling Acoustical Performance - June 2025 (2).pdf",
        size_bytes=535_035,
        type="Acoustic",
    ),
)


def type_priority(document_type: str) -> int:
    return DOCUMENT_TYPE_PRIORITY.get(document_type, len(DOCUMENT_TYPE_PRIORITY) + 1)


def ordered_catalog(
    documents: Iterable[CatalogDocument] = DEFAULT_DOCUMENT_CATALOG,
) -> tuple[CatalogDocument, ...]:
    return tuple(sorted(documents, key=lambda item: (item.priority, item.name.lower())))


def total_size_bytes(documents: Iterable[CatalogDocument]) -> int:
    return sum(max(item.size_bytes, 0) for item in documents)


def estimate_packet_size_bytes(documents: Iterable[CatalogDocument]) -> int:
    materialized = tuple(documents)
    return total_size_bytes(materialized) + PER_DOCUMENT_OVERHEAD_BYTES * len(materialized)
