from __future__ import annotations

from collections.abc import Mapping
from enum import Enum

import fitz

from packet_api.services.models import ProjectHeader, display_value

PAGE_WIDTH = 612
PAGE_HEIGHT = 792
LEFT_MARGIN = 50
VALUE_COLUMN_X = 150
ERROR_CAUSE_MAX_LENGTH = 80
ERROR_DOCUMENT_NAME_MAX_LENGTH = 60
ELLIPSIS = "..."

REGULAR_FONT = "helv"
BOLD_FONT = "hebo"

TITLE_COLOR = (0.2, 0.2, 0.2)
LABEL_COLOR = (0.3, 0.3, 0.3)
MUTED_COLOR = (0.5, 0.5, 0.5)
ALERT_COLOR = (0.8, 0.2, 0.2)

DEFAULT_PACKET_TITLE = "MAXTERRA® PDF PACKET"
DEFAULT_PACKET_FOOTER = "Generated by MAXTERRA® PDF Packet Builder"
SKIPPED_DOCUMENT_NOTE = "This document could not be processed and has been skipped."


class PageKind(str, Enum):
    COVER = "cover"
    DIVIDER = "divider"
    ERROR = "error"


def truncate_error_cause(cause: object, max_length: int = ERROR_CAUSE_MAX_LENGTH) -> str:
    text = "" if cause is None else str(cause)
    if len(text) > max_length:
        return text[:max_length] + ELLIPSIS
    return text


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _new_page() -> tuple[fitz.Document, fitz.Page]:
    document = fitz.open()
    page = document.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    return document, page


def build_cover_page(
    header: ProjectHeader,
    *,
    title: str = DEFAULT_PACKET_TITLE,
    footer: str = DEFAULT_PACKET_FOOTER,
) -> fitz.Document:
    document, page = _new_page()
    page.insert_text(
        (LEFT_MARGIN, 100),
        _text(title),
        fontsize=24,
        fontname=BOLD_FONT,
        color=TITLE_COLOR,
    )

    y_position = 200
    for label, value in header.display_fields():
        page.insert_text(
            (LEFT_MARGIN, y_position),
            label,
            fontsize=12,
            fontname=BOLD_FONT,
            color=LABEL_COLOR,
        )
        page.insert_text(
            (VALUE_COLUMN_X, y_position),
            value,
            fontsize=12,
            fontname=REGULAR_FONT,
            color=TITLE_COLOR,
        )
        y_position += 30

    page.insert_text(
        (LEFT_MARGIN, PAGE_HEIGHT - 50),
        _text(footer),
        fontsize=10,
        fontname=REGULAR_FONT,
        color=MUTED_COLOR,
    )
    return document


def build_divider_page(document_type: object, document_name: object) -> fitz.Document:
    document, page = _new_page()
    page.insert_text(
        (LEFT_MARGIN, 150),
        _text(document_type).upper(),
        fontsize=18,
        fontname=BOLD_FONT,
        color=TITLE_COLOR,
    )
    page.insert_text(
        (LEFT_MARGIN, 200),
        _text(document_name),
        fontsize=14,
        fontname=REGULAR_FONT,
        color=LABEL_COLOR,
    )
    return document


def build_error_page(document_name: object, cause: object) -> fitz.Document:
    document, page = _new_page()
    page.insert_text(
        (LEFT_MARGIN, 150),
        "DOCUMENT ERROR",
        fontsize=18,
        fontname=BOLD_FONT,
        color=ALERT_COLOR,
    )
    page.insert_text(
        (LEFT_MARGIN, 200),
        f"Document: {truncate_error_cause(document_name, ERROR_DOCUMENT_NAME_MAX_LENGTH)}",
        fontsize=14,
        fontname=REGULAR_FONT,
        color=LABEL_COLOR,
    )
    page.insert_text(
        (LEFT_MARGIN, 250),
        f"Error: {truncate_error_cause(cause)}",
        fontsize=12,
        fontname=REGULAR_FONT,
        color=MUTED_COLOR,
    )
    page.insert_text(
        (LEFT_MARGIN, 300),
        SKIPPED_DOCUMENT_NOTE,
        fontsize=12,
        fontname=REGULAR_FONT,
        color=MUTED_COLOR,
    )
    return document


class PageCanvasBuilder:
    """Renders the generated single-page documents of a packet.

    Every page is US Letter, drawn with the Helvetica base-14 faces. Content
    is taken as-is; missing header fields fall back to ``N/A``.
    """

    def __init__(
        self,
        *,
        title: str = DEFAULT_PACKET_TITLE,
        footer: str = DEFAULT_PACKET_FOOTER,
    ) -> None:
        self._title = title
        self._footer = footer

    def build_page(self, kind: PageKind, content: Mapping[str, object]) -> fitz.Document:
        if kind is PageKind.COVER:
            header = content.get("header")
            if not isinstance(header, ProjectHeader):
                header = ProjectHeader(
                    project_name=display_value(content.get("project_name")),
                    submitted_to=display_value(content.get("submitted_to")),
                    prepared_by=display_value(content.get("prepared_by")),
                    product=display_value(content.get("product")),
                    date=display_value(content.get("date")),
                )
            return build_cover_page(header, title=self._title, footer=self._footer)
        if kind is PageKind.DIVIDER:
            return build_divider_page(content.get("type"), content.get("name"))
        return build_error_page(content.get("name"), content.get("cause"))

    def cover(self, header: ProjectHeader) -> fitz.Document:
        return self.build_page(PageKind.COVER, {"header": header})

    def divider(self, *, document_type: str, document_name: str) -> fitz.Document:
        return self.build_page(
            PageKind.DIVIDER, {"type": document_type, "name": document_name}
        )

    def error(self, *, document_name: str, cause: str) -> fitz.Document:
        return self.build_page(PageKind.ERROR, {"name": document_name, "cause": cause})
