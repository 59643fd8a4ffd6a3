from __future__ import annotations

import fitz

STAMP_RIGHT_OFFSET = 50
STAMP_BOTTOM_OFFSET = 30
STAMP_FONT_SIZE = 10
STAMP_COLOR = (0.5, 0.5, 0.5)


def stamp_page_numbers(document: fitz.Document) -> int:
    """Stamp each page after the first with its 1-based physical position.

    The cover counts as page 1 but carries no stamp. Stamps are placed in
    visual coordinates so rotated source pages read upright. Calling this
    twice stamps twice; the assembly pipeline invokes it once per packet.
    """
    stamped = 0
    for page_index in range(1, document.page_count):
        page = document.load_page(page_index)
        page_rect = page.rect
        visual_point = fitz.Point(
            page_rect.width - STAMP_RIGHT_OFFSET,
            page_rect.height - STAMP_BOTTOM_OFFSET,
        )
        page.insert_text(
            visual_point * page.derotation_matrix,
            str(page_index + 1),
            fontsize=STAMP_FONT_SIZE,
            fontname="helv",
            color=STAMP_COLOR,
            rotate=page.rotation,
            overlay=True,
        )
        stamped += 1
    return stamped
