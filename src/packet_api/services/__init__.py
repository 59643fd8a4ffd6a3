from packet_api.services.models import (
    AssemblyResult,
    AssemblyTableOfContentsEntry,
    DocumentDescriptor,
    DocumentStatus,
    FailureKind,
    PageFailureRecord,
    ProjectHeader,
)
from packet_api.services.packet_assembly_service import PacketAssemblyService
from packet_api.services.page_canvas import PageCanvasBuilder, PageKind
from packet_api.services.source_fetcher import SourceFetcher

__all__ = [
    "AssemblyResult",
    "AssemblyTableOfContentsEntry",
    "DocumentDescriptor",
    "DocumentStatus",
    "FailureKind",
    "PacketAssemblyService",
    "PageCanvasBuilder",
    "PageFailureRecord",
    "PageKind",
    "ProjectHeader",
    "SourceFetcher",
]
