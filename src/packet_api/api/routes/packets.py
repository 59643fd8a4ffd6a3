from __future__ import annotations

from fastapi import APIRouter, Request, Response

from packet_api.api.routes.threadpool import run_blocking
from packet_api.catalog import (
    DEFAULT_DOCUMENT_CATALOG,
    CatalogDocument,
    estimate_packet_size_bytes,
    ordered_catalog,
    total_size_bytes,
)
from packet_api.errors import RequestMalformedError
from packet_api.schemas import (
    CatalogDocumentResponse,
    DocumentCatalogResponse,
    GeneratePacketRequest,
)
from packet_api.services import (
    AssemblyResult,
    DocumentDescriptor,
    PacketAssemblyService,
    ProjectHeader,
)
from packet_api.telemetry import RequestMetrics


def _to_domain(
    payload: GeneratePacketRequest,
) -> tuple[ProjectHeader, tuple[DocumentDescriptor, ...]]:
    project = payload.project_data
    header = ProjectHeader(
        project_name=project.project_name or "",
        submitted_to=project.submitted_to or "",
        prepared_by=project.prepared_by or "",
        product=project.product or "",
        date=project.date or "",
    )
    documents = tuple(
        DocumentDescriptor(
            document_id=item.document_id,
            name=item.name or "",
            url=item.url,
            document_type=item.type or "",
            order=item.order,
        )
        for item in payload.documents
    )
    return header, documents


def build_packet_router(
    assembly_service: PacketAssemblyService,
    *,
    request_metrics: RequestMetrics | None = None,
    max_documents: int = 100,
    catalog: tuple[CatalogDocument, ...] = DEFAULT_DOCUMENT_CATALOG,
) -> APIRouter:
    router = APIRouter(tags=["packets"])

    def _record_packet_outcome(
        *,
        request: Request,
        outcome: str,
        document_count: int,
        result: AssemblyResult | None = None,
    ) -> None:
        if request_metrics is None:
            return
        request_metrics.record_packet_outcome(
            trace_id=getattr(request.state, "trace_id", ""),
            outcome=outcome,
            document_count=document_count,
            page_count=result.page_count if result else 0,
            failure_kinds=tuple(item.kind.value for item in result.failures)
            if result
            else (),
        )

    @router.post("/generate-packet", response_class=Response)
    async def generate_packet(payload: GeneratePacketRequest, request: Request) -> Response:
        trace_id = getattr(request.state, "trace_id", "")
        document_count = len(payload.documents)
        if document_count > max_documents:
            _record_packet_outcome(
                request=request, outcome="rejected", document_count=document_count
            )
            raise RequestMalformedError(
                f"Packet requests are limited to {max_documents} documents, got {document_count}"
            )

        header, documents = _to_domain(payload)
        try:
            result = await run_blocking(assembly_service.assemble, header, documents)
        except Exception:
            _record_packet_outcome(
                request=request, outcome="failed", document_count=document_count
            )
            raise

        _record_packet_outcome(
            request=request,
            outcome="generated",
            document_count=document_count,
            result=result,
        )
        return Response(
            content=result.payload,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'attachment; filename="{result.filename}"',
                "x-packet-page-count": str(result.page_count),
                "x-packet-failed-units": str(len(result.failures)),
                "x-trace-id": trace_id,
            },
        )

    @router.get("/documents", response_model=DocumentCatalogResponse)
    async def list_documents() -> DocumentCatalogResponse:
        ordered = ordered_catalog(catalog)
        return DocumentCatalogResponse(
            documents=[
                CatalogDocumentResponse(
                    id=item.id,
                    name=item.name,
                    description=item.description,
                    filename=item.filename,
                    url=item.url,
                    size_bytes=item.size_bytes,
                    type=item.type,
                    required=item.required,
                    priority=item.priority,
                )
                for item in ordered
            ],
            total_size_bytes=total_size_bytes(ordered),
            estimated_packet_size_bytes=estimate_packet_size_bytes(ordered),
        )

    return router
