from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProjectData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_name: str | None = Field(default=None, alias="projectName", max_length=512)
    submitted_to: str | None = Field(default=None, alias="submittedTo", max_length=512)
    prepared_by: str | None = Field(default=None, alias="preparedBy", max_length=512)
    product: str | None = Field(default=None, max_length=512)
    date: str | None = Field(default=None, max_length=128)


class DocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="id", min_length=1, max_length=256)
    name: str | None = Field(default=None, max_length=512)
    url: str = Field(min_length=1, max_length=4096)
    type: str | None = Field(default=None, max_length=128)
    order: int = 0


class GeneratePacketRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_data: ProjectData = Field(alias="projectData")
    documents: list[DocumentRequest]

    @model_validator(mode="after")
    def _require_unique_document_ids(self) -> "GeneratePacketRequest":
        seen: set[str] = set()
        for document in self.documents:
            if document.document_id in seen:
                raise ValueError(f"duplicate document id: {document.document_id}")
            seen.add(document.document_id)
        return self


class CatalogDocumentResponse(BaseModel):
    id: str
    name: str
    description: str
    filename: str
    url: str
    size_bytes: int
    type: str
    required: bool
    priority: int


class DocumentCatalogResponse(BaseModel):
    documents: list[CatalogDocumentResponse]
    total_size_bytes: int
    estimated_packet_size_bytes: int


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
    message: str
    trace_id: str
