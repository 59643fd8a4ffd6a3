from __future__ import annotations

from datetime import date

import httpx

from packet_api.client import PacketApiClient, SelectedDocument, build_packet_request

DOCUMENTS = [
    SelectedDocument(id="esr", name="ESR Report", url="/PDFS/esr.pdf", type="ESR", order=2),
    SelectedDocument(id="tds", name="Data Sheet", url="/PDFS/tds.pdf", type="TDS", order=1),
    SelectedDocument(
        id="msds", name="Safety Sheet", url="/PDFS/msds.pdf", type="MSDS", order=3, selected=False
    ),
]


def _build_response(
    *,
    status_code: int,
    content: bytes = b"",
    json_body: dict | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    request = httpx.Request("POST", "https://packets.example/generate-packet")
    if json_body is not None:
        return httpx.Response(
            status_code=status_code, json=json_body, headers=headers or {}, request=request
        )
    return httpx.Response(
        status_code=status_code, content=content, headers=headers or {}, request=request
    )


def test_build_packet_request_filters_sorts_and_fills_defaults() -> None:
    payload = build_packet_request(
        {"projectName": "  Acme Floor ", "submittedTo": "", "product": None},
        DOCUMENTS,
        today=date(2025, 1, 15),
    )

    assert payload == {
        "projectData": {
            "projectName": "Acme Floor",
            "submittedTo": "N/A",
            "preparedBy": "N/A",
            "product": "N/A",
            "date": "2025-01-15",
        },
        "documents": [
            {"id": "tds", "name": "Data Sheet", "url": "/PDFS/tds.pdf", "type": "TDS", "order": 1},
            {"id": "esr", "name": "ESR Report", "url": "/PDFS/esr.pdf", "type": "ESR", "order": 2},
        ],
    }


def test_build_packet_request_defaults_project_name() -> None:
    payload = build_packet_request({"date": "2024-12-01"}, DOCUMENTS)

    assert payload is not None
    assert payload["projectData"]["projectName"] == "Untitled Project"
    assert payload["projectData"]["date"] == "2024-12-01"


def test_generate_packet_success_response() -> None:
    captured: dict[str, object] = {}

    def fake_post(url, **kwargs) -> httpx.Response:
        captured["url"] = url
        captured["json"] = kwargs["json"]
        return _build_response(
            status_code=200,
            content=b"%PDF-1.7 packet",
            headers={
                "content-type": "application/pdf",
                "content-disposition": 'attachment; filename="Acme-Floor.pdf"',
                "x-packet-page-count": "6",
                "x-trace-id": "trace-123",
            },
        )

    client = PacketApiClient(api_base_url="https://packets.example/", post_func=fake_post)
    result = client.generate_packet({"projectName": "Acme Floor"}, DOCUMENTS)

    assert result.ok is True
    assert result.payload == b"%PDF-1.7 packet"
    assert result.filename == "Acme-Floor.pdf"
    assert result.page_count == 6
    assert result.trace_id == "trace-123"
    assert captured["url"] == "https://packets.example/generate-packet"
    assert [item["id"] for item in captured["json"]["documents"]] == ["tds", "esr"]


def test_generate_packet_requires_a_selected_document() -> None:
    def fake_post(*_args, **_kwargs) -> httpx.Response:
        raise AssertionError("request should not be sent")

    client = PacketApiClient(api_base_url="https://packets.example", post_func=fake_post)
    result = client.generate_packet(
        {"projectName": "Acme Floor"},
        [SelectedDocument(id="a", name="A", url="/a.pdf", type="TDS", order=1, selected=False)],
    )

    assert result.ok is False
    assert result.error_code == "NO_DOCUMENTS_SELECTED"


def test_generate_packet_returns_error_envelope_details() -> None:
    def fake_post(*_args, **_kwargs) -> httpx.Response:
        return _build_response(
            status_code=500,
            json_body={
                "error": "Invalid packet request",
                "message": "documents: Field required",
                "trace_id": "trace-500",
            },
            headers={"x-trace-id": "trace-500"},
        )

    client = PacketApiClient(api_base_url="https://packets.example", post_func=fake_post)
    result = client.generate_packet({}, DOCUMENTS)

    assert result.ok is False
    assert result.error_code == "REQUEST_FAILED"
    assert result.trace_id == "trace-500"
    assert result.error_message == (
        "Worker request failed: 500 Invalid packet request - documents: Field required"
    )


def test_generate_packet_handles_transport_errors() -> None:
    def fake_post(url, **_kwargs) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=httpx.Request("POST", url))

    client = PacketApiClient(api_base_url="https://packets.example", post_func=fake_post)
    result = client.generate_packet({}, DOCUMENTS)

    assert result.ok is False
    assert result.error_code == "TRANSPORT_ERROR"


def test_generate_packet_rejects_empty_pdf() -> None:
    def fake_post(*_args, **_kwargs) -> httpx.Response:
        return _build_response(status_code=200, content=b"")

    client = PacketApiClient(api_base_url="https://packets.example", post_func=fake_post)
    result = client.generate_packet({}, DOCUMENTS)

    assert result.ok is False
    assert result.error_code == "EMPTY_PACKET"
