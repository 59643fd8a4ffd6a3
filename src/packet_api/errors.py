from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    error: str
    message: str
    status_code: int

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)


class RequestMalformedError(ApiError):
    def __init__(self, message: str = "Request body could not be parsed") -> None:
        super().__init__(
            error="Invalid packet request",
            message=message,
            status_code=500,
        )


class PacketAssemblyError(ApiError):
    def __init__(self, message: str = "Packet could not be assembled") -> None:
        super().__init__(
            error="Packet assembly failed",
            message=message,
            status_code=500,
        )
