from packet_api.api.routes.packets import build_packet_router

__all__ = ["build_packet_router"]
