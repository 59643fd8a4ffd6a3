from packet_api.telemetry.request_metrics import RequestMetrics
from packet_api.telemetry.tracing import generate_trace_id

__all__ = ["generate_trace_id", "RequestMetrics"]
