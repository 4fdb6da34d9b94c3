"""
Prometheus metrics endpoint for monitoring and observability.

Example:
    GET /metrics

    Response:
        # HELP housing_booking_transitions_total Booking status transitions attempted
        # TYPE housing_booking_transitions_total counter
        housing_booking_transitions_total{from_status="pending",outcome="success",to_status="approved"} 3.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """
    Prometheus metrics endpoint.

    Returns:
        Response: Metrics in Prometheus text exposition format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
