"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST, REGISTRY


router = APIRouter(tags=["metrics"])


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint.

    Returns:
        Response: Prometheus metrics in text format
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )
