"""
Health check endpoints for the auth service
"""
from fastapi import APIRouter, status
from datetime import datetime, timezone

from ..schemas import HealthResponse, MessageResponse

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK, response_model=HealthResponse)
def health_check() -> HealthResponse:
    """
    Basic health check endpoint. Makes no directory calls.

    Returns:
        dict: Health status and timestamp
    """
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@router.get("/test", status_code=status.HTTP_200_OK, response_model=MessageResponse)
def test_route() -> MessageResponse:
    return MessageResponse(message="Server is running")
