from fastapi import APIRouter, status

from wcag_audit.platform.response import api_response
from wcag_audit.platform.websocket_manager import broadcaster

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check():
    return api_response(
        data={
            "status": "ok",
            "service": "WCAG Audit",
            "observers": broadcaster.get_total_connection_count(),
        },
        message="Service is healthy",
        status_code=status.HTTP_200_OK,
    )
