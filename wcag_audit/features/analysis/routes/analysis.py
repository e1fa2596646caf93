from fastapi import APIRouter, Depends, HTTPException, Query, Request, WebSocket, WebSocketDisconnect, status
from sse_starlette.sse import EventSourceResponse

from wcag_audit.features.analysis.dependencies import get_analysis_service, get_broadcaster, get_store
from wcag_audit.features.analysis.exceptions import AnalysisNotFoundError
from wcag_audit.features.analysis.schemas.analysis import AnalysisCreate
from wcag_audit.features.analysis.services.analysis_service import AnalysisService
from wcag_audit.features.analysis.services.progress_stream import stream_analysis_progress
from wcag_audit.features.analysis.services.store import AnalysisStore
from wcag_audit.platform.config import settings
from wcag_audit.platform.logger import get_logger
from wcag_audit.platform.response import api_response
from wcag_audit.platform.utils.url_validator import validate_url
from wcag_audit.platform.websocket_manager import ProgressBroadcaster

logger = get_logger(__name__)

router = APIRouter(tags=["analysis"])


@router.post(
    "/analyze",
    status_code=status.HTTP_201_CREATED,
    summary="Start an accessibility analysis",
    description="Records the analysis and returns immediately; progress is pushed over /ws/analyses",
)
async def submit_analysis(
    request: AnalysisCreate,
    service: AnalysisService = Depends(get_analysis_service),
):
    is_valid, url_str, error_message = validate_url(request.url)
    if not is_valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid URL: {error_message}",
        )

    submitted = await service.submit(url_str)

    return api_response(
        data=submitted,
        message="Analysis started",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/analyses", summary="List analyses, newest first")
async def list_analyses(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    service: AnalysisService = Depends(get_analysis_service),
):
    analyses = await service.list_analyses(page=page, limit=limit)
    return api_response(data=analyses, message="Analyses retrieved successfully")


@router.get("/analyses/{analysis_id}", summary="Get a single analysis")
async def get_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service),
):
    try:
        analysis = await service.get(analysis_id)
    except AnalysisNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")

    return api_response(data=analysis, message="Analysis retrieved successfully")


@router.get("/analyses/{analysis_id}/events", summary="Stream progress of one analysis (SSE)")
async def analysis_events(
    analysis_id: str,
    request: Request,
    store: AnalysisStore = Depends(get_store),
    broadcaster: ProgressBroadcaster = Depends(get_broadcaster),
):
    if await store.find_by_id(analysis_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Analysis not found")

    return EventSourceResponse(
        stream_analysis_progress(analysis_id, store, broadcaster, request.is_disconnected)
    )


@router.websocket("/ws/analyses")
async def analysis_progress_socket(
    websocket: WebSocket,
    broadcaster: ProgressBroadcaster = Depends(get_broadcaster),
):
    """
    Progress channel. Every connected client receives every event:

        {"event": "analysis-progress",
         "data": {"analysisId": "...", "status": "...", "results"?: {...}, "errorMessage"?: "..."}}

    Messages sent by the client are ignored.
    """
    observer = await broadcaster.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("Progress WebSocket disconnected")
    finally:
        broadcaster.disconnect(observer)
