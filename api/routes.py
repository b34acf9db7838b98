"""
REST endpoints for emotion prediction and the server-side live session.
"""
from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
import logging

import cv2

from core.config import Settings
from core.errors import CameraAccessError
from core.inference import InferenceClient
from core.live import build_scheduler
from core.models import PredictRequest, PredictionResponse, LiveStatus
from core.pipeline import failure_response, predict_emotion
from core.scheduler import SchedulerState


router = APIRouter()
settings = Settings()
logger = logging.getLogger(__name__)

inference_client = InferenceClient(settings)
live_scheduler = build_scheduler(settings)


@router.post("/predict-emotion", response_model=PredictionResponse, response_model_exclude_none=True)
async def predict(request: Request):
    """
    Classify the facial emotion in one webcam frame.

    Args:
        request: JSON body {"image": "data:image/jpeg;base64,..."}

    Returns:
        PredictionResponse: 200 unless the image is missing (400). A malformed
        body or an upstream failure yields a neutral placeholder with an
        `error` message so the client keeps running.
    """
    try:
        payload = PredictRequest.model_validate(await request.json())
    except ValueError as e:
        logger.warning(f"[api] /predict-emotion malformed body: {e}")
        return failure_response(f"Invalid request body: {e}")
    if not payload.image:
        return JSONResponse(status_code=400, content={"error": "No image provided"})
    logger.debug(f"[api] /predict-emotion image_len={len(payload.image)}")
    return await run_in_threadpool(predict_emotion, payload.image, inference_client)


@router.post("/live/start")
async def live_start():
    if live_scheduler.state is not SchedulerState.IDLE:
        return {"status": "already_running"}
    try:
        live_scheduler.start()
    except CameraAccessError as e:
        logger.exception("[api] live session could not open the camera")
        raise HTTPException(status_code=503, detail=e.message)
    return {"status": "started"}

@router.get("/live/status", response_model=LiveStatus)
async def live_status():
    return live_scheduler.snapshot()

@router.get("/live/overlay")
async def live_overlay():
    """Current overlay layer as a transparent PNG (204 before anything was rendered)."""
    layer = live_scheduler.renderer.layer
    if layer is None:
        return Response(status_code=204)
    ok, buf = cv2.imencode(".png", layer)
    if not ok:
        raise HTTPException(status_code=500, detail="Overlay encoding failed")
    return Response(content=buf.tobytes(), media_type="image/png")

@router.post("/live/stop")
async def live_stop():
    if live_scheduler.state is SchedulerState.IDLE:
        return {"status": "not_running"}
    live_scheduler.stop()
    return {"status": "stopped"}
