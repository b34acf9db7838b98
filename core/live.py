# core/live.py
"""
Live camera window.

Shows the webcam feed with the latest emotion overlay. A CaptureScheduler
sends a frame every 300 ms either straight to the vision model (local
pipeline) or to a running /predict-emotion API, and the display loop
composites the overlay layer + status/error banner on every frame.

Press 'q' to quit the window.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Optional

import cv2

from core.config import Settings
from core.frames import CameraFrameSource
from core.inference import InferenceClient, RemotePredictor
from core.pipeline import predict_emotion
from core.scheduler import CaptureScheduler
from core.visual import OverlayRenderer, composite, draw_status

logger = logging.getLogger(__name__)

WINDOW_TITLE = "Live Facial Expression Recognition (q to quit)"
DISPLAY_DELAY = 0.01   # seconds yielded to the loop between displayed frames


def build_scheduler(settings: Settings,
                    camera_index: Optional[int] = None,
                    api_url: Optional[str] = None) -> CaptureScheduler:
    """Camera source + predictor (local pipeline, or remote API when api_url is set)."""
    cam_idx = settings.CAMERA_INDEX if camera_index is None else camera_index
    source = CameraFrameSource(
        camera_index=cam_idx,
        width=settings.FRAME_WIDTH,
        height=settings.FRAME_HEIGHT,
        jpeg_quality=settings.JPEG_QUALITY,
    )
    if api_url:
        predictor = RemotePredictor(api_url, timeout=settings.VISION_TIMEOUT)
    else:
        predictor = functools.partial(predict_emotion, client=InferenceClient(settings))
    return CaptureScheduler(source, predictor, OverlayRenderer())


async def _display_loop(scheduler: CaptureScheduler) -> None:
    source = scheduler.frame_source
    while True:
        frame = source.read()
        if frame is None:
            logger.warning("[live] camera returned no frame; closing window")
            break

        snap = scheduler.snapshot()
        annotated = composite(frame, scheduler.renderer.layer)
        annotated = draw_status(annotated, f"{snap.message} | frames analyzed: {snap.frame_count}", snap.error)
        cv2.imshow(WINDOW_TITLE, annotated)
        if (cv2.waitKey(1) & 0xFF) == ord("q"):
            break
        await asyncio.sleep(DISPLAY_DELAY)


async def run_live_session(scheduler: CaptureScheduler) -> None:
    scheduler.start()
    try:
        await _display_loop(scheduler)
    finally:
        scheduler.stop()
        cv2.destroyAllWindows()


def run_live_overlay(settings: Settings,
                     camera_index: Optional[int] = None,
                     api_url: Optional[str] = None) -> None:
    """
    Open the webcam and show live emotion overlays until 'q' is pressed.

    Raises:
        CameraAccessError: camera permission denied / not found / busy
    """
    scheduler = build_scheduler(settings, camera_index, api_url)
    logger.debug(f"[live] starting overlay camera={scheduler.frame_source.camera_index} api_url={api_url}")
    asyncio.run(run_live_session(scheduler))
