"""
Fixed-cadence capture scheduler.

Drives capture -> predict -> render every CAPTURE_INTERVAL_SECONDS on the running
asyncio loop, with at most one prediction in flight. Ticks that land while a
cycle is pending are dropped, not queued, so upstream latency lowers the
effective frame rate instead of building a backlog.

Each session gets a generation number; a result whose generation is no longer
current (the session was stopped or restarted meanwhile) is discarded.
"""
# core/scheduler.py
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, Optional

from core.errors import CameraAccessError
from core.models import EmotionPrediction, LiveStatus, PredictionResponse
from core.visual import OverlayRenderer

logger = logging.getLogger(__name__)

CAPTURE_INTERVAL_SECONDS = 0.3

Predictor = Callable[[str], PredictionResponse]


class SchedulerState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    STREAMING = "streaming"


class CaptureScheduler:
    """Owns the capture session: timer, in-flight flag, current prediction and error banner."""

    def __init__(
        self,
        frame_source,
        predict: Predictor,
        renderer: Optional[OverlayRenderer] = None,
        interval: float = CAPTURE_INTERVAL_SECONDS,
    ):
        self.frame_source = frame_source
        self.predict = predict
        self.renderer = renderer or OverlayRenderer()
        self.interval = float(interval)

        self._state = SchedulerState.IDLE
        self._pending = False
        self._generation = 0
        self._timer: Optional[asyncio.Task] = None
        self._started_at: Optional[float] = None
        self._prediction: Optional[EmotionPrediction] = None
        self._error: Optional[str] = None
        self._message = ""
        self._frame_count = 0
        self._skipped = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def pending(self) -> bool:
        return self._pending

    # ---- lifecycle ----
    def start(self) -> None:
        """
        Open the frame source and begin ticking. Must be called from a running event loop.

        Raises:
            CameraAccessError: the camera could not be opened; state returns to IDLE
        """
        if self._state is not SchedulerState.IDLE:
            return
        self._state = SchedulerState.CAPTURING
        self._message = "Requesting camera access..."
        try:
            self.frame_source.open()
        except CameraAccessError as e:
            logger.error(f"[scheduler] camera access failed: {e}")
            self._state = SchedulerState.IDLE
            self._error = e.message
            self._message = ""
            raise

        self._generation += 1
        self._pending = False
        self._error = None
        self._frame_count = 0
        self._skipped = 0
        self._started_at = time.time()
        self._state = SchedulerState.STREAMING
        self._message = "Camera active - Ready for analysis"
        self._timer = asyncio.get_running_loop().create_task(self._run_timer(self._generation))
        logger.debug(f"[scheduler] started generation={self._generation} interval={self.interval}s")

    def stop(self) -> None:
        """Cancel the timer, drop any in-flight result, clear the displayed prediction."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._state is SchedulerState.IDLE:
            return
        self._generation += 1
        self._state = SchedulerState.IDLE
        self._pending = False
        self._prediction = None
        self._error = None
        self._message = ""
        self._frame_count = 0
        self._started_at = None
        self.renderer.clear()
        try:
            self.frame_source.close()
        except Exception:
            logger.warning("[scheduler] frame source close failed")
        logger.debug(f"[scheduler] stopped; generation now {self._generation}")

    def snapshot(self) -> LiveStatus:
        return LiveStatus(
            state=self._state.value,
            running=self._state is not SchedulerState.IDLE,
            pending=self._pending,
            generation=self._generation,
            frame_count=self._frame_count,
            skipped_ticks=self._skipped,
            started_at=self._started_at,
            prediction=self._prediction,
            error=self._error,
            message=self._message,
        )

    # ---- ticking ----
    async def _run_timer(self, generation: int) -> None:
        while self._generation == generation and self._state is SchedulerState.STREAMING:
            await asyncio.sleep(self.interval)
            self.tick()

    def tick(self) -> Optional[asyncio.Task]:
        """
        One timer tick. Returns the spawned cycle task, or None when the tick was a no-op
        (not streaming, a cycle already in flight, or the camera has no frame size yet).
        """
        if self._state is not SchedulerState.STREAMING:
            return None
        if self._pending:
            self._skipped += 1
            return None
        width, height = self.frame_source.dimensions()
        if not width or not height:
            logger.debug("[scheduler] frame source not ready; tick skipped")
            return None
        self._pending = True
        return asyncio.get_running_loop().create_task(self._cycle(self._generation, (width, height)))

    async def _cycle(self, generation: int, dims) -> None:
        try:
            # camera read + JPEG encode and the model call both block; keep them off the loop
            image = await asyncio.to_thread(self.frame_source.capture)
            response = await asyncio.to_thread(self.predict, image)
            if generation != self._generation:
                logger.debug(f"[scheduler] discarding stale result from generation={generation}")
                return
            prediction = EmotionPrediction(**response.model_dump(exclude={"error"}))
            self.renderer.render(prediction, dims)
            self._prediction = prediction
            self._frame_count += 1
            self._error = f"Analysis failed: {response.error}" if response.error else None
        except Exception as e:
            logger.exception("[scheduler] capture cycle failed")
            if generation == self._generation:
                self._error = f"Analysis failed: {e}"
        finally:
            if generation == self._generation:
                self._pending = False
