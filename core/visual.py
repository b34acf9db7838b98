"""Overlay drawing helpers.

- OverlayRenderer: draw the current prediction (box + label) on a transparent BGRA layer
- composite: blend that layer onto a BGR camera frame
- draw_status: status line + transient error banner for the live window

The layer is sized to the source frame, so prediction coordinates map 1:1.
"""
from __future__ import annotations
import cv2
import numpy as np
from typing import Optional, Tuple

from core.models import EmotionPrediction

FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_SCALE = 0.6
LABEL_THICKNESS = 2
BOX_THICKNESS = 3
LABEL_BG_ALPHA = 204  # 0.8 opacity


def format_label(prediction: EmotionPrediction) -> str:
    """Label text, e.g. "Happy (92%)"; percentage rounded half up."""
    pct = int(prediction.confidence * 100 + 0.5)
    return f"{prediction.emotion} ({pct}%)"


class OverlayRenderer:
    """Draws one prediction at a time; every render() starts from a clear layer."""

    def __init__(self, color: Tuple[int, int, int] = (0, 255, 0)):
        self.color = color
        self.layer: Optional[np.ndarray] = None

    def clear(self) -> None:
        if self.layer is not None:
            self.layer[:] = 0

    def _ensure_layer(self, width: int, height: int) -> np.ndarray:
        if self.layer is None or self.layer.shape[:2] != (height, width):
            self.layer = np.zeros((height, width, 4), dtype=np.uint8)
        else:
            self.layer[:] = 0
        return self.layer

    def render(self, prediction: Optional[EmotionPrediction], frame_dimensions: Tuple[int, int]) -> np.ndarray:
        """
        Draw `prediction` onto a freshly cleared layer.

        Args:
            prediction: normalized result (None just clears)
            frame_dimensions: (width, height) of the source frame

        Returns:
            BGRA layer (H, W, 4); alpha 0 everywhere nothing was drawn
        """
        width, height = int(frame_dimensions[0]), int(frame_dimensions[1])
        layer = self._ensure_layer(max(1, width), max(1, height))
        if prediction is None or not prediction.has_face:
            return layer

        # keep the box inside the frame
        x1 = max(0, min(prediction.x, width - 1))
        y1 = max(0, min(prediction.y, height - 1))
        x2 = max(0, min(prediction.x + prediction.w, width - 1))
        y2 = max(0, min(prediction.y + prediction.h, height - 1))
        bgra = (*self.color, 255)
        cv2.rectangle(layer, (x1, y1), (x2, y2), bgra, BOX_THICKNESS)

        label = format_label(prediction)
        (tw, th), _ = cv2.getTextSize(label, FONT, LABEL_SCALE, LABEL_THICKNESS)
        # label sits above the box; pushed inside the frame when the box touches the top edge
        top = max(0, y1 - th - 10)
        cv2.rectangle(layer, (x1, top), (x1 + tw + 10, top + th + 8), (*self.color, LABEL_BG_ALPHA), cv2.FILLED)
        cv2.putText(layer, label, (x1 + 5, top + th + 3), FONT, LABEL_SCALE, (0, 0, 0, 255), LABEL_THICKNESS, cv2.LINE_AA)
        return layer


def composite(frame: np.ndarray, layer: Optional[np.ndarray]) -> np.ndarray:
    """Alpha-blend a BGRA layer onto a BGR frame (returns a copy)."""
    out = frame.copy()
    if layer is None:
        return out
    h = min(out.shape[0], layer.shape[0])
    w = min(out.shape[1], layer.shape[1])
    if h == 0 or w == 0:
        return out
    alpha = layer[:h, :w, 3:4].astype(np.float32) / 255.0
    base = out[:h, :w].astype(np.float32)
    out[:h, :w] = (layer[:h, :w, :3].astype(np.float32) * alpha + base * (1.0 - alpha)).astype(np.uint8)
    return out


def draw_status(frame: np.ndarray, message: str = "", error: Optional[str] = None) -> np.ndarray:
    """Status line bottom-left; error banner across the top in red."""
    out = frame.copy()
    h, w = out.shape[:2]
    if message:
        cv2.putText(out, message, (10, max(15, h - 10)), FONT, 0.5, (255, 255, 255), 1, cv2.LINE_AA)
    if error:
        cv2.rectangle(out, (0, 0), (w, 36), (0, 0, 160), cv2.FILLED)
        cv2.putText(out, error, (10, 24), FONT, 0.6, (255, 255, 255), 2, cv2.LINE_AA)
    return out
