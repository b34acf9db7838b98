# core/pipeline.py
from __future__ import annotations
import logging

from core.inference import InferenceClient
from core.models import PredictionResponse
from core.normalizer import normalize, placeholder_prediction

logger = logging.getLogger(__name__)

def failure_response(message: str) -> PredictionResponse:
    """Neutral placeholder carrying the failure message."""
    return PredictionResponse(**placeholder_prediction().model_dump(), error=message)

def predict_emotion(image_data: str, client: InferenceClient) -> PredictionResponse:
    """
    Infer + normalize one frame. Always returns a well-formed record.

    Any failure (transport, status, empty reply) yields the neutral placeholder
    with the failure message in `error`.
    """
    logger.debug(f"[pipeline] predict_emotion start image_len={len(image_data or '')}")
    try:
        raw = client.infer(image_data)
        prediction = normalize(raw)
    except Exception as e:
        logger.exception("[pipeline] prediction failed; returning placeholder")
        return failure_response(str(e) or type(e).__name__)

    logger.debug(f"[pipeline] predict_emotion finished emotion={prediction.emotion}")
    return PredictionResponse(**prediction.model_dump())
