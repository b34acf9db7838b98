"""
Turn a free-form vision-model reply into a validated EmotionPrediction.

The model is prompted to answer with one exact JSON object but does not always
comply, so parsing degrades in tiers:

1. parse_strict_json: first brace-delimited object, validated and coerced
2. scan_text: keyword + number scan, placeholder box
3. placeholder_prediction: fixed neutral record

Every tier is a pure function returning a record or None. normalize() never raises.
"""
from __future__ import annotations
import json
import logging
import math
import re
from typing import Callable, Optional, Tuple

from core.errors import MalformedReplyError
from core.models import EmotionPrediction, NO_FACE_LABEL

logger = logging.getLogger(__name__)

EMOTIONS: Tuple[str, ...] = ("Happy", "Sad", "Angry", "Surprise", "Fear", "Disgust", "Neutral")

# Typical centered face in a 640x480 webcam frame
PLACEHOLDER_BOX = {"x": 120, "y": 80, "w": 200, "h": 240}
DEFAULT_CONFIDENCE = 0.5

_JSON_OBJECT = re.compile(r"\{[^}]*\}")
_NUMBER = re.compile(r"(\d+(?:\.\d+)?)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
# upper bound for a box coordinate; anything larger is not a pixel position
MAX_COORD = 10000
_LABELS = {label.lower(): label for label in EMOTIONS}


def clamp01(x: float) -> float:
    return max(0.0, min(1.0, x))


def placeholder_prediction(emotion: str = "Neutral", confidence: float = DEFAULT_CONFIDENCE) -> EmotionPrediction:
    return EmotionPrediction(emotion=emotion, confidence=clamp01(confidence), **PLACEHOLDER_BOX)


def _canonical_label(value) -> str:
    if not isinstance(value, str):
        raise MalformedReplyError(f"emotion is not a string: {value!r}")
    key = value.strip().lower()
    if key in _LABELS:
        return _LABELS[key]
    if key.startswith("no face"):
        return NO_FACE_LABEL
    raise MalformedReplyError(f"unknown emotion label: {value!r}")


def _coerce_confidence(value) -> float:
    if isinstance(value, bool):
        raise MalformedReplyError("confidence is a boolean")
    try:
        conf = float(value)
    except (TypeError, ValueError):
        raise MalformedReplyError(f"confidence is not numeric: {value!r}")
    if math.isnan(conf):
        raise MalformedReplyError("confidence is NaN")
    return clamp01(conf)


def _coerce_coord(value) -> int:
    """int / float / leading-integer string -> int in [0, MAX_COORD], anything else -> 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        n = value
    elif isinstance(value, float):
        n = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        m = _LEADING_INT.match(value)
        n = int(m.group(1)) if m else 0
    else:
        n = 0
    return max(0, min(n, MAX_COORD))


def _prediction_from_dict(data) -> EmotionPrediction:
    if not isinstance(data, dict):
        raise MalformedReplyError("reply JSON is not an object")
    if not data.get("emotion") or data.get("confidence") is None:
        raise MalformedReplyError("Invalid prediction format")
    return EmotionPrediction(
        emotion=_canonical_label(data["emotion"]),
        confidence=_coerce_confidence(data["confidence"]),
        x=_coerce_coord(data.get("x")),
        y=_coerce_coord(data.get("y")),
        w=_coerce_coord(data.get("w")),
        h=_coerce_coord(data.get("h")),
    )


def parse_strict_json(raw: str) -> Optional[EmotionPrediction]:
    """First brace-delimited object (or the whole reply when there is none) as a record."""
    match = _JSON_OBJECT.search(raw)
    candidate = match.group(0) if match else raw
    try:
        return _prediction_from_dict(json.loads(candidate))
    except (ValueError, MalformedReplyError) as e:
        logger.debug(f"[normalizer] strict JSON tier rejected reply: {e}")
        return None


def scan_text(raw: str) -> Optional[EmotionPrediction]:
    """Lenient scan: first line naming an emotion, first number as confidence."""
    emotion = "Neutral"
    for line in raw.upper().split("\n"):
        found = next((label for label in EMOTIONS if label.upper() in line), None)
        if found:
            emotion = found
            break

    confidence = DEFAULT_CONFIDENCE
    m = _NUMBER.search(raw)
    if m:
        value = float(m.group(1))
        # "87 percent" -> 0.87
        confidence = clamp01(value / 100.0 if value > 1 else value)

    return placeholder_prediction(emotion, confidence)


PARSERS: Tuple[Callable[[str], Optional[EmotionPrediction]], ...] = (parse_strict_json, scan_text)


def normalize(raw) -> EmotionPrediction:
    """
    Convert a raw model reply into a well-formed EmotionPrediction.

    Never raises: an empty reply or an unexpected error yields the neutral placeholder.
    """
    try:
        if not isinstance(raw, str) or not raw.strip():
            logger.warning("[normalizer] empty reply; using placeholder")
            return placeholder_prediction()
        for parser in PARSERS:
            prediction = parser(raw)
            if prediction is not None:
                logger.debug(f"[normalizer] {parser.__name__} -> {prediction.emotion} ({prediction.confidence:.2f})")
                return prediction
    except Exception:
        logger.exception("[normalizer] unexpected failure; using placeholder")
    return placeholder_prediction()
