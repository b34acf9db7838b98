"""
Pydantic data models for API IO.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal

NO_FACE_LABEL = "No face detected"

EmotionLabel = Literal[
    "Happy", "Sad", "Angry", "Surprise", "Fear", "Disgust", "Neutral", "No face detected"
]

class EmotionPrediction(BaseModel):
    """One normalized classification for one frame. Never mutated after construction."""
    model_config = ConfigDict(frozen=True)

    emotion: EmotionLabel
    confidence: float = Field(ge=0.0, le=1.0)
    x: int = Field(default=0, ge=0)
    y: int = Field(default=0, ge=0)
    w: int = Field(default=0, ge=0)
    h: int = Field(default=0, ge=0)

    @property
    def has_face(self) -> bool:
        return self.emotion != NO_FACE_LABEL and self.w > 0 and self.h > 0

class PredictionResponse(EmotionPrediction):
    error: Optional[str] = None

class PredictRequest(BaseModel):
    image: Optional[str] = None



# live model


class LiveStatus(BaseModel):
    state: Literal["idle", "capturing", "streaming"]
    running: bool
    pending: bool = False
    generation: int = 0
    frame_count: int = 0
    skipped_ticks: int = 0
    started_at: float | None = None
    prediction: EmotionPrediction | None = None
    error: str | None = None
    message: str = ""
