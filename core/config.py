"""
Configuration for the emotion relay.
"""
from pydantic import BaseModel
import logging
import os

class Settings(BaseModel):
    """
    Runtime settings with environment-variable overrides.
    """
    VISION_API_URL: str = os.getenv("VISION_API_URL", "https://api.openai.com/v1/chat/completions")
    VISION_API_KEY: str = os.getenv("VISION_API_KEY") or os.getenv("OPENAI_API_KEY", "")
    VISION_MODEL: str = os.getenv("VISION_MODEL", "gpt-4o-mini")
    VISION_MAX_TOKENS: int = int(os.getenv("VISION_MAX_TOKENS", "300"))
    VISION_TIMEOUT: float = float(os.getenv("VISION_TIMEOUT", "30"))

    CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))
    FRAME_WIDTH: int = int(os.getenv("FRAME_WIDTH", "640"))
    FRAME_HEIGHT: int = int(os.getenv("FRAME_HEIGHT", "480"))
    JPEG_QUALITY: int = int(os.getenv("JPEG_QUALITY", "80"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG")

    def __init__(self, **data):
        super().__init__(**data)
        # JPEG quality outside 1..100 is rejected by cv2.imencode
        object.__setattr__(self, "JPEG_QUALITY", max(1, min(100, int(self.JPEG_QUALITY))))
        # Normalize LOG_LEVEL: strip comments/extra words, upper-case, validate
        raw = (self.LOG_LEVEL or "").strip()
        level = raw.split()[0].upper() if raw else "DEBUG"
        if not isinstance(logging.getLevelName(level), int):
            level = "DEBUG"
        object.__setattr__(self, "LOG_LEVEL", level)
