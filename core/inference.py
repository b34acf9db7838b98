"""
Outbound calls: the vision model (InferenceClient) and this service's own
/predict-emotion endpoint (RemotePredictor).
"""
# core/inference.py
from __future__ import annotations
from typing import Dict, Optional
import logging

import requests

from core.config import Settings
from core.errors import UpstreamError
from core.models import PredictionResponse

logger = logging.getLogger(__name__)

PROMPT = """Analyze this image for facial expressions. Detect the face and identify the primary emotion.

REQUIREMENTS:
1. Look for a human face in the image
2. Identify ONE primary emotion from: Happy, Sad, Angry, Surprise, Fear, Disgust, Neutral
3. Estimate face bounding box coordinates (x, y, width, height)
4. Provide confidence score (0.0 to 1.0)

Return response in this EXACT JSON format:
{
  "emotion": "Happy",
  "confidence": 0.95,
  "x": 120,
  "y": 80,
  "w": 200,
  "h": 240
}

If no face is detected, return:
{
  "emotion": "No face detected",
  "confidence": 0.0,
  "x": 0,
  "y": 0,
  "w": 0,
  "h": 0
}

ONLY return the JSON object, no other text."""


def build_request(image_data: str, model: str, max_tokens: int) -> Dict:
    """One user message: the fixed instruction + the frame as an image_url part."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PROMPT},
                    {"type": "image_url", "image_url": {"url": image_data}},
                ],
            }
        ],
    }


def _message_text(data) -> str:
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, list):
        # multi-part content: keep the text parts
        content = "".join(p["text"] for p in content if isinstance(p, dict) and isinstance(p.get("text"), str))
    return content if isinstance(content, str) else ""


class InferenceClient:
    """OpenAI-compatible chat-completions client for single-frame emotion requests."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.s = settings
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.s.VISION_API_KEY:
            headers["Authorization"] = f"Bearer {self.s.VISION_API_KEY}"
        return headers

    def infer(self, image_data: str) -> str:
        """
        Send one encoded frame to the vision model.

        Args:
            image_data: data URL ("data:image/jpeg;base64,...")

        Returns:
            str: raw reply text, untrusted

        Raises:
            UpstreamError: transport failure, non-success status, or no textual content
        """
        payload = build_request(image_data, self.s.VISION_MODEL, self.s.VISION_MAX_TOKENS)
        try:
            resp = self.session.post(
                self.s.VISION_API_URL,
                json=payload,
                headers=self._headers(),
                timeout=self.s.VISION_TIMEOUT,
            )
        except requests.RequestException as e:
            raise UpstreamError(f"Vision API request failed: {e}") from e

        if not resp.ok:
            raise UpstreamError(f"Vision API failed: {resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError("Vision API returned a non-JSON body", status_code=resp.status_code) from e

        text = _message_text(data)
        if not text:
            raise UpstreamError("No response from vision model", status_code=resp.status_code)

        logger.debug(f"[inference] raw reply: {text!r}")
        return text


class RemotePredictor:
    """Calls a running instance of this API, the way the browser page does."""

    def __init__(self, api_url: str, session: Optional[requests.Session] = None, timeout: float = 30.0):
        self.url = api_url.rstrip("/") + "/predict-emotion"
        self.session = session or requests.Session()
        self.timeout = timeout

    def __call__(self, image_data: str) -> PredictionResponse:
        resp = self.session.post(self.url, json={"image": image_data}, timeout=self.timeout)
        if not resp.ok:
            raise UpstreamError(f"API error: {resp.status_code} {resp.reason}", status_code=resp.status_code)
        return PredictionResponse(**resp.json())
