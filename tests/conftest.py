import threading
import pytest
import numpy as np

from core.models import PredictionResponse


class DummyFrameSource:
    """Stands in for CameraFrameSource; counts captures."""
    def __init__(self, width=640, height=480, fail_open=None, fail_capture=False):
        self.width, self.height = width, height
        self.fail_open = fail_open
        self.fail_capture = fail_capture
        self.opened = False
        self.closed = 0
        self.captures = 0
    def open(self):
        if self.fail_open is not None:
            raise self.fail_open
        self.opened = True
    def dimensions(self):
        return self.width, self.height
    def capture(self):
        if self.fail_capture:
            raise RuntimeError("Failed to read frame from camera")
        self.captures += 1
        return "data:image/jpeg;base64,AAAA"
    def close(self):
        self.closed += 1


class BlockingPredictor:
    """Predictor that blocks each call until release() (runs in a worker thread)."""
    def __init__(self, response=None):
        self.calls = 0
        self.gate = threading.Event()
        self.response = response or PredictionResponse(emotion="Happy", confidence=0.9, x=10, y=20, w=30, h=40)
    def release(self):
        self.gate.set()
    def __call__(self, image):
        self.calls += 1
        assert self.gate.wait(timeout=5), "predictor never released"
        return self.response


class DummyResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.reason = reason
        self._payload = payload
    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class DummySession:
    """Records posts and replays a canned response (or raises)."""
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.posts = []
    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


def chat_reply(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def frame():
    return np.zeros((48, 64, 3), dtype=np.uint8)

@pytest.fixture
def frame_source():
    return DummyFrameSource()
