"""Run live camera overlay.

Usage:
    uvicorn api.main:app --reload                         # (separate, for API)
    python scripts/live_overlay.py                        # call the vision model directly
    python scripts/live_overlay.py --api-url http://127.0.0.1:8000   # go through the API

Press 'q' to quit the window.
"""
import argparse
import logging
import sys

from core.config import Settings
from core.errors import CameraAccessError
from core.live import run_live_overlay

if __name__ == '__main__':
    p = argparse.ArgumentParser()
    p.add_argument("--camera", type=int, default=None, help="Camera index (default: CAMERA_INDEX)")
    p.add_argument("--api-url", default=None, help="Base URL of a running API; omit to call the model directly")
    args = p.parse_args()

    s = Settings()
    logging.basicConfig(level=s.LOG_LEVEL)
    try:
        run_live_overlay(s, camera_index=args.camera, api_url=args.api_url)
    except CameraAccessError as e:
        print(e.message, file=sys.stderr)
        sys.exit(1)
