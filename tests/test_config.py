from core.config import Settings

def test_Settings():
    s = Settings()
    assert s.FRAME_WIDTH > 0 and s.FRAME_HEIGHT > 0
    # override via env-like behavior (construct new instance)
    s2 = Settings(VISION_MODEL="llava", CAMERA_INDEX=1)
    assert s2.VISION_MODEL == "llava" and s2.CAMERA_INDEX == 1

def test_Settings_normalizes_values():
    assert Settings(JPEG_QUALITY=400).JPEG_QUALITY == 100
    assert Settings(JPEG_QUALITY=0).JPEG_QUALITY == 1
    assert Settings(LOG_LEVEL="info  # verbose").LOG_LEVEL == "INFO"
    assert Settings(LOG_LEVEL="chatty").LOG_LEVEL == "DEBUG"
    assert Settings(LOG_LEVEL="").LOG_LEVEL == "DEBUG"
