import json
import pytest
import core.normalizer as norm
from core.normalizer import normalize, parse_strict_json, scan_text, placeholder_prediction, PLACEHOLDER_BOX


def _box(p):
    return {"x": p.x, "y": p.y, "w": p.w, "h": p.h}


@pytest.mark.parametrize("emotion", ["Happy", "Sad", "Angry", "Surprise", "Fear", "Disgust", "Neutral"])
def test_valid_json_passes_through_unchanged(emotion):
    raw = json.dumps({"emotion": emotion, "confidence": 0.73, "x": 12, "y": 34, "w": 56, "h": 78})
    p = normalize(raw)
    assert p.emotion == emotion
    assert p.confidence == 0.73
    assert _box(p) == {"x": 12, "y": 34, "w": 56, "h": 78}


def test_no_face_reply():
    raw = '{"emotion": "No face detected", "confidence": 0.0, "x": 0, "y": 0, "w": 0, "h": 0}'
    p = normalize(raw)
    assert p.emotion == "No face detected"
    assert p.confidence == 0.0 and _box(p) == {"x": 0, "y": 0, "w": 0, "h": 0}
    assert not p.has_face


@pytest.mark.parametrize("given,expected", [(1.5, 1.0), (-0.2, 0.0), ("1.5", 1.0), ("-0.2", 0.0)])
def test_confidence_is_clamped(given, expected):
    raw = json.dumps({"emotion": "Sad", "confidence": given, "x": 1, "y": 1, "w": 1, "h": 1})
    assert normalize(raw).confidence == expected


def test_non_numeric_coordinates_become_zero():
    raw = json.dumps({"emotion": "Fear", "confidence": 0.4, "x": "left", "y": None, "w": [1], "h": "n/a"})
    p = normalize(raw)
    assert p.emotion == "Fear"
    assert _box(p) == {"x": 0, "y": 0, "w": 0, "h": 0}


def test_coordinate_coercion_variants():
    raw = json.dumps({"emotion": "Happy", "confidence": 0.5, "x": 50.9, "y": "12px", "w": -20, "h": True})
    p = normalize(raw)
    assert _box(p) == {"x": 50, "y": 12, "w": 0, "h": 0}


def test_huge_coordinates_are_capped():
    raw = json.dumps({"emotion": "Happy", "confidence": 0.5, "x": 1e12, "y": 10**15, "w": "99999999", "h": 300})
    p = normalize(raw)
    assert _box(p) == {"x": norm.MAX_COORD, "y": norm.MAX_COORD, "w": norm.MAX_COORD, "h": 300}


def test_null_confidence_falls_through_to_scan():
    p = normalize('{"emotion": "Happy", "confidence": null}')
    assert p.emotion == "Happy"
    assert p.confidence == norm.DEFAULT_CONFIDENCE
    assert _box(p) == PLACEHOLDER_BOX


def test_missing_coordinates_default_to_zero():
    p = normalize('{"emotion": "Neutral", "confidence": 0.6}')
    assert p.emotion == "Neutral" and _box(p) == {"x": 0, "y": 0, "w": 0, "h": 0}


def test_string_typed_fields_end_to_end():
    raw = '{"emotion":"Happy","confidence":"0.92","x":"50","y":"60","w":"100","h":"120"}'
    p = normalize(raw)
    assert p.model_dump() == {"emotion": "Happy", "confidence": 0.92, "x": 50, "y": 60, "w": 100, "h": 120}


def test_json_wrapped_in_prose_and_fences():
    raw = 'Sure! Here you go:\n```json\n{"emotion": "surprise", "confidence": 0.81, "x": 5, "y": 6, "w": 7, "h": 8}\n```'
    p = normalize(raw)
    assert p.emotion == "Surprise" and p.confidence == 0.81 and p.x == 5


def test_plain_text_fallback_end_to_end():
    p = normalize("No clear JSON here, but HAPPY detected with 87 percent confidence")
    assert p.emotion == "Happy"
    assert p.confidence == pytest.approx(0.87)
    assert _box(p) == PLACEHOLDER_BOX


def test_fallback_angry_without_number_uses_default_confidence():
    p = normalize("The person looks ANGRY to me")
    assert p.emotion == "Angry" and p.confidence == 0.5 and _box(p) == PLACEHOLDER_BOX


def test_fallback_angry_with_fraction():
    p = normalize("emotion: angry, confidence 0.66 {broken json")
    assert p.emotion == "Angry" and p.confidence == pytest.approx(0.66)


def test_fallback_picks_first_line_with_keyword():
    p = normalize("Analysis follows\nDominant: fear\nSecondary: happy")
    assert p.emotion == "Fear"


def test_fallback_defaults_to_neutral():
    p = normalize("I cannot tell.")
    assert p.emotion == "Neutral" and p.confidence == 0.5 and _box(p) == PLACEHOLDER_BOX


def test_fallback_large_number_is_clamped():
    assert normalize("happy, 250 percent sure").confidence == 1.0


def test_invalid_structure_falls_through_to_scan():
    # confidence missing -> strict tier rejects, scan finds SAD and no number
    p = normalize('{"emotion": "Sad"}')
    assert p.emotion == "Sad" and p.confidence == 0.5 and _box(p) == PLACEHOLDER_BOX


def test_unknown_label_falls_through_to_scan():
    p = normalize('{"emotion": "very happy", "confidence": 0.9, "x": 1, "y": 2, "w": 3, "h": 4}')
    assert p.emotion == "Happy"
    assert _box(p) == PLACEHOLDER_BOX


@pytest.mark.parametrize("raw", ["", "   \n ", None, 42])
def test_empty_or_non_text_reply_gives_placeholder(raw):
    assert normalize(raw) == placeholder_prediction()


def test_unexpected_error_gives_placeholder(monkeypatch):
    def boom(raw):
        raise RuntimeError("parser exploded")
    monkeypatch.setattr(norm, "PARSERS", (boom,))
    assert normalize('{"emotion": "Happy", "confidence": 1}') == placeholder_prediction()


def test_tiers_in_isolation():
    assert parse_strict_json("nothing structured") is None
    assert parse_strict_json('{"emotion": "Disgust", "confidence": "abc"}') is None
    assert parse_strict_json('["Happy", 0.9]') is None
    assert scan_text("DISGUST 0.3").emotion == "Disgust"


def test_placeholder_prediction():
    p = placeholder_prediction()
    assert p.emotion == "Neutral" and p.confidence == 0.5
    assert _box(p) == {"x": 120, "y": 80, "w": 200, "h": 240}
