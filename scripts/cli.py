"""
CLI to classify the facial emotion in one image -> JSON.
"""
from __future__ import annotations
import argparse, json, logging, os
from core.config import Settings
from core.frames import image_file_to_data_url
from core.inference import InferenceClient
from core.pipeline import predict_emotion

def main():
    p = argparse.ArgumentParser()
    p.add_argument("--image", required=True, help="Path to input image")
    p.add_argument("--out", default="output/prediction.json", help="Path to output JSON")
    args = p.parse_args()

    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    image = image_file_to_data_url(args.image, settings.JPEG_QUALITY)
    result = predict_emotion(image, InferenceClient(settings)).model_dump(exclude_none=True)
    print(json.dumps(result, indent=2, ensure_ascii=False))

    # Also write to file
    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(result, f, indent=2, ensure_ascii=False)
    print(f"✅ Prediction written to {args.out}")

if __name__ == "__main__":
    main()
