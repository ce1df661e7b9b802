#!/usr/bin/env python3
"""
Offline Pipeline Runner
=======================

Standalone script that runs image files through the mood pipeline.

Each image is converted to a YUV_420_888 frame (the layout a camera
delivers), submitted to a MoodSession and reported as it resolves.

Prerequisites:
    - Install the package: pip install -e .
    - For --backend vision: pip install -e ".[vision]"

Usage:
    python scripts/run_pipeline.py face.jpg
    python scripts/run_pipeline.py a.jpg b.jpg --rotation 90 --backend haar
    python scripts/run_pipeline.py dark.png --backend mock --reconstruction direct
"""

import argparse
import asyncio
import logging
import sys

from moodcam.capture import FrameDecoder, load_frame
from moodcam.detection import HaarFaceDetector, MockFaceDetector, VisionFaceDetector
from moodcam.mood import MoodClassifier
from moodcam.pipeline import MoodPipeline, MoodResult, MoodSession


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def build_detector(backend: str):
    if backend == "mock":
        return MockFaceDetector()
    if backend == "vision":
        return VisionFaceDetector()
    return HaarFaceDetector()


async def run(paths, rotation: int, backend: str, reconstruction: str, grid_size: int) -> dict:
    """
    Run every image through one session.

    Returns:
        Summary dict with result and error counts
    """
    pipeline = MoodPipeline(
        detector=build_detector(backend),
        decoder=FrameDecoder(reconstruction=reconstruction),
        classifier=MoodClassifier(grid_size=grid_size),
    )
    summary = {"results": 0, "errors": 0, "unreadable": 0}

    def on_result(result: MoodResult) -> None:
        summary["results"] += 1
        assessment = result.assessment
        reason = f" ({assessment.fallback_reason.value})" if assessment.fallback_reason else ""
        logger.info(
            f"[{result.frame_id}] {paths[result.frame_id]}: {result.mood.value} "
            f"via {assessment.basis.value}{reason} signal={assessment.signal:.2f} "
            f"size={result.image.width}x{result.image.height}"
        )
        logger.info(f"[{result.frame_id}]   suggestions: {', '.join(result.suggestions)}")

    def on_error(frame_id: int, error: Exception) -> None:
        summary["errors"] += 1

    async with MoodSession(pipeline, on_result=on_result, on_error=on_error) as session:
        for frame_id, path in enumerate(paths):
            frame = load_frame(path, frame_id=frame_id, rotation=rotation)
            if frame is None:
                summary["unreadable"] += 1
                logger.error(f"[{frame_id}] Cannot read image: {path}")
                continue
            session.submit(frame)
        await session.drain()

        logger.info("=" * 60)
        for key, value in pipeline.get_metrics().items():
            logger.info(f"  {key}: {value}")
        logger.info("=" * 60)

    return summary


def main():
    parser = argparse.ArgumentParser(description="Run images through the mood pipeline")
    parser.add_argument("images", nargs="+", help="Image files to classify")
    parser.add_argument(
        "--rotation",
        type=int,
        choices=(0, 90, 180, 270),
        default=0,
        help="Clockwise rotation the frames need to become upright (default: 0)",
    )
    parser.add_argument(
        "--backend",
        choices=("mock", "haar", "vision"),
        default="haar",
        help="Face detector backend (default: haar)",
    )
    parser.add_argument(
        "--reconstruction",
        choices=("jpeg", "direct"),
        default="jpeg",
        help="Frame reconstruction mode (default: jpeg)",
    )
    parser.add_argument(
        "--grid-size",
        type=int,
        default=40,
        help="Brightness sample grid side (default: 40)",
    )

    args = parser.parse_args()

    summary = asyncio.run(run(
        paths=args.images,
        rotation=args.rotation,
        backend=args.backend,
        reconstruction=args.reconstruction,
        grid_size=args.grid_size,
    ))

    sys.exit(0 if summary["errors"] == 0 and summary["unreadable"] == 0 else 1)


if __name__ == "__main__":
    main()
