"""
Mood Pipeline Graph
===================

LangGraph state machine that turns one RawFrame into a MoodResult.
LangGraph is used for CONTROL FLOW only.

Graph Structure:
    START → decode ─┬─ (ok) → detect → classify → suggest → END
                    └─ (error) → END

Stages:
    AWAITING_FRAME → DECODING → AWAITING_DETECTION → CLASSIFIED → DONE
                        └──────→ FAILED

Only decoding can fail. Detection failures are absorbed by the brightness
fallback, so there is no FAILED edge after AWAITING_DETECTION. A failed
frame is not retried.

Design Rules:
    - One frame per invocation, no state shared between frames
    - The RawFrame is dropped from the graph state right after decoding
    - The pipeline owns its detector and closes it exactly once
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypedDict

from langgraph.graph import END, StateGraph

from moodcam.capture.frame import RawFrame
from moodcam.capture.image import DecodedImage
from moodcam.capture.image_decoder import FrameDecoder
from moodcam.detection.detector import DetectionOutcome, FaceDetector, request_detection
from moodcam.errors import FrameError
from moodcam.mood.classifier import MoodAssessment, MoodClassifier
from moodcam.mood.suggestions import suggestions_for
from moodcam.pipeline.metrics import PipelineMetrics
from moodcam.pipeline.result import MoodResult


logger = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    """Stages a frame moves through."""

    AWAITING_FRAME = "AWAITING_FRAME"
    DECODING = "DECODING"
    AWAITING_DETECTION = "AWAITING_DETECTION"
    CLASSIFIED = "CLASSIFIED"
    DONE = "DONE"
    FAILED = "FAILED"


class MoodGraphState(TypedDict):
    """
    State passed through the pipeline graph.

    Attributes:
        frame: Frame to decode (cleared once decoded)
        frame_id: Identity of the frame
        stage: Current stage
        image: Decoded image
        outcome: Detection outcome
        assessment: Classified mood
        suggestions: Suggestions for the mood
        error: Frame error if decoding failed
    """
    frame: Optional[RawFrame]
    frame_id: int
    stage: PipelineStage
    image: Optional[DecodedImage]
    outcome: Optional[DetectionOutcome]
    assessment: Optional[MoodAssessment]
    suggestions: Optional[List[str]]
    error: Optional[FrameError]


def create_initial_state(frame: RawFrame) -> MoodGraphState:
    """Create graph state for a new frame."""
    return {
        "frame": frame,
        "frame_id": frame.frame_id,
        "stage": PipelineStage.AWAITING_FRAME,
        "image": None,
        "outcome": None,
        "assessment": None,
        "suggestions": None,
        "error": None,
    }


StageListener = Callable[[int, PipelineStage], None]


class MoodPipeline:
    """
    Frame → mood → suggestions pipeline.

    Example:
        pipeline = MoodPipeline(detector=HaarFaceDetector())
        try:
            result = await pipeline.process(frame)
            print(result.mood, result.suggestions)
        except FrameError as e:
            print(e.describe())
        finally:
            pipeline.close()
    """

    def __init__(
        self,
        detector: FaceDetector,
        decoder: Optional[FrameDecoder] = None,
        classifier: Optional[MoodClassifier] = None,
        stage_listener: Optional[StageListener] = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            detector: Face detector; the pipeline takes ownership
            decoder: Frame decoder (default: JPEG round trip at quality 100)
            classifier: Mood classifier (default: 40x40 brightness grid)
            stage_listener: Called with (frame_id, stage) on every stage entry
        """
        self.detector = detector
        self.decoder = decoder or FrameDecoder()
        self.classifier = classifier or MoodClassifier()
        self.stage_listener = stage_listener
        self.metrics = PipelineMetrics()
        self._closed = False

        self._graph = self._build_graph()

        logger.info(f"MoodPipeline initialized: detector={type(detector).__name__}")

    @property
    def closed(self) -> bool:
        return self._closed

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(MoodGraphState)

        workflow.add_node("decode", self._decode_node)
        workflow.add_node("detect", self._detect_node)
        workflow.add_node("classify", self._classify_node)
        workflow.add_node("suggest", self._suggest_node)

        workflow.set_entry_point("decode")
        workflow.add_conditional_edges(
            "decode",
            self._route_after_decode,
            {"detect": "detect", "failed": END},
        )
        workflow.add_edge("detect", "classify")
        workflow.add_edge("classify", "suggest")
        workflow.add_edge("suggest", END)

        return workflow.compile()

    def _enter(self, frame_id: int, stage: PipelineStage) -> None:
        logger.debug(f"Frame {frame_id}: stage={stage.value}")
        if self.stage_listener is not None:
            self.stage_listener(frame_id, stage)

    async def _decode_node(self, state: MoodGraphState) -> Dict[str, Any]:
        frame_id = state["frame_id"]
        self._enter(frame_id, PipelineStage.DECODING)

        try:
            image = self.decoder.decode(state["frame"])
        except FrameError as e:
            self.metrics.decode_failures += 1
            logger.warning(f"Frame {frame_id} failed: {e.describe()}")
            self._enter(frame_id, PipelineStage.FAILED)
            return {"frame": None, "stage": PipelineStage.FAILED, "error": e}

        self.metrics.frames_decoded += 1
        self._enter(frame_id, PipelineStage.AWAITING_DETECTION)
        return {"frame": None, "stage": PipelineStage.AWAITING_DETECTION, "image": image}

    def _route_after_decode(self, state: MoodGraphState) -> str:
        return "failed" if state["stage"] == PipelineStage.FAILED else "detect"

    async def _detect_node(self, state: MoodGraphState) -> Dict[str, Any]:
        outcome = await request_detection(self.detector, state["image"])
        return {"outcome": outcome}

    async def _classify_node(self, state: MoodGraphState) -> Dict[str, Any]:
        assessment = self.classifier.classify(state["outcome"], state["image"])
        self.metrics.record_assessment(assessment)
        self._enter(state["frame_id"], PipelineStage.CLASSIFIED)
        return {"assessment": assessment, "stage": PipelineStage.CLASSIFIED}

    async def _suggest_node(self, state: MoodGraphState) -> Dict[str, Any]:
        suggestions = suggestions_for(state["assessment"].mood)
        self._enter(state["frame_id"], PipelineStage.DONE)
        return {"suggestions": suggestions, "stage": PipelineStage.DONE}

    async def process(self, frame: RawFrame) -> MoodResult:
        """
        Run one frame through the pipeline.

        The frame is closed on every exit path.

        Args:
            frame: Frame to process

        Returns:
            MoodResult for the frame

        Raises:
            FrameError: If the frame could not be decoded
            RuntimeError: If the pipeline is closed
        """
        if self._closed:
            frame.close()
            raise RuntimeError("MoodPipeline is closed")

        self.metrics.frames_received += 1
        self._enter(frame.frame_id, PipelineStage.AWAITING_FRAME)

        try:
            state = await self._graph.ainvoke(create_initial_state(frame))
        finally:
            frame.close()

        if state["stage"] == PipelineStage.FAILED:
            raise state["error"]

        result = MoodResult(
            frame_id=state["frame_id"],
            image=state["image"],
            assessment=state["assessment"],
            suggestions=tuple(state["suggestions"]),
        )
        logger.info(
            f"Frame {result.frame_id}: mood={result.mood.value} "
            f"basis={result.assessment.basis.value} signal={result.assessment.signal:.2f}"
        )
        return result

    def close(self) -> None:
        """Close the detector once. Teardown errors are logged, never raised."""
        if self._closed:
            return
        self._closed = True
        try:
            self.detector.close()
        except Exception as e:
            logger.warning(f"Face detector close failed: {e}")
        logger.info("MoodPipeline closed")

    def get_metrics(self) -> Dict[str, Any]:
        """Get pipeline metrics for observability."""
        return {"closed": self._closed, **self.metrics.to_dict()}
