"""
Pipeline Module
===============

Orchestration of the mood pipeline.

    - graph.py: LangGraph state machine decode → detect → classify → suggest
    - session.py: Concurrent frame submission with a cancellation guard
    - metrics.py: Counters for fallbacks and failures
"""

from moodcam.pipeline.graph import MoodPipeline, PipelineStage
from moodcam.pipeline.metrics import PipelineMetrics
from moodcam.pipeline.result import MoodResult
from moodcam.pipeline.session import MoodSession


__all__ = [
    "MoodPipeline",
    "PipelineStage",
    "PipelineMetrics",
    "MoodResult",
    "MoodSession",
]
