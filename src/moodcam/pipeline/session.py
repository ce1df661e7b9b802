"""
Mood Session
============

Owns a MoodPipeline for the lifetime of one capture session and runs
submitted frames concurrently.

Rules:
    - One asyncio task per submitted frame
    - Results are published with their frame id; arrival order may differ
      from submission order
    - After close(), no result or error is published, even if a request
      resolves late
    - Each frame ends in exactly one outcome: a result, an error, or a
      discard after close(); callback exceptions are logged, never raised
    - Every submitted frame is closed, including frames cancelled before
      decoding
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

from moodcam.capture.frame import RawFrame
from moodcam.errors import FrameError
from moodcam.pipeline.graph import MoodPipeline
from moodcam.pipeline.result import MoodResult


logger = logging.getLogger(__name__)


ResultCallback = Callable[[MoodResult], None]
ErrorCallback = Callable[[int, Exception], None]


class MoodSession:
    """
    Capture session that publishes one outcome per submitted frame.

    Example:
        async with MoodSession(pipeline, on_result=show, on_error=warn) as session:
            session.submit(frame)
            await session.drain()
    """

    def __init__(
        self,
        pipeline: MoodPipeline,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self.pipeline = pipeline
        self.on_result = on_result
        self.on_error = on_error
        self._pending: Dict[int, asyncio.Task] = {}
        self._frames: Dict[int, RawFrame] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of frames still in flight."""
        return len(self._pending)

    def submit(self, frame: RawFrame) -> asyncio.Task:
        """
        Schedule a frame for processing.

        Must be called from a running event loop.

        Raises:
            RuntimeError: If the session is closed
            ValueError: If a frame with the same id is still in flight
        """
        if self._closed:
            frame.close()
            raise RuntimeError("MoodSession is closed")
        if frame.frame_id in self._pending:
            frame.close()
            raise ValueError(f"Frame {frame.frame_id} is already in flight")

        task = asyncio.create_task(self._run(frame), name=f"mood_frame_{frame.frame_id}")
        self._pending[frame.frame_id] = task
        self._frames[frame.frame_id] = frame
        task.add_done_callback(lambda _: self._forget(frame.frame_id))
        return task

    async def _run(self, frame: RawFrame) -> None:
        frame_id = frame.frame_id
        try:
            result = await self.pipeline.process(frame)
        except FrameError as e:
            if self._guard(frame_id):
                logger.error(f"Frame {frame_id} rejected: {e.describe()}")
                self._publish_error(frame_id, e)
            return
        except Exception as e:
            if self._guard(frame_id):
                logger.error(f"Frame {frame_id} failed unexpectedly: {type(e).__name__}: {e}")
                self._publish_error(frame_id, e)
            return
        finally:
            frame.close()

        if self._guard(frame_id):
            self.pipeline.metrics.results_published += 1
            try:
                self.on_result(result)
            except Exception as e:
                logger.error(f"Result callback raised for frame {frame_id}: {type(e).__name__}: {e}")

    def _publish_error(self, frame_id: int, error: Exception) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(frame_id, error)
        except Exception as e:
            logger.error(f"Error callback raised for frame {frame_id}: {type(e).__name__}: {e}")

    def _forget(self, frame_id: int) -> None:
        self._pending.pop(frame_id, None)
        self._frames.pop(frame_id, None)

    def _guard(self, frame_id: int) -> bool:
        """True if outcomes may still be published."""
        if self._closed:
            self.pipeline.metrics.results_discarded += 1
            logger.debug(f"Session closed, discarding outcome for frame {frame_id}")
            return False
        return True

    async def drain(self) -> None:
        """Wait until every submitted frame has resolved."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

    async def close(self) -> None:
        """
        End the session.

        Pending frames are cancelled and their outcomes discarded; the
        pipeline (and its detector) is closed.
        """
        if self._closed:
            return
        self._closed = True

        tasks = list(self._pending.values())
        frames = list(self._frames.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"MoodSession closed, cancelled {len(tasks)} pending frame(s)")

        # Tasks cancelled before their first step never reach their finally
        for frame in frames:
            frame.close()

        self.pipeline.close()

    async def __aenter__(self) -> "MoodSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
