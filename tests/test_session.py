"""
Mood Session Tests
==================

Tests for concurrent submission, correlation by frame id and
cancellation on session close.
"""

import asyncio

import pytest


class _StubbornPipeline:
    """Resolves even when its task is cancelled, like a late callback."""

    def __init__(self):
        from moodcam.pipeline import PipelineMetrics

        self.metrics = PipelineMetrics()
        self.close_count = 0

    async def process(self, frame):
        try:
            await asyncio.sleep(0.05)
        except asyncio.CancelledError:
            pass
        frame.close()
        return object()

    def close(self):
        self.close_count += 1


def _session(detector, results, errors=None):
    from moodcam.capture.image_decoder import FrameDecoder
    from moodcam.pipeline import MoodPipeline, MoodSession

    pipeline = MoodPipeline(detector=detector, decoder=FrameDecoder(reconstruction="direct"))
    on_error = None
    if errors is not None:
        on_error = lambda frame_id, error: errors.append((frame_id, error))
    return MoodSession(pipeline, on_result=results.append, on_error=on_error)


class TestMoodSession:
    """Tests for MoodSession."""

    def test_results_correlate_by_frame_id_not_arrival(self, smiling_face):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector
        from moodcam.models.mood import MoodBasis

        results = []
        detector = MockFaceDetector(
            faces=[smiling_face],
            per_frame={1: []},
            per_frame_delay={0: 0.05},
        )

        async def scenario():
            async with _session(detector, results) as session:
                session.submit(solid_frame(8, 8, (10, 10, 10), frame_id=0))
                session.submit(solid_frame(8, 8, (10, 10, 10), frame_id=1))
                await session.drain()
                assert session.pending == 0

        asyncio.run(scenario())

        assert [r.frame_id for r in results] == [1, 0]
        by_id = {r.frame_id: r for r in results}
        assert by_id[0].assessment.basis == MoodBasis.SMILE
        assert by_id[1].assessment.basis == MoodBasis.BRIGHTNESS
        assert detector.close_count == 1

    def test_decode_failure_published_as_error(self):
        from moodcam.capture.frame import Plane, RawFrame
        from moodcam.detection import MockFaceDetector
        from moodcam.errors import FormatError

        results, errors = [], []
        frame = RawFrame(6, 4, 4, planes=(Plane(b"\x00" * 16), None, Plane(b"\x80" * 4)))

        async def scenario():
            async with _session(MockFaceDetector(), results, errors) as session:
                session.submit(frame)
                await session.drain()

        asyncio.run(scenario())

        assert results == []
        assert len(errors) == 1
        frame_id, error = errors[0]
        assert frame_id == 6
        assert isinstance(error, FormatError)
        assert "Missing U plane" in error.describe()
        assert frame.closed

    def test_close_cancels_pending_and_publishes_nothing(self):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        results = []
        detector = MockFaceDetector(delay=10.0)
        frames = [solid_frame(8, 8, (0, 0, 0), frame_id=i) for i in range(3)]

        async def scenario():
            session = _session(detector, results)
            for frame in frames:
                session.submit(frame)
            await asyncio.sleep(0.01)
            await session.close()
            return session

        session = asyncio.run(scenario())

        assert results == []
        assert session.closed
        assert all(frame.closed for frame in frames)
        assert detector.close_count == 1

    def test_frames_cancelled_before_decoding_are_released(self):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        results = []
        frame = solid_frame(8, 8, (0, 0, 0))

        async def scenario():
            session = _session(MockFaceDetector(), results)
            session.submit(frame)
            # Close before the task gets its first step
            await session.close()

        asyncio.run(scenario())

        assert frame.closed
        assert results == []

    def test_late_resolution_after_close_is_discarded(self):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.pipeline import MoodSession

        results = []
        pipeline = _StubbornPipeline()

        async def scenario():
            session = MoodSession(pipeline, on_result=results.append)
            session.submit(solid_frame(8, 8, (200, 200, 200)))
            await asyncio.sleep(0.01)
            await session.close()

        asyncio.run(scenario())

        assert results == []
        assert pipeline.metrics.results_discarded == 1
        assert pipeline.metrics.results_published == 0
        assert pipeline.close_count == 1

    def test_duplicate_in_flight_id_rejected(self):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        results = []
        duplicate = solid_frame(8, 8, (0, 0, 0), frame_id=1)

        async def scenario():
            async with _session(MockFaceDetector(delay=0.01), results) as session:
                session.submit(solid_frame(8, 8, (0, 0, 0), frame_id=1))
                with pytest.raises(ValueError, match="already in flight"):
                    session.submit(duplicate)
                await session.drain()

        asyncio.run(scenario())

        assert duplicate.closed
        assert [r.frame_id for r in results] == [1]

    def test_submit_after_close_rejected(self):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        frame = solid_frame(8, 8, (0, 0, 0))

        async def scenario():
            session = _session(MockFaceDetector(), [])
            await session.close()
            with pytest.raises(RuntimeError, match="closed"):
                session.submit(frame)

        asyncio.run(scenario())

        assert frame.closed


class TestSessionOutcomes:
    """Tests that every frame ends in exactly one observable outcome."""

    def test_pipeline_closed_elsewhere_reaches_on_error(self, caplog):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        results, errors = [], []
        frame = solid_frame(8, 8, (0, 0, 0), frame_id=3)

        async def scenario():
            async with _session(MockFaceDetector(), results, errors) as session:
                session.pipeline.close()
                session.submit(frame)
                await session.drain()

        with caplog.at_level("ERROR"):
            asyncio.run(scenario())

        assert results == []
        assert len(errors) == 1
        frame_id, error = errors[0]
        assert frame_id == 3
        assert isinstance(error, RuntimeError)
        assert "Frame 3 failed unexpectedly: RuntimeError" in caplog.text
        assert frame.closed

    def test_raising_result_callback_is_logged(self, caplog):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector
        from moodcam.pipeline import MoodPipeline, MoodSession

        pipeline = MoodPipeline(detector=MockFaceDetector())
        seen = []

        def on_result(result):
            seen.append(result.frame_id)
            raise ValueError("display gone")

        async def scenario():
            async with MoodSession(pipeline, on_result=on_result) as session:
                session.submit(solid_frame(8, 8, (0, 0, 0), frame_id=0))
                session.submit(solid_frame(8, 8, (0, 0, 0), frame_id=1))
                await session.drain()
                assert session.pending == 0

        with caplog.at_level("ERROR"):
            asyncio.run(scenario())

        assert sorted(seen) == [0, 1]
        assert pipeline.metrics.results_published == 2
        assert "Result callback raised for frame 0: ValueError: display gone" in caplog.text
        assert "Result callback raised for frame 1: ValueError: display gone" in caplog.text

    def test_unexpected_failure_without_error_callback_is_logged(self, caplog):
        from moodcam.capture.synthetic import solid_frame
        from moodcam.detection import MockFaceDetector

        results = []

        async def scenario():
            async with _session(MockFaceDetector(), results) as session:
                session.pipeline.close()
                session.submit(solid_frame(8, 8, (0, 0, 0), frame_id=9))
                await session.drain()

        with caplog.at_level("ERROR"):
            asyncio.run(scenario())

        assert results == []
        assert "Frame 9 failed unexpectedly: RuntimeError: MoodPipeline is closed" in caplog.text
