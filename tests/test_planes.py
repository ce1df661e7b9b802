"""
Plane Reassembly Tests
======================

Tests for RawFrame lifetime and the Y + V + U buffer layout.
"""

import pytest


class TestReassemblePlanes:
    """Tests for reassemble_planes()."""

    def test_length_is_sum_of_plane_sizes(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes

        planes = (Plane(b"\x01" * 16), Plane(b"\x02" * 7), Plane(b"\x03" * 7))
        out = reassemble_planes(planes)

        assert len(out) == 16 + 7 + 7

    def test_order_is_luma_then_plane_two_then_plane_one(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes

        y, u, v = b"YYYY", b"UU", b"VV"
        out = reassemble_planes((Plane(y), Plane(u), Plane(v)))

        assert bytes(out) == b"YYYYVVUU"

    def test_declared_size_limits_copy(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes

        planes = (Plane(b"YYYYyy", size=4), Plane(b"UU"), Plane(b"VVvv", size=2))
        out = reassemble_planes(planes)

        assert bytes(out) == b"YYYYVVUU"

    def test_accepts_memoryview_buffers(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes

        planes = (
            Plane(memoryview(b"YYYY")),
            Plane(memoryview(bytearray(b"UU"))),
            Plane(memoryview(b"VV")),
        )

        assert bytes(reassemble_planes(planes)) == b"YYYYVVUU"

    def test_one_empty_chroma_plane_is_accepted(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes

        out = reassemble_planes((Plane(b"YY"), Plane(b""), Plane(b"VV")))

        assert bytes(out) == b"YYVV"

    def test_missing_plane_raises_format_error(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes
        from moodcam.errors import FormatError

        with pytest.raises(FormatError, match="Missing U plane"):
            reassemble_planes((Plane(b"YY"), None, Plane(b"VV")))

    def test_fewer_than_three_planes_raises_format_error(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes
        from moodcam.errors import FormatError

        with pytest.raises(FormatError, match="Expected 3 planes"):
            reassemble_planes((Plane(b"YY"), Plane(b"UU")))

    def test_empty_luma_raises_format_error(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes
        from moodcam.errors import FormatError

        with pytest.raises(FormatError, match="Unexpected plane sizes: y=0 u=2 v=2"):
            reassemble_planes((Plane(b""), Plane(b"UU"), Plane(b"VV")))

    def test_both_chroma_empty_raises_format_error(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes
        from moodcam.errors import FormatError

        with pytest.raises(FormatError, match="Unexpected plane sizes"):
            reassemble_planes((Plane(b"YYYY"), Plane(b""), Plane(b"")))

    def test_oversized_declaration_raises_format_error(self):
        from moodcam.capture.frame import Plane
        from moodcam.capture.planes import reassemble_planes
        from moodcam.errors import FormatError

        planes = (Plane(b"YYYY"), Plane(b"UU"), Plane(b"VV", size=10))

        with pytest.raises(FormatError, match="V plane declares 10 bytes but holds 2") as info:
            reassemble_planes(planes)

        assert info.value.stage == "plane_reassembly"


class TestRawFrame:
    """Tests for the RawFrame scoped resource."""

    def _frame(self, **kwargs):
        from moodcam.capture.frame import Plane, RawFrame

        planes = (Plane(b"\x00" * 4), Plane(b"\x80"), Plane(b"\x80"))
        return RawFrame(frame_id=3, width=2, height=2, planes=planes, **kwargs)

    def test_close_is_idempotent(self):
        frame = self._frame()

        frame.close()
        frame.close()

        assert frame.closed

    def test_planes_after_close_raise_format_error(self):
        from moodcam.errors import FormatError

        frame = self._frame()
        frame.close()

        with pytest.raises(FormatError, match="already released"):
            frame.planes

    def test_context_manager_closes(self):
        with self._frame() as frame:
            assert not frame.closed
        assert frame.closed

    def test_close_releases_memoryview_buffers(self):
        from moodcam.capture.frame import Plane, RawFrame

        view = memoryview(bytearray(4))
        frame = RawFrame(0, 2, 2, planes=(Plane(view), Plane(b"\x80"), Plane(b"\x80")))
        frame.close()

        with pytest.raises(ValueError):
            view.tobytes()

    def test_invalid_rotation_rejected(self):
        with pytest.raises(ValueError, match="rotation"):
            self._frame(rotation=45)

    def test_repr_does_not_dump_planes(self):
        text = repr(self._frame(rotation=90))

        assert "frame_id=3" in text
        assert "rotation=90" in text
        assert "\\x00" not in text
