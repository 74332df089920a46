"""
Frame Store Tests
=================

Ordered storage, duration rewrite and lookups.
"""

import pytest

from flipbook.engine.store import FrameStore
from flipbook.models.frame import Frame


class TestFrameStore:
    """FrameStore operations."""
    
    def test_empty_store(self):
        store = FrameStore()
        assert store.count == 0
        assert store.total_duration == 0
        assert list(store.valid_index_range) == []
        assert store.at(0) is None
    
    def test_append_preserves_order(self, abcd_frames):
        store = FrameStore()
        for frame in abcd_frames:
            store.append(frame)
        
        assert store.count == 4
        assert [store.at(i) for i in range(4)] == abcd_frames
        assert store.last_index == 3
    
    def test_total_duration_ignores_speed(self, abcd_frames):
        store = FrameStore(abcd_frames)
        assert store.total_duration == pytest.approx(3.5)
    
    def test_at_rejects_out_of_range(self, abcd_frames):
        store = FrameStore(abcd_frames)
        assert store.at(4) is None
        assert store.at(-1) is None
        assert store.valid_index_range == range(0, 4)
    
    def test_replace_all_returns_count(self, abcd_frames):
        store = FrameStore(abcd_frames)
        assert store.replace_all(abcd_frames[:2]) == 2
        assert store.at(2) is None
    
    def test_clear(self, abcd_frames):
        store = FrameStore(abcd_frames)
        store.clear()
        assert len(store) == 0
    
    def test_rewrite_all_durations_keeps_images(self, abcd_frames):
        """Every duration becomes d; image handles are untouched."""
        store = FrameStore(abcd_frames)
        store.rewrite_all_durations(0.2)
        
        for original, rewritten in zip(abcd_frames, store):
            assert rewritten.duration == 0.2
            assert rewritten.image is original.image
        assert store.total_duration == pytest.approx(0.8)
    
    def test_rewrite_rejects_negative_duration(self, abcd_frames):
        store = FrameStore(abcd_frames)
        with pytest.raises(ValueError):
            store.rewrite_all_durations(-1.0)


class TestFrame:
    """Frame value type."""
    
    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            Frame(image=object(), duration=-0.1)
    
    def test_zero_duration_allowed(self):
        assert Frame(image=object(), duration=0.0).duration == 0.0
    
    def test_frame_is_immutable(self, abcd_frames):
        with pytest.raises(AttributeError):
            abcd_frames[0].duration = 3.0
    
    def test_repr_does_not_dump_image(self, abcd_frames):
        assert repr(abcd_frames[0]) == "Frame(shape=(2, 2, 3), duration=0.500)"
