"""
Frame Store
===========

Ordered, mutable sequence of frames owned by a single flipbook.

Design Rules:
    - Runs on the control thread only, no internal locking
    - Frames are immutable values, the store never touches image data
    - Does NOT track playback position (see PlaybackController)
"""

import logging
from typing import Iterable, Iterator, List, Optional

from flipbook.models.frame import Frame


logger = logging.getLogger(__name__)


class FrameStore:
    """
    Ordered frame sequence.
    
    Example:
        store = FrameStore()
        store.append(Frame(image=img, duration=0.1))
        store.total_duration  # 0.1
    """
    
    def __init__(self, frames: Optional[Iterable[Frame]] = None) -> None:
        self._frames: List[Frame] = list(frames) if frames is not None else []
    
    def __len__(self) -> int:
        return len(self._frames)
    
    def __iter__(self) -> Iterator[Frame]:
        return iter(self._frames)
    
    @property
    def count(self) -> int:
        """Number of frames."""
        return len(self._frames)
    
    @property
    def total_duration(self) -> float:
        """Sum of all frame durations in seconds, ignoring speed."""
        return sum(frame.duration for frame in self._frames)
    
    @property
    def valid_index_range(self) -> range:
        """Range of valid frame indices (empty when the store is empty)."""
        return range(len(self._frames))
    
    @property
    def last_index(self) -> int:
        """Index of the last frame, -1 when empty."""
        return len(self._frames) - 1
    
    def append(self, frame: Frame) -> None:
        """Add a frame to the end of the sequence."""
        self._frames.append(frame)
    
    def replace_all(self, frames: Iterable[Frame]) -> int:
        """
        Replace the whole sequence.
        
        Returns:
            Number of frames now stored.
        """
        self._frames = list(frames)
        logger.debug(f"Frame store replaced, {len(self._frames)} frames")
        return len(self._frames)
    
    def clear(self) -> None:
        self._frames = []
    
    def rewrite_all_durations(self, duration: float) -> None:
        """
        Set every frame's duration, keeping images and order.
        
        Raises:
            ValueError: If duration is negative
        """
        if duration < 0:
            raise ValueError(f"Frame duration must be >= 0, got {duration}")
        self._frames = [frame.with_duration(duration) for frame in self._frames]
    
    def at(self, index: int) -> Optional[Frame]:
        """
        Frame at ``index``, or None if outside the valid range.
        
        Negative indices are out of range (no wrap-around lookup).
        """
        if 0 <= index < len(self._frames):
            return self._frames[index]
        return None
