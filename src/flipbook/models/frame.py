"""
Frame Data Model
================

Immutable (image, duration) pair consumed by the playback engine.

Design Rules:
    - The image is an opaque handle owned by the caller
    - Does NOT decode, copy or free image data
    - Duration is in seconds and never negative
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """
    A single flipbook frame.
    
    Attributes:
        image: Decoded raster image (e.g. a numpy array from OpenCV).
            Treated as read-only by the engine.
        duration: Seconds the image stays visible at speed 1.0.
            Zero is legal and means "advance on the next tick".
    
    Equality is identity: image handles such as numpy arrays have no
    usable scalar equality.
    """
    
    image: Any
    duration: float
    
    def __post_init__(self) -> None:
        if self.duration < 0:
            raise ValueError(f"Frame duration must be >= 0, got {self.duration}")
    
    def with_duration(self, duration: float) -> "Frame":
        """Return a copy of this frame sharing the same image handle."""
        return Frame(image=self.image, duration=duration)
    
    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        shape = getattr(self.image, "shape", None)
        image_desc = f"shape={shape}" if shape is not None else type(self.image).__name__
        return f"Frame({image_desc}, duration={self.duration:.3f})"
