"""
Data Models
===========

Value types shared by the engine and the loaders.

Models:
    Frame:
        - Frame: Immutable (image, duration) pair
    
    Playback:
        - PlaybackState: IDLE / RUNNING
        - StopReason: ANIMATION_COMPLETE / USER_STOPPED
        - PlaybackStatus: Observability snapshot
        - PLAYBACK_SPEED_RANGE, INFINITE: Constants
    
    Loading:
        - LoadStatus: LOADED / ERROR / CANCELLED
        - LoadOutcome: Result passed to load completion handlers
"""

from flipbook.models.frame import Frame
from flipbook.models.playback import (
    DEFAULT_PLAYBACK_SPEED,
    INFINITE,
    MAX_PLAYBACK_SPEED,
    MIN_PLAYBACK_SPEED,
    PLAYBACK_SPEED_RANGE,
    PlaybackState,
    PlaybackStatus,
    StopReason,
    normalize_speed,
)
from flipbook.models.load import LoadOutcome, LoadStatus

__all__ = [
    # Frame
    "Frame",
    # Playback
    "PlaybackState",
    "StopReason",
    "PlaybackStatus",
    "normalize_speed",
    "INFINITE",
    "PLAYBACK_SPEED_RANGE",
    "MIN_PLAYBACK_SPEED",
    "MAX_PLAYBACK_SPEED",
    "DEFAULT_PLAYBACK_SPEED",
    # Loading
    "LoadStatus",
    "LoadOutcome",
]
