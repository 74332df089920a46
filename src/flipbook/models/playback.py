"""
Playback State Models
=====================

Enums, constants and snapshot models describing the playback engine.

Core Concepts:
    - PlaybackState: Idle or Running
    - StopReason: Why a logical stop happened
    - INFINITE: Repeat sentinel meaning "loop forever"
    - PlaybackStatus: Read-only snapshot for observability
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# Inclusive bounds for the playback speed multiplier
MIN_PLAYBACK_SPEED = 1.0 / 16.0
MAX_PLAYBACK_SPEED = 16.0
PLAYBACK_SPEED_RANGE = (MIN_PLAYBACK_SPEED, MAX_PLAYBACK_SPEED)

DEFAULT_PLAYBACK_SPEED = 1.0

# Repeat-count sentinel: never exhaust
INFINITE = None


class PlaybackState(str, Enum):
    """
    Lifecycle of the playback controller.
    
    Attributes:
        IDLE: No tick is scheduled
        RUNNING: A tick is scheduled and frames are being emitted
    """
    
    IDLE = "IDLE"
    RUNNING = "RUNNING"


class StopReason(str, Enum):
    """
    Reason attached to the terminal "stopped" notification.
    
    Attributes:
        ANIMATION_COMPLETE: All requested repeats have been played
        USER_STOPPED: The owner stopped playback (explicitly or by scrubbing)
    """
    
    ANIMATION_COMPLETE = "ANIMATION_COMPLETE"
    USER_STOPPED = "USER_STOPPED"


def normalize_speed(speed: float) -> float:
    """Return ``speed`` if inside PLAYBACK_SPEED_RANGE, else the default."""
    if MIN_PLAYBACK_SPEED <= speed <= MAX_PLAYBACK_SPEED:
        return float(speed)
    return DEFAULT_PLAYBACK_SPEED


class PlaybackStatus(BaseModel):
    """
    Point-in-time snapshot of a flipbook.
    
    Attributes:
        state: IDLE or RUNNING
        current_index: Index of the frame currently presented
        frame_count: Number of frames in the store
        speed: Active playback speed multiplier
        remaining_repeats: Repeats left, None when looping forever
        total_duration: Sum of frame durations at speed 1.0 (seconds)
    """
    
    state: PlaybackState = Field(default=PlaybackState.IDLE)
    current_index: int = Field(default=0, ge=0)
    frame_count: int = Field(default=0, ge=0)
    speed: float = Field(default=DEFAULT_PLAYBACK_SPEED, gt=0)
    remaining_repeats: Optional[int] = Field(
        default=None,
        ge=0,
        description="Repeats left (None = infinite)",
    )
    total_duration: float = Field(default=0.0, ge=0)
