"""
Load Outcome Models
===================

Result types surfaced by frame loaders.

A load is a single attempt: it either yields frames, fails, or is
cancelled cooperatively by the caller. None of these are retried.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoadStatus(str, Enum):
    """
    Terminal status of a frame load.
    
    Attributes:
        LOADED: Frames were decoded successfully
        ERROR: The source could not be decoded
        CANCELLED: The caller's should_stop predicate requested a stop
    """
    
    LOADED = "LOADED"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


class LoadOutcome(BaseModel):
    """
    Outcome handed to a load completion handler.
    
    Attributes:
        status: Terminal status
        frames: Decoded frames (empty unless LOADED)
        error: Human readable error message for ERROR outcomes
        dropped_frames: Samples that could not be read and were skipped
    """
    
    model_config = ConfigDict(arbitrary_types_allowed=True)
    
    status: LoadStatus
    frames: List[Any] = Field(default_factory=list)
    error: Optional[str] = None
    dropped_frames: int = Field(default=0, ge=0)
    
    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.LOADED
    
    @property
    def frame_count(self) -> int:
        return len(self.frames)
