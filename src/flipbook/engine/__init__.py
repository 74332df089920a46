"""
Engine Module
=============

The playback core:
    - FrameStore: Ordered frame sequence
    - PlaybackController: Play/stop/scrub state machine and timer loop
    - NotificationHub: Subscribers, per-start callback, completion hook
    - ControlExecutor / AsyncioExecutor: Single control thread the engine
      is pinned to
"""

from flipbook.engine.executor import (
    AsyncioExecutor,
    ControlExecutor,
    ExecutorAffinityError,
)
from flipbook.engine.store import FrameStore
from flipbook.engine.hub import NotificationHub, Subscription
from flipbook.engine.controller import AUTO, PlaybackController, PlaybackMetrics

__all__ = [
    "AUTO",
    "AsyncioExecutor",
    "ControlExecutor",
    "ExecutorAffinityError",
    "FrameStore",
    "NotificationHub",
    "PlaybackController",
    "PlaybackMetrics",
    "Subscription",
]
