"""
Playback Controller
===================

Timed emission of frames from a FrameStore.

State Machine:
    IDLE --start()--> RUNNING --stop() / repeats exhausted--> IDLE

Timing:
    Each presented frame stays up for ``frame.duration / speed`` seconds.
    When the timer fires the index advances modulo the frame count, so
    looping is implicit. A finite repeat count is decremented on the tick
    that would wrap past the last frame; at zero the controller stops with
    ANIMATION_COMPLETE and stays parked on the last frame.

Cancellation:
    Every start/stop bumps a generation counter. A tick carries the
    generation it was scheduled under and is dropped on arrival if the
    counter has moved on, so a cancelled animation never ghost-ticks.
"""

import logging
import weakref
from typing import Optional

from flipbook.engine.executor import ControlExecutor, TimerHandle
from flipbook.engine.hub import FrameChangedCallback, NotificationHub
from flipbook.engine.store import FrameStore
from flipbook.models.frame import Frame
from flipbook.models.playback import (
    DEFAULT_PLAYBACK_SPEED,
    PlaybackState,
    PlaybackStatus,
    StopReason,
    normalize_speed,
)


logger = logging.getLogger(__name__)


# Sentinel for start(start_at_frame=AUTO)
AUTO = -1


class PlaybackMetrics:
    """Counters for PlaybackController observability."""

    __slots__ = (
        "frames_emitted",
        "ticks",
        "stale_ticks_dropped",
        "completions",
        "user_stops",
    )

    def __init__(self) -> None:
        self.frames_emitted: int = 0
        self.ticks: int = 0
        self.stale_ticks_dropped: int = 0
        self.completions: int = 0
        self.user_stops: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "frames_emitted": self.frames_emitted,
            "ticks": self.ticks,
            "stale_ticks_dropped": self.stale_ticks_dropped,
            "completions": self.completions,
            "user_stops": self.user_stops,
        }


def _fire_tick(controller_ref: "weakref.ReferenceType[PlaybackController]", generation: int) -> None:
    """Timer continuation: re-resolve the controller and forward the tick."""
    controller = controller_ref()
    if controller is None:
        return
    controller._on_tick(generation)


class PlaybackController:
    """
    Drives timed emission of frames.

    All public methods must run on the executor's control thread.

    Attributes:
        store: Frames being played
        hub: Where emitted frames and stop events go
        executor: Control-thread executor providing the timer
        metrics: Operational counters
    """

    def __init__(
        self,
        store: FrameStore,
        hub: NotificationHub,
        executor: ControlExecutor,
    ) -> None:
        self.store = store
        self.hub = hub
        self.executor = executor

        # State
        self._current_index: int = 0
        self._speed: float = DEFAULT_PLAYBACK_SPEED
        self._remaining_repeats: Optional[int] = None
        self._timer: Optional[TimerHandle] = None
        self._generation: int = 0

        self.metrics = PlaybackMetrics()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return PlaybackState.RUNNING if self._timer is not None else PlaybackState.IDLE

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def remaining_repeats(self) -> Optional[int]:
        """Repeats left in the current run (None = infinite)."""
        return self._remaining_repeats

    @property
    def generation(self) -> int:
        return self._generation

    def is_animating(self) -> bool:
        """True while a tick is scheduled."""
        return self._timer is not None

    def peek(self) -> Optional[Frame]:
        """Frame at the current index, or None if the store is empty."""
        self.executor.assert_on_executor("peek")
        return self.store.at(self._current_index)

    def frame_at(self, offset: int) -> Optional[Frame]:
        """Frame at ``offset``, or None if outside the valid range."""
        self.executor.assert_on_executor("frame_at")
        return self.store.at(offset)

    def status(self) -> PlaybackStatus:
        return PlaybackStatus(
            state=self.state,
            current_index=self._current_index,
            frame_count=self.store.count,
            speed=self._speed,
            remaining_repeats=self._remaining_repeats,
            total_duration=self.store.total_duration,
        )

    # -------------------------------------------------------------------------
    # Control
    # -------------------------------------------------------------------------

    def start(
        self,
        start_at_frame: int = AUTO,
        speed: float = DEFAULT_PLAYBACK_SPEED,
        repeat_count: Optional[int] = None,
        on_frame: Optional[FrameChangedCallback] = None,
    ) -> None:
        """
        Start (or restart) playback.

        The resolved starting frame is emitted immediately, then the next
        tick is scheduled after its duration divided by the speed.

        Args:
            start_at_frame: Index to start at. AUTO (any negative value)
                resumes at the current index, or restarts at 0 when parked
                on the last frame. Indices past the end fall back to 0.
            speed: Speed multiplier; values outside PLAYBACK_SPEED_RANGE
                are silently replaced with 1.0
            repeat_count: Times to play the sequence. None loops forever.
            on_frame: Callback receiving (frame, index, count) for this run

        Raises:
            ValueError: If repeat_count is not None and < 1
        """
        self.executor.assert_on_executor("start")

        if repeat_count is not None and repeat_count < 1:
            raise ValueError(f"repeat_count must be >= 1 or None, got {repeat_count}")

        # Restarting supersedes any tick from the previous run
        self._cancel_timer()
        self.hub.frame_callback = on_frame

        if self.store.count == 0:
            logger.debug("start() on an empty flipbook, nothing to play")
            return

        if start_at_frame >= 0:
            offset = start_at_frame
        elif self._is_at_last_frame():
            offset = 0
        else:
            offset = self._current_index
        self._current_index = offset if offset < self.store.count else 0

        self._remaining_repeats = repeat_count
        self._speed = normalize_speed(speed)
        if self._speed != speed:
            logger.debug(f"Speed {speed} outside allowed range, using {self._speed}")

        logger.info(
            f"Playback started at frame {self._current_index}/{self.store.count} "
            f"(speed={self._speed}, repeats={repeat_count or 'infinite'})"
        )
        self._present_current_frame()

    def stop(self, reason: StopReason = StopReason.USER_STOPPED) -> None:
        """
        Stop playback and notify the completion hook.

        Safe to call while idle; the hook is still invoked.
        """
        self.executor.assert_on_executor("stop")
        was_animating = self.is_animating()
        self._cancel_timer()
        self.hub.frame_callback = None

        if reason == StopReason.ANIMATION_COMPLETE:
            self.metrics.completions += 1
        else:
            self.metrics.user_stops += 1
        if was_animating or reason == StopReason.ANIMATION_COMPLETE:
            logger.info(f"Playback stopped at frame {self._current_index}: {reason.value}")

        self.hub.emit_stopped(reason)

    def set_current_frame(self, offset: int) -> Optional[int]:
        """
        Scrub to ``offset``.

        Always stops playback first. Out-of-range offsets leave the
        position unchanged.

        Returns:
            The accepted offset, or None if it was out of range.
        """
        self.executor.assert_on_executor("set_current_frame")
        self.stop(StopReason.USER_STOPPED)

        frame = self.store.at(offset)
        if frame is None:
            logger.debug(f"Ignoring scrub to invalid offset {offset}")
            return None

        self._current_index = offset
        # Only subscribers: the frame callback was cleared by stop()
        self.metrics.frames_emitted += 1
        self.hub.publish(frame)
        return offset

    def reset(self) -> None:
        """Cancel any tick silently and rewind to frame 0 (store changed)."""
        self.executor.assert_on_executor("reset")
        self._cancel_timer()
        self._current_index = 0

    def close(self) -> None:
        """Teardown: cancel any pending tick without a stop notification."""
        self._cancel_timer()
        self.hub.frame_callback = None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _is_at_last_frame(self) -> bool:
        return self._current_index >= self.store.last_index

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _present_current_frame(self) -> None:
        """Emit the current frame and schedule the next tick."""
        frame = self.store.at(self._current_index)
        if frame is None:
            self._timer = None
            return

        self.metrics.frames_emitted += 1
        generation = self._generation
        self.hub.emit_frame(frame, self._current_index, self.store.count)

        # A subscriber may have stopped or restarted playback
        if generation != self._generation:
            return

        delay = frame.duration / self._speed
        self._timer = self.executor.call_later(
            delay, _fire_tick, weakref.ref(self), generation
        )

    def _on_tick(self, generation: int) -> None:
        """Timer continuation, running on the control thread."""
        if generation != self._generation or self._timer is None:
            self.metrics.stale_ticks_dropped += 1
            logger.debug(f"Dropping stale tick (generation {generation} != {self._generation})")
            return

        self._timer = None
        self.metrics.ticks += 1

        count = self.store.count
        if count == 0:
            return

        if self._is_at_last_frame() and self._remaining_repeats is not None:
            self._remaining_repeats -= 1
            if self._remaining_repeats <= 0:
                self.stop(StopReason.ANIMATION_COMPLETE)
                return

        self._current_index = (self._current_index + 1) % count
        logger.debug(f"Tick -> frame {self._current_index}/{count}")
        self._present_current_frame()
