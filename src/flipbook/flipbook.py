"""
Flipbook
========

Public entry point: an ordered set of timed frames plus a player.

The Flipbook composes the FrameStore, PlaybackController and
NotificationHub and pins them to one ControlExecutor. Every public
method must run on that executor's thread.

Example:
    async def main():
        book = Flipbook()
        book.load_frames(Frame(image=img, duration=0.1) for img in images)
        book.subscribe(lambda frame: show(frame.image))
        reason = await book.play(repeat_count=2)
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from flipbook.config import get_settings
from flipbook.engine.controller import AUTO, PlaybackController
from flipbook.engine.executor import AsyncioExecutor, ControlExecutor
from flipbook.engine.hub import (
    CompletionHook,
    FrameChangedCallback,
    FrameSubscriber,
    NotificationHub,
    Subscription,
)
from flipbook.engine.store import FrameStore
from flipbook.loaders.animated import load_animated_image
from flipbook.loaders.video import load_video_frames
from flipbook.models.frame import Frame
from flipbook.models.load import LoadOutcome
from flipbook.models.playback import (
    DEFAULT_PLAYBACK_SPEED,
    PLAYBACK_SPEED_RANGE,
    PlaybackStatus,
    StopReason,
)


logger = logging.getLogger(__name__)


class Flipbook:
    """
    Timed image sequence with play/stop/scrub control.

    Attributes:
        playback_speed_range: Inclusive (min, max) accepted speeds
        executor: Control-thread executor the flipbook is pinned to
    """

    playback_speed_range = PLAYBACK_SPEED_RANGE

    def __init__(self, executor: Optional[ControlExecutor] = None) -> None:
        """
        Create an empty flipbook.

        Args:
            executor: Control executor. Defaults to an AsyncioExecutor on
                the running event loop, so construct inside a coroutine
                when omitting it.
        """
        if executor is None:
            executor = AsyncioExecutor(
                check_affinity=get_settings().engine.check_thread_affinity
            )
        self.executor = executor
        self._store = FrameStore()
        self._hub = NotificationHub()
        self._controller = PlaybackController(self._store, self._hub, executor)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def frame_count(self) -> int:
        self.executor.assert_on_executor("frame_count")
        return self._store.count

    @property
    def duration(self) -> float:
        """Total duration of all frames in seconds, ignoring speed."""
        self.executor.assert_on_executor("duration")
        return self._store.total_duration

    @property
    def frame_range(self) -> range:
        self.executor.assert_on_executor("frame_range")
        return self._store.valid_index_range

    @property
    def current_index(self) -> int:
        return self._controller.current_index

    @property
    def metrics(self) -> dict:
        return self._controller.metrics.to_dict()

    def is_animating(self) -> bool:
        return self._controller.is_animating()

    def peek(self) -> Optional[Frame]:
        return self._controller.peek()

    def frame_at(self, offset: int) -> Optional[Frame]:
        return self._controller.frame_at(offset)

    def status(self) -> PlaybackStatus:
        self.executor.assert_on_executor("status")
        return self._controller.status()

    # -------------------------------------------------------------------------
    # Frame management
    # -------------------------------------------------------------------------

    def add_frame(self, frame: Frame) -> None:
        """Append a frame to the end of the sequence."""
        self.executor.assert_on_executor("add_frame")
        self._store.append(frame)

    def add_frame_image(self, image: Any, duration: float) -> None:
        self.add_frame(Frame(image=image, duration=duration))

    def load_frames(self, frames: Iterable[Frame]) -> int:
        """
        Replace all frames.

        Stops playback (USER_STOPPED) if it is running and rewinds to
        frame 0.

        Returns:
            Number of frames loaded.
        """
        self.executor.assert_on_executor("load_frames")
        self._stop_for_store_change()
        count = self._store.replace_all(frames)
        logger.info(f"Loaded {count} frames")
        return count

    def remove_all(self) -> None:
        """Remove all frames, stopping playback if it is running."""
        self.executor.assert_on_executor("remove_all")
        self._stop_for_store_change()
        self._store.clear()

    def set_all_frame_durations(self, duration: float) -> None:
        """Give every frame the same duration (seconds)."""
        self.executor.assert_on_executor("set_all_frame_durations")
        self._store.rewrite_all_durations(duration)

    def _stop_for_store_change(self) -> None:
        if self._controller.is_animating():
            self._controller.stop(StopReason.USER_STOPPED)
        self._controller.reset()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_video(
        self,
        path: Union[str, Path],
        frame_count: Optional[int] = None,
        frame_duration: Optional[float] = None,
        should_stop: Optional[Callable[[], bool]] = None,
        completion: Optional[Callable[[LoadOutcome], Any]] = None,
    ) -> LoadOutcome:
        """
        Sample frames evenly from a video file.

        Existing frames are removed immediately. Decoding runs on a worker
        thread; the result is installed back on the control loop.

        Args:
            path: Video file readable by OpenCV
            frame_count: Frames to extract (defaults to the loader config)
            frame_duration: Duration per frame; defaults to
                clip duration / frame_count
            should_stop: Predicate polled before each frame; returning
                True cancels the load
            completion: Called with the outcome on the control loop

        Returns:
            The LoadOutcome (also passed to ``completion``).
        """
        self.executor.assert_on_executor("load_video")
        if frame_count is None:
            frame_count = get_settings().loader.default_frame_count

        self.remove_all()

        outcome = await asyncio.to_thread(
            load_video_frames,
            path,
            frame_count,
            frame_duration=frame_duration,
            should_stop=should_stop,
        )

        if outcome.ok:
            self._stop_for_store_change()
            self._store.replace_all(outcome.frames)
            logger.info(f"Loaded {outcome.frame_count} frames from {path}")

        if completion is not None:
            completion(outcome)
        return outcome

    def load_animated_image(self, source: Union[str, Path, bytes]) -> LoadOutcome:
        """
        Replace all frames with those of an animated image (e.g. a GIF).

        Each frame keeps its own delay. On failure the flipbook is left
        empty.

        Returns:
            The LoadOutcome of the decode.
        """
        self.executor.assert_on_executor("load_animated_image")
        self.remove_all()
        outcome = load_animated_image(source)
        if outcome.ok:
            self.load_frames(outcome.frames)
        return outcome

    # -------------------------------------------------------------------------
    # Playback
    # -------------------------------------------------------------------------

    def start(
        self,
        start_at_frame: int = AUTO,
        speed: float = DEFAULT_PLAYBACK_SPEED,
        repeat_count: Optional[int] = None,
        callback: Optional[FrameChangedCallback] = None,
    ) -> None:
        """
        Start playback. See PlaybackController.start for the semantics.

        Args:
            start_at_frame: Starting index, or AUTO to resume
            speed: Playback speed multiplier
            repeat_count: Times to play the sequence (None = forever)
            callback: Receives (frame, index, count) for this run only
        """
        self._controller.start(
            start_at_frame=start_at_frame,
            speed=speed,
            repeat_count=repeat_count,
            on_frame=callback,
        )

    def stop(self, reason: StopReason = StopReason.USER_STOPPED) -> None:
        self._controller.stop(reason)

    def set_current_frame(self, offset: int) -> Optional[int]:
        """Scrub to ``offset``; returns it, or None if out of range."""
        return self._controller.set_current_frame(offset)

    async def play(
        self,
        start_at_frame: int = AUTO,
        speed: float = DEFAULT_PLAYBACK_SPEED,
        repeat_count: Optional[int] = None,
        callback: Optional[FrameChangedCallback] = None,
    ) -> Optional[StopReason]:
        """
        Start playback and wait for it to stop.

        Returns:
            The StopReason, or None if there was nothing to play.
        """
        if not isinstance(self.executor, AsyncioExecutor):
            raise TypeError("play() requires an AsyncioExecutor")

        stopped: asyncio.Future = self.executor.loop.create_future()

        def _resolve(reason: StopReason) -> None:
            if not stopped.done():
                stopped.set_result(reason)

        self._hub.add_stop_listener(_resolve)
        try:
            self.start(start_at_frame, speed, repeat_count, callback)
        except BaseException:
            self._hub.remove_stop_listener(_resolve)
            raise
        if not self.is_animating() and not stopped.done():
            self._hub.remove_stop_listener(_resolve)
            return None

        try:
            return await stopped
        except asyncio.CancelledError:
            if self.is_animating():
                self.stop(StopReason.USER_STOPPED)
            raise

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, subscriber: FrameSubscriber, weak: bool = False) -> Subscription:
        """Receive every emitted frame until the subscription is cancelled."""
        self.executor.assert_on_executor("subscribe")
        return self._hub.subscribe(subscriber, weak=weak)

    @property
    def animation_did_complete(self) -> Optional[CompletionHook]:
        """Hook called with the StopReason of every logical stop."""
        return self._hub.completion_hook

    @animation_did_complete.setter
    def animation_did_complete(self, hook: Optional[CompletionHook]) -> None:
        self._hub.completion_hook = hook

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Cancel any pending tick without notifying the completion hook."""
        self._controller.close()

    def __enter__(self) -> "Flipbook":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
