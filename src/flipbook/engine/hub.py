"""
Notification Hub
================

Delivers emitted frames and stop events to interested parties.

Channels:
    - Subscribers: any number of push callbacks receiving every Frame
    - Frame callback: a single transient slot set per start(), receiving
      (frame, current_index, frame_count)
    - Completion hook: a single slot receiving the StopReason of every
      logical stop

Design Rules:
    - Delivery is synchronous on the control thread
    - Each subscriber sees frames in emission order
    - A failing subscriber is logged and does not affect the others
"""

import logging
import weakref
from typing import Any, Callable, List, Optional

from flipbook.models.frame import Frame
from flipbook.models.playback import StopReason


logger = logging.getLogger(__name__)


FrameSubscriber = Callable[[Frame], Any]
FrameChangedCallback = Callable[[Frame, int, int], Any]
CompletionHook = Callable[[StopReason], Any]


class Subscription:
    """
    Handle returned by NotificationHub.subscribe().

    Holds the subscriber either strongly or through a weak reference.
    Call cancel() (or use as a context manager) to unsubscribe.
    """

    __slots__ = ("_hub", "_strong", "_weak", "_active")

    def __init__(
        self, hub: "NotificationHub", subscriber: FrameSubscriber, weak: bool
    ) -> None:
        self._hub = hub
        self._active = True
        if weak:
            self._strong: Optional[FrameSubscriber] = None
            if hasattr(subscriber, "__self__") and hasattr(subscriber, "__func__"):
                self._weak = weakref.WeakMethod(subscriber)
            else:
                self._weak = weakref.ref(subscriber)
        else:
            self._strong = subscriber
            self._weak = None

    @property
    def active(self) -> bool:
        """True until cancelled or until a weak subscriber is collected."""
        return self._active and self.resolve() is not None

    def resolve(self) -> Optional[FrameSubscriber]:
        if self._strong is not None:
            return self._strong
        return self._weak() if self._weak is not None else None

    def cancel(self) -> None:
        if self._active:
            self._active = False
            self._hub._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cancel()


class NotificationHub:
    """
    Fan-out of frames and stop events.

    Example:
        hub = NotificationHub()
        sub = hub.subscribe(lambda frame: render(frame.image))
        hub.completion_hook = lambda reason: print(reason)
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self.frame_callback: Optional[FrameChangedCallback] = None
        self.completion_hook: Optional[CompletionHook] = None
        self._stop_listeners: List[CompletionHook] = []

    @property
    def subscriber_count(self) -> int:
        return sum(1 for sub in self._subscriptions if sub.active)

    def subscribe(self, subscriber: FrameSubscriber, weak: bool = False) -> Subscription:
        """
        Register a push subscriber for every emitted frame.

        Args:
            subscriber: Callable receiving each Frame
            weak: Hold only a weak reference; the subscription ends
                when the subscriber is garbage collected

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, subscriber, weak)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass

    def add_stop_listener(self, listener: CompletionHook) -> None:
        """Register an internal one-shot listener for the next logical stop."""
        self._stop_listeners.append(listener)

    def remove_stop_listener(self, listener: CompletionHook) -> None:
        try:
            self._stop_listeners.remove(listener)
        except ValueError:
            pass

    def publish(self, frame: Frame) -> None:
        """Push ``frame`` to every live subscriber."""
        for subscription in list(self._subscriptions):
            if not subscription._active:
                continue
            subscriber = subscription.resolve()
            if subscriber is None:
                self._remove(subscription)
                continue
            try:
                subscriber(frame)
            except Exception:
                logger.exception(f"Frame subscriber {subscriber!r} raised")

    def emit_frame(self, frame: Frame, index: int, count: int) -> None:
        """Publish to subscribers, then to the per-start frame callback."""
        self.publish(frame)
        if self.frame_callback is not None:
            try:
                self.frame_callback(frame, index, count)
            except Exception:
                logger.exception("Frame callback raised")

    def emit_stopped(self, reason: StopReason) -> None:
        """Deliver a logical stop to the completion hook and stop listeners."""
        listeners, self._stop_listeners = self._stop_listeners, []
        if self.completion_hook is not None:
            try:
                self.completion_hook(reason)
            except Exception:
                logger.exception("Completion hook raised")
        for listener in listeners:
            listener(reason)
