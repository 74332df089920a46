"""
Flipbook
========

Frame-sequencing engine: presents an ordered collection of timed images
one at a time, at variable speed, looping or for a fixed number of
repeats, with scrubbing and cancellation.

Components:
    - models: Frame, StopReason, PlaybackStatus, LoadOutcome
    - engine: FrameStore, PlaybackController, NotificationHub, executors
    - loaders: OpenCV-based video and image-sequence loaders
    - config: Settings and logging setup

Example:
    import asyncio
    from flipbook import Flipbook, Frame
    
    async def main(images):
        book = Flipbook()
        book.load_frames(Frame(image=img, duration=0.1) for img in images)
        book.subscribe(lambda frame: print(frame))
        await book.play(repeat_count=1)
    
    asyncio.run(main(images))
"""

__version__ = "0.1.0"

from flipbook.models import Frame, LoadOutcome, LoadStatus, PlaybackStatus, StopReason
from flipbook.engine import AUTO, AsyncioExecutor, ControlExecutor, ExecutorAffinityError
from flipbook.flipbook import Flipbook

__all__ = [
    "__version__",
    "AUTO",
    "AsyncioExecutor",
    "ControlExecutor",
    "ExecutorAffinityError",
    "Flipbook",
    "Frame",
    "LoadOutcome",
    "LoadStatus",
    "PlaybackStatus",
    "StopReason",
]
