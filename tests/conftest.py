"""
Test Configuration
==================

Pytest fixtures and test configuration for the flipbook engine.
"""

import heapq
import itertools

import numpy as np
import pytest

from flipbook.engine.executor import ControlExecutor


class _ManualHandle:
    """Timer handle for ManualExecutor."""
    
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
    
    def cancel(self):
        self.cancelled = True


class ManualExecutor(ControlExecutor):
    """
    Deterministic executor with a virtual clock.
    
    Nothing runs until advance() moves the clock forward; callbacks then
    fire in time order, exactly like an event loop would.
    """
    
    def __init__(self, check_affinity=True):
        super().__init__(check_affinity=check_affinity)
        self.now = 0.0
        self._queue = []
        self._seq = itertools.count()
        self.on_thread = True
    
    def time(self):
        return self.now
    
    def call_later(self, delay, callback, *args):
        handle = _ManualHandle(self.now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle
    
    def is_on_executor(self):
        return self.on_thread
    
    @property
    def pending(self):
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)
    
    def advance(self, seconds):
        """Move the clock forward, firing every callback that falls due."""
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target
    
    def fire_cancelled(self):
        """Run cancelled callbacks anyway, simulating ticks already in flight."""
        for _, _, handle in sorted(self._queue, key=lambda item: item[:2]):
            if handle.cancelled:
                handle.callback(*handle.args)


@pytest.fixture
def executor():
    """Virtual-clock control executor."""
    return ManualExecutor()


@pytest.fixture
def images():
    """Four distinct 2x2 images, A..D."""
    return {
        name: np.full((2, 2, 3), value, dtype=np.uint8)
        for name, value in zip("ABCD", (10, 20, 30, 40))
    }


@pytest.fixture
def abcd_frames(images):
    """Frames [(A, 0.5), (B, 0.5), (C, 0.5), (D, 2.0)]."""
    from flipbook.models.frame import Frame
    
    return [
        Frame(image=images["A"], duration=0.5),
        Frame(image=images["B"], duration=0.5),
        Frame(image=images["C"], duration=0.5),
        Frame(image=images["D"], duration=2.0),
    ]


@pytest.fixture
def flipbook(executor):
    """Empty flipbook pinned to the virtual-clock executor."""
    from flipbook.flipbook import Flipbook
    
    return Flipbook(executor=executor)


@pytest.fixture
def recorder(executor):
    """Collects (time, event) pairs from subscribers and hooks."""
    
    class Recorder:
        def __init__(self):
            self.events = []
        
        def frame(self, frame):
            self.events.append((executor.now, frame))
        
        def stopped(self, reason):
            self.events.append((executor.now, reason))
    
    return Recorder()
