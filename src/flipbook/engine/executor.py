"""
Control Executor
================

Single-threaded executor the playback engine is pinned to.

All engine state (frames, playback position, subscriber lists) is owned
by one control thread. Public engine methods must run on it. Timers are
owned by the executor and fire on the control thread itself, so a tick
never touches state from a foreign thread.

Design Rules:
    - No locks: mutation is confined to the control thread
    - Wrong-thread access is a programmer error (ExecutorAffinityError)
    - Timers are cancellable handles, never per-tick threads
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol


logger = logging.getLogger(__name__)


class ExecutorAffinityError(RuntimeError):
    """Raised when engine state is touched from outside its control thread."""
    pass


class TimerHandle(Protocol):
    """Cancellable handle for a scheduled callback."""
    
    def cancel(self) -> None:
        ...


class ControlExecutor(ABC):
    """
    Abstract single-thread executor.
    
    Implementations provide a clock, delayed scheduling on the control
    thread and a thread-identity check.
    """
    
    def __init__(self, check_affinity: bool = True) -> None:
        self.check_affinity = check_affinity
    
    @abstractmethod
    def time(self) -> float:
        """Current executor time in seconds (monotonic)."""
    
    @abstractmethod
    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle:
        """Run ``callback(*args)`` on the control thread after ``delay`` seconds."""
    
    @abstractmethod
    def is_on_executor(self) -> bool:
        """True when the calling thread is the control thread."""
    
    def assert_on_executor(self, operation: str) -> None:
        """
        Enforce control-thread affinity.
        
        Args:
            operation: Name of the public operation, used in the error
            
        Raises:
            ExecutorAffinityError: If called from another thread and
                affinity checking is enabled
        """
        if self.check_affinity and not self.is_on_executor():
            raise ExecutorAffinityError(
                f"{operation}() called outside the flipbook's control thread "
                f"(thread {threading.current_thread().name})"
            )


class AsyncioExecutor(ControlExecutor):
    """
    Executor backed by an asyncio event loop.
    
    The loop's thread is the control thread. Construct it on that thread,
    either inside a running loop or by passing the loop explicitly.
    
    Example:
        async def main():
            executor = AsyncioExecutor()
            book = Flipbook(executor=executor)
    """
    
    def __init__(
        self,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        check_affinity: bool = True,
    ) -> None:
        super().__init__(check_affinity=check_affinity)
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._thread_id = threading.get_ident()
    
    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop
    
    def time(self) -> float:
        return self._loop.time()
    
    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> TimerHandle:
        return self._loop.call_later(max(0.0, delay), callback, *args)
    
    def is_on_executor(self) -> bool:
        return threading.get_ident() == self._thread_id
