"""
Video Loader
============

Samples frames evenly across a video file using OpenCV.

Design Rules:
    - Single attempt, no retries
    - Cancellation is cooperative: should_stop() is polled before each frame
    - Failures and cancellation are returned as a LoadOutcome, never raised
    - Blocking; run it on a worker thread (Flipbook.load_video does)
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

import cv2

from flipbook.config import get_settings
from flipbook.models.frame import Frame
from flipbook.models.load import LoadOutcome, LoadStatus


logger = logging.getLogger(__name__)


def load_video_frames(
    path: Union[str, Path],
    frame_count: int,
    frame_duration: Optional[float] = None,
    should_stop: Optional[Callable[[], bool]] = None,
    max_read_failures: Optional[int] = None,
) -> LoadOutcome:
    """
    Extract ``frame_count`` frames spread evenly over a video.
    
    Args:
        path: Video file readable by OpenCV
        frame_count: Number of samples to take
        frame_duration: Duration assigned to every frame. Defaults to
            clip duration / frame_count.
        should_stop: Predicate polled before each sample; True cancels
        max_read_failures: Consecutive unreadable samples tolerated
            before giving up (defaults to the loader config)
        
    Returns:
        LoadOutcome with LOADED, ERROR or CANCELLED status
        
    Raises:
        ValueError: If frame_count < 1
    """
    if frame_count < 1:
        raise ValueError(f"frame_count must be >= 1, got {frame_count}")
    if max_read_failures is None:
        max_read_failures = get_settings().loader.max_read_failures
    
    capture = cv2.VideoCapture(str(path))
    try:
        if not capture.isOpened():
            logger.error(f"Unable to open video: {path}")
            return LoadOutcome(status=LoadStatus.ERROR, error=f"Unable to open video: {path}")
        
        total_frames = capture.get(cv2.CAP_PROP_FRAME_COUNT)
        fps = capture.get(cv2.CAP_PROP_FPS)
        if total_frames <= 0 or fps <= 0:
            logger.error(f"Video has no readable timing information: {path}")
            return LoadOutcome(
                status=LoadStatus.ERROR,
                error=f"Invalid frame count ({total_frames}) or fps ({fps})",
            )
        
        clip_duration = total_frames / fps
        step = clip_duration / frame_count
        duration = frame_duration if frame_duration is not None else step
        
        frames: List[Frame] = []
        dropped = 0
        consecutive_failures = 0
        
        for sample in range(frame_count):
            if should_stop is not None and should_stop():
                logger.info(f"Video load cancelled after {len(frames)} frames: {path}")
                return LoadOutcome(status=LoadStatus.CANCELLED, dropped_frames=dropped)
            
            position = min(int(round(sample * step * fps)), int(total_frames) - 1)
            capture.set(cv2.CAP_PROP_POS_FRAMES, position)
            ok, image = capture.read()
            
            if not ok or image is None:
                dropped += 1
                consecutive_failures += 1
                logger.warning(f"Dropped frame {sample} (position {position}) from {path}")
                if consecutive_failures > max_read_failures:
                    return LoadOutcome(
                        status=LoadStatus.ERROR,
                        error=f"Too many unreadable frames ({consecutive_failures} in a row)",
                        dropped_frames=dropped,
                    )
                continue
            
            consecutive_failures = 0
            frames.append(Frame(image=image, duration=duration))
        
        if not frames:
            return LoadOutcome(
                status=LoadStatus.ERROR,
                error="No frames could be read",
                dropped_frames=dropped,
            )
        
        logger.debug(f"Sampled {len(frames)} frames from {path} ({clip_duration:.2f}s clip)")
        return LoadOutcome(status=LoadStatus.LOADED, frames=frames, dropped_frames=dropped)
    finally:
        capture.release()
