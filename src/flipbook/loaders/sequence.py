"""
Image Sequence Loader
=====================

Builds frames from individual image files decoded with OpenCV.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

import cv2
import numpy as np

from flipbook.loaders.errors import FrameLoadError
from flipbook.models.frame import Frame
from flipbook.models.load import LoadOutcome, LoadStatus


logger = logging.getLogger(__name__)


def read_image(path: Union[str, Path]) -> np.ndarray:
    """
    Decode an image file to a BGR numpy array.
    
    Raises:
        FrameLoadError: If OpenCV cannot decode the file
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FrameLoadError(f"Failed to decode image: {path}")
    return image


def load_image_sequence(
    paths: Iterable[Union[str, Path]],
    duration: float,
    should_stop: Optional[Callable[[], bool]] = None,
) -> LoadOutcome:
    """
    Decode each path, in order, into a frame of ``duration`` seconds.
    
    Any unreadable file fails the whole load.
    
    Args:
        paths: Image files in display order
        duration: Duration for every frame (seconds)
        should_stop: Predicate polled before each file; True cancels
        
    Returns:
        LoadOutcome with LOADED, ERROR or CANCELLED status
    """
    frames: List[Frame] = []
    for path in paths:
        if should_stop is not None and should_stop():
            return LoadOutcome(status=LoadStatus.CANCELLED)
        try:
            frames.append(Frame(image=read_image(path), duration=duration))
        except FrameLoadError as e:
            logger.error(str(e))
            return LoadOutcome(status=LoadStatus.ERROR, error=str(e))
    
    if not frames:
        return LoadOutcome(status=LoadStatus.ERROR, error="No images given")
    return LoadOutcome(status=LoadStatus.LOADED, frames=frames)
