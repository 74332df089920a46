"""
Animated Image Loader
=====================

Reads every frame of an animated image (GIF, APNG, WebP) with its own
display delay, using Pillow.

Design Rules:
    - Each frame keeps the delay stored in the file (ms -> seconds)
    - A frame without a delay fails the whole load
    - Images are returned as BGR numpy arrays, like the OpenCV loaders
"""

import io
import logging
from pathlib import Path
from typing import Callable, List, Optional, Union

import cv2
import numpy as np
from PIL import Image, ImageSequence, UnidentifiedImageError

from flipbook.models.frame import Frame
from flipbook.models.load import LoadOutcome, LoadStatus


logger = logging.getLogger(__name__)


def load_animated_image(
    source: Union[str, Path, bytes],
    should_stop: Optional[Callable[[], bool]] = None,
) -> LoadOutcome:
    """
    Decode all frames of an animated image.
    
    Args:
        source: File path, or the raw file contents
        should_stop: Predicate polled before each frame; True cancels
        
    Returns:
        LoadOutcome with LOADED, ERROR or CANCELLED status
    """
    name = "<bytes>" if isinstance(source, bytes) else str(source)
    try:
        image = Image.open(io.BytesIO(source) if isinstance(source, bytes) else str(source))
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Unable to open animated image {name}: {e}")
        return LoadOutcome(status=LoadStatus.ERROR, error=f"Unable to open {name}: {e}")
    
    frames: List[Frame] = []
    try:
        for index, frame in enumerate(ImageSequence.Iterator(image)):
            if should_stop is not None and should_stop():
                logger.info(f"Animated image load cancelled after {len(frames)} frames: {name}")
                return LoadOutcome(status=LoadStatus.CANCELLED)
            
            delay_ms = frame.info.get("duration")
            if delay_ms is None:
                logger.error(f"Frame {index} of {name} has no delay")
                return LoadOutcome(
                    status=LoadStatus.ERROR,
                    error=f"Frame {index} has no delay",
                )
            
            rgb = np.asarray(frame.convert("RGB"))
            frames.append(
                Frame(
                    image=cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR),
                    duration=float(delay_ms) / 1000.0,
                )
            )
    except OSError as e:
        logger.error(f"Failed to decode {name}: {e}")
        return LoadOutcome(status=LoadStatus.ERROR, error=f"Failed to decode {name}: {e}")
    finally:
        image.close()
    
    logger.debug(f"Decoded {len(frames)} frames from {name}")
    return LoadOutcome(status=LoadStatus.LOADED, frames=frames)
