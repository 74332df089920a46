"""
Loaders
=======

Turn external sources into decoded (image, duration) frames.

Loaders sit outside the playback engine: they only produce the ordered
frame list that Flipbook.load_frames() installs.

    - load_video_frames: Even sampling across a video file
    - load_animated_image: GIF/APNG/WebP frames with per-frame delays
    - load_image_sequence: One frame per image file
"""

from flipbook.loaders.animated import load_animated_image
from flipbook.loaders.errors import FrameLoadError
from flipbook.loaders.sequence import load_image_sequence, read_image
from flipbook.loaders.video import load_video_frames

__all__ = [
    "FrameLoadError",
    "load_animated_image",
    "load_image_sequence",
    "load_video_frames",
    "read_image",
]
