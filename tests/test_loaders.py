"""
Loader Tests
============

OpenCV-backed video sampling and image sequences, Pillow-backed
animated images.
"""

import asyncio
import importlib
import threading

import cv2
import numpy as np
import pytest
from PIL import Image

from flipbook.engine.executor import AsyncioExecutor
from flipbook.flipbook import Flipbook
from flipbook.loaders import FrameLoadError, load_animated_image, load_image_sequence, load_video_frames, read_image
from flipbook.models.load import LoadOutcome, LoadStatus
from flipbook.models.frame import Frame
from flipbook.models.playback import StopReason


@pytest.fixture
def image_files(tmp_path):
    """Three solid-colour PNG files."""
    paths = []
    for i, value in enumerate((0, 100, 200)):
        path = tmp_path / f"frame_{i}.png"
        cv2.imwrite(str(path), np.full((8, 8, 3), value, dtype=np.uint8))
        paths.append(path)
    return paths


@pytest.fixture
def video_file(tmp_path):
    """Ten-frame, 10 fps MJPG clip; each frame a different grey level."""
    path = tmp_path / "clip.avi"
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), 10.0, (32, 32))
    if not writer.isOpened():
        pytest.skip("OpenCV build cannot write MJPG video")
    for i in range(10):
        writer.write(np.full((32, 32, 3), i * 25, dtype=np.uint8))
    writer.release()
    return path


class TestImageSequence:
    """load_image_sequence / read_image."""
    
    def test_loads_in_order(self, image_files):
        outcome = load_image_sequence(image_files, duration=0.1)
        
        assert outcome.ok
        assert outcome.frame_count == 3
        assert [int(frame.image.mean()) for frame in outcome.frames] == [0, 100, 200]
        assert all(frame.duration == 0.1 for frame in outcome.frames)
    
    def test_unreadable_file_is_error(self, image_files, tmp_path):
        outcome = load_image_sequence(image_files + [tmp_path / "missing.png"], duration=0.1)
        
        assert outcome.status == LoadStatus.ERROR
        assert "missing.png" in outcome.error
        assert outcome.frames == []
    
    def test_cancelled(self, image_files):
        calls = []
        
        def should_stop():
            calls.append(1)
            return len(calls) > 1
        
        outcome = load_image_sequence(image_files, duration=0.1, should_stop=should_stop)
        
        assert outcome.status == LoadStatus.CANCELLED
        assert outcome.frames == []
    
    def test_read_image_raises(self, tmp_path):
        with pytest.raises(FrameLoadError):
            read_image(tmp_path / "nope.png")


class TestVideo:
    """load_video_frames."""
    
    def test_samples_evenly(self, video_file):
        outcome = load_video_frames(video_file, frame_count=5)
        
        assert outcome.status == LoadStatus.LOADED
        assert outcome.frame_count == 5
        assert all(frame.duration == pytest.approx(0.2) for frame in outcome.frames)
        assert outcome.frames[0].image.shape == (32, 32, 3)
    
    def test_explicit_frame_duration(self, video_file):
        outcome = load_video_frames(video_file, frame_count=2, frame_duration=0.04)
        assert [frame.duration for frame in outcome.frames] == [0.04, 0.04]
    
    def test_missing_file_is_error(self, tmp_path):
        outcome = load_video_frames(tmp_path / "missing.avi", frame_count=3)
        
        assert outcome.status == LoadStatus.ERROR
        assert not outcome.ok
    
    def test_cancelled_mid_decode(self, video_file):
        polls = []
        
        def should_stop():
            polls.append(1)
            return len(polls) == 3
        
        outcome = load_video_frames(video_file, frame_count=5, should_stop=should_stop)
        
        assert outcome.status == LoadStatus.CANCELLED
        assert outcome.frames == []
    
    def test_invalid_frame_count(self, video_file):
        with pytest.raises(ValueError):
            load_video_frames(video_file, frame_count=0)


class TestFlipbookLoadVideo:
    """Async loading into a flipbook."""
    
    def test_load_video_installs_frames(self, video_file):
        async def scenario():
            book = Flipbook(executor=AsyncioExecutor())
            outcomes = []
            outcome = await book.load_video(video_file, frame_count=4, completion=outcomes.append)
            return book.frame_count, book.duration, outcome, outcomes
        
        count, duration, outcome, outcomes = asyncio.run(scenario())
        
        assert count == 4
        assert duration == pytest.approx(1.0)
        assert outcomes == [outcome]
    
    def test_failed_load_leaves_flipbook_empty(self, tmp_path, image_files):
        async def scenario():
            book = Flipbook(executor=AsyncioExecutor())
            book.load_frames(load_image_sequence(image_files, duration=0.1).frames)
            outcome = await book.load_video(tmp_path / "missing.avi", frame_count=4)
            return book.frame_count, outcome
        
        count, outcome = asyncio.run(scenario())
        
        assert count == 0
        assert outcome.status == LoadStatus.ERROR
    
    def test_playback_started_during_load_is_stopped(self, monkeypatch):
        """Frames arriving from a load stop a playback begun meanwhile."""
        flipbook_module = importlib.import_module("flipbook.flipbook")
        gate = threading.Event()
        
        def gated_loader(path, frame_count, frame_duration=None, should_stop=None):
            gate.wait(5.0)
            return LoadOutcome(
                status=LoadStatus.LOADED,
                frames=[Frame(image="loaded", duration=0.1)],
            )
        
        monkeypatch.setattr(flipbook_module, "load_video_frames", gated_loader)
        
        async def scenario():
            book = Flipbook(executor=AsyncioExecutor())
            reasons = []
            book.animation_did_complete = reasons.append
            
            load = asyncio.create_task(book.load_video("clip.avi", frame_count=1))
            await asyncio.sleep(0)
            book.add_frame(Frame(image="manual", duration=10.0))
            play = asyncio.create_task(book.play())
            await asyncio.sleep(0)
            assert book.is_animating()
            
            gate.set()
            await load
            reason = await asyncio.wait_for(play, 1.0)
            return reason, reasons, book.is_animating(), book.peek().image
        
        reason, reasons, animating, image = asyncio.run(scenario())
        
        assert reason == StopReason.USER_STOPPED
        assert reasons == [StopReason.USER_STOPPED]
        assert not animating
        assert image == "loaded"


@pytest.fixture
def gif_file(tmp_path):
    """Three-frame GIF: red 100ms, green 200ms, blue 300ms."""
    path = tmp_path / "anim.gif"
    frames = [Image.new("RGB", (8, 8), color) for color in ((255, 0, 0), (0, 255, 0), (0, 0, 255))]
    frames[0].save(path, save_all=True, append_images=frames[1:], duration=[100, 200, 300], loop=0)
    return path


class TestAnimatedImage:
    """load_animated_image."""
    
    def test_keeps_per_frame_delays(self, gif_file):
        outcome = load_animated_image(gif_file)
        
        assert outcome.status == LoadStatus.LOADED
        assert [frame.duration for frame in outcome.frames] == pytest.approx([0.1, 0.2, 0.3])
        # BGR channel order, like the OpenCV loaders
        assert outcome.frames[0].image[0, 0].tolist() == [0, 0, 255]
        assert outcome.frames[2].image[0, 0].tolist() == [255, 0, 0]
    
    def test_accepts_bytes(self, gif_file):
        outcome = load_animated_image(gif_file.read_bytes())
        assert outcome.frame_count == 3
    
    def test_frame_without_delay_is_error(self, image_files):
        outcome = load_animated_image(image_files[0])
        
        assert outcome.status == LoadStatus.ERROR
        assert "no delay" in outcome.error
    
    def test_undecodable_source_is_error(self, tmp_path):
        assert load_animated_image(b"not an image").status == LoadStatus.ERROR
        assert load_animated_image(tmp_path / "missing.gif").status == LoadStatus.ERROR
    
    def test_cancelled(self, gif_file):
        outcome = load_animated_image(gif_file, should_stop=lambda: True)
        assert outcome.status == LoadStatus.CANCELLED
    
    def test_flipbook_load_animated_image(self, flipbook, executor, gif_file):
        outcome = flipbook.load_animated_image(gif_file)
        
        assert outcome.ok
        assert flipbook.frame_count == 3
        assert flipbook.duration == pytest.approx(0.6)
        
        durations = []
        flipbook.start(repeat_count=1, callback=lambda frame, index, count: durations.append(frame.duration))
        executor.advance(1.0)
        assert durations == pytest.approx([0.1, 0.2, 0.3])
