"""
Shared fixtures: an in-memory stand-in for the OpenCV video source.
"""

# Standard Library
from typing import Dict, List, Optional

# PIP3 modules
import numpy
import pytest

from models import VideoInfo

#============================================

def solid_frame(rows: int, cols: int, bgr=(0, 0, 0)) -> numpy.ndarray:
    frame = numpy.empty((rows, cols, 3), dtype=numpy.uint8)
    frame[:, :] = bgr
    return frame

#============================================

def gray_frames(count: int, rows: int = 4, cols: int = 4) -> List[numpy.ndarray]:
    """
    Frames whose gray level equals their local index (B=G=R=i).
    """
    return [solid_frame(rows, cols, (i, i, i)) for i in range(count)]

#============================================

class FakeVideo:
    """
    Frame source with the VideoSource interface, backed by a frame list.
    """

    def __init__(self, path: str, frames: List[numpy.ndarray], fps: float = 30.0,
                 declared: Optional[int] = None, opened: bool = True):
        self.video_path = path
        self.frames = frames
        self.fps = fps
        self.frame_count = len(frames) if declared is None else declared
        self.opened = opened
        self.position = 0
        self.seeks = []
        self.released = False
        shape = frames[0].shape if frames else (0, 0, 3)
        self.height = shape[0]
        self.width = shape[1]

    def is_opened(self) -> bool:
        return self.opened

    def info(self) -> VideoInfo:
        return VideoInfo(self.video_path, self.fps, self.frame_count, self.width, self.height)

    def seek(self, frame_index: int):
        self.seeks.append(frame_index)
        self.position = frame_index

    def read(self):
        if self.position >= len(self.frames):
            return None
        frame = self.frames[self.position]
        self.position += 1
        return frame

    def release(self):
        self.released = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

#============================================

class FakeLibrary:
    """
    Maps paths to FakeVideo objects and records which paths were opened.
    """

    def __init__(self):
        self.videos: Dict[str, FakeVideo] = {}
        self.opened: List[str] = []

    def add(self, path: str, frames: List[numpy.ndarray], **kwargs) -> FakeVideo:
        video = FakeVideo(path, frames, **kwargs)
        self.videos[path] = video
        return video

    def add_broken(self, path: str) -> FakeVideo:
        return self.add(path, [], opened=False)

    def __call__(self, path: str) -> FakeVideo:
        self.opened.append(path)
        return self.videos[path]

#============================================

@pytest.fixture
def library() -> FakeLibrary:
    return FakeLibrary()
