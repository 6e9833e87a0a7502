"""
Video Source Module using OpenCV

Thin wrapper around cv2.VideoCapture that exposes what the reduction
pipeline needs from a decoder:
1. Whether the path opened as a video
2. Declared frame rate, frame count and frame size
3. Sequential decoding of the next frame
4. Seeking to a frame index
"""

import logging
from typing import Optional

import cv2
import numpy as np

from models import VideoInfo


logger = logging.getLogger(__name__)


class VideoOpenError(ValueError):
    """Raised when a video file cannot be opened for decoding"""


class VideoSource:
    """
    Decoded frame source for a single video file.

    Frames are BGR uint8 arrays of shape (height, width, 3).
    """

    def __init__(self, video_path: str):
        """
        Open a video file.

        Args:
            video_path: Path to the video file
        """
        self.video_path = str(video_path)
        self.cap = cv2.VideoCapture(self.video_path)
        self.position = 0

    def is_opened(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    @property
    def fps(self) -> float:
        return float(self.cap.get(cv2.CAP_PROP_FPS))

    @property
    def frame_count(self) -> int:
        return max(0, int(self.cap.get(cv2.CAP_PROP_FRAME_COUNT)))

    @property
    def width(self) -> int:
        return int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))

    @property
    def height(self) -> int:
        return int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    def info(self) -> VideoInfo:
        """Declared properties of the video"""
        return VideoInfo(
            file_path=self.video_path,
            fps=self.fps,
            num_frames=self.frame_count,
            width=self.width,
            height=self.height
        )

    def seek(self, frame_index: int):
        """Position the decoder so the next read() returns frame_index"""
        self.cap.set(cv2.CAP_PROP_POS_FRAMES, frame_index)
        self.position = frame_index

    def read(self) -> Optional[np.ndarray]:
        """
        Decode the next frame.

        Returns:
            BGR frame, or None at end of stream
        """
        ret, frame = self.cap.read()
        if not ret or frame is None or frame.size == 0:
            return None
        self.position += 1
        return frame

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
