"""
Frame Selection Module

Decides which frame to process next across a sequence of videos that are
treated as one continuous timeline. Global frame indices run from 0 across
all videos: with videos of 20, 30 and 40 frames, global index 55 is local
frame 35 of the second video.

Two modes are supported:
- all frames: every index of every video is selected
- explicit indices: only a sorted, duplicate-free list of global indices
"""

import logging
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


def normalize_indices(indices: Optional[Iterable[int]]) -> Optional[List[int]]:
    """
    Sort and de-duplicate requested frame indices.

    Args:
        indices: Requested global frame indices, in any order, or None

    Returns:
        Ascending unique list, or None when every frame is wanted

    Raises:
        ValueError: If an index is negative
    """
    if indices is None:
        return None
    result = sorted(set(int(i) for i in indices))
    if result and result[0] < 0:
        raise ValueError(f"Frame indices must be non-negative, got {result[0]}")
    return result


class FrameSelector:
    """
    Walks the global frame timeline one video at a time.

    Call arm() with a video's frame count before pulling that video's
    frames with advance(). advance() returns None when the current video
    has no more selected frames; check `finished` to know whether any later
    video can still produce frames.
    """

    def __init__(self, indices: Optional[Iterable[int]] = None):
        self.indices = normalize_indices(indices)
        self._cursor = 0
        self.frame_idx = -1  # Last selected global index
        self.video_start = 0
        self.frame_cap = 0

    @property
    def explicit(self) -> bool:
        return self.indices is not None

    @property
    def finished(self) -> bool:
        """True once an explicit index list has been fully consumed"""
        return self.explicit and self._cursor >= len(self.indices)

    def arm(self, frame_count: int):
        """
        Start the next video.

        Its global range is [previous cap, previous cap + frame_count).

        Args:
            frame_count: Declared number of frames in the video
        """
        self.video_start = self.frame_cap
        self.frame_cap = self.video_start + max(0, int(frame_count))
        logger.debug(f"Armed video range [{self.video_start}, {self.frame_cap})")

    def advance(self) -> Optional[int]:
        """
        Select the next frame of the current video.

        Returns:
            Global index of the next frame to process, or None when the
            current video has no further selected frames
        """
        if self.explicit:
            # Left behind by a video that ended before its declared count
            while not self.finished and self.indices[self._cursor] < self.video_start:
                logger.debug(f"Dropping frame #{self.indices[self._cursor]}: its video ended early")
                self._cursor += 1
            if self.finished:
                return None
            candidate = self.indices[self._cursor]
        else:
            candidate = max(self.frame_idx + 1, self.video_start)

        if candidate >= self.frame_cap:
            # Not consumed: the next video may own this index
            return None

        if self.explicit:
            self._cursor += 1
        self.frame_idx = candidate
        return candidate

    def local_index(self, global_index: int) -> int:
        """Position of a global index within the current video"""
        return global_index - self.video_start

    def __iter__(self):
        """Iterate over the selected global indices of the current video"""
        while True:
            idx = self.advance()
            if idx is None:
                return
            yield idx
