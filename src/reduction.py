"""
Frame Reduction Module

This module is responsible for:
1. Pulling selected frames from each video in turn
2. Converting the non-waste region of each frame to grayscale luminance
3. Reordering the grayscale pixels into a cell-major scratch buffer
4. Taking the lower median of every grid cell
5. Producing one ResultRow per processed frame

Videos are processed one at a time, in order. The scratch buffer and the
capture handle belong to a single video and are released when that video
is done, including when it ends early or fails.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from grid import build_index_map, cell_count, effective_shape
from models import GridConfig, ResultRow
from selection import FrameSelector
from video_source import VideoOpenError, VideoSource


logger = logging.getLogger(__name__)


def grayscale(r: int, g: int, b: int) -> int:
    """Luminosity = 0.299R + 0.587G + 0.114B, truncated"""
    return (299 * r + 587 * g + 114 * b) // 1000


def grayscale_frame(frame: np.ndarray) -> np.ndarray:
    """
    Grayscale a BGR frame with the same integer weights as grayscale().

    Args:
        frame: uint8 array of shape (rows, cols, 3) in BGR order

    Returns:
        uint8 array of shape (rows, cols)
    """
    b = frame[..., 0].astype(np.uint32)
    g = frame[..., 1].astype(np.uint32)
    r = frame[..., 2].astype(np.uint32)
    return ((299 * r + 587 * g + 114 * b) // 1000).astype(np.uint8)


def lower_median(values: Sequence[int]) -> int:
    """Element at index len // 2 of the sorted values (no averaging)"""
    ordered = np.sort(np.asarray(values))
    return int(ordered[len(ordered) // 2])


def cell_medians(buffer: np.ndarray, cell_size: int) -> np.ndarray:
    """
    Lower median of every cell of a cell-major buffer.

    Per cell this is lower_median() of the span: the sorted element at
    index cell_size // 2, never an average. Each cell span is sorted in
    place, so the buffer contents are scrambled afterwards.

    Args:
        buffer: 1-D array whose length is a multiple of cell_size
        cell_size: Number of pixels in one cell

    Returns:
        1-D array with one median per cell, in cell order
    """
    cells = buffer.reshape(-1, cell_size)
    cells.sort(axis=1)
    return cells[:, cell_size // 2]


def frame_timestamp(frame_index: int, fps: float) -> float:
    """Seconds from the start of the timeline to a global frame index"""
    return frame_index / fps if fps > 0 else 0.0


def check_frame(frame: np.ndarray, rows: int, cols: int):
    """
    Validate a decoded frame before reduction.

    Raises:
        ValueError: If the frame is not a contiguous 8-bit BGR raster
            covering at least rows x cols pixels
    """
    if frame.ndim != 3 or frame.shape[2] != 3 or frame.dtype != np.uint8:
        raise ValueError(
            f"Expected an 8-bit 3-channel BGR frame, got shape {frame.shape} dtype {frame.dtype}"
        )
    if not frame.flags['C_CONTIGUOUS']:
        raise ValueError("Frame raster is not contiguous")
    if frame.shape[0] < rows or frame.shape[1] < cols:
        raise ValueError(
            f"Frame is {frame.shape[0]}x{frame.shape[1]}, smaller than the grid extents {rows}x{cols}"
        )


def reduce_frame(
    frame: np.ndarray,
    buffer: np.ndarray,
    index_map: np.ndarray,
    rows: int,
    cols: int,
    cell_size: int
) -> List[int]:
    """
    Reduce one frame to per-cell median luminance.

    Args:
        frame: BGR frame, at least rows x cols
        buffer: Scratch uint8 buffer of rows * cols bytes
        index_map: Flattened cell-major offsets for a rows x cols region
        rows: Effective row extent
        cols: Effective column extent
        cell_size: Pixels per cell

    Returns:
        Median luminance of every cell, in cell order
    """
    check_frame(frame, rows, cols)
    buffer[index_map] = grayscale_frame(frame[:rows, :cols]).ravel()
    return cell_medians(buffer, cell_size).tolist()


class FrameReducer:
    """
    Reduces a sequence of videos to per-frame grid medians.

    The decode collaborator is pluggable through `opener`, a callable taking
    a path and returning an object with the VideoSource interface.
    """

    def __init__(
        self,
        config: Optional[GridConfig] = None,
        opener: Callable[[str], VideoSource] = VideoSource,
        show_progress: bool = False,
        skip_unreadable: bool = False
    ):
        """
        Initialize the FrameReducer.

        Args:
            config: Grid configuration (defaults to GridConfig())
            opener: Factory returning a frame source for a path
            show_progress: Show a tqdm progress bar per video on stderr
            skip_unreadable: Log and skip videos that fail to open instead of
                raising VideoOpenError
        """
        self.config = config or GridConfig()
        self.opener = opener
        self.show_progress = show_progress
        self.skip_unreadable = skip_unreadable

    def reduce(self, paths: Iterable[str], indices: Optional[Iterable[int]] = None) -> Iterator[ResultRow]:
        """
        Reduce every selected frame of every video, in order.

        Args:
            paths: Video files, treated as one concatenated timeline
            indices: Global frame indices to sample, or None for every frame

        Yields:
            One ResultRow per processed frame

        Raises:
            VideoOpenError: If a video cannot be opened and skip_unreadable is off
        """
        selector = FrameSelector(indices)
        for path in paths:
            if selector.finished:
                logger.info("All requested frames processed, not opening remaining videos")
                break
            yield from self.reduce_video(str(path), selector)

    def _open(self, video_path: str):
        source = self.opener(video_path)
        if not source.is_opened():
            source.release()
            raise VideoOpenError(f"Cannot open video: {video_path}")
        return source

    def _extents(self, height: int, width: int):
        rows = self.config.rows if self.config.rows is not None else height
        cols = self.config.cols if self.config.cols is not None else width
        eff_rows, eff_cols = effective_shape(rows, cols, self.config.grid_size)
        if eff_rows == 0 or eff_cols == 0:
            raise ValueError(
                f"Grid size {self.config.grid_size} does not fit a {rows}x{cols} frame"
            )
        return eff_rows, eff_cols

    def reduce_video(self, video_path: str, selector: FrameSelector) -> Iterator[ResultRow]:
        """
        Reduce the selected frames of one video.

        Args:
            video_path: Path to the video file
            selector: Shared selector carrying the global frame position

        Yields:
            One ResultRow per processed frame
        """
        try:
            source = self._open(video_path)
        except VideoOpenError as e:
            if not self.skip_unreadable:
                raise
            logger.error(f"{e} (skipping)")
            return

        with source:
            info = source.info()
            selector.arm(info.num_frames)
            logger.info(
                f"Opened {video_path}: {info.num_frames} frames, {info.width}x{info.height}, {info.fps:.2f} fps"
            )

            rows, cols = self._extents(info.height, info.width)
            cell_size = self.config.cell_size
            logger.debug(
                f"Reducing {rows}x{cols} region to "
                f"{cell_count(rows, cols, self.config.grid_size)} cells of {cell_size} pixels"
            )
            index_map = build_index_map(self.config.grid_size, rows, cols).ravel()
            buffer = np.empty(rows * cols, dtype=np.uint8)

            total = None if selector.explicit else info.num_frames
            with tqdm(total=total, desc=f"Reducing {Path(video_path).name}",
                      unit="frame", disable=not self.show_progress) as pbar:
                for frame_idx in selector:
                    logger.debug(f"Processing frame #{frame_idx}")
                    local_idx = selector.local_index(frame_idx)
                    if selector.explicit and local_idx != source.position:
                        source.seek(local_idx)

                    frame = source.read()
                    if frame is None:
                        logger.info(
                            f"{video_path} ended at local frame {local_idx}, "
                            f"before its declared {info.num_frames} frames"
                        )
                        break

                    medians = reduce_frame(frame, buffer, index_map, rows, cols, cell_size)
                    pbar.update(1)
                    yield ResultRow(
                        frame_index=frame_idx,
                        timestamp=frame_timestamp(frame_idx, info.fps),
                        medians=medians,
                        source=video_path
                    )
