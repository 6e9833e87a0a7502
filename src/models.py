"""
Shared data models for the Luma Grid pipeline.

This module contains dataclasses and shared types used across
multiple modules to avoid circular imports and unnecessary dependencies.
"""

from dataclasses import dataclass, asdict, field, fields
from typing import Dict, List, Optional


def _check_positive_int(name: str, value):
    # bool is an int subclass but never a valid extent
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class GridConfig:
    """Grid parameters used to reduce every frame"""
    grid_size: int = 5
    # Raw extents; None means "use the video's declared height/width"
    rows: Optional[int] = None
    cols: Optional[int] = None
    delimiter: str = ","

    def __post_init__(self):
        _check_positive_int('grid_size', self.grid_size)
        for name in ('rows', 'cols'):
            value = getattr(self, name)
            if value is not None:
                _check_positive_int(name, value)
        if not isinstance(self.delimiter, str):
            raise ValueError(f"delimiter must be a string, got {self.delimiter!r}")
        if not self.delimiter:
            raise ValueError("delimiter must not be empty")

    @property
    def cell_size(self) -> int:
        return self.grid_size * self.grid_size

    @classmethod
    def from_dict(cls, data: Dict) -> 'GridConfig':
        """
        Build a config from a plain dict, ignoring None values.

        Args:
            data: Mapping of field name to value

        Returns:
            GridConfig instance

        Raises:
            KeyError: If the mapping contains an unknown field
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise KeyError(f"Unknown config field(s): {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if v is not None})

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class VideoInfo:
    """Properties a video declares when it is opened"""
    file_path: str
    fps: float
    num_frames: int
    width: int
    height: int


@dataclass
class ResultRow:
    """One reduced frame: timestamp plus the median luminance of every cell"""
    frame_index: int  # Global index across the concatenated videos
    timestamp: float
    medians: List[int] = field(default_factory=list)
    source: str = ""
