#!/usr/bin/env python3
"""
Video Luma Grid Feature Extraction

Main CLI application entry point.

This application reduces a sequence of videos to per-frame features by:
1. Treating the videos as one continuous frame timeline
2. Selecting every frame, or only the requested global frame indices
3. Overlaying a fixed-size grid on each selected frame
4. Emitting one CSV line per frame: timestamp, then the median
   luminance of every grid cell
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from emitter import RowEmitter
from models import GridConfig
from reduction import FrameReducer
from video_source import VideoOpenError


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_config(config_file: str) -> dict:
    """
    Load grid settings from a JSON file.

    Expected JSON format (every key optional):
    {
        "grid_size": 5,
        "rows": 322,
        "cols": 240,
        "delimiter": ","
    }

    Args:
        config_file: Path to the JSON file

    Returns:
        Dict of config values
    """
    with open(config_file, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {config_file}")
    return data


def build_config(args: argparse.Namespace) -> GridConfig:
    """Merge the config file (if any) with command-line overrides"""
    values = load_config(args.config) if args.config else {}
    overrides = {
        'grid_size': args.grid_size,
        'rows': args.rows,
        'cols': args.cols,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return GridConfig.from_dict(values)


def find_missing_files(paths: List[str]) -> List[str]:
    """Report every listed path that does not exist"""
    logger.info("Proceeding with file list:")
    missing = []
    for path in paths:
        logger.info(f"  {path}")
        if not Path(path).is_file():
            logger.error(f"    Couldn't find a file at that path: {path}")
            missing.append(path)
    return missing


class LumaGridPipeline:
    """Runs the reduction over a file list and writes rows to an output"""

    def __init__(
        self,
        files: List[str],
        config: GridConfig,
        indices: Optional[List[int]] = None,
        output_file: Optional[str] = None,
        show_progress: bool = False,
        skip_unreadable: bool = False
    ):
        """
        Initialize the pipeline.

        Args:
            files: Video files, processed in order
            config: Grid configuration
            indices: Global frame indices to sample (None for every frame)
            output_file: File for the rows (stdout when None)
            show_progress: Show a progress bar per video
            skip_unreadable: Skip videos that fail to open instead of halting
        """
        self.files = files
        self.config = config
        self.indices = indices
        self.output_file = Path(output_file) if output_file else None
        self.reducer = FrameReducer(
            config,
            show_progress=show_progress,
            skip_unreadable=skip_unreadable
        )

    def run(self) -> bool:
        """
        Reduce all videos and write the rows.

        Returns:
            True on success, False if a video failed to open or a frame
            could not be reduced
        """
        logger.info(f"Grid: {self.config.grid_size}px cells, "
                    f"extents {self.config.rows or 'auto'}x{self.config.cols or 'auto'}")
        logger.debug(f"Configuration: {self.config.to_dict()}")
        if self.indices is not None:
            logger.info(f"Sampling {len(set(self.indices))} requested frame indices")
        else:
            logger.info("Sampling every frame")

        rows = self.reducer.reduce(self.files, self.indices)
        try:
            if self.output_file:
                self.output_file.parent.mkdir(parents=True, exist_ok=True)
                with open(self.output_file, 'w') as f:
                    count = RowEmitter(f, self.config.delimiter).emit_all(rows)
            else:
                count = RowEmitter(sys.stdout, self.config.delimiter).emit_all(rows)
        except VideoOpenError as e:
            logger.error(f"Error opening video stream or file: {e}")
            logger.error("Halting: remaining videos were not processed")
            return False
        except ValueError as e:
            logger.error(f"Error reducing frames: {e}")
            return False

        logger.info(f"Wrote {count} rows")
        return True


class _ArgumentParser(argparse.ArgumentParser):
    """Argument errors exit with status 1"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = _ArgumentParser(
        description='Reduce videos to per-frame grid median luminance (CSV)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every frame of two videos, concatenated
  python main.py --files a.mp4 b.mp4 > features.csv

  # Only global frames 55 and 200, with 8px cells
  python main.py --files a.mp4 b.mp4 --indices 200 55 --grid-size 8
        """
    )

    parser.add_argument(
        '--files',
        nargs='+',
        required=True,
        help='List of video file paths, processed in the order given'
    )
    parser.add_argument(
        '--indices',
        nargs='+',
        type=_frame_index,
        default=None,
        help='Global frame indices to parse (default: every frame)'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to JSON file with grid settings'
    )
    parser.add_argument(
        '--grid-size',
        type=int,
        default=None,
        help='Edge length of a grid cell in pixels (default: 5)'
    )
    parser.add_argument(
        '--rows',
        type=int,
        default=None,
        help='Raw row extent to reduce (default: video height)'
    )
    parser.add_argument(
        '--cols',
        type=int,
        default=None,
        help='Raw column extent to reduce (default: video width)'
    )
    parser.add_argument(
        '--output',
        default=None,
        help='Write rows to this file instead of stdout'
    )
    parser.add_argument(
        '--skip-unreadable',
        action='store_true',
        help='Skip videos that fail to open instead of halting the run'
    )
    parser.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar per video'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def _frame_index(value: str) -> int:
    index = int(value)
    if index < 0:
        raise argparse.ArgumentTypeError(f"frame index must be non-negative: {value}")
    return index


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    # Set logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = build_config(args)
    except FileNotFoundError:
        logger.error(f"Config file not found: {args.config}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file: {e}")
        sys.exit(1)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Validate inputs
    missing = find_missing_files(args.files)
    if missing:
        logger.error("Halting for missing files.")
        sys.exit(1)

    pipeline = LumaGridPipeline(
        files=args.files,
        config=config,
        indices=args.indices,
        output_file=args.output,
        show_progress=args.progress,
        skip_unreadable=args.skip_unreadable
    )

    if pipeline.run():
        sys.exit(0)
    else:
        sys.exit(1)


if __name__ == '__main__':
    main()
