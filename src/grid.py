"""
Grid Index Mapping Module

This module is responsible for:
1. Trimming raw frame extents down to whole grid cells
2. Mapping a pixel (row, col) to its offset in a cell-major buffer
3. Building a full-frame index map so a frame can be scattered in one pass

Cell-major layout for a 3x3 grid over a 6x9 frame (values are offsets):

     0  1  2 |  9 10 11 | 18 19 20
     3  4  5 | 12 13 14 | 21 22 23
     6  7  8 | 15 16 17 | 24 25 26
    ---------+----------+---------
    27 28 29 | 36 37 38 | 45 46 47
    30 31 32 | 39 40 41 | 48 49 50
    33 34 35 | 42 43 44 | 51 52 53

Every cell occupies one contiguous run of grid_size**2 offsets, cells in
row-major order, pixels inside a cell in row-major order.
"""

from typing import Tuple

import numpy as np


def effective_extent(raw: int, grid_size: int) -> int:
    """Largest multiple of grid_size not exceeding raw"""
    return raw - (raw % grid_size)


def effective_shape(rows: int, cols: int, grid_size: int) -> Tuple[int, int]:
    """
    Trim raw frame extents to whole grid cells.

    The trailing rows/columns that do not fill a cell are waste and are
    never read.

    Args:
        rows: Raw row count (frame height)
        cols: Raw column count (frame width)
        grid_size: Edge length of a grid cell in pixels

    Returns:
        Tuple of (effective rows, effective cols)
    """
    return effective_extent(rows, grid_size), effective_extent(cols, grid_size)


def cell_count(rows: int, cols: int, grid_size: int) -> int:
    """Number of grid cells covering the effective extents"""
    eff_rows, eff_cols = effective_shape(rows, cols, grid_size)
    return (eff_rows * eff_cols) // (grid_size * grid_size)


def maploc(row: int, col: int, grid_size: int, rows: int, cols: int) -> int:
    """
    Offset of pixel (row, col) in the cell-major buffer.

    No bounds checking is done: row must be below the effective row extent
    and col below the effective col extent.

    Args:
        row: Pixel row
        col: Pixel column
        grid_size: Edge length of a grid cell
        rows: Row extent (waste is trimmed here)
        cols: Column extent (waste is trimmed here)

    Returns:
        Linear offset in a buffer of effective rows * effective cols bytes
    """
    cols = effective_extent(cols, grid_size)
    cells_above = (row // grid_size) * (cols // grid_size)
    cells_before = col // grid_size
    cell_base = (grid_size * grid_size) * (cells_above + cells_before)
    within_cell = (row % grid_size) * grid_size + (col % grid_size)
    return cell_base + within_cell


def build_index_map(grid_size: int, rows: int, cols: int) -> np.ndarray:
    """
    Index map for a whole frame.

    Entry [r, c] equals maploc(r, c, grid_size, rows, cols). The map covers
    only the effective extents, so it has the shape of the non-waste region.

    Args:
        grid_size: Edge length of a grid cell
        rows: Raw row extent
        cols: Raw column extent

    Returns:
        Integer array of shape (effective rows, effective cols)
    """
    eff_rows, eff_cols = effective_shape(rows, cols, grid_size)
    r = np.arange(eff_rows, dtype=np.intp)[:, None]
    c = np.arange(eff_cols, dtype=np.intp)[None, :]

    cells_per_row = eff_cols // grid_size
    cell_index = (r // grid_size) * cells_per_row + (c // grid_size)
    within_cell = (r % grid_size) * grid_size + (c % grid_size)
    return cell_index * (grid_size * grid_size) + within_cell
