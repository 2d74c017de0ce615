"""
interaction.py — Brush Writes Into the Grid
============================================
Turns a pointer position + radius into cell writes:
  - paint_density   : smoke brush (set or additive)
  - add_velocity    : push the fluid at a cell
  - paint_obstacle  : mark / unmark solid cells

These run between steps, never during one. The solver itself does not
clear density inside obstacles every frame; paint_obstacle does it once
when a cell becomes solid.
"""

import numpy as np

from .grid import FluidGrid
from .solver import enforce_boundaries


def world_to_cell(grid: FluidGrid, px: float, py: float) -> tuple[int, int]:
    """Physical position (grid origin at 0,0) → integer cell coordinates."""
    return int(np.floor(px / grid.cell_size)), int(np.floor(py / grid.cell_size))


def brush_cells(grid: FluidGrid, cx: int, cy: int, radius: float) -> np.ndarray:
    """
    Flat indices of the in-bounds cells in the square brush around (cx, cy).

    Args:
        cx, cy : Brush center (cell indices, may lie outside the grid)
        radius : Brush radius in physical units (converted to whole cells)
    """
    r = max(0, int(radius / grid.cell_size))
    x0, x1 = max(0, cx - r), min(grid.width, cx + r + 1)
    y0, y1 = max(0, cy - r), min(grid.height, cy + r + 1)
    if x0 >= x1 or y0 >= y1:
        return np.empty(0, dtype=np.intp)
    xs, ys = np.meshgrid(np.arange(x0, x1), np.arange(y0, y1))
    return (xs + ys * grid.width).ravel()


def paint_density(grid: FluidGrid, cx: int, cy: int, radius: float,
                  amount: float = 1.0, additive: bool = False,
                  max_density: float = 1.0):
    """
    Inject smoke around cell (cx, cy). Solid cells are skipped.

    Args:
        amount      : Value written to each brushed cell (or added, if additive)
        additive    : Add instead of set; the result is clipped to max_density
        max_density : Upper bound for additive painting
    """
    idx = brush_cells(grid, cx, cy, radius)
    idx = idx[grid.solid[idx] == 0]
    if additive:
        grid.density[idx] = np.minimum(grid.density[idx] + amount, max_density)
    else:
        grid.density[idx] = amount


def add_velocity(grid: FluidGrid, cx: int, cy: int, fx: float, fy: float):
    """
    Add (fx, fy) to the left u edge and bottom v edge of cell (cx, cy).
    Out-of-range cells are ignored.
    """
    if not (0 <= cx < grid.width and 0 <= cy < grid.height):
        return
    grid.u[grid.index_u(cx, cy)] += fx
    grid.v[grid.index_v(cx, cy)] += fy


def paint_obstacle(grid: FluidGrid, cx: int, cy: int, radius: float, solid: bool = True):
    """
    Mark (or with solid=False, unmark) a disc of cells as obstacle.

    Newly solid cells lose their smoke and their four edge velocities,
    so the next step starts from a consistent state.
    """
    r = radius / grid.cell_size
    idx = brush_cells(grid, cx, cy, radius)
    if idx.size == 0:
        return
    xs, ys = idx % grid.width, idx // grid.width
    idx = idx[(xs - cx) ** 2 + (ys - cy) ** 2 <= r * r]

    if not solid:
        grid.solid[idx] = 0
        return

    grid.solid[idx] = 1
    grid.density[idx] = 0.0
    grid.density_prev[idx] = 0.0
    enforce_boundaries(grid)


def paint_obstacle_rect(grid: FluidGrid, x0: int, y0: int, x1: int, y1: int):
    """Mark the cells x0 <= x < x1, y0 <= y < y1 as solid and clear their smoke."""
    x0, x1 = max(0, x0), min(grid.width, x1)
    y0, y1 = max(0, y0), min(grid.height, y1)
    if x0 >= x1 or y0 >= y1:
        return
    grid.solid_2d[y0:y1, x0:x1] = 1
    grid.density_2d[y0:y1, x0:x1] = 0.0
    grid.density_prev_2d[y0:y1, x0:x1] = 0.0
    enforce_boundaries(grid)
