"""
advect.py — Semi-Lagrangian Advection
======================================
This is what makes fluid look like it's *actually flowing*.

The algorithm (per sample):
  1. Look at the sample's position (edge midpoint or cell center).
  2. Trace BACKWARD along the velocity field by one timestep (dt).
     → "Where did the stuff at this sample come FROM?"
  3. Clamp the traced point into the region the field is sampled on.
  4. Bilinearly interpolate the previous-frame field at that point.

Every read comes from the *_prev snapshot, so a sample never sees a value
that was already updated in the same pass.

Positions are in index units of the field being advected, so a physical
displacement of `velocity * dt` becomes `velocity * dt / cell_size`.

Key reference: Jos Stam, "Stable Fluids" (SIGGRAPH 1999)
"""

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .grid import FluidGrid


def _bilinear_interpolate(field: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Bilinear interpolation of a 2D field indexed [y, x] at fractional positions.

    Positions are clamped to the array extent, so callers only need to
    apply their own (tighter) sampling region.
    """
    Ny, Nx = field.shape

    x = np.clip(x, 0, Nx - 1)
    y = np.clip(y, 0, Ny - 1)

    # Lower corner of the surrounding 4-sample square
    x0 = np.floor(x).astype(np.int32)
    y0 = np.floor(y).astype(np.int32)

    # Upper corner (collapses onto the lower one at the far edge)
    x1 = np.minimum(x0 + 1, Nx - 1)
    y1 = np.minimum(y0 + 1, Ny - 1)

    tx = x - x0
    ty = y - y0

    c00 = field[y0, x0]
    c10 = field[y0, x1]
    c01 = field[y1, x0]
    c11 = field[y1, x1]

    # Lerp in X, then Y
    c0 = c00 * (1 - tx) + c10 * tx
    c1 = c01 * (1 - tx) + c11 * tx
    return c0 * (1 - ty) + c1 * ty


def _positions(x_start: int, x_stop: int, y_start: int, y_stop: int):
    """Index-space sample coordinates as two (ny, nx) arrays."""
    return np.meshgrid(
        np.arange(x_start, x_stop, dtype=np.float32),
        np.arange(y_start, y_stop, dtype=np.float32),
    )


def advect_u(grid: "FluidGrid", dt: float):
    """
    Self-advect the horizontal velocity u (vertical edges).

    Edges on the left/right walls and edges touching a solid cell are
    set to zero; everything else is back-traced from the snapshot.

    Modifies: grid.u (in-place)
    """
    W, H = grid.width, grid.height
    u_out = grid.u_2d
    if W < 2:
        u_out[:] = 0.0
        return

    u_prev = grid.u_prev_2d
    v_prev = grid.v_prev_2d
    scale = dt / grid.cell_size

    # Interior edges x = 1..W-1, all rows
    xs, ys = _positions(1, W, 0, H)
    u_here = u_prev[:, 1:W]
    # v at the edge midpoint: mean of the 4 surrounding horizontal-edge samples
    v_here = 0.25 * (v_prev[:-1, :-1] + v_prev[:-1, 1:] +
                     v_prev[1:, :-1] + v_prev[1:, 1:])

    # u sample (x, y) sits at physical (x, y + 0.5); keep half a cell off the walls
    x_back = np.clip(xs - scale * u_here, 0.5, W - 0.5)
    y_back = np.clip(ys - scale * v_here, 0.0, H - 1)
    values = _bilinear_interpolate(u_prev, x_back, y_back)

    solid = grid.solid_2d != 0
    blocked = solid[:, :-1] | solid[:, 1:]

    u_out[:, 1:W] = np.where(blocked, 0.0, values)
    u_out[:, 0] = 0.0
    u_out[:, W] = 0.0


def advect_v(grid: "FluidGrid", dt: float):
    """
    Self-advect the vertical velocity v (horizontal edges).
    Mirror image of advect_u with the axes swapped.

    Modifies: grid.v (in-place)
    """
    W, H = grid.width, grid.height
    v_out = grid.v_2d
    if H < 2:
        v_out[:] = 0.0
        return

    u_prev = grid.u_prev_2d
    v_prev = grid.v_prev_2d
    scale = dt / grid.cell_size

    # Interior edges y = 1..H-1, all columns
    xs, ys = _positions(0, W, 1, H)
    v_here = v_prev[1:H, :]
    u_here = 0.25 * (u_prev[:-1, :-1] + u_prev[:-1, 1:] +
                     u_prev[1:, :-1] + u_prev[1:, 1:])

    # v sample (x, y) sits at physical (x + 0.5, y)
    x_back = np.clip(xs - scale * u_here, 0.0, W - 1)
    y_back = np.clip(ys - scale * v_here, 0.5, H - 0.5)
    values = _bilinear_interpolate(v_prev, x_back, y_back)

    # The two cells sharing the edge: below (y-1) and above (y)
    solid = grid.solid_2d != 0
    blocked = solid[:-1, :] | solid[1:, :]

    v_out[1:H, :] = np.where(blocked, 0.0, values)
    v_out[0, :] = 0.0
    v_out[H, :] = 0.0


def advect_density(grid: "FluidGrid", dt: float):
    """
    Advect the density (smoke) field through the snapshot velocity.

    For each cell center, average the bounding edge velocities, trace
    backward, clamp into the cell-center region and sample density_prev.
    Solid cells get zero density.

    Modifies: grid.density (in-place)
    """
    W, H = grid.width, grid.height
    u_prev = grid.u_prev_2d
    v_prev = grid.v_prev_2d
    scale = dt / grid.cell_size

    uc = 0.5 * (u_prev[:, :-1] + u_prev[:, 1:])
    vc = 0.5 * (v_prev[:-1, :] + v_prev[1:, :])

    xs, ys = _positions(0, W, 0, H)
    x_back = np.clip(xs - scale * uc, 0.0, W - 1)
    y_back = np.clip(ys - scale * vc, 0.0, H - 1)
    values = _bilinear_interpolate(grid.density_prev_2d, x_back, y_back)

    grid.density_2d[:] = np.where(grid.solid_2d != 0, 0.0, values)
