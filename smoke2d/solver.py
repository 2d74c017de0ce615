"""
solver.py — Pressure Projection
================================
The pressure projection step enforces INCOMPRESSIBILITY:
  div(v) = 0 everywhere in the fluid

After advection and forcing, the velocity field is generally NOT
divergence-free (fluid "piles up" in some cells). We fix this by:
  1. Computing divergence of the current velocity field
  2. Solving the Poisson equation for pressure: ∇²p = div(v) / dt
  3. Subtracting the pressure gradient from velocity: v = v - dt·∇p

Boundary handling:
  - Domain walls: zero-gradient (Neumann) pressure, zero normal velocity
  - Solid cells: a solid neighbour contributes the cell's own pressure
    (zero gradient across the obstacle face); edges of solid cells are
    forced to zero afterwards

The Poisson solve is a FIXED number of Jacobi sweeps. There is no
convergence check, so the cost of a frame is bounded and predictable.
"""

import time
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .grid import FluidGrid


PRESSURE_ITERATIONS = 40


def interior_divergence(grid: "FluidGrid") -> np.ndarray:
    """Divergence of every interior, non-solid cell (walls excluded), flattened."""
    div = grid.compute_divergence()[1:-1, 1:-1]
    fluid = grid.solid_2d[1:-1, 1:-1] == 0
    return div[fluid]


def _max_abs(values: np.ndarray) -> float:
    return float(np.abs(values).max()) if values.size else 0.0


def project(grid: "FluidGrid", dt: float, iterations: int = PRESSURE_ITERATIONS) -> dict:
    """
    Pressure projection: make the velocity field divergence-free.

    Args:
        grid       : The FluidGrid to modify in-place
        dt         : Timestep the pressure is solved for
        iterations : Jacobi sweeps (always all of them)

    Returns:
        dict with timing and divergence metrics (for benchmarking)
    """
    t_start = time.perf_counter()
    div_before = _max_abs(interior_divergence(grid))

    pressure = grid.pressure_2d
    rhs = grid.divergence_2d
    pressure[:] = 0.0
    rhs[:] = 0.0

    # Grids thinner than 3 cells have no interior: only the walls apply
    if grid.width >= 3 and grid.height >= 3:
        solid = grid.solid_2d != 0
        _compute_rhs(grid, dt)
        _jacobi_solve(pressure, rhs, solid, iterations)
        _subtract_pressure_gradient(grid, dt, solid)

    enforce_boundaries(grid)

    t_end = time.perf_counter()
    div_after = interior_divergence(grid)

    return {
        "time_ms"               : (t_end - t_start) * 1000,
        "iterations"            : iterations,
        "divergence_before_max" : div_before,
        "divergence_after_max"  : _max_abs(div_after),
        "divergence_after_mean" : float(np.abs(div_after).mean()) if div_after.size else 0.0,
    }


def _compute_rhs(grid: "FluidGrid", dt: float):
    """divergence[cell] = -div(cell) * cell_size² / dt for interior cells."""
    div = grid.compute_divergence()
    h = grid.cell_size
    grid.divergence_2d[1:-1, 1:-1] = -div[1:-1, 1:-1] * (h * h / dt)


def _apply_neumann(p: np.ndarray):
    """dp/dn = 0 at walls: copy each boundary cell from its interior neighbour."""
    p[0,  :] = p[1,  :]
    p[-1, :] = p[-2, :]
    p[:,  0] = p[:,  1]
    p[:, -1] = p[:, -2]


def _jacobi_solve(p: np.ndarray, rhs: np.ndarray, solid: np.ndarray, iterations: int):
    """
    Classical Jacobi iteration for the pressure Poisson equation.

      p[y,x] = (rhs[y,x] + pL + pR + pB + pT) / 4

    A solid neighbour is replaced by p[y,x] itself. Solid cells are
    never updated. Each sweep reads only the previous sweep's values.
    """
    solid_c = solid[1:-1, 1:-1]
    solid_l = solid[1:-1, :-2]
    solid_r = solid[1:-1, 2:]
    solid_b = solid[:-2, 1:-1]
    solid_t = solid[2:, 1:-1]
    rhs_c = rhs[1:-1, 1:-1]

    for _ in range(iterations):
        _apply_neumann(p)

        centre = p[1:-1, 1:-1]
        neighbours = (
            np.where(solid_l, centre, p[1:-1, :-2]) +
            np.where(solid_r, centre, p[1:-1, 2:]) +
            np.where(solid_b, centre, p[:-2, 1:-1]) +
            np.where(solid_t, centre, p[2:, 1:-1])
        )
        p[1:-1, 1:-1] = np.where(solid_c, centre, 0.25 * (rhs_c + neighbours))

    # Boundary cells are read by the gradient step below
    _apply_neumann(p)


def _subtract_pressure_gradient(grid: "FluidGrid", dt: float, solid: np.ndarray):
    """
    Subtract dt·∇p from the edge velocities of every interior fluid cell.

    Cell (x, y) owns its left u edge and its bottom v edge:
      u(x, y) -= dt * (p[y,x] - p[y,x-1]) / cell_size
      v(x, y) -= dt * (p[y,x] - p[y-1,x]) / cell_size
    """
    p = grid.pressure_2d
    scale = dt / grid.cell_size

    centre = p[1:-1, 1:-1]
    p_left = np.where(solid[1:-1, :-2], centre, p[1:-1, :-2])
    p_bottom = np.where(solid[:-2, 1:-1], centre, p[:-2, 1:-1])
    fluid = ~solid[1:-1, 1:-1]

    # u columns 1..W-2 are the left edges of interior cells; v rows 1..H-2 the bottom edges
    grid.u_2d[1:-1, 1:-2] -= np.where(fluid, scale * (centre - p_left), 0.0)
    grid.v_2d[1:-2, 1:-1] -= np.where(fluid, scale * (centre - p_bottom), 0.0)


def enforce_boundaries(grid: "FluidGrid"):
    """
    Zero the four edges of every solid cell, then the outer walls.

    Modifies: grid.u, grid.v (in-place)
    """
    u, v = grid.u_2d, grid.v_2d
    solid = grid.solid_2d != 0

    u[:, :-1][solid] = 0.0   # left edges
    u[:, 1:][solid] = 0.0    # right edges
    v[:-1, :][solid] = 0.0   # bottom edges
    v[1:, :][solid] = 0.0    # top edges

    u[:, 0] = 0.0
    u[:, -1] = 0.0
    v[0, :] = 0.0
    v[-1, :] = 0.0
