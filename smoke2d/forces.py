"""
forces.py — Velocity Decay and Buoyancy
========================================
The body-force part of a step.

Velocity decay stands in for viscous diffusion: instead of solving
  (I - ν·dt·∇²) u_new = u_old
every velocity sample is scaled by a constant factor each step. This is
not a physical diffusion.

Buoyancy pushes smoke upward in proportion to its density:
  F_y = buoyancy * density
applied to the vertical velocity v before projection, so the pressure
solve can absorb the divergence it creates.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .grid import FluidGrid


# ── Decay parameter ───────────────────────────────────────────────────────────
VELOCITY_DECAY = 0.99   # multiplier per step, applied to u and v


def damp_velocity(grid: "FluidGrid", factor: float = VELOCITY_DECAY):
    """
    Multiply every velocity sample by `factor`.

    Modifies: grid.u, grid.v (in-place)
    """
    grid.u *= factor
    grid.v *= factor


def apply_buoyancy(grid: "FluidGrid", buoyancy: float, dt: float):
    """
    Apply buoyancy force to the vertical velocity.

    The v-field lives on horizontal edges (height+1 rows), so each
    interior edge gets the average density of the cell below and the
    cell above it. Wall rows are left alone; projection zeroes them.

    Modifies: grid.v (in-place)
    """
    d = grid.density_2d
    grid.v_2d[1:-1, :] += buoyancy * dt * 0.5 * (d[:-1, :] + d[1:, :])
