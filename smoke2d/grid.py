"""
grid.py — 2D MAC (Marker-and-Cell) Staggered Grid
==================================================
The foundation of the entire simulation.

Layout on a width × height grid:
  - Pressure, divergence, density and the solid mask live at CELL CENTERS
      → length width*height,        index x + y*width
  - Velocity `u` (horizontal) lives on VERTICAL cell edges
      → length (width+1)*height,    index x + y*(width+1)
  - Velocity `v` (vertical) lives on HORIZONTAL cell edges
      → length width*(height+1),    index x + y*width

The arrays are flat so external code (brushes, renderers) can address
them through the index helpers. Every flat array also has a row-major 2D
view (`u_2d`, `density_2d`, ...) indexed [y, x] that shares its memory;
the vectorised physics steps work through those views.

Why staggered? It prevents the "checkerboard" pressure instability
that appears on collocated grids.
"""

import math
import time
from typing import Optional

import numpy as np

from .advect import advect_density, advect_u, advect_v
from .forces import VELOCITY_DECAY, apply_buoyancy, damp_velocity
from .solver import PRESSURE_ITERATIONS, project


class InvalidArgument(ValueError):
    """Raised for non-positive grid dimensions or cell size."""


def _validate(width, height, cell_size):
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")
    try:
        cell_size = float(cell_size)
    except (TypeError, ValueError):
        raise InvalidArgument(f"cell_size must be a positive number, got {cell_size!r}") from None
    if not math.isfinite(cell_size) or cell_size <= 0.0:
        raise InvalidArgument(f"cell_size must be a positive number, got {cell_size!r}")
    return int(width), int(height), cell_size


class FluidGrid:
    """
    width × height MAC grid storing all simulation state.
    This is the single source of truth; the host loop calls `step()` once
    per frame and collaborators read/write the public arrays in between.
    """

    def __init__(self, width: int, height: int, cell_size: float = 1.0,
                 pressure_iterations: int = PRESSURE_ITERATIONS,
                 velocity_decay: float = VELOCITY_DECAY):
        """
        Args:
            width, height       : Number of fluid cells along x and y
            cell_size           : Physical length of one cell edge
            pressure_iterations : Jacobi sweeps per projection (fixed, no early exit)
            velocity_decay      : Multiplier applied to every velocity sample each step
        """
        self.width, self.height, self.cell_size = _validate(width, height, cell_size)
        self.pressure_iterations = int(pressure_iterations)
        self.velocity_decay = float(velocity_decay)
        self._allocate()

    def _allocate(self):
        W, H = self.width, self.height
        n_cells = W * H

        # ── Scalar fields (cell-centered) ──────────────────────────────────
        self.density      = np.zeros(n_cells, dtype=np.float32)
        self.density_prev = np.zeros(n_cells, dtype=np.float32)
        self.pressure     = np.zeros(n_cells, dtype=np.float32)
        self.divergence   = np.zeros(n_cells, dtype=np.float32)

        # Obstacle mask: 0 = fluid, nonzero = solid
        self.solid = np.zeros(n_cells, dtype=np.uint8)

        # ── Velocity fields (edge-centered, staggered) ─────────────────────
        # u: horizontal component on vertical edges   → (W+1) * H
        # v: vertical component on horizontal edges   → W * (H+1)
        self.u = np.zeros((W + 1) * H, dtype=np.float32)
        self.v = np.zeros(W * (H + 1), dtype=np.float32)

        # Snapshot taken at the start of each step (advection source)
        self.u_prev = np.zeros_like(self.u)
        self.v_prev = np.zeros_like(self.v)

    # ── Index helpers ─────────────────────────────────────────────────────

    def index(self, x: int, y: int) -> int:
        """Flat offset of cell (x, y) in density/pressure/divergence/solid."""
        return x + y * self.width

    def index_u(self, x: int, y: int) -> int:
        """Flat offset of the u sample on the left edge of cell (x, y); x ∈ [0, width]."""
        return x + y * (self.width + 1)

    def index_v(self, x: int, y: int) -> int:
        """Flat offset of the v sample on the bottom edge of cell (x, y); y ∈ [0, height]."""
        return x + y * self.width

    # ── 2D views, indexed [y, x] ──────────────────────────────────────────

    @property
    def u_2d(self) -> np.ndarray:
        return self.u.reshape(self.height, self.width + 1)

    @property
    def v_2d(self) -> np.ndarray:
        return self.v.reshape(self.height + 1, self.width)

    @property
    def u_prev_2d(self) -> np.ndarray:
        return self.u_prev.reshape(self.height, self.width + 1)

    @property
    def v_prev_2d(self) -> np.ndarray:
        return self.v_prev.reshape(self.height + 1, self.width)

    def cells_2d(self, field: np.ndarray) -> np.ndarray:
        """Reshape a cell-centered flat array into a (height, width) view."""
        return field.reshape(self.height, self.width)

    @property
    def density_2d(self) -> np.ndarray:
        return self.cells_2d(self.density)

    @property
    def density_prev_2d(self) -> np.ndarray:
        return self.cells_2d(self.density_prev)

    @property
    def pressure_2d(self) -> np.ndarray:
        return self.cells_2d(self.pressure)

    @property
    def divergence_2d(self) -> np.ndarray:
        return self.cells_2d(self.divergence)

    @property
    def solid_2d(self) -> np.ndarray:
        return self.cells_2d(self.solid)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def step(self, dt: float, viscosity: float = 0.0, diffusion: float = 0.0,
             buoyancy: float = 0.0) -> Optional[dict]:
        """
        Advance the fluid by dt seconds.

        Physics pipeline:
          1. Snapshot u, v, density into the *_prev buffers
          2. Self-advect u, then v (semi-Lagrangian, from the snapshot)
          3. Advect density
          4. Damp velocity by `velocity_decay`
          5. Buoyancy (only if buoyancy != 0)
          6. Pressure projection with solid and wall boundaries

        viscosity and diffusion are accepted for interface compatibility;
        no diffusion solve is run. The uniform velocity decay stands in
        for viscous relaxation.

        Returns a dict of per-stage timings (ms) and divergence metrics,
        or None when dt <= 0 (nothing is touched).
        """
        if dt <= 0:
            return None

        t_total_start = time.perf_counter()

        # ── Save previous state for advection back-tracing ─────────────────
        np.copyto(self.u_prev, self.u)
        np.copyto(self.v_prev, self.v)
        np.copyto(self.density_prev, self.density)

        t0 = time.perf_counter()
        advect_u(self, dt)
        advect_v(self, dt)
        t_advect_vel = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        advect_density(self, dt)
        t_advect_den = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        damp_velocity(self, self.velocity_decay)
        if buoyancy != 0:
            apply_buoyancy(self, buoyancy, dt)
        t_forces = (time.perf_counter() - t0) * 1000

        proj_metrics = project(self, dt, iterations=self.pressure_iterations)

        return {
            "advect_vel_ms"   : t_advect_vel,
            "advect_den_ms"   : t_advect_den,
            "forces_ms"       : t_forces,
            "project_ms"      : proj_metrics["time_ms"],
            "total_ms"        : (time.perf_counter() - t_total_start) * 1000,
            "divergence_before_max": proj_metrics["divergence_before_max"],
            "divergence_max"  : proj_metrics["divergence_after_max"],
            "divergence_mean" : proj_metrics["divergence_after_mean"],
        }

    def resize(self, width: int, height: int, cell_size: float):
        """
        Reallocate every array for new dimensions. This is a full reset:
        old state (obstacles included) is discarded, not resampled.
        Does nothing when the dimensions are unchanged.
        """
        width, height, cell_size = _validate(width, height, cell_size)
        if (width == self.width and height == self.height
                and math.isclose(cell_size, self.cell_size)):
            return
        self.width, self.height, self.cell_size = width, height, cell_size
        self._allocate()

    def clear(self):
        """Zero all fields in place. The solid mask is left as is."""
        for arr in [self.u, self.v, self.u_prev, self.v_prev,
                    self.density, self.density_prev,
                    self.pressure, self.divergence]:
            arr[:] = 0.0

    # ── Diagnostics ───────────────────────────────────────────────────────

    def velocity_at_center(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Average staggered edge velocities to cell centers.
        Returns (uc, vc), each of shape (height, width).
        """
        u, v = self.u_2d, self.v_2d
        uc = 0.5 * (u[:, :-1] + u[:, 1:])
        vc = 0.5 * (v[:-1, :] + v[1:, :])
        return uc, vc

    def compute_divergence(self) -> np.ndarray:
        """
        Net outflow per cell: (du/dx + dv/dy), shape (height, width).
        For an incompressible fluid this should be ~0 away from the walls.
        """
        u, v = self.u_2d, self.v_2d
        return ((u[:, 1:] - u[:, :-1]) + (v[1:, :] - v[:-1, :])) / self.cell_size

    def __repr__(self):
        max_div = float(np.abs(self.compute_divergence()).max())
        max_vel = float(max(np.abs(self.u).max(), np.abs(self.v).max()))
        return (
            f"FluidGrid(width={self.width}, height={self.height}, cell_size={self.cell_size})\n"
            f"  density  : max={self.density.max():.4f}, sum={self.density.sum():.2f}\n"
            f"  velocity : max_component={max_vel:.4f}\n"
            f"  divergence: max={max_div:.6f}\n"
            f"  solid    : {int(np.count_nonzero(self.solid))} cells"
        )
