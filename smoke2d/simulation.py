"""
simulation.py — Host Loop
==========================
Owns a FluidGrid plus the per-frame parameters and calls `grid.step()`
exactly once per frame. Everything else (brushes, renderers) talks to
the grid between frames.

Usage:
    sim = FluidSimulation(width=64, height=64, cell_size=0.5)
    sim.add_smoke_source(32, 4)       # Inject smoke at bottom-center
    for frame in range(100):
        sim.step()
        density = sim.grid.density_2d  # Hand to the renderer
"""

import numpy as np

from .grid import FluidGrid
from .interaction import add_velocity, paint_density


class FluidSimulation:
    """
    The complete 2D smoke simulation.
    """

    def __init__(self, width: int = 32, height: int = 32, cell_size: float = 0.5,
                 dt: float = 0.02, viscosity: float = 0.00001,
                 diffusion: float = 0.00001, buoyancy: float = 0.0):
        """
        Args:
            width, height : Grid resolution in cells
            cell_size     : Physical size of one cell
            dt            : Timestep (seconds). Keep this small!
            viscosity     : Passed through to the grid (velocity decay is used instead)
            diffusion     : Passed through to the grid
            buoyancy      : Upward force per unit density (0 = no buoyancy)
        """
        self.grid = FluidGrid(width, height, cell_size)
        self.dt = dt
        self.viscosity = viscosity
        self.diffusion = diffusion
        self.buoyancy = buoyancy
        self.frame = 0
        self.perf_log = []   # stores timing data per frame

    def add_smoke_source(self, x: int, y: int, density: float = 1.0,
                         velocity: tuple = (0.0, 1.0), radius: float = None):
        """
        Emit smoke and push the fluid at cell (x, y).
        Call this before stepping to inject smoke each frame.

        Args:
            x, y     : Source position (cell indices)
            density  : Density written into the brushed cells
            velocity : (du, dv) added at the source cell
            radius   : Brush radius in physical units (default: 2 cells)
        """
        if radius is None:
            radius = 2 * self.grid.cell_size
        paint_density(self.grid, x, y, radius, amount=density)
        add_velocity(self.grid, x, y, *velocity)

    def step(self) -> dict:
        """
        Advance simulation by one timestep (dt seconds).

        Returns performance metrics dict for benchmarking; a non-positive
        dt leaves the grid untouched and the frame counter unchanged.
        """
        g = self.grid
        metrics = g.step(self.dt, self.viscosity, self.diffusion, self.buoyancy)
        if metrics is None:
            return {"frame": self.frame, "skipped": True}

        self.frame += 1
        t_total = metrics["total_ms"]
        metrics.update({
            "frame"         : self.frame,
            "fps"           : 1000.0 / t_total if t_total > 0 else 0,
            "density_total" : float(g.density.sum()),
        })
        self.perf_log.append(metrics)
        return metrics

    def set_grid_size(self, width: int, height: int, cell_size: float = None):
        """
        Switch resolution. Discards the current state unless nothing changed.
        """
        if cell_size is None:
            cell_size = self.grid.cell_size
        self.grid.resize(width, height, cell_size)
        print(f"[Simulation] Grid size: {self.grid.width}x{self.grid.height} "
              f"(cell_size={self.grid.cell_size})")

    def reset(self):
        """Zero all fields, keep obstacles and resolution."""
        self.grid.clear()
        self.frame = 0
        self.perf_log.clear()

    def print_status(self):
        """Pretty-print current simulation state."""
        g = self.grid
        div = g.compute_divergence()
        uc, vc = g.velocity_at_center()
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Grid: {g.width}x{g.height}")
        print(f"  Density   : max={g.density.max():.4f}, total={g.density.sum():.2f}")
        print(f"  Velocity  : max_u={np.abs(uc).max():.4f}, max_v={np.abs(vc).max():.4f}")
        print(f"  Divergence: max={np.abs(div).max():.6f}, mean={np.abs(div).mean():.8f}")
        print(f"  Pressure  : max={g.pressure.max():.4f}, min={g.pressure.min():.4f}")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")
