"""
display.py — Grid → Image Data
===============================
Read-only conversion of the grid's public arrays into things a renderer
can draw. No plotting here; visualizer.py does the matplotlib side.

Draw modes:
  density    → smoke amount, >= 0
  divergence → signed, + = expansion, - = compression
  pressure   → signed
  velocity   → magnitude of the cell-center velocity
"""

import numpy as np

from .grid import FluidGrid

DRAW_MODES = ("density", "divergence", "pressure", "velocity")
SIGNED_MODES = ("divergence", "pressure")


def field_image(grid: FluidGrid, mode: str = "density") -> np.ndarray:
    """
    Return a (height, width) array for the given draw mode, row y = grid row y.
    The result is a copy, so the renderer can keep it across steps.
    """
    if mode == "density":
        return grid.density_2d.copy()
    if mode == "divergence":
        return grid.divergence_2d.copy()
    if mode == "pressure":
        return grid.pressure_2d.copy()
    if mode == "velocity":
        uc, vc = grid.velocity_at_center()
        return np.sqrt(uc * uc + vc * vc)
    raise ValueError(f"Unknown draw mode: {mode}. Use one of {DRAW_MODES}.")


def velocity_vectors(grid: FluidGrid, min_magnitude: float = 0.01):
    """
    Cell-center arrows for the vector overlay.

    Returns (px, py, uc, vc): physical positions of the cell centers and
    the velocity there, for cells whose speed exceeds min_magnitude.
    """
    uc, vc = grid.velocity_at_center()
    h = grid.cell_size
    px, py = np.meshgrid((np.arange(grid.width) + 0.5) * h,
                         (np.arange(grid.height) + 0.5) * h)
    keep = np.sqrt(uc * uc + vc * vc) > min_magnitude
    return px[keep], py[keep], uc[keep], vc[keep]


def next_draw_mode(mode: str) -> str:
    """Cycle through DRAW_MODES (the renderer's mode key)."""
    return DRAW_MODES[(DRAW_MODES.index(mode) + 1) % len(DRAW_MODES)]
