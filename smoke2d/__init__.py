"""
smoke2d/ — 2D Staggered-Grid Smoke Solver
==========================================
Exports the main interfaces.

Host loop / renderer import: FluidSimulation, FluidGrid
Brushes import: smoke2d.interaction
Draw modes: smoke2d.display
"""

from .grid import FluidGrid, InvalidArgument
from .simulation import FluidSimulation
from .solver import PRESSURE_ITERATIONS
from .forces import VELOCITY_DECAY

__all__ = ["FluidGrid", "FluidSimulation", "InvalidArgument",
           "PRESSURE_ITERATIONS", "VELOCITY_DECAY"]
