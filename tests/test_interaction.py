import numpy as np
import pytest

from smoke2d import FluidGrid
from smoke2d.interaction import (
    add_velocity,
    brush_cells,
    paint_density,
    paint_obstacle,
    paint_obstacle_rect,
    world_to_cell,
)


class TestBrush:

    def setup_method(self):
        self.g = FluidGrid(10, 8, 1.0)

    def test_world_to_cell(self):
        g = FluidGrid(10, 8, 0.5)
        assert world_to_cell(g, 1.2, 0.7) == (2, 1)
        assert world_to_cell(g, -0.1, 0.0) == (-1, 0)

    def test_brush_is_clipped_at_the_walls(self):
        assert brush_cells(self.g, 4, 4, 1.0).size == 9
        assert brush_cells(self.g, 0, 0, 1.0).size == 4
        assert brush_cells(self.g, 9, 7, 1.0).size == 4
        assert brush_cells(self.g, 50, 50, 1.0).size == 0

    def test_brush_radius_is_in_physical_units(self):
        g = FluidGrid(10, 10, 0.5)
        assert brush_cells(g, 5, 5, 1.0).size == 25     # 2 cells each way

    def test_paint_density_sets_value(self):
        self.g.density_2d[4, 4] = 0.2
        paint_density(self.g, 4, 4, 1.0, amount=1.0)
        assert self.g.density_2d[3:6, 3:6].min() == 1.0
        assert self.g.density.sum() == pytest.approx(9.0)

    def test_paint_density_additive_is_clipped(self):
        paint_density(self.g, 2, 2, 0.0, amount=0.4, additive=True)
        paint_density(self.g, 2, 2, 0.0, amount=0.4, additive=True)
        assert self.g.density_2d[2, 2] == pytest.approx(0.8)
        paint_density(self.g, 2, 2, 0.0, amount=0.4, additive=True)
        assert self.g.density_2d[2, 2] == pytest.approx(1.0)

    def test_paint_density_skips_solid_cells(self):
        self.g.solid_2d[4, 4] = 1
        paint_density(self.g, 4, 4, 1.0)
        assert self.g.density_2d[4, 4] == 0.0
        assert self.g.density_2d[4, 5] == 1.0

    def test_add_velocity_writes_left_and_bottom_edges(self):
        add_velocity(self.g, 3, 2, 1.5, -2.0)
        add_velocity(self.g, 3, 2, 1.5, 0.0)
        assert self.g.u[self.g.index_u(3, 2)] == pytest.approx(3.0)
        assert self.g.v[self.g.index_v(3, 2)] == pytest.approx(-2.0)
        assert np.count_nonzero(self.g.u) == 1

    @pytest.mark.parametrize("cx, cy", [(-1, 0), (10, 0), (0, 8), (3, -2)])
    def test_add_velocity_out_of_range_is_ignored(self, cx, cy):
        add_velocity(self.g, cx, cy, 1.0, 1.0)
        assert not self.g.u.any() and not self.g.v.any()


class TestObstacles:

    def setup_method(self):
        self.g = FluidGrid(10, 10, 1.0)
        self.g.density[:] = 0.5
        self.g.density_prev[:] = 0.5
        self.g.u[:] = 1.0
        self.g.v[:] = 1.0

    def test_disc_marks_cells_and_clears_their_smoke(self):
        paint_obstacle(self.g, 5, 5, 1.0)
        solid = self.g.solid_2d != 0
        assert solid.sum() == 5
        assert solid[5, 5] and solid[4, 5] and solid[6, 5] and solid[5, 4] and solid[5, 6]
        assert not self.g.density_2d[solid].any()
        assert not self.g.density_prev_2d[solid].any()
        assert self.g.density_2d[~solid].min() == 0.5

    def test_disc_zeroes_obstacle_edges(self):
        paint_obstacle(self.g, 5, 5, 0.0)
        g = self.g
        assert g.u[g.index_u(5, 5)] == 0.0
        assert g.u[g.index_u(6, 5)] == 0.0
        assert g.v[g.index_v(5, 5)] == 0.0
        assert g.v[g.index_v(5, 6)] == 0.0
        assert g.u[g.index_u(3, 5)] == 1.0

    def test_erasing_unmarks_without_touching_smoke(self):
        paint_obstacle(self.g, 5, 5, 1.0)
        self.g.density_2d[5, 5] = 0.25
        paint_obstacle(self.g, 5, 5, 1.0, solid=False)
        assert not self.g.solid.any()
        assert self.g.density_2d[5, 5] == 0.25

    def test_rect(self):
        paint_obstacle_rect(self.g, 2, 3, 5, 4)
        g = self.g
        assert np.count_nonzero(g.solid) == 3
        assert g.solid_2d[3, 2:5].all()
        assert not g.density_2d[3, 2:5].any()
        assert g.u[g.index_u(5, 3)] == 0.0
        assert g.v[g.index_v(4, 4)] == 0.0

    def test_rect_outside_grid_is_ignored(self):
        paint_obstacle_rect(self.g, 20, 20, 30, 30)
        assert not self.g.solid.any()
