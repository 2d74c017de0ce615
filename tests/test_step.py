import numpy as np
import pytest

from smoke2d import FluidGrid
from smoke2d.interaction import paint_obstacle_rect
from smoke2d.solver import interior_divergence


FIELDS = ["u", "v", "u_prev", "v_prev", "density", "density_prev",
          "pressure", "divergence", "solid"]


def _randomize(grid, seed=0, speed=1.0):
    rng = np.random.default_rng(seed)
    grid.u[:] = speed * rng.standard_normal(grid.u.shape)
    grid.v[:] = speed * rng.standard_normal(grid.v.shape)
    grid.density[:] = rng.random(grid.density.shape)


def _max_interior_divergence(grid):
    return float(np.abs(interior_divergence(grid)).max())


class TestNoOpSteps:

    def setup_method(self):
        self.g = FluidGrid(8, 6, 0.5)
        _randomize(self.g)
        rng = np.random.default_rng(1)
        for name in ["u_prev", "v_prev", "density_prev", "pressure", "divergence"]:
            arr = getattr(self.g, name)
            arr[:] = rng.standard_normal(arr.shape)
        self.g.solid_2d[3, 3] = 1

    @pytest.mark.parametrize("dt", [0.0, -0.1])
    def test_non_positive_dt_changes_nothing(self, dt):
        before = {name: getattr(self.g, name).copy() for name in FIELDS}
        assert self.g.step(dt, 0.0, 0.0, 3.0) is None
        for name in FIELDS:
            np.testing.assert_array_equal(getattr(self.g, name), before[name])


class TestStepInvariants:

    @pytest.mark.parametrize("dt, viscosity, diffusion, buoyancy", [
        (0.01, 0.0, 0.0, 0.0),
        (0.1, 0.001, 0.0001, 0.0),
        (0.1, 0.0, 0.0, 2.5),
        (1.0, 0.5, 0.5, -1.0),
        (5.0, 0.0, 0.0, 10.0),
    ])
    def test_outer_boundary_edges_are_zero(self, dt, viscosity, diffusion, buoyancy):
        g = FluidGrid(12, 9, 0.5)
        _randomize(g, speed=3.0)
        g.step(dt, viscosity, diffusion, buoyancy)

        assert not g.u_2d[:, 0].any()
        assert not g.u_2d[:, -1].any()
        assert not g.v_2d[0, :].any()
        assert not g.v_2d[-1, :].any()

    @pytest.mark.parametrize("buoyancy", [0.0, 4.0])
    def test_solid_cell_edges_are_zero(self, buoyancy):
        g = FluidGrid(12, 12, 1.0)
        _randomize(g, seed=3, speed=2.0)
        paint_obstacle_rect(g, 4, 4, 7, 6)
        g.solid_2d[9, 2] = 1
        # Velocity written by a brush after the obstacle was placed
        g.u[g.index_u(5, 5)] = 4.0

        g.step(0.1, 0.0, 0.0, buoyancy)

        ys, xs = np.nonzero(g.solid_2d)
        for x, y in zip(xs, ys):
            assert g.u[g.index_u(x, y)] == 0.0
            assert g.u[g.index_u(x + 1, y)] == 0.0
            assert g.v[g.index_v(x, y)] == 0.0
            assert g.v[g.index_v(x, y + 1)] == 0.0

    def test_density_in_solid_cells_does_not_grow(self):
        g = FluidGrid(10, 10, 1.0)
        _randomize(g, seed=5)
        g.solid_2d[4, 4] = 1
        g.density_2d[4, 4] = 0.3    # left over, not cleared by the caller
        g.step(0.2, 0.0, 0.0, 1.0)
        assert g.density_2d[4, 4] <= 0.3

    def test_sealed_box_density_sum_does_not_increase(self):
        g = FluidGrid(16, 16, 1.0)
        g.density_2d[7, 9] = 1.0
        total_before = float(g.density.sum())

        g.step(0.1, 0.0, 0.0, 0.0)

        assert float(g.density.sum()) <= total_before + 1e-6
        assert not g.u.any() and not g.v.any()

    def test_pressure_and_divergence_are_recomputed(self):
        g = FluidGrid(8, 8, 1.0)
        g.pressure[:] = 123.0
        g.divergence[:] = -7.0
        g.step(0.1, 0.0, 0.0, 0.0)
        assert not g.pressure.any()
        assert not g.divergence.any()

    def test_velocity_decay_scales_the_result_linearly(self):
        g = FluidGrid(6, 6, 1.0)
        g.v_2d[1:-1, 2] = 1.0
        g.v_2d[1:-1, 3] = 1.0
        g2 = FluidGrid(6, 6, 1.0, velocity_decay=0.5)
        g2.v[:] = g.v

        g.step(0.01, 0.0, 0.0, 0.0)
        g2.step(0.01, 0.0, 0.0, 0.0)

        assert np.abs(g.v).sum() > 0.0
        np.testing.assert_allclose(g2.v, g.v * (0.5 / 0.99), rtol=1e-4, atol=1e-6)
        np.testing.assert_allclose(g2.u, g.u * (0.5 / 0.99), rtol=1e-4, atol=1e-6)

    def test_buoyancy_pushes_smoke_upward(self):
        g = FluidGrid(10, 10, 1.0)
        g.density_2d[5, 5] = 1.0
        g.step(0.1, 0.0, 0.0, 5.0)
        assert g.v_2d[5:7, 5].sum() > 0.0

    def test_step_returns_metrics(self):
        g = FluidGrid(8, 8, 1.0)
        _randomize(g)
        metrics = g.step(0.05)
        for key in ["advect_vel_ms", "advect_den_ms", "forces_ms", "project_ms",
                    "total_ms", "divergence_before_max", "divergence_max", "divergence_mean"]:
            assert key in metrics
        assert metrics["divergence_max"] <= metrics["divergence_before_max"]


class TestEndToEnd:

    def test_single_puff_moves_up_and_stays_nearly_incompressible(self):
        g = FluidGrid(10, 10, 1.0)
        g.density[g.index(5, 5)] = 1.0
        g.v[g.index_v(5, 6)] = 5.0     # edge above the smoke cell
        div_before = _max_interior_divergence(g)

        g.step(0.1, 0.0, 0.0, 0.0)

        neighbours = [g.density[g.index(x, y)]
                      for x, y in [(4, 5), (6, 5), (5, 4), (5, 6)]]
        assert max(neighbours) > 0.0
        assert g.density[g.index(5, 6)] > 0.0
        assert _max_interior_divergence(g) < div_before
