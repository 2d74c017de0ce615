import argparse

import main


def _args(**overrides):
    values = dict(width=12, height=12, cell_size=0.5, dt=0.02, buoyancy=1.0, frames=3)
    values.update(overrides)
    return argparse.Namespace(**values)


def test_headless_run_prints_summary(capsys):
    main.run_headless(_args())
    out = capsys.readouterr().out
    assert "Headless simulation | 12x12 | 3 frames" in out
    assert "Average:" in out


def test_benchmark_lists_every_stage(capsys):
    main.run_benchmark(_args(frames=2))
    out = capsys.readouterr().out
    for stage in ["advect_vel_ms", "advect_den_ms", "forces_ms", "project_ms", "total_ms"]:
        assert stage in out
