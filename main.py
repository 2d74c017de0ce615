"""
main.py — Entry Point
======================
Runs the 2D smoke simulation.

Usage:
    python main.py                          # Headless run, prints stats (default)
    python main.py --mode live              # Interactive window
    python main.py --mode benchmark         # Per-stage timing breakdown
    python main.py --width 100 --height 100 --buoyancy 2.0
"""

import argparse
import numpy as np


def _make_sim(args):
    from smoke2d import FluidSimulation

    return FluidSimulation(width=args.width, height=args.height,
                           cell_size=args.cell_size, dt=args.dt,
                           buoyancy=args.buoyancy)


def _emit(sim):
    """Smoke source at bottom center, pushing upward."""
    g = sim.grid
    sim.add_smoke_source(g.width // 2, 2, density=1.0, velocity=(0.0, 2.0))


def run_live(args):
    """Live interactive visualization."""
    from visualizer import FluidVisualizer

    print(f"Starting live simulation ({args.width}x{args.height})...")
    print("Left drag: smoke | right drag: obstacles | m: draw mode | close the window to exit.\n")

    sim = _make_sim(args)
    viz = FluidVisualizer(sim)
    viz.run(fps=30)


def run_headless(args):
    """Run simulation without display — prints stats each frame."""
    sim = _make_sim(args)

    print(f"\nHeadless simulation | {args.width}x{args.height} | {args.frames} frames")
    print(f"{'─'*60}")

    total_times = []
    for f in range(args.frames):
        _emit(sim)
        metrics = sim.step()
        total_times.append(metrics["total_ms"])

        if f % 10 == 0:
            print(f"  Frame {f:03d} | {metrics['total_ms']:6.1f}ms "
                  f"({metrics['fps']:.1f} FPS) | "
                  f"div_max={metrics['divergence_max']:.5f} | "
                  f"density={metrics['density_total']:.1f}")

    print(f"\n{'─'*60}")
    print(f"  Average: {np.mean(total_times):.1f}ms/frame ({1000/np.mean(total_times):.1f} FPS)")
    print(f"  Min:     {np.min(total_times):.1f}ms")
    print(f"  Max:     {np.max(total_times):.1f}ms")
    sim.print_status()


def run_benchmark(args):
    """
    Detailed performance breakdown.
    Shows how long each physics stage takes.
    """
    print(f"\n{'='*60}")
    print(f"  BENCHMARK | {args.width}x{args.height} | {args.frames} frames")
    print(f"{'='*60}")

    sim = _make_sim(args)

    # Warm up
    for _ in range(5):
        _emit(sim)
        sim.step()

    logs = []
    for _ in range(args.frames):
        _emit(sim)
        logs.append(sim.step())

    keys = ["advect_vel_ms", "advect_den_ms", "forces_ms", "project_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  FPS (physics only): {1000/np.mean(total_vals):.1f}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="2D Smoke Simulation")
    parser.add_argument(
        "--mode", choices=["live", "headless", "benchmark"],
        default="headless",
        help="Run mode (default: headless)"
    )
    parser.add_argument("--width",     type=int,   default=64,   help="Grid width in cells (default: 64)")
    parser.add_argument("--height",    type=int,   default=64,   help="Grid height in cells (default: 64)")
    parser.add_argument("--cell-size", type=float, default=0.5,  help="Cell edge length (default: 0.5)")
    parser.add_argument("--dt",        type=float, default=0.02, help="Timestep (default: 0.02)")
    parser.add_argument("--buoyancy",  type=float, default=1.0,  help="Buoyancy per unit density (default: 1.0)")
    parser.add_argument("--frames",    type=int,   default=100,  help="Number of frames")

    args = parser.parse_args()
    if args.dt <= 0:
        parser.error("--dt must be positive")

    if args.mode == "live":
        run_live(args)
    elif args.mode == "headless":
        run_headless(args)
    elif args.mode == "benchmark":
        run_benchmark(args)
