"""
visualizer.py — 2D Smoke Viewer
================================
Renders one field of the simulation (density, divergence, pressure or
velocity magnitude) with an optional velocity-vector overlay and grid
lines. Uses matplotlib FuncAnimation for real-time updates.

Controls:
  left drag   → paint smoke, push fluid along the drag
  right drag  → paint obstacles   (shift + right drag erases)
  m           → next draw mode
  v / g       → toggle vectors / grid lines
  c           → clear the fluid (obstacles stay)
  1..4        → grid size 50, 100, 150, 200 cells per side
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.colors import LinearSegmentedColormap

from smoke2d.display import SIGNED_MODES, field_image, next_draw_mode, velocity_vectors
from smoke2d.interaction import add_velocity, paint_density, paint_obstacle, world_to_cell

# Custom smoke colormap: black → orange → white
SMOKE_COLORS = ["#000000", "#1a0a00", "#ff6a00", "#ffffff"]
smoke_cmap = LinearSegmentedColormap.from_list("smoke", SMOKE_COLORS)

# Signed fields: blue (negative) → black → orange (positive)
SIGNED_COLORS = ["#0080ff", "#000000", "#ff8000"]
signed_cmap = LinearSegmentedColormap.from_list("signed", SIGNED_COLORS)

SIZE_PRESETS = {"1": 50, "2": 100, "3": 150, "4": 200}


class FluidVisualizer:
    """
    Real-time viewer of the 2D fluid simulation.

    Usage (standalone):
        from smoke2d import FluidSimulation
        from visualizer import FluidVisualizer

        sim = FluidSimulation(width=64, height=64, buoyancy=2.0)
        viz = FluidVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, draw_mode: str = "density",
                 brush_radius: float = 2.0, brush_strength: float = 10.0,
                 vector_scale: float = 0.5):
        """
        Args:
            simulation     : FluidSimulation instance
            draw_mode      : One of smoke2d.display.DRAW_MODES
            brush_radius   : Brush radius in physical units
            brush_strength : Velocity added per unit of mouse travel
            vector_scale   : Arrow length per unit of speed
        """
        self.sim = simulation
        self.draw_mode = draw_mode
        self.brush_radius = brush_radius
        self.brush_strength = brush_strength
        self.vector_scale = vector_scale
        self.show_vectors = True
        self.show_grid_lines = False

        self._drag_button = None
        self._last_pos = None
        self._quiver = None
        self._grid_lines = []

        self._setup_figure()

    # ── Figure ────────────────────────────────────────────────────────────

    def _setup_figure(self):
        """Initialize the matplotlib figure with a single image axis."""
        self.fig, self.ax = plt.subplots(figsize=(7, 7))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])
        for spine in self.ax.spines.values():
            spine.set_edgecolor('#333333')

        self.title_text = self.ax.set_title(
            "", color='#cccccc', fontsize=10, fontfamily='monospace'
        )
        self._build_image()

        self.fig.canvas.mpl_connect("button_press_event", self._on_press)
        self.fig.canvas.mpl_connect("button_release_event", self._on_release)
        self.fig.canvas.mpl_connect("motion_notify_event", self._on_motion)
        self.fig.canvas.mpl_connect("key_press_event", self._on_key)

        plt.tight_layout()

    def _build_image(self):
        """(Re)create the image for the current grid size."""
        g = self.sim.grid
        for img in list(self.ax.images):
            img.remove()

        extent = (0, g.width * g.cell_size, 0, g.height * g.cell_size)
        self.img = self.ax.imshow(
            np.zeros((g.height, g.width)), cmap=smoke_cmap,
            vmin=0, vmax=1.0,
            interpolation='nearest',
            origin='lower',
            extent=extent,
            aspect='equal'
        )
        self.ax.set_xlim(extent[0], extent[1])
        self.ax.set_ylim(extent[2], extent[3])
        self._draw_grid_lines()

    def _draw_grid_lines(self):
        for line in self._grid_lines:
            line.remove()
        self._grid_lines = []
        if not self.show_grid_lines:
            return
        g = self.sim.grid
        w, h = g.width * g.cell_size, g.height * g.cell_size
        xs = np.arange(g.width + 1) * g.cell_size
        ys = np.arange(g.height + 1) * g.cell_size
        self._grid_lines.append(self.ax.vlines(xs, 0, h, colors='white', alpha=0.1, linewidth=0.5))
        self._grid_lines.append(self.ax.hlines(ys, 0, w, colors='white', alpha=0.1, linewidth=0.5))

    def _draw_vectors(self):
        if self._quiver is not None:
            self._quiver.remove()
            self._quiver = None
        if not self.show_vectors:
            return
        px, py, uc, vc = velocity_vectors(self.sim.grid)
        if px.size == 0:
            return
        self._quiver = self.ax.quiver(
            px, py, uc * self.vector_scale, vc * self.vector_scale,
            color=(1, 1, 1, 0.5), angles='xy', scale_units='xy', scale=1,
            width=0.002
        )

    def _draw_field(self):
        data = field_image(self.sim.grid, self.draw_mode)
        self.img.set_data(data)
        if self.draw_mode in SIGNED_MODES:
            limit = max(float(np.abs(data).max()), 1e-6)
            self.img.set_cmap(signed_cmap)
            self.img.set_clim(-limit, limit)
        elif self.draw_mode == "velocity":
            self.img.set_cmap('gray')
            self.img.set_clim(0, max(float(data.max()), 1e-6))
        else:
            self.img.set_cmap(smoke_cmap)
            self.img.set_clim(0, 1.0)

    # ── Mouse / keyboard ──────────────────────────────────────────────────

    def _on_press(self, event):
        if event.inaxes is not self.ax or event.xdata is None:
            return
        self._drag_button = event.button
        self._last_pos = (event.xdata, event.ydata)
        self._paint(event.xdata, event.ydata, 0.0, 0.0, event.key)

    def _on_release(self, event):
        self._drag_button = None
        self._last_pos = None

    def _on_motion(self, event):
        if self._drag_button is None or event.inaxes is not self.ax or event.xdata is None:
            return
        dx = event.xdata - self._last_pos[0]
        dy = event.ydata - self._last_pos[1]
        self._last_pos = (event.xdata, event.ydata)
        self._paint(event.xdata, event.ydata, dx, dy, event.key)

    def _paint(self, px, py, dx, dy, key):
        g = self.sim.grid
        cx, cy = world_to_cell(g, px, py)
        if self._drag_button == 1:
            paint_density(g, cx, cy, self.brush_radius)
            add_velocity(g, cx, cy, dx * self.brush_strength, dy * self.brush_strength)
        elif self._drag_button == 3:
            paint_obstacle(g, cx, cy, self.brush_radius, solid=(key != "shift"))

    def _on_key(self, event):
        if event.key == "m":
            self.draw_mode = next_draw_mode(self.draw_mode)
            print(f"[Visualizer] Draw mode: {self.draw_mode}")
        elif event.key == "v":
            self.show_vectors = not self.show_vectors
        elif event.key == "g":
            self.show_grid_lines = not self.show_grid_lines
            self._draw_grid_lines()
        elif event.key == "c":
            self.sim.reset()
        elif event.key in SIZE_PRESETS:
            n = SIZE_PRESETS[event.key]
            self.sim.set_grid_size(n, n)
            self._build_image()

    # ── Animation ─────────────────────────────────────────────────────────

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and redraws."""
        metrics = self.sim.step()

        self._draw_field()
        self._draw_vectors()

        fps = metrics.get("fps", 0.0)
        div_max = metrics.get("divergence_max", 0.0)
        self.title_text.set_text(
            f"Frame {self.sim.frame} | {self.draw_mode} | "
            f"{fps:.1f} FPS | div_max={div_max:.5f}"
        )
        return [self.img, self.title_text]

    def run(self, fps: int = 30, frames: int = None):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render (None = infinite)
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=False,
            cache_frame_data=False
        )
        plt.show()

    def save_gif(self, path: str = "smoke2d.gif", fps: int = 10, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=100, blit=False
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")
