"""
Visualization for keyboard layout optimization

Draws layout layers over their effort grid, colored finger assignments,
and the score history of a run.
"""

import matplotlib.pyplot as plt
import numpy as np
from typing import List, Optional, Sequence, Tuple

from .key import Finger, Hand
from .keycode import Keycode
from .layer import Layer
from .layout import Layout
from .optimizer import GenerationStats, OptimizationResult


class LayoutVisualizer:
    """Plots layouts against the effort and phalanx layers of a keyboard"""

    def __init__(self, effort_layer: Layer, phalanx_layer: Layer):
        self.effort_layer = effort_layer
        self.phalanx_layer = phalanx_layer
        self.finger_colors = {
            Finger.THUMB: "tab:gray",
            Finger.INDEX: "tab:blue",
            Finger.MIDDLE: "tab:green",
            Finger.RING: "tab:orange",
            Finger.PINKIE: "tab:red",
            Finger.JOINT: "tab:purple",
        }

    def plot_layer(self, layout: Layout, layer_index: int = 0, ax: plt.Axes = None, title: Optional[str] = None):
        """
        Draw one layer's keycodes over an effort heatmap.

        Non-moveable keys are drawn in bold, symmetric keys are underlined
        with a marker.
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=(1.1 * layout.num_cols + 2, 1.1 * layout.num_rows + 1))

        efforts = np.array(self.effort_layer.values(), dtype=float)
        image = ax.imshow(efforts, cmap="YlOrRd", alpha=0.6)
        plt.colorbar(image, ax=ax, fraction=0.025, pad=0.02, label="Effort")

        layer = layout.layer(layer_index)
        for row, col, key in layer.cells():
            label = "" if key.value is Keycode.NO else key.value.value
            ax.text(col, row, label, ha="center", va="center", fontsize=10,
                    fontweight="normal" if key.is_moveable else "bold")
            if key.is_symmetric:
                ax.plot(col, row + 0.32, marker="^", color="black", markersize=4)

        ax.set_xticks(range(layout.num_cols))
        ax.set_yticks(range(layout.num_rows))
        ax.set_title(title or f"Layer {layer_index}")
        return ax

    def plot_fingers(self, ax: plt.Axes = None):
        """Draw the finger assignment grid, left hand hatched"""
        if ax is None:
            fig, ax = plt.subplots(figsize=(1.1 * self.phalanx_layer.num_cols + 1, 1.1 * self.phalanx_layer.num_rows))

        for row, col, phalanx in self.phalanx_layer.cells():
            color = self.finger_colors.get(phalanx.finger, "lightgray")
            hatch = "//" if phalanx.hand is Hand.LEFT else None
            ax.add_patch(plt.Rectangle((col - 0.45, row - 0.45), 0.9, 0.9,
                                       facecolor=color, alpha=0.5, hatch=hatch, edgecolor="black"))
            ax.text(col, row, phalanx.to_token(), ha="center", va="center", fontsize=8)

        ax.set_xlim(-0.5, self.phalanx_layer.num_cols - 0.5)
        ax.set_ylim(self.phalanx_layer.num_rows - 0.5, -0.5)
        ax.set_aspect("equal")
        ax.set_title("Finger assignment")
        return ax

    def plot_layout(self, layout: Layout, save_path: Optional[str] = None, show: bool = False):
        """Plot every layer of a layout in one figure"""
        fig, axes = plt.subplots(layout.num_layers, 1,
                                 figsize=(1.1 * layout.num_cols + 2, 3 * layout.num_layers),
                                 squeeze=False)
        for layer_index in range(layout.num_layers):
            self.plot_layer(layout, layer_index, ax=axes[layer_index][0])

        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
        if show:
            plt.show()
        return fig


def history_arrays(history: Sequence[GenerationStats]) -> Tuple[np.ndarray, ...]:
    """Columns of the history as arrays: generation, best, mean, worst, best_ever."""
    return tuple(
        np.array([getattr(stats, name) for stats in history], dtype=float)
        for name in ('generation', 'best', 'mean', 'worst', 'best_ever')
    )


def plot_score_history(history: List[GenerationStats], ax: plt.Axes = None,
                       save_path: Optional[str] = None, show: bool = False):
    """
    Plot best, mean and best-ever effort per generation with the worst-to-best band.

    Args:
        history: Generation statistics from an optimization run
        ax: Axes to draw on (a new figure is created if omitted)
        save_path: Optional path to save the figure
        show: Whether to call plt.show()
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 5))

    generations, best, mean, worst, best_ever = history_arrays(history)
    ax.fill_between(generations, best, worst, color="lightblue", alpha=0.4, label="best-worst")
    ax.plot(generations, mean, color="tab:blue", linewidth=1, label="mean")
    ax.plot(generations, best, color="tab:green", linewidth=1, marker=".", label="best")
    ax.plot(generations, best_ever, color="black", linewidth=2, label="best ever")

    ax.set_xlabel("Generation")
    ax.set_ylabel("Effort (lower is better)")
    ax.set_title("Score history")
    ax.grid(True, alpha=0.3)
    ax.legend()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
    if show:
        plt.show()
    return ax


def plot_result(result: OptimizationResult, effort_layer: Layer, phalanx_layer: Layer,
                output_dir: Optional[str] = None, show: bool = False) -> List[str]:
    """
    Save the standard plots of a run.

    Returns:
        Paths of the saved figures (empty when output_dir is None)
    """
    visualizer = LayoutVisualizer(effort_layer, phalanx_layer)
    saved = []

    layout_path = f"{output_dir}/best_layout.png" if output_dir else None
    fig = visualizer.plot_layout(result.best_layout, save_path=layout_path, show=show)
    plt.close(fig)

    history_path = f"{output_dir}/score_history.png" if output_dir else None
    fig, ax = plt.subplots(figsize=(8, 5))
    plot_score_history(result.history, ax=ax, save_path=history_path, show=show)
    plt.close(fig)

    for path in (layout_path, history_path):
        if path:
            saved.append(path)
    return saved
