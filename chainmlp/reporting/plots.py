"""Headless-safe plotting of SSE curves."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple


class PlotAdapter:
    """Collect per-split SSE values and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def logger(self, split: str):
        """Return an ``(epoch, metrics)`` callback recording ``split``."""

        def _record(epoch: int, metrics) -> None:
            if self.enable_plots:
                sse = float(metrics.get("sse", 0.0))
                self._history.setdefault(split, []).append((epoch, sse))

        return _record

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for split, points in sorted(self._history.items()):
            epochs, values = zip(*points)
            ax.plot(epochs, values, label=split)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("SSE")
        ax.set_title("Training Curve")
        ax.legend()
        plot_path = self.run_dir / "sse.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path
