"""Core typing contracts for chainmlp."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class LayerShape:
    """Width and activation of a single layer."""

    num_inputs: int
    num_outputs: int
    activation: str = "sigmoid"

    @property
    def num_weights(self) -> int:
        return self.num_outputs * (self.num_inputs + 1)


@dataclass(frozen=True)
class NetworkDescription:
    """Description of a layer chain, head layer first."""

    layers: List[LayerShape] = field(default_factory=list)

    @property
    def layer_dims(self) -> List[int]:
        if not self.layers:
            return []
        return [self.layers[0].num_inputs] + [layer.num_outputs for layer in self.layers]

    @property
    def num_weights(self) -> int:
        return sum(layer.num_weights for layer in self.layers)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`chainmlp.training.pipelines.run_pipeline`."""

    epochs: int
    stopped: bool
    before: str
    after: str
    report: str
    weights: str
    run_dir: str = ""
    manifest_path: str = ""
    metrics_path: str = ""
