"""Run manifest for reproducing a training run."""

from __future__ import annotations

import json
import subprocess
import time
from pathlib import Path
from typing import Mapping

from ..core.layers import Layer

# Order of the tokens in a dumped weight string.
WEIGHT_ORDER = "head layer first; per output unit: bias, then one weight per input"


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def describe_network(network: Layer) -> dict:
    """Layer shapes plus the final weight string, enough to rebuild ``network``."""

    description = network.describe()
    return {
        "layer_dims": description.layer_dims,
        "layers": [
            {
                "inputs": layer.num_inputs,
                "outputs": layer.num_outputs,
                "activation": layer.activation,
            }
            for layer in description.layers
        ],
        "num_weights": description.num_weights,
        "weight_order": WEIGHT_ORDER,
        "weights": network.dump_weights(),
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    network: Layer,
    outcome: Mapping[str, object],
) -> str:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "git_sha": _git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "config": config,
        "dataset": dict(dataset_provenance),
        "network": describe_network(network),
        "outcome": dict(outcome),
    }
    path.write_text(json.dumps(manifest, indent=2))
    return str(path)
