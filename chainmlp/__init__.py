"""chainmlp public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import ConfigurationError, ConfigurationWarning, FormatError, ShapeMismatch
from .core.layers import ChainedLayer, Layer, LinearLayer, SigmoidLayer, build_network
from .data import DataSet, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer, TrainerState

__all__ = [
    "ChainedLayer",
    "ConfigurationError",
    "ConfigurationWarning",
    "DataSet",
    "FormatError",
    "Layer",
    "LinearLayer",
    "ShapeMismatch",
    "SigmoidLayer",
    "Trainer",
    "TrainerState",
    "activations",
    "build_network",
    "get_dataset",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
