"""Training loop and run pipelines."""

from .pipelines import load_config, load_preset, presets, run_pipeline
from .trainer import Trainer, TrainerState

__all__ = ["Trainer", "TrainerState", "load_config", "load_preset", "presets", "run_pipeline"]
