"""Dataset registry and the built-in problems."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, MutableMapping

import numpy as np

from .dataset import DataSet

XOR_TEXT = "2 1 %.0f %.0f %.3f;x1 x2 XOR;0 0 0;0 1 1;1 0 1;1 1 0"

TWO_CLASS_TEXT = (
    "2 2 %.1f %.0f %.3f;0.1 1.2 1 0;0.7 1.8 1 0;0.8 1.6 1 0;1 0.8 0 0;"
    "0.3 0.5 1 1;0 0.2 1 1;-0.3 0.8 1 1;-0.5 -1.5 0 1;-1.5 -1.3 0 1"
)


@dataclass(frozen=True)
class DatasetBundle:
    """Training, unseen and optional validation sets for one problem."""

    name: str
    train: DataSet
    unseen: DataSet
    validation: DataSet | None = None
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def num_inputs(self) -> int:
        return self.train.num_inputs

    @property
    def num_outputs(self) -> int:
        return self.train.num_outputs


DatasetFactory = Callable[..., DatasetBundle]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(name: str) -> Callable[[DatasetFactory], DatasetFactory]:
    """Register a dataset factory under ``name``::

        @register_dataset("xor")
        def make_xor(**options):
            ...
    """

    def decorator(factory: DatasetFactory) -> DatasetFactory:
        _REGISTRY[name] = factory
        return factory

    return decorator


def available() -> list[str]:
    return sorted(_REGISTRY)


def get_dataset(name: str, **options: Any) -> DatasetBundle:
    try:
        factory = _REGISTRY[name]
    except KeyError as exc:
        raise KeyError(f"Unknown dataset {name!r}. Available: {', '.join(available())}") from exc
    return factory(**options)


@register_dataset("xor")
def make_xor() -> DatasetBundle:
    """The four XOR patterns, used for both training and unseen reporting."""

    return DatasetBundle(
        name="xor",
        train=DataSet.from_text(XOR_TEXT, name="xor-train"),
        unseen=DataSet.from_text(XOR_TEXT, name="xor-unseen"),
        provenance={"source": "builtin", "text": XOR_TEXT},
    )


@register_dataset("two_class")
def make_two_class() -> DatasetBundle:
    """Nine points with two binary outputs that are not linearly separable."""

    return DatasetBundle(
        name="two_class",
        train=DataSet.from_text(TWO_CLASS_TEXT, name="two_class-train"),
        unseen=DataSet.from_text(TWO_CLASS_TEXT, name="two_class-unseen"),
        provenance={"source": "builtin", "text": TWO_CLASS_TEXT},
    )


def _blobs(rng: np.random.Generator, count: int, noise: float) -> DataSet:
    labels = np.arange(count) % 2
    centres = np.where(labels[:, None] == 1, 1.0, -1.0) * np.ones((count, 2))
    inputs = centres + noise * rng.standard_normal((count, 2))
    return DataSet(
        inputs,
        labels.reshape(-1, 1).astype(np.float64),
        labels=["x1", "x2", "class"],
        input_format="%.2f",
        output_format="%.0f",
    )


@register_dataset("noisy_two_class")
def make_noisy_two_class(
    n_train: int = 40,
    n_unseen: int = 20,
    n_valid: int = 20,
    noise: float = 0.8,
    seed: int = 0,
) -> DatasetBundle:
    """Two overlapping Gaussian blobs split into train, unseen and validation sets."""

    rng = np.random.default_rng(seed)
    train = _blobs(rng, n_train, noise)
    unseen = _blobs(rng, n_unseen, noise)
    validation = _blobs(rng, n_valid, noise)
    train.name, unseen.name, validation.name = "blobs-train", "blobs-unseen", "blobs-valid"
    return DatasetBundle(
        name="noisy_two_class",
        train=train,
        unseen=unseen,
        validation=validation,
        provenance={
            "source": "synthetic",
            "n_train": n_train,
            "n_unseen": n_unseen,
            "n_valid": n_valid,
            "noise": noise,
            "seed": seed,
        },
    )


__all__ = [
    "DatasetBundle",
    "XOR_TEXT",
    "TWO_CLASS_TEXT",
    "available",
    "get_dataset",
    "register_dataset",
]
