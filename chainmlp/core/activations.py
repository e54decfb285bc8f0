"""Activation utilities for chainmlp."""

from __future__ import annotations

import numpy as np

from .types import Array


def identity(x: Array) -> Array:
    """Return ``x`` unchanged (linear activation)."""

    return np.asarray(x, dtype=np.float64)


def identity_deriv(outputs: Array) -> Array:
    return np.ones_like(outputs, dtype=np.float64)


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


def sigmoid_deriv(outputs: Array) -> Array:
    """Derivative of the sigmoid expressed in terms of its outputs."""

    return outputs * (1.0 - outputs)


ACTIVATIONS = {
    "linear": (identity, identity_deriv),
    "sigmoid": (sigmoid, sigmoid_deriv),
}

__all__ = ["ACTIVATIONS", "identity", "identity_deriv", "sigmoid", "sigmoid_deriv"]
