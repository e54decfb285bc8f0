"""Core numerical primitives for chainmlp."""

from . import activations, errors, layers, types

__all__ = ["activations", "errors", "layers", "types"]
