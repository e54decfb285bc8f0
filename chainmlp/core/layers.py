"""Composable layers and the backpropagation chain.

A network is either a single leaf layer or a :class:`ChainedLayer` holding a
head layer and the rest of the network as its successor.  Every operation on a
chain runs the head's version and then forwards to the successor, so chains of
any depth behave like one layer to the trainer.

Weights of a leaf with ``n`` inputs are stored per output unit as
``[bias, w_0, ..., w_{n-1}]``.  The flat weight string of a chain is the head's
dump followed by the successor's, which is the order :meth:`load_weights`
consumes.
"""

from __future__ import annotations

import abc
from typing import List, Sequence, Union

import numpy as np

from .activations import ACTIVATIONS
from .errors import ConfigurationError, FormatError, ShapeMismatch
from .types import Array, LayerShape, NetworkDescription

RandomSource = Union[np.random.Generator, int, None]


def _as_generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _as_vector(values: Sequence[float] | Array, size: int, what: str) -> Array:
    vec = np.asarray(values, dtype=np.float64).reshape(-1)
    if vec.shape[0] != size:
        raise ShapeMismatch(f"Expected {size} {what}, got {vec.shape[0]}")
    return vec


def _parse_weights(tokens: Sequence[str], count: int) -> Array:
    if len(tokens) < count:
        raise FormatError(f"Expected at least {count} weight values, got {len(tokens)}")
    try:
        return np.array([float(token) for token in tokens[:count]], dtype=np.float64)
    except ValueError as exc:
        raise FormatError(f"Weight values must be decimal numbers: {exc}") from exc


class Layer(abc.ABC):
    """Capability shared by leaf layers and layer chains."""

    num_inputs: int
    num_outputs: int

    @property
    @abc.abstractmethod
    def outputs(self) -> Array:
        """Outputs of the last layer from the most recent forward pass."""

    @property
    @abc.abstractmethod
    def num_weights(self) -> int:
        """Total weight count including biases."""

    @abc.abstractmethod
    def compute_outputs(self, inputs: Sequence[float] | Array) -> None:
        ...

    @abc.abstractmethod
    def deposit_outputs(self, index: int, dataset) -> None:
        ...

    @abc.abstractmethod
    def compute_deltas(self, errors: Sequence[float] | Array) -> None:
        ...

    @abc.abstractmethod
    def weighted_deltas(self) -> Array:
        ...

    @abc.abstractmethod
    def update_weights(
        self, inputs: Sequence[float] | Array, learn_rate: float, momentum: float
    ) -> None:
        ...

    @abc.abstractmethod
    def load_weights(self, tokens: Sequence[str]) -> List[str]:
        """Consume this layer's weights from ``tokens`` and return the rest."""

    @abc.abstractmethod
    def randomize_weights(self, rng: RandomSource = None) -> None:
        ...

    @abc.abstractmethod
    def dump_weights(self) -> str:
        ...

    @abc.abstractmethod
    def initialize(self) -> None:
        """Clear momentum memory and cached activations before a run."""

    @abc.abstractmethod
    def leaves(self) -> List["LinearLayer"]:
        """Leaf layers in forward order."""

    def set_weights(self, weights: str | Sequence[str]) -> None:
        """Load a complete weight string; the token count must match exactly."""

        tokens = weights.split() if isinstance(weights, str) else list(weights)
        if len(tokens) != self.num_weights:
            raise FormatError(
                f"Weight string has {len(tokens)} values, network needs {self.num_weights}"
            )
        _parse_weights(tokens, self.num_weights)
        self.load_weights(tokens)

    def describe(self) -> NetworkDescription:
        return NetworkDescription(
            layers=[
                LayerShape(leaf.num_inputs, leaf.num_outputs, leaf.activation)
                for leaf in self.leaves()
            ]
        )


class LinearLayer(Layer):
    """Layer of neurons with linear activation sharing the same inputs.

    Weights start at zero unless ``weights`` (a weight string) or ``rng`` is
    given.
    """

    activation = "linear"

    def __init__(
        self,
        num_inputs: int,
        num_outputs: int,
        weights: str | Sequence[str] | None = None,
        rng: RandomSource = None,
    ) -> None:
        if num_inputs < 1 or num_outputs < 1:
            raise ShapeMismatch(
                f"Layer needs at least one input and one output, got {num_inputs}x{num_outputs}"
            )
        self.num_inputs = int(num_inputs)
        self.num_outputs = int(num_outputs)
        self._activate, self._derivative = ACTIVATIONS[self.activation]
        self.weights = np.zeros((self.num_outputs, self.num_inputs + 1), dtype=np.float64)
        self._changes = np.zeros_like(self.weights)
        self._outputs = np.zeros(self.num_outputs, dtype=np.float64)
        self.deltas = np.zeros(self.num_outputs, dtype=np.float64)
        if weights is not None:
            self.set_weights(weights)
        elif rng is not None:
            self.randomize_weights(rng)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} inputs={self.num_inputs} outputs={self.num_outputs}>"

    @property
    def outputs(self) -> Array:
        return self._outputs

    @property
    def num_weights(self) -> int:
        return int(self.weights.size)

    def compute_outputs(self, inputs: Sequence[float] | Array) -> None:
        x = _as_vector(inputs, self.num_inputs, "inputs")
        net = self.weights[:, 0] + self.weights[:, 1:] @ x
        self._outputs = self._activate(net)

    def deposit_outputs(self, index: int, dataset) -> None:
        dataset.record_outputs(index, self._outputs)

    def compute_deltas(self, errors: Sequence[float] | Array) -> None:
        err = _as_vector(errors, self.num_outputs, "errors")
        self.deltas = err * self._derivative(self._outputs)

    def weighted_deltas(self) -> Array:
        return self.weights[:, 1:].T @ self.deltas

    def update_weights(
        self, inputs: Sequence[float] | Array, learn_rate: float, momentum: float
    ) -> None:
        x = np.concatenate(([1.0], _as_vector(inputs, self.num_inputs, "inputs")))
        change = learn_rate * np.outer(self.deltas, x) + momentum * self._changes
        self.weights += change
        self._changes = change

    def load_weights(self, tokens: Sequence[str]) -> List[str]:
        values = _parse_weights(tokens, self.num_weights)
        self.weights = values.reshape(self.weights.shape)
        return list(tokens[self.num_weights:])

    def randomize_weights(self, rng: RandomSource = None) -> None:
        gen = _as_generator(rng)
        self.weights = gen.uniform(-1.0, 1.0, size=self.weights.shape)

    def dump_weights(self) -> str:
        return " ".join(repr(float(w)) for w in self.weights.ravel())

    def initialize(self) -> None:
        self._changes = np.zeros_like(self.weights)
        self._outputs = np.zeros(self.num_outputs, dtype=np.float64)
        self.deltas = np.zeros(self.num_outputs, dtype=np.float64)

    def leaves(self) -> List["LinearLayer"]:
        return [self]


class SigmoidLayer(LinearLayer):
    """Layer of sigmoidally activated neurons; the hidden-layer behaviour."""

    activation = "sigmoid"


class ChainedLayer(Layer):
    """A head layer feeding a successor, which may itself be a chain."""

    def __init__(self, head: Layer, successor: Layer) -> None:
        if head.num_outputs != successor.num_inputs:
            raise ShapeMismatch(
                f"Layer with {head.num_outputs} outputs cannot feed "
                f"a layer with {successor.num_inputs} inputs"
            )
        self.head = head
        self.successor = successor
        self.num_inputs = head.num_inputs
        self.num_outputs = successor.num_outputs

    def __repr__(self) -> str:
        dims = self.describe().layer_dims
        return f"<ChainedLayer dims={dims}>"

    @property
    def outputs(self) -> Array:
        return self.successor.outputs

    @property
    def num_weights(self) -> int:
        return self.head.num_weights + self.successor.num_weights

    def compute_outputs(self, inputs: Sequence[float] | Array) -> None:
        self.head.compute_outputs(inputs)
        self.successor.compute_outputs(self.head.outputs)

    def deposit_outputs(self, index: int, dataset) -> None:
        self.successor.deposit_outputs(index, dataset)

    def compute_deltas(self, errors: Sequence[float] | Array) -> None:
        # successor deltas must exist before they are propagated back
        self.successor.compute_deltas(errors)
        self.head.compute_deltas(self.successor.weighted_deltas())

    def weighted_deltas(self) -> Array:
        return self.head.weighted_deltas()

    def update_weights(
        self, inputs: Sequence[float] | Array, learn_rate: float, momentum: float
    ) -> None:
        self.head.update_weights(inputs, learn_rate, momentum)
        self.successor.update_weights(self.head.outputs, learn_rate, momentum)

    def load_weights(self, tokens: Sequence[str]) -> List[str]:
        return self.successor.load_weights(self.head.load_weights(tokens))

    def randomize_weights(self, rng: RandomSource = None) -> None:
        gen = _as_generator(rng)
        self.head.randomize_weights(gen)
        self.successor.randomize_weights(gen)

    def dump_weights(self) -> str:
        return f"{self.head.dump_weights()} {self.successor.dump_weights()}"

    def initialize(self) -> None:
        self.head.initialize()
        self.successor.initialize()

    def leaves(self) -> List[LinearLayer]:
        return self.head.leaves() + self.successor.leaves()


_OUTPUT_LAYERS = {"linear": LinearLayer, "sigmoid": SigmoidLayer}


def build_network(
    layer_dims: Sequence[int],
    output: str = "sigmoid",
    weights: str | Sequence[str] | None = None,
    seed: RandomSource = None,
) -> Layer:
    """Build a chain of sigmoid hidden layers ending in an ``output`` layer.

    ``layer_dims`` lists the input width, each hidden width and the output
    width, e.g. ``[2, 2, 1]`` for the XOR network.  The network is loaded from
    ``weights`` when given, otherwise randomised from ``seed``.
    """

    dims = [int(d) for d in layer_dims]
    if len(dims) < 2:
        raise ConfigurationError(f"Need at least input and output widths, got {dims}")
    try:
        output_cls = _OUTPUT_LAYERS[output]
    except KeyError as exc:
        available = ", ".join(sorted(_OUTPUT_LAYERS))
        raise ConfigurationError(
            f"Unknown output activation {output!r}. Available: {available}"
        ) from exc

    network: Layer = output_cls(dims[-2], dims[-1])
    for in_dim, out_dim in reversed(list(zip(dims[:-2], dims[1:-1]))):
        network = ChainedLayer(SigmoidLayer(in_dim, out_dim), network)

    if weights is not None:
        network.set_weights(weights)
    else:
        network.randomize_weights(seed)
    return network


__all__ = ["Layer", "LinearLayer", "SigmoidLayer", "ChainedLayer", "build_network"]
