import math

import numpy as np
import pytest

from chainmlp.core.errors import ConfigurationError, FormatError, ShapeMismatch
from chainmlp.core.layers import ChainedLayer, LinearLayer, SigmoidLayer, build_network


def _sig(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def test_single_sigmoid_neuron_closed_form():
    layer = SigmoidLayer(2, 1, weights="0.5 -0.5 0.1")
    layer.compute_outputs([1.0, 0.0])
    assert layer.outputs[0] == pytest.approx(0.5)

    layer.compute_outputs([0.0, 1.0])
    assert layer.outputs[0] == pytest.approx(_sig(0.6))


def test_chain_outputs_match_manual_composition():
    weights = "0.1 0.2 -0.3 -0.4 0.5 0.6 " "0.7 -0.8 0.9 " "-0.2 1.5"
    network = build_network([2, 2, 1, 1], weights=weights)
    network.compute_outputs([1.0, 0.5])

    h1 = _sig(0.1 + 0.2 * 1.0 - 0.3 * 0.5)
    h2 = _sig(-0.4 + 0.5 * 1.0 + 0.6 * 0.5)
    h3 = _sig(0.7 - 0.8 * h1 + 0.9 * h2)
    expected = _sig(-0.2 + 1.5 * h3)
    assert network.outputs.shape == (1,)
    assert network.outputs[0] == pytest.approx(expected)


def test_linear_output_layer_is_not_squashed():
    network = build_network([1, 1, 1], output="linear", weights="0 0 3 4")
    network.compute_outputs([5.0])
    assert network.outputs[0] == pytest.approx(3.0 + 4.0 * 0.5)


def test_sigmoid_deltas_use_output_derivative():
    layer = SigmoidLayer(1, 1, weights="0 0")
    layer.compute_outputs([3.0])
    layer.compute_deltas([0.2])
    assert layer.deltas[0] == pytest.approx(0.2 * 0.5 * 0.5)


def test_weighted_deltas_length_follows_inputs():
    layer = LinearLayer(3, 2, weights="0 1 2 3 0 4 5 6")
    layer.compute_outputs([0.0, 0.0, 0.0])
    layer.compute_deltas([1.0, 2.0])
    weighted = layer.weighted_deltas()
    assert weighted.shape == (3,)
    assert np.allclose(weighted, [9.0, 12.0, 15.0])

    wide = SigmoidLayer(2, 7, rng=0)
    wide.compute_outputs([0.3, -0.3])
    wide.compute_deltas(np.ones(7))
    assert wide.weighted_deltas().shape == (2,)


def test_update_weights_applies_momentum():
    layer = LinearLayer(1, 1, weights="0 0")
    layer.compute_outputs([2.0])
    layer.compute_deltas([1.0])
    layer.update_weights([2.0], learn_rate=0.5, momentum=0.9)
    assert np.allclose(layer.weights, [[0.5, 1.0]])

    layer.update_weights([2.0], learn_rate=0.5, momentum=0.9)
    assert np.allclose(layer.weights, [[0.5 + 0.95, 1.0 + 1.9]])

    layer.initialize()
    layer.update_weights([2.0], learn_rate=0.0, momentum=0.9)
    assert np.allclose(layer.weights, [[1.45, 2.9]])


def test_chain_backpropagates_successor_deltas():
    head = SigmoidLayer(1, 1, weights="0 0")
    tail = LinearLayer(1, 1, weights="0 2")
    network = ChainedLayer(head, tail)
    network.compute_outputs([1.0])
    assert network.outputs[0] == pytest.approx(1.0)

    network.compute_deltas([1.0])
    assert tail.deltas[0] == pytest.approx(1.0)
    assert head.deltas[0] == pytest.approx(2.0 * 0.25)

    network.update_weights([1.0], learn_rate=1.0, momentum=0.0)
    assert np.allclose(head.weights, [[0.5, 0.5]])
    assert np.allclose(tail.weights, [[1.0, 2.5]])


def test_num_weights_sums_layer_shapes():
    assert build_network([3, 4, 2], seed=0).num_weights == 4 * 4 + 2 * 5
    deep = build_network([2, 3, 3, 1], seed=0)
    assert deep.num_weights == 3 * 3 + 3 * 4 + 1 * 4
    assert len(deep.dump_weights().split()) == deep.num_weights


def test_dump_then_load_reproduces_weights_exactly():
    original = build_network([3, 4, 2], seed=7)
    copy = build_network([3, 4, 2], seed=99)
    copy.set_weights(original.dump_weights())
    for left, right in zip(original.leaves(), copy.leaves()):
        assert np.array_equal(left.weights, right.weights)
    assert copy.dump_weights() == original.dump_weights()


def test_load_weights_splits_head_first():
    network = build_network([1, 1, 1], weights="1 2 3 4")
    head, tail = network.leaves()
    assert np.allclose(head.weights, [[1.0, 2.0]])
    assert np.allclose(tail.weights, [[3.0, 4.0]])

    leaf = LinearLayer(1, 1)
    assert leaf.load_weights(["5", "6", "7", "8"]) == ["7", "8"]


def test_malformed_weight_strings_raise_format_error():
    with pytest.raises(FormatError):
        build_network([2, 2, 1], weights="0.1 0.2 0.3")
    with pytest.raises(FormatError):
        build_network([1, 1], weights="1 2 3")
    with pytest.raises(FormatError):
        build_network([1, 1], weights="1 two")


def test_shape_mismatches_are_rejected():
    with pytest.raises(ShapeMismatch):
        ChainedLayer(SigmoidLayer(2, 3), SigmoidLayer(2, 1))
    layer = SigmoidLayer(2, 1, rng=0)
    with pytest.raises(ShapeMismatch):
        layer.compute_outputs([1.0, 2.0, 3.0])
    layer.compute_outputs([1.0, 2.0])
    with pytest.raises(ShapeMismatch):
        layer.compute_deltas([1.0, 1.0])


def test_randomize_is_seeded_and_breaks_symmetry():
    first = build_network([2, 3, 1], seed=5)
    second = build_network([2, 3, 1], seed=5)
    assert first.dump_weights() == second.dump_weights()
    values = np.array([float(tok) for tok in first.dump_weights().split()])
    assert np.all((values >= -1.0) & (values < 1.0))
    assert len(set(values)) == values.size


def test_build_network_describes_layers():
    network = build_network([4, 3, 2], output="linear", seed=0)
    description = network.describe()
    assert description.layer_dims == [4, 3, 2]
    assert [layer.activation for layer in description.layers] == ["sigmoid", "linear"]
    assert description.num_weights == network.num_weights
    assert network.num_inputs == 4 and network.num_outputs == 2

    with pytest.raises(ConfigurationError):
        build_network([2, 1], output="tanh")
    with pytest.raises(ConfigurationError):
        build_network([2])


def test_failed_load_leaves_weights_untouched():
    network = build_network([2, 2, 1], seed=0)
    weights = network.dump_weights()
    for bad in ("9 9 9 9 9 9 9", "9 9 9 9 9 9 9 9 9 9", "9 9 9 9 9 9 9 9 x"):
        with pytest.raises(FormatError):
            network.set_weights(bad)
        assert network.dump_weights() == weights
