import numpy as np
import pytest

from chainmlp.core.errors import FormatError, ShapeMismatch
from chainmlp.data import DataSet, available, get_dataset
from chainmlp.data.registry import TWO_CLASS_TEXT, XOR_TEXT


def test_parse_xor_text_with_labels():
    data = DataSet.from_text(XOR_TEXT)
    assert len(data) == 4
    assert data.num_inputs == 2 and data.num_outputs == 1
    assert data.labels == ["x1", "x2", "XOR"]
    assert data.input_format == "%.0f"
    assert np.array_equal(data.targets_of(1), [1.0])
    assert np.array_equal(data.inputs_of(3), [1.0, 1.0])


def test_parse_without_labels_and_newline_records():
    data = DataSet.from_text(TWO_CLASS_TEXT)
    assert len(data) == 9
    assert data.labels is None
    assert data.is_classification

    multiline = DataSet.from_text("1 1\n0.5 0.25\n\n1.5 0.75\n")
    assert len(multiline) == 2
    assert multiline.sse_format == "%.3f"
    assert not multiline.is_classification


def test_analysis_reports_sse_and_percent_correct():
    data = DataSet.from_text(XOR_TEXT)
    assert data.analysis() == "SSE 2.000 % Correct 50.00"

    for index, value in enumerate([0.1, 0.9, 0.8, 0.3]):
        data.record_outputs(index, [value])
    assert data.sse()[0] == pytest.approx(0.01 + 0.01 + 0.04 + 0.09)
    assert data.percent_correct() == pytest.approx(100.0)
    assert np.allclose(data.errors_of(2), [0.2])

    regression = DataSet.from_text("1 1 %.1f %.1f %.2f;0.5 0.25")
    assert regression.analysis() == "SSE 0.06"


def test_sse_log_appends_total():
    data = DataSet.from_text(TWO_CLASS_TEXT)
    first = data.add_to_sse_log()
    data.record_outputs(0, [1.0, 0.0])
    second = data.add_to_sse_log()
    assert data.sse_log == [first, second]
    assert second == pytest.approx(first - 1.0)
    assert data.metrics()["sse"] == pytest.approx(second)


def test_malformed_text_raises_format_error():
    bad = [
        "",
        "two 1;0 0 0",
        "2 1;0 0",
        "2 1;0 a 1",
        "2 1 %.0f",
        "2 1 nope %.0f %.3f;0 0 0",
        "2 1;x1 x2",
        "2 1;x1 XOR;0 0 0",
    ]
    for text in bad:
        with pytest.raises(FormatError):
            DataSet.from_text(text)


def test_record_outputs_checks_width():
    data = DataSet.from_text(XOR_TEXT)
    with pytest.raises(ShapeMismatch):
        data.record_outputs(0, [0.1, 0.2])
    with pytest.raises(ShapeMismatch):
        DataSet([[0.0, 1.0]], [[1.0], [0.0]])


def test_from_file_and_table(tmp_path):
    path = tmp_path / "xor.txt"
    path.write_text(XOR_TEXT.replace(";", "\n"))
    data = DataSet.from_file(path)
    assert data.name == "xor"
    table = data.to_table().splitlines()
    assert table[0] == "x1\tx2\tXOR\tout(XOR)"
    assert table[2] == "0\t1\t1\t0.000"
    assert len(table) == 5


def test_registry_builtins():
    assert {"xor", "two_class", "noisy_two_class"} <= set(available())
    xor = get_dataset("xor")
    assert xor.validation is None
    assert xor.train is not xor.unseen

    first = get_dataset("noisy_two_class", seed=4)
    second = get_dataset("noisy_two_class", seed=4)
    assert first.validation is not None
    assert len(first.train) == 40 and len(first.validation) == 20
    assert np.array_equal(first.train.inputs, second.train.inputs)
    assert first.provenance["seed"] == 4

    with pytest.raises(KeyError):
        get_dataset("mnist")
