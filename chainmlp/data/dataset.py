"""Labelled example sets parsed from a compact delimited text format.

The text format separates records with ``;`` or newlines::

    2 1 %.0f %.0f %.3f;x1 x2 XOR;0 0 0;0 1 1;1 0 1;1 1 0

The header gives the number of inputs and targets followed by optional
printf-style display formats for inputs, outputs/targets and SSE values.  An
optional record of column labels may follow; every other record holds one
example, inputs first.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import numpy as np

from ..core.errors import FormatError, ShapeMismatch
from ..core.types import Array

DEFAULT_FORMAT = "%.3f"


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _records(text: str) -> List[List[str]]:
    records = []
    for line in text.replace("\n", ";").split(";"):
        tokens = line.split()
        if tokens:
            records.append(tokens)
    return records


class DataSet:
    """Ordered examples with the outputs a network last produced for them."""

    def __init__(
        self,
        inputs: Array | Sequence[Sequence[float]],
        targets: Array | Sequence[Sequence[float]],
        *,
        labels: Sequence[str] | None = None,
        input_format: str = DEFAULT_FORMAT,
        output_format: str = DEFAULT_FORMAT,
        sse_format: str = DEFAULT_FORMAT,
        name: str = "",
    ) -> None:
        self.inputs = np.atleast_2d(np.asarray(inputs, dtype=np.float64))
        self.targets = np.atleast_2d(np.asarray(targets, dtype=np.float64))
        if self.inputs.shape[0] != self.targets.shape[0]:
            raise ShapeMismatch(
                f"{self.inputs.shape[0]} input rows but {self.targets.shape[0]} target rows"
            )
        self.num_inputs = int(self.inputs.shape[1])
        self.num_outputs = int(self.targets.shape[1])
        if labels is not None and len(labels) != self.num_inputs + self.num_outputs:
            raise ShapeMismatch(
                f"Expected {self.num_inputs + self.num_outputs} labels, got {len(labels)}"
            )
        self.labels = list(labels) if labels is not None else None
        self.input_format = input_format
        self.output_format = output_format
        self.sse_format = sse_format
        self.name = name
        self.outputs = np.zeros_like(self.targets)
        self.sse_log: List[float] = []

    @classmethod
    def from_text(cls, text: str, name: str = "") -> "DataSet":
        """Parse the delimited text format described in the module docstring."""

        records = _records(text)
        if not records:
            raise FormatError("Data set text is empty")
        header = records[0]
        if len(header) < 2 or not all(tok.isdigit() for tok in header[:2]):
            raise FormatError(f"Header must start with input and output counts: {header}")
        num_inputs, num_outputs = int(header[0]), int(header[1])
        if num_inputs < 1 or num_outputs < 1:
            raise FormatError(f"Header counts must be positive: {header}")
        formats = header[2:5] + [DEFAULT_FORMAT] * (3 - len(header[2:5]))
        for fmt in formats:
            try:
                fmt % 0.0
            except (TypeError, ValueError) as exc:
                raise FormatError(f"Invalid display format {fmt!r}") from exc

        rows = records[1:]
        labels = None
        if rows and not _is_number(rows[0][0]):
            labels = rows.pop(0)
        width = num_inputs + num_outputs
        if labels is not None and len(labels) != width:
            raise FormatError(f"Expected {width} labels, got {len(labels)}: {labels}")
        if not rows:
            raise FormatError("Data set has no examples")

        values = []
        for lineno, row in enumerate(rows, start=1):
            if len(row) != width:
                raise FormatError(f"Example {lineno} has {len(row)} values, expected {width}")
            try:
                values.append([float(tok) for tok in row])
            except ValueError as exc:
                raise FormatError(f"Example {lineno} is not numeric: {row}") from exc
        data = np.asarray(values, dtype=np.float64)
        return cls(
            data[:, :num_inputs],
            data[:, num_inputs:],
            labels=labels,
            input_format=formats[0],
            output_format=formats[1],
            sse_format=formats[2],
            name=name,
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "DataSet":
        path = Path(path)
        return cls.from_text(path.read_text(), name=path.stem)

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    def __repr__(self) -> str:
        return (
            f"<DataSet {self.name or 'unnamed'} examples={len(self)} "
            f"inputs={self.num_inputs} outputs={self.num_outputs}>"
        )

    def inputs_of(self, index: int) -> Array:
        return self.inputs[index]

    def targets_of(self, index: int) -> Array:
        return self.targets[index]

    def record_outputs(self, index: int, outputs: Array | Sequence[float]) -> None:
        """Store the network's outputs for example ``index``."""

        values = np.asarray(outputs, dtype=np.float64).reshape(-1)
        if values.shape[0] != self.num_outputs:
            raise ShapeMismatch(
                f"Data set expects {self.num_outputs} outputs, got {values.shape[0]}"
            )
        self.outputs[index] = values

    def errors_of(self, index: int) -> Array:
        """Return ``target - output`` for example ``index``."""

        return self.targets_of(index) - self.outputs[index]

    def sse(self) -> Array:
        """Sum of squared errors over all examples, one value per output."""

        return np.sum((self.targets - self.outputs) ** 2, axis=0)

    def total_sse(self) -> float:
        return float(np.sum(self.sse()))

    def add_to_sse_log(self) -> float:
        """Append the current total SSE to :attr:`sse_log` and return it."""

        value = self.total_sse()
        self.sse_log.append(value)
        return value

    @property
    def is_classification(self) -> bool:
        return bool(np.all((self.targets == 0.0) | (self.targets == 1.0)))

    def percent_correct(self) -> float:
        """Percentage of examples whose thresholded outputs all match."""

        predicted = (self.outputs >= 0.5).astype(np.float64)
        correct = np.all(predicted == self.targets, axis=1)
        return float(100.0 * np.mean(correct))

    def analysis(self) -> str:
        """Describe the current SSE and, for 0/1 targets, the % classified correctly."""

        text = "SSE " + " ".join(self.sse_format % value for value in self.sse())
        if self.is_classification:
            text += " % Correct " + "%.2f" % self.percent_correct()
        return text

    def metrics(self) -> dict:
        payload = {"sse": self.total_sse()}
        if self.is_classification:
            payload["correct"] = self.percent_correct()
        return payload

    def to_table(self) -> str:
        """Return the examples and latest outputs as an aligned text table."""

        if self.labels is not None:
            in_labels = self.labels[: self.num_inputs]
            out_labels = self.labels[self.num_inputs:]
        else:
            in_labels = [f"x{i + 1}" for i in range(self.num_inputs)]
            out_labels = [f"t{i + 1}" for i in range(self.num_outputs)]
        header = in_labels + out_labels + [f"out({label})" for label in out_labels]
        lines = ["\t".join(header)]
        for ins, targs, outs in zip(self.inputs, self.targets, self.outputs):
            cells = [self.input_format % v for v in ins]
            cells += [self.output_format % v for v in targs]
            cells += [DEFAULT_FORMAT % v for v in outs]
            lines.append("\t".join(cells))
        return "\n".join(lines)


__all__ = ["DataSet", "DEFAULT_FORMAT"]
