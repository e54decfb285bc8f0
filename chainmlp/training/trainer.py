"""Online backpropagation training with validation-based early stopping."""

from __future__ import annotations

import enum
import warnings
from typing import Mapping, Sequence

from ..core.errors import ConfigurationWarning, ShapeMismatch
from ..core.layers import Layer
from ..data.dataset import DataSet


class TrainerState(enum.Enum):
    """Learning status; ``STOPPED`` is terminal."""

    LEARNING = "learning"
    STOPPED = "stopped"


class Trainer:
    """Train a layer chain on a training set, reporting on unseen and validation sets.

    When a validation set is supplied its SSE is summed over windows of
    ``check_every`` epochs.  Learning stops for good as soon as a window sum
    fails to improve on the previous one; the first window only sets the
    baseline.
    """

    def __init__(
        self,
        network: Layer,
        train: DataSet,
        unseen: DataSet | None = None,
        validation: DataSet | None = None,
        *,
        early_stopping: bool = True,
        check_every: int = 10,
        split_loggers: Mapping[str, Sequence[object]] | None = None,
    ) -> None:
        for dataset in (train, unseen, validation):
            if dataset is None:
                continue
            if dataset.num_inputs != network.num_inputs:
                raise ShapeMismatch(
                    f"Network takes {network.num_inputs} inputs, "
                    f"data set {dataset.name!r} has {dataset.num_inputs}"
                )
            if dataset.num_outputs != network.num_outputs:
                raise ShapeMismatch(
                    f"Network has {network.num_outputs} outputs, "
                    f"data set {dataset.name!r} has {dataset.num_outputs} targets"
                )
        if check_every < 1:
            raise ValueError("check_every must be at least 1")
        self.network = network
        self.train = train
        self.unseen = unseen
        self.validation = validation
        self.early_stopping = early_stopping
        self.check_every = check_every
        self.split_loggers = dict(split_loggers or {})
        self.state = TrainerState.LEARNING
        self.previous_window_sum: float | None = None
        self._warned_no_validation = False

    @property
    def stopped(self) -> bool:
        return self.state is TrainerState.STOPPED

    @property
    def epochs_run(self) -> int:
        return len(self.train.sse_log)

    def initialize(self) -> None:
        """Reset the network's momentum memory and the stopping state."""

        self.network.initialize()
        self.previous_window_sum = None
        self.state = TrainerState.LEARNING

    def compute(self, dataset: DataSet) -> None:
        """Forward pass over ``dataset`` without changing any weights."""

        for index in range(len(dataset)):
            self.network.compute_outputs(dataset.inputs_of(index))
            self.network.deposit_outputs(index, dataset)

    def adapt(self, dataset: DataSet, learn_rate: float, momentum: float) -> float:
        """One online epoch over ``dataset``; returns the SSE logged for it."""

        for index in range(len(dataset)):
            inputs = dataset.inputs_of(index)
            self.network.compute_outputs(inputs)
            self.network.deposit_outputs(index, dataset)
            self.network.compute_deltas(dataset.errors_of(index))
            self.network.update_weights(inputs, learn_rate, momentum)
        return dataset.add_to_sse_log()

    def run_epochs(self, num_epochs: int, learn_rate: float, momentum: float) -> str:
        """Learn for up to ``num_epochs`` epochs and return the progress report.

        Ten report lines are produced at evenly spaced epochs (every epoch when
        fewer than 20 are requested).  Once stopped, further calls return an
        empty string.
        """

        if self.state is TrainerState.STOPPED:
            return ""

        check = self.early_stopping and self.validation is not None
        if self.early_stopping and self.validation is None and not self._warned_no_validation:
            warnings.warn(
                "Early stopping needs a validation set; running every epoch",
                ConfigurationWarning,
                stacklevel=2,
            )
            self._warned_no_validation = True

        epochs_so_far = self.epochs_run
        interval = max(1, num_epochs // 10)
        cursor = len(self.validation.sse_log) if self.validation is not None else 0
        window_sum = 0.0
        report: list[str] = []

        for ct in range(1, num_epochs + 1):
            epoch = ct + epochs_so_far
            self.adapt(self.train, learn_rate, momentum)
            self._emit_epoch("train", epoch, self.train.metrics())

            if self.validation is not None:
                self.compute(self.validation)
                self.validation.add_to_sse_log()
                self._emit_epoch("val", epoch, self.validation.metrics())
                log = self.validation.sse_log
                window_sum += sum(log[cursor:])
                cursor = len(log)

            if check and ct % self.check_every == 0:
                if self.previous_window_sum is not None and window_sum >= self.previous_window_sum:
                    self.state = TrainerState.STOPPED
                    report.append(f"Stopped after {self.epochs_run} epochs.\n")
                    return "".join(report)
                self.previous_window_sum = window_sum
                window_sum = 0.0

            if num_epochs < 20 or ct % interval == 0:
                report.append(f"Epoch {epoch:4d} : {self.train.analysis()}\n")

        return "".join(report)

    def present(self) -> str:
        """Pass every data set through the network and describe the results."""

        parts = []
        for label, dataset in (
            ("Train", self.train),
            ("Unseen", self.unseen),
            ("Valid", self.validation),
        ):
            if dataset is None:
                continue
            self.compute(dataset)
            parts.append(f"{label}: {dataset.analysis()}")
        return " ".join(parts)

    def _emit_epoch(self, split: str, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.split_loggers.get(split, []):
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Trainer", "TrainerState"]
