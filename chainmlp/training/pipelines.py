"""Pipeline assembly: presets, config files and the train-and-report run."""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping, Sequence

from ..core.errors import ConfigurationError
from ..core.layers import Layer, build_network
from ..core.types import RunResult
from ..data import registry
from ..data.dataset import DataSet
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .trainer import Trainer

XOR_WEIGHTS = (
    "0.862518 -0.155797 0.282885 0.834986 -0.505997 "
    "-0.864449 0.036498 -0.430437 0.481210"
)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor": {
        "data": {"name": "xor"},
        "model": {"hidden": [2], "output": "sigmoid", "weights": XOR_WEIGHTS},
        "train": {
            "epochs": 1000,
            "learn_rate": 0.4,
            "momentum": 0.7,
            "seed": 0,
            "early_stopping": False,
        },
    },
    "two_class": {
        "data": {"name": "two_class"},
        "model": {"hidden": [2], "output": "sigmoid"},
        "train": {
            "epochs": 1000,
            "learn_rate": 0.3,
            "momentum": 0.5,
            "seed": 1,
            "early_stopping": False,
        },
    },
    "noisy_two_class": {
        "data": {
            "name": "noisy_two_class",
            "options": {"n_train": 40, "n_unseen": 20, "n_valid": 20, "noise": 0.8, "seed": 0},
        },
        "model": {"hidden": [4], "output": "sigmoid"},
        "train": {
            "epochs": 1000,
            "learn_rate": 0.2,
            "momentum": 0.5,
            "seed": 3,
            "early_stopping": True,
            "check_every": 10,
        },
    },
}

_REQUIRED_SECTIONS = ("data", "model", "train")


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, object]:
    try:
        return deepcopy(_PRESETS[name])  # type: ignore[return-value]
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def load_config(path: str | Path) -> Dict[str, object]:
    """Read a JSON or YAML config file into a plain mapping."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise ConfigurationError(f"Unsupported config file type: {path.suffix}")
    text = path.read_text()
    if suffix == ".json":
        data = json.loads(text or "{}")
    else:
        import yaml

        data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Config {path.name} must decode to a mapping")
    return dict(data)


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively overlay ``override`` on a copy of ``base``."""

    merged = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def validate_config(config: Mapping[str, object]) -> None:
    missing = [name for name in _REQUIRED_SECTIONS if name not in config]
    if missing:
        raise ConfigurationError(f"Config is missing required sections: {', '.join(missing)}")
    data_cfg = config["data"]
    if not isinstance(data_cfg, Mapping) or not ({"name", "path"} & set(data_cfg)):
        raise ConfigurationError("The data section needs either a 'name' or a 'path'")
    train_cfg = config["train"]
    if isinstance(train_cfg, Mapping) and train_cfg.get("enable_plots") and not train_cfg.get("run_dir"):
        raise ConfigurationError("enable_plots needs a run_dir to write the SSE curve into")


def load_data(data_cfg: Mapping[str, object]) -> registry.DatasetBundle:
    """Resolve the data section to a :class:`DatasetBundle`."""

    if "path" in data_cfg:
        train = DataSet.from_file(str(data_cfg["path"]))
        unseen_path = data_cfg.get("unseen_path")
        unseen = DataSet.from_file(str(unseen_path)) if unseen_path else train
        valid_path = data_cfg.get("validation_path")
        validation = DataSet.from_file(str(valid_path)) if valid_path else None
        provenance = {
            "source": "file",
            "path": str(data_cfg["path"]),
            "unseen_path": unseen_path,
            "validation_path": valid_path,
        }
        return registry.DatasetBundle(
            name=train.name,
            train=train,
            unseen=unseen,
            validation=validation,
            provenance=provenance,
        )
    options = dict(data_cfg.get("options", {}) or {})  # type: ignore[call-overload]
    return registry.get_dataset(str(data_cfg["name"]), **options)


def build_dims(bundle: registry.DatasetBundle, model_cfg: Mapping[str, object]) -> list[int]:
    hidden = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
    return [bundle.num_inputs, *hidden, bundle.num_outputs]


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build, present, train and present again, printing as the run goes."""

    validate_config(config)
    data_cfg = dict(config["data"])  # type: ignore[call-overload]
    model_cfg = dict(config["model"])  # type: ignore[call-overload]
    train_cfg = dict(config["train"])  # type: ignore[call-overload]

    bundle = load_data(data_cfg)
    dims = build_dims(bundle, model_cfg)
    seed = int(train_cfg.get("seed", 0))
    epochs = int(train_cfg.get("epochs", 1000))
    learn_rate = float(train_cfg.get("learn_rate", 0.4))
    momentum = float(train_cfg.get("momentum", 0.7))
    output = str(model_cfg.get("output", "sigmoid"))

    network = build_network(dims, output=output, weights=model_cfg.get("weights"), seed=seed)

    run_dir = Path(train_cfg["run_dir"]) if train_cfg.get("run_dir") else None
    plots = PlotAdapter(run_dir or Path("."), enable_plots=bool(train_cfg.get("enable_plots", False)))
    split_loggers: Dict[str, list] = {
        "train": [plots.logger("train")],
        "val": [plots.logger("val")],
    }
    train_jsonl = None
    if run_dir is not None:
        run_dir.mkdir(parents=True, exist_ok=True)
        train_jsonl = JsonlSink(run_dir / "metrics_train.jsonl", split="train", seed=seed)
        csv_path = run_dir / "metrics.csv"
        if csv_path.exists():
            csv_path.unlink()
        split_loggers["train"] += [train_jsonl, CsvSink(csv_path, split="train")]
        if bundle.validation is not None:
            val_jsonl = JsonlSink(run_dir / "metrics_val.jsonl", split="val", seed=seed)
            split_loggers["val"] += [val_jsonl, CsvSink(csv_path, split="val")]

    trainer = Trainer(
        network,
        bundle.train,
        bundle.unseen,
        bundle.validation,
        early_stopping=bool(train_cfg.get("early_stopping", True)),
        check_every=int(train_cfg.get("check_every", 10)),
        split_loggers=split_loggers,
    )
    trainer.initialize()

    _print_startup_summary(
        dataset_name=bundle.name,
        dims=dims,
        output=output,
        epochs=epochs,
        learn_rate=learn_rate,
        momentum=momentum,
        network=network,
        validation=bundle.validation is not None,
    )
    before = trainer.present()
    print(before)
    print("Weights " + network.dump_weights())
    report = trainer.run_epochs(epochs, learn_rate, momentum)
    print(report, end="")
    after = trainer.present()
    print(after)
    weights = network.dump_weights()
    print("Weights " + weights)
    print(bundle.unseen.to_table())

    manifest_path = ""
    if run_dir is not None:
        (run_dir / "weights.txt").write_text(weights + "\n")
        manifest_path = write_manifest(
            run_dir / "manifest.json",
            config=json.loads(json.dumps(config)),
            dataset_provenance=bundle.provenance,
            network=network,
            outcome={
                "epochs": trainer.epochs_run,
                "state": trainer.state.value,
                "before": before,
                "after": after,
            },
        )
        plots.close()

    return RunResult(
        epochs=trainer.epochs_run,
        stopped=trainer.stopped,
        before=before,
        after=after,
        report=report,
        weights=weights,
        run_dir=str(run_dir) if run_dir is not None else "",
        manifest_path=manifest_path,
        metrics_path=str(train_jsonl.path) if train_jsonl is not None else "",
    )


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    output: str,
    epochs: int,
    learn_rate: float,
    momentum: float,
    network: Layer,
    validation: bool,
) -> None:
    print("=== chainmlp run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Output layer  : {output}")
    print(f"Epochs        : {epochs}")
    print(f"Learn rate    : {learn_rate}")
    print(f"Momentum      : {momentum}")
    print(f"Validation    : {'yes' if validation else 'no'}")
    print(f"Weights       : {network.num_weights}")
    print("====================")


__all__ = [
    "XOR_WEIGHTS",
    "load_config",
    "load_data",
    "load_preset",
    "merge_config",
    "presets",
    "run_pipeline",
    "validate_config",
]
