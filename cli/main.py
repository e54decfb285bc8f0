"""Command line entry point for chainmlp training runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable

from chainmlp.training import pipelines


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config", type=Path, help="Optional JSON/YAML config, full or partial override"
    )
    parser.add_argument("--data", type=Path, help="Training data set in the delimited text format")
    parser.add_argument("--unseen", type=Path, help="Unseen data set file (defaults to --data)")
    parser.add_argument("--validation", type=Path, help="Validation data set file")
    parser.add_argument(
        "--hidden",
        type=int,
        nargs="+",
        help="Hidden layer widths, head layer first",
    )
    parser.add_argument("--output", choices=["sigmoid", "linear"], help="Output layer activation")
    parser.add_argument("--weights", help="Initial weight string (whitespace separated)")
    parser.add_argument("--epochs", type=int, help="Number of epochs to run")
    parser.add_argument("--learn-rate", type=float, help="Learning rate")
    parser.add_argument("--momentum", type=float, help="Momentum constant")
    parser.add_argument("--seed", type=int, help="Seed for random initial weights")
    parser.add_argument(
        "--early-stopping",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Stop when the windowed validation SSE stops improving",
    )
    parser.add_argument("--run-dir", type=Path, help="Directory for metrics and manifest")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write an SSE curve to the run directory"
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)

    if args.config:
        override = pipelines.load_config(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    if args.data:
        data_cfg: dict = {"path": str(args.data)}
        if args.unseen:
            data_cfg["unseen_path"] = str(args.unseen)
        if args.validation:
            data_cfg["validation_path"] = str(args.validation)
        config["data"] = data_cfg
        # preset weights only fit the preset's data
        config.setdefault("model", {}).pop("weights", None)

    model_cfg = config.setdefault("model", {})
    if args.hidden:
        model_cfg["hidden"] = list(args.hidden)
        model_cfg.pop("weights", None)
    if args.output:
        model_cfg["output"] = args.output
    if args.weights:
        model_cfg["weights"] = args.weights

    train_cfg = config.setdefault("train", {})
    overrides = {
        "epochs": args.epochs,
        "learn_rate": args.learn_rate,
        "momentum": args.momentum,
        "seed": args.seed,
        "early_stopping": args.early_stopping,
    }
    train_cfg.update({key: value for key, value in overrides.items() if value is not None})
    if args.run_dir:
        train_cfg["run_dir"] = str(args.run_dir)
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    pipelines.run_pipeline(config)


if __name__ == "__main__":
    main()
