import json
from pathlib import Path

from chainmlp.training import pipelines


def test_pipeline_artifacts_are_deterministic(tmp_path):
    config = pipelines.load_preset("noisy_two_class")
    config["train"].update({"epochs": 40, "run_dir": str(tmp_path / "run_a")})

    first = pipelines.run_pipeline(config)
    metrics_a = Path(first.metrics_path).read_bytes()
    weights_a = (tmp_path / "run_a" / "weights.txt").read_text()

    config["train"]["run_dir"] = str(tmp_path / "run_b")
    second = pipelines.run_pipeline(config)
    metrics_b = Path(second.metrics_path).read_bytes()
    weights_b = (tmp_path / "run_b" / "weights.txt").read_text()

    assert metrics_a == metrics_b
    assert weights_a == weights_b
    assert first.report == second.report

    manifest_a = json.loads(Path(first.manifest_path).read_text())
    manifest_b = json.loads(Path(second.manifest_path).read_text())
    assert manifest_a["outcome"] == manifest_b["outcome"]
    assert manifest_a["network"]["layer_dims"] == [2, 4, 1]
