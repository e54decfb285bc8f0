"""Reporting utilities for chainmlp."""

from .artifacts import WEIGHT_ORDER, describe_network, write_manifest
from .metrics import CsvSink, HistoryCapture, JsonlSink
from .plots import PlotAdapter

__all__ = [
    "WEIGHT_ORDER",
    "describe_network",
    "write_manifest",
    "CsvSink",
    "HistoryCapture",
    "JsonlSink",
    "PlotAdapter",
]
