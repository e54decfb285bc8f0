"""Data sets and the dataset registry."""

from .dataset import DataSet
from .registry import DatasetBundle, available, get_dataset, register_dataset

__all__ = ["DataSet", "DatasetBundle", "available", "get_dataset", "register_dataset"]
