# id3py/__init__.py
"""
id3py: ID3 decision trees and random-subspace bagging in pure Python.

Exports:
    - Dataset, Instance, Attribute
    - ID3Tree, ID3Classifier
    - Ensemble, TreeTrainer, BaggedID3Classifier
    - read_dataset, parse_instance
    - run_cross_validation, confusion_matrix
"""
from .dataset import Attribute, Dataset, Instance, merge_excluding_fold
from .tree import ID3Tree, ID3Classifier, Leaf, ContinuousSplit, DiscreteSplit
from .ensemble import Ensemble, TreeTrainer, BaggedID3Classifier
from .records import read_dataset, parse_instance
from .validation import CrossValidator, run_cross_validation, confusion_matrix

__all__ = [
    "Attribute", "Dataset", "Instance", "merge_excluding_fold",
    "ID3Tree", "ID3Classifier", "Leaf", "ContinuousSplit", "DiscreteSplit",
    "Ensemble", "TreeTrainer", "BaggedID3Classifier",
    "read_dataset", "parse_instance",
    "CrossValidator", "run_cross_validation", "confusion_matrix",
]
__version__ = "0.1.0"
