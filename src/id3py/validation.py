# -*- coding: utf-8 -*-
"""
id3py.validation
================

k-fold cross-validation of pruned ID3 trees.

The dataset is split round-robin into ``k`` folds.  For every fold a tree is
induced on the remaining folds, pruned, and tested on the held-out fold; the
tree with the best held-out accuracy is kept as the selected model.
"""

from __future__ import annotations

import logging

import pandas as pd

from .dataset import Dataset, merge_excluding_fold
from .tree import ID3Tree

logger = logging.getLogger(__name__)

DEFAULT_FOLDS = 10


class CrossValidator:
    """
    Run k-fold cross-validation over a dataset.

    Parameters
    ----------
    dataset : Dataset
        Labeled instances.
    k : int, default=10
        Number of folds, greater than 1.

    Attributes
    ----------
    folds_ : list[Dataset]
        Held-out folds, in split order.
    trees_ : list[ID3Tree]
        One pruned and tested tree per fold.
    accuracies_ : list[float]
        Held-out accuracy of each tree.
    selected_ : int
        Index of the most accurate tree; the first fold wins ties.
    """

    def __init__(self, dataset: Dataset, k: int = DEFAULT_FOLDS):
        self.dataset = dataset
        self.k = k

    def run(self) -> tuple[ID3Tree, float]:
        folds = self.dataset.split_folds(self.k)
        if folds is None:
            raise ValueError(f"k must be greater than 1, got {self.k}")
        self.folds_ = folds
        self.trees_, self.accuracies_ = [], []
        for i, fold in enumerate(folds):
            logger.info("Starting cross validation split %d", i)
            tree = ID3Tree(merge_excluding_fold(folds, i)).traverse().prune()
            accuracy = tree.test(fold) if tree.root is not None else 0.0
            logger.info("Split %d resulted in accuracy %.4f", i, accuracy)
            self.trees_.append(tree)
            self.accuracies_.append(accuracy)
        self.selected_ = max(range(len(self.trees_)), key=self.accuracies_.__getitem__)
        return self.selected_tree, self.accuracies_[self.selected_]

    @property
    def selected_tree(self) -> ID3Tree:
        return self.trees_[self.selected_]

    def confusion_matrix(self) -> pd.DataFrame:
        """Confusion matrix of the selected tree on its held-out fold."""
        return self.selected_tree.confusion_matrix()


def run_cross_validation(dataset: Dataset, k: int = DEFAULT_FOLDS) -> tuple[ID3Tree, float]:
    """Cross-validate and return the selected tree with its held-out accuracy."""
    return CrossValidator(dataset, k).run()


def confusion_matrix(tree: ID3Tree, test_fold: Dataset) -> pd.DataFrame:
    """
    Test ``tree`` on ``test_fold`` and return the confusion matrix.

    Returns
    -------
    pandas.DataFrame
        Rows are actual classes, columns predicted classes, cells the number
        of test instances with that pair.
    """
    tree.test(test_fold)
    return tree.confusion_matrix()
