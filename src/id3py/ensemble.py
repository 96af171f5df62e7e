# -*- coding: utf-8 -*-
"""
id3py.ensemble
==============

Bagging of ID3 trees over random attribute subsets.

:class:`TreeTrainer` draws, for every member, a random subset of
``round(sqrt(n_attributes))`` attributes and induces one :class:`ID3Tree` on
the dataset filtered to that subset.  Members are independent, so induction is
dispatched through :class:`joblib.Parallel`.  The resulting :class:`Ensemble`
classifies by majority vote and can be saved to / loaded from disk with
:mod:`joblib`.
"""

from __future__ import annotations

import logging
import math
import os
from collections import Counter
from typing import Iterable, Iterator

import joblib
import numpy as np
from joblib import Parallel, delayed
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils import check_random_state

from .dataset import Dataset, Instance
from .tree import ID3Tree, _resolve_feature_names

logger = logging.getLogger(__name__)


class Ensemble:
    """Ordered, append-only collection of induced trees.

    The ensemble owns its trees: they are not meant to be mutated once added.
    """

    def __init__(self, trees: Iterable[ID3Tree] | None = None):
        self.trees: list[ID3Tree] = list(trees) if trees is not None else []

    def add(self, tree: ID3Tree) -> None:
        self.trees.append(tree)

    def extend(self, trees: Iterable[ID3Tree]) -> None:
        self.trees.extend(trees)

    def __len__(self) -> int:
        return len(self.trees)

    def __iter__(self) -> Iterator[ID3Tree]:
        return iter(self.trees)

    def __getitem__(self, index: int) -> ID3Tree:
        return self.trees[index]

    def votes(self, instance: Instance) -> Counter:
        """Tally of the labels predicted by every member, in first-vote order."""
        return Counter(tree.classify(instance) for tree in self.trees)

    def classify_by_vote(self, instance: Instance):
        """
        Return the label predicted by most members.

        Ties go to the label that received its first vote earliest; this
        ordering is an implementation detail.

        Raises
        ------
        ValueError
            If the ensemble holds no tree.
        """
        if not self.trees:
            raise ValueError("Ensemble is empty. Add trees before classifying.")
        # equal counts keep first-vote order
        return self.votes(instance).most_common(1)[0][0]

    def save(self, path: str | os.PathLike) -> str:
        """Write the ensemble to ``path`` with :func:`joblib.dump`."""
        joblib.dump(self, path)
        logger.info("Saved ensemble of %d trees to %s", len(self), path)
        return str(path)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "Ensemble":
        """Read an ensemble written by :meth:`save`."""
        obj = joblib.load(path)
        if not isinstance(obj, cls):
            raise TypeError(f"{path} does not contain an {cls.__name__}")
        logger.info("Loaded ensemble of %d trees from %s", len(obj), path)
        return obj


def _induce(dataset: Dataset, pruning: bool, release: bool) -> ID3Tree:
    tree = ID3Tree(dataset).traverse()
    if pruning:
        tree.prune()
    if release:
        tree.release_training_data()
    return tree


class TreeTrainer:
    """
    Train trees on random attribute subsets of a dataset.

    Parameters
    ----------
    dataset : Dataset
        Full training set.
    pruning : bool, default=False
        Prune every member after induction.
    release : bool, default=True
        Drop each member's training subsets once it is induced (and pruned),
        keeping the ensemble's memory bounded by the tree sizes.
    random_state : int, RandomState instance or None, default=None
        Seed for the attribute draws.
    n_jobs : int or None, default=None
        Number of parallel jobs used by :class:`joblib.Parallel`.  None means
        one job.
    """

    def __init__(self, dataset: Dataset, *, pruning: bool = False, release: bool = True,
                 random_state=None, n_jobs: int | None = None):
        self.dataset = dataset
        self.pruning = pruning
        self.release = release
        self.random_state = random_state
        self.n_jobs = n_jobs

    def subset_size(self) -> int:
        return max(1, int(round(math.sqrt(len(self.dataset.attributes)))))

    def random_attribute_subset(self, random_state=None) -> Dataset:
        """
        Filter the dataset to a random subset of its attributes.

        The attribute names are shuffled and the first ``subset_size()`` are
        kept.
        """
        rng = check_random_state(random_state)
        names = self.dataset.attributes
        order = rng.permutation(len(names))[: self.subset_size()]
        return self.dataset.filtered([names[i] for i in order])

    def train(self, n_trees: int) -> Ensemble:
        """
        Induce ``n_trees`` trees, each on a fresh random attribute subset.

        All subsets are drawn before any induction starts, so the result for
        a given ``random_state`` does not depend on ``n_jobs``.
        """
        rng = check_random_state(self.random_state)
        subsets = [self.random_attribute_subset(rng) for _ in range(n_trees)]
        for i, subset in enumerate(subsets):
            logger.info("Creating tree %d from random attributes %s", i, subset.attributes)
        trees = Parallel(n_jobs=self.n_jobs)(
            delayed(_induce)(subset, self.pruning, self.release) for subset in subsets
        )
        return Ensemble(trees)


class BaggedID3Classifier(BaseEstimator, ClassifierMixin):
    """
    Bag of ID3 trees trained on random attribute subsets.

    Parameters
    ----------
    n_estimators : int, default=10
        Number of trees.
    feature_names : list[str] or None, default=None
        Names of the input columns, see :class:`~id3py.tree.ID3Classifier`.
    continuous_features : list[int|str] or None, default=None
        Indices or names of continuous columns.
    pruning : bool, default=False
        Prune every member tree.
    random_state : int or None, default=None
        Seed for the attribute draws.
    n_jobs : int or None, default=None
        Parallel jobs for training.

    Attributes
    ----------
    ensemble_ : Ensemble
        The trained trees.
    classes_ : ndarray
        Class labels seen during ``fit``.
    """

    def __init__(self, *, n_estimators: int = 10, feature_names: list[str] | None = None,
                 continuous_features: list[int | str] | None = None, pruning: bool = False,
                 random_state: int | None = None, n_jobs: int | None = None):
        self.n_estimators = n_estimators
        self.feature_names = feature_names
        self.continuous_features = continuous_features
        self.pruning = pruning
        self.random_state = random_state
        self.n_jobs = n_jobs

    def fit(self, X, y):
        X = np.asarray(X, dtype=object)
        y = np.asarray(y)
        if len(X) != len(y):
            raise ValueError("X and y must have the same number of rows")
        if int(self.n_estimators) < 1:
            raise ValueError("n_estimators must be at least 1")
        self.feature_names_ = _resolve_feature_names(X, self.feature_names, self.continuous_features)
        self.n_features_in_ = X.shape[1]
        self.classes_ = np.unique(y)
        trainer = TreeTrainer(Dataset.from_arrays(X, y, self.feature_names_),
                              pruning=self.pruning, random_state=self.random_state,
                              n_jobs=self.n_jobs)
        self.ensemble_ = trainer.train(int(self.n_estimators))
        return self

    def predict(self, X):
        if not getattr(self, "ensemble_", None):
            raise ValueError("Estimator not fitted. Call fit(...) first.")
        data = Dataset.from_arrays(X, None, self.feature_names_)
        return np.array([self.ensemble_.classify_by_vote(inst) for inst in data])
