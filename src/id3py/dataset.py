# -*- coding: utf-8 -*-
"""
id3py.dataset
=============

Labeled instances and the statistics the ID3 inducer reads from them.

A :class:`Dataset` is an ordered collection of :class:`Instance` objects.  It
keeps, for every tracked attribute, an :class:`Attribute` counter of observed
values and, for the class column, a counter of labels.  Both are updated on
every :meth:`Dataset.add` so they always describe the current membership.

Attribute names follow a naming convention: a name starting with
:data:`CONTINUOUS_MARKER` (``"#"``) holds numeric values, every other name
holds discrete string values.

Lookups on unknown attributes do not raise: they log a warning and return
``None`` so the caller can decide what to do.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping

import numpy as np

logger = logging.getLogger(__name__)

CONTINUOUS_MARKER = "#"


def is_continuous(name: str) -> bool:
    """Return True if ``name`` follows the continuous attribute convention."""
    return name.startswith(CONTINUOUS_MARKER)


def _first_max(counts: Mapping) -> object | None:
    # strict comparison keeps the first key seen on ties
    best, best_count = None, 0
    for key, count in counts.items():
        if count > best_count:
            best, best_count = key, count
    return best


# -----------------------------------------------------------------------------
# Attribute statistics
# -----------------------------------------------------------------------------
class Attribute:
    """Occurrence counter for the values of one attribute.

    Parameters
    ----------
    name : str
        Attribute name.  A leading ``"#"`` marks a continuous attribute.

    Attributes
    ----------
    counts : dict
        Mapping ``value -> count`` in first-seen order.
    """

    def __init__(self, name: str):
        self.name = name
        self.counts: dict = {}

    @property
    def continuous(self) -> bool:
        return is_continuous(self.name)

    @property
    def values(self) -> list:
        return list(self.counts)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def add(self, value) -> None:
        self.counts[value] = self.counts.get(value, 0) + 1

    def majority_value(self):
        return _first_max(self.counts)

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, value) -> bool:
        return value in self.counts

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, {len(self.counts)} values)"


# -----------------------------------------------------------------------------
# Instance
# -----------------------------------------------------------------------------
class Instance:
    """A single record: ordered attribute values plus an optional class label.

    Continuous values are stored as ``float`` and discrete values as ``str``.
    ``label`` is ``None`` for an instance that is waiting to be classified.
    """

    __slots__ = ("values", "label")

    def __init__(self, values: Mapping[str, object], label: str | None = None):
        self.values = dict(values)
        self.label = label

    @classmethod
    def from_sequences(cls, names: Iterable[str], values: Iterable, label: str | None = None) -> "Instance":
        return cls(zip(names, values), label)

    @property
    def attributes(self) -> list[str]:
        return list(self.values)

    def get(self, name: str, default=None):
        return self.values.get(name, default)

    def __getitem__(self, name: str):
        return self.values[name]

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __repr__(self) -> str:
        return f"Instance({self.values!r}, label={self.label!r})"


# -----------------------------------------------------------------------------
# Dataset
# -----------------------------------------------------------------------------
class Dataset:
    """Ordered collection of instances with derived statistics.

    Parameters
    ----------
    instances : iterable of Instance, optional
        Initial members, added in order.
    filters : iterable of str or None, default=None
        If given, only these attribute names are tracked and exposed.  The
        instances themselves are shared untouched.  Partitions produced by the
        ``split_*`` methods inherit the filter.  An empty filter is rejected
        with ``ValueError``.

    Notes
    -----
    Attribute and label enumeration follows first-seen insertion order.  The
    majority helpers break ties in favour of the first value encountered in
    that order; this tie-break is an implementation detail, not a guarantee.
    """

    def __init__(self, instances: Iterable[Instance] | None = None, *, filters: Iterable[str] | None = None):
        self.filters: frozenset[str] | None = frozenset(filters) if filters is not None else None
        if self.filters is not None and not self.filters:
            raise ValueError("filters must name at least one attribute")
        self.instances: list[Instance] = []
        self._attributes: dict[str, Attribute] = {}
        self._class_counts: dict[str, int] = {}
        if instances is not None:
            self.extend(instances)

    # -- construction ----------------------------------------------------
    @classmethod
    def from_arrays(cls, X, y=None, feature_names=None, *, filters=None) -> "Dataset":
        """
        Build a dataset from array-like input.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Attribute values.  Columns whose name carries the continuous
            marker are converted to ``float``; the rest to ``str``.
        y : array-like of shape (n_samples,), optional
            Class labels, kept as given.  When omitted the instances are
            unlabeled.
        feature_names : list[str], optional
            Column names.  Defaults to ``f0, f1, ...`` (all discrete).

        Returns
        -------
        Dataset
        """
        X = np.asarray(X, dtype=object)
        if X.ndim != 2:
            raise ValueError("X must be a 2-dimensional array")
        n_features = X.shape[1]
        if feature_names is None:
            feature_names = [f"f{i}" for i in range(n_features)]
        elif len(feature_names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")
        labels = [None] * X.shape[0] if y is None else list(np.asarray(y, dtype=object))
        if len(labels) != X.shape[0]:
            raise ValueError("X and y must have the same number of rows")
        dataset = cls(filters=filters)
        cont = [is_continuous(n) for n in feature_names]
        for row, label in zip(X, labels):
            values = {
                name: (float(v) if c else str(v))
                for name, v, c in zip(feature_names, row, cont)
            }
            dataset.add(Instance(values, label))
        return dataset

    def _spawn(self) -> "Dataset":
        return Dataset(filters=self.filters)

    def tracks(self, attribute: str) -> bool:
        return self.filters is None or attribute in self.filters

    def add(self, instance: Instance) -> None:
        self.instances.append(instance)
        for name, value in instance.values.items():
            if not self.tracks(name):
                continue
            stats = self._attributes.get(name)
            if stats is None:
                stats = self._attributes[name] = Attribute(name)
            stats.add(value)
        label = instance.label
        self._class_counts[label] = self._class_counts.get(label, 0) + 1

    def extend(self, instances: Iterable[Instance]) -> None:
        for instance in instances:
            self.add(instance)

    def filtered(self, attributes: Iterable[str]) -> "Dataset":
        """Return a view of the same instances tracking only ``attributes``."""
        return Dataset(self.instances, filters=attributes)

    # -- accessors -------------------------------------------------------
    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self) -> Iterator[Instance]:
        return iter(self.instances)

    def __getitem__(self, index: int) -> Instance:
        return self.instances[index]

    def __repr__(self) -> str:
        return (f"Dataset({len(self)} instances, {len(self._attributes)} attributes, "
                f"{len(self._class_counts)} classes)")

    @property
    def attributes(self) -> list[str]:
        return list(self._attributes)

    @property
    def attribute_stats(self) -> dict[str, Attribute]:
        return dict(self._attributes)

    @property
    def class_counts(self) -> dict[str, int]:
        return dict(self._class_counts)

    @property
    def classes(self) -> list[str]:
        return list(self._class_counts)

    @property
    def labels(self) -> list[str | None]:
        return [inst.label for inst in self.instances]

    def attribute(self, name: str) -> Attribute | None:
        stats = self._attributes.get(name)
        if stats is None:
            logger.warning("Attribute %s not found", name)
        return stats

    def values(self, attribute: str) -> list | None:
        """Distinct values of ``attribute`` in first-seen order."""
        stats = self.attribute(attribute)
        return None if stats is None else stats.values

    def value_counts(self, attribute: str) -> dict | None:
        stats = self.attribute(attribute)
        return None if stats is None else dict(stats.counts)

    def numeric_values(self, attribute: str) -> np.ndarray | None:
        """Sorted distinct numeric values of a continuous attribute."""
        stats = self.attribute(attribute)
        if stats is None:
            return None
        if not stats.continuous:
            logger.warning("Attribute %s is not continuous", attribute)
            return None
        return np.unique(np.asarray(stats.values, dtype=float))

    # -- statistics ------------------------------------------------------
    def majority_class(self) -> str | None:
        return _first_max(self._class_counts)

    def majority_value(self, attribute: str):
        stats = self.attribute(attribute)
        return None if stats is None else stats.majority_value()

    def purity(self) -> float:
        """Percentage share of the majority class, 0 for an empty dataset."""
        if not self.instances:
            return 0.0
        return max(self._class_counts.values()) / len(self.instances) * 100.0

    # -- partitioning ----------------------------------------------------
    def split_folds(self, k: int) -> list["Dataset"] | None:
        """
        Partition the instances round-robin into ``k`` folds.

        Instance ``i`` goes to fold ``i % k``, so the result only depends on
        the current instance order.

        Parameters
        ----------
        k : int
            Number of folds.  Must be greater than 1.

        Returns
        -------
        list[Dataset] or None
            ``k`` datasets, or ``None`` when ``k <= 1``.
        """
        if k <= 1:
            logger.warning("Unable to split into %s folds, number of folds too small", k)
            return None
        folds = [self._spawn() for _ in range(k)]
        for i, instance in enumerate(self.instances):
            folds[i % k].add(instance)
        return folds

    def split_values(self, attribute: str) -> dict | None:
        """
        Partition the instances by the distinct values of a discrete attribute.

        Returns
        -------
        dict or None
            Ordered mapping ``value -> Dataset`` with one entry per value the
            attribute takes within this dataset, or ``None`` if the attribute
            is unknown.
        """
        stats = self.attribute(attribute)
        if stats is None:
            return None
        parts = {value: self._spawn() for value in stats.values}
        for instance in self.instances:
            parts[instance[attribute]].add(instance)
        return parts

    def split_threshold(self, attribute: str, threshold: float) -> tuple["Dataset", "Dataset"] | None:
        """
        Binary partition of a continuous attribute.

        Returns
        -------
        tuple of Dataset or None
            ``(left, right)`` where ``left`` holds ``value <= threshold`` and
            ``right`` holds ``value > threshold``; ``None`` if the attribute is
            unknown or not continuous.
        """
        stats = self.attribute(attribute)
        if stats is None:
            return None
        if not stats.continuous:
            logger.warning("Unable to split on %s, attribute is not continuous", attribute)
            return None
        left, right = self._spawn(), self._spawn()
        for instance in self.instances:
            (left if instance[attribute] <= threshold else right).add(instance)
        return left, right


def merge_excluding_fold(folds: list[Dataset], exclude_index: int) -> Dataset:
    """Concatenate every fold except ``folds[exclude_index]``."""
    merged = Dataset(filters=folds[0].filters if folds else None)
    for i, fold in enumerate(folds):
        if i != exclude_index:
            merged.extend(fold)
    return merged
