# -*- coding: utf-8 -*-
"""
id3py.records
=============

Reader for comma-separated record files.

The first line names the columns.  A name starting with ``"#"`` is a
continuous attribute, any other name a discrete one, and the last column holds
the class label::

    #sepal-length,#sepal-width,#petal-length,#petal-width,class
    5.1,3.5,1.4,0.2,Iris-setosa

A continuous field that does not parse as a number is read as ``0.0`` and
reported through the module logger; it does not abort the load.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Sequence

import pandas as pd

from .dataset import Dataset, Instance, is_continuous

logger = logging.getLogger(__name__)


def _to_float(name: str, raw) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        logger.warning("Number format exception for value %r of %s, using 0.0", raw, name)
        return 0.0


def parse_instance(names: Sequence[str], values: Sequence[str], label=None) -> Instance:
    """
    Build an instance from raw string values.

    Parameters
    ----------
    names : sequence of str
        Attribute names, continuous ones carrying the ``"#"`` marker.
    values : sequence of str
        Raw values aligned with ``names``.
    label : optional
        Class label; leave ``None`` for an instance to classify.

    Returns
    -------
    Instance
    """
    if len(names) != len(values):
        raise ValueError("names and values must have the same length")
    parsed = [_to_float(n, v) if is_continuous(n) else str(v).strip()
              for n, v in zip(names, values)]
    return Instance.from_sequences(names, parsed, label)


def read_dataset(path: str | os.PathLike, *, filters: Iterable[str] | None = None) -> Dataset:
    """
    Load a dataset from a record file.

    Parameters
    ----------
    path : str or path-like
        File to read.
    filters : iterable of str, optional
        Restrict the tracked attributes, see :class:`~id3py.dataset.Dataset`.

    Returns
    -------
    Dataset

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ValueError
        If the file is empty or its header has fewer than two columns.
    """
    logger.info("Loading data set %s", path)
    frame = pd.read_csv(path, dtype=str, keep_default_na=False,
                        skipinitialspace=True, skip_blank_lines=True)
    frame.columns = [str(c).strip() for c in frame.columns]
    if frame.shape[1] < 2:
        raise ValueError(f"{path}: header needs at least one attribute and a class column")
    names, label_column = list(frame.columns[:-1]), frame.columns[-1]
    logger.info("Attribute names %s, class column %s", names, label_column)

    frame = frame.fillna("").apply(lambda col: col.str.strip())
    for name in names:
        if not is_continuous(name):
            continue
        numeric = pd.to_numeric(frame[name], errors="coerce")
        bad = numeric.isna()
        if bad.any():
            logger.warning("Number format exception for %d value(s) of %s (e.g. %r), using 0.0",
                           int(bad.sum()), name, frame.loc[bad, name].iloc[0])
        frame[name] = numeric.fillna(0.0).astype(float)

    dataset = Dataset(filters=filters)
    for row in frame.itertuples(index=False, name=None):
        dataset.add(Instance.from_sequences(names, row[:-1], row[-1]))
    logger.info("Loaded %d instances", len(dataset))
    return dataset
