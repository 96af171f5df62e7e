import pytest
from sklearn.datasets import load_iris

from id3py import Dataset, Instance


@pytest.fixture
def iris():
    """The classic iris data with continuous, marker-prefixed attribute names."""
    data = load_iris()
    names = ["#sepal-length", "#sepal-width", "#petal-length", "#petal-width"]
    labels = ["Iris-" + data.target_names[t] for t in data.target]
    return Dataset.from_arrays(data.data, labels, names)


@pytest.fixture
def fruit():
    """One discrete attribute whose value fully determines the class."""
    rows = ([("red", "apple")] * 4 + [("green", "pear")] * 2 + [("yellow", "banana")] * 3)
    return Dataset(Instance({"colour": c}, label) for c, label in rows)
