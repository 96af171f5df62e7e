import pytest
from id3py import Dataset, Instance, merge_excluding_fold
from id3py.dataset import is_continuous


def _weather():
    """Small mixed dataset: one continuous and one discrete attribute."""
    rows = [
        (30.0, "sunny", "no"),
        (22.0, "rain", "yes"),
        (18.0, "rain", "yes"),
        (27.0, "sunny", "no"),
        (21.0, "overcast", "yes"),
    ]
    return Dataset(Instance({"#temp": t, "outlook": o}, label) for t, o, label in rows)


def test_marker_convention():
    assert is_continuous("#temp")
    assert not is_continuous("outlook")


def test_add_updates_statistics():
    ds = _weather()
    assert len(ds) == 5
    assert ds.attributes == ["#temp", "outlook"]
    assert ds.class_counts == {"no": 2, "yes": 3}
    assert ds.value_counts("outlook") == {"sunny": 2, "rain": 2, "overcast": 1}
    # counts of every attribute sum to the number of instances
    for stats in ds.attribute_stats.values():
        assert stats.total == len(ds)


def test_majority_and_purity():
    ds = _weather()
    assert ds.majority_class() == "yes"
    assert ds.purity() == pytest.approx(60.0)
    # tie between sunny and rain goes to the first value seen
    assert ds.majority_value("outlook") == "sunny"


def test_empty_dataset_purity_is_zero():
    assert Dataset().purity() == 0.0
    assert Dataset().majority_class() is None


def test_unknown_attribute_returns_none():
    ds = _weather()
    assert ds.split_values("humidity") is None
    assert ds.split_threshold("#humidity", 1.0) is None
    assert ds.majority_value("humidity") is None
    assert ds.values("humidity") is None


def test_split_threshold_requires_continuous():
    assert _weather().split_threshold("outlook", 1.0) is None


def test_split_threshold_partitions(iris):
    left, right = iris.split_threshold("#petal-width", 1.0)
    assert len(left) + len(right) == len(iris)
    assert all(inst["#petal-width"] <= 1.0 for inst in left)
    assert all(inst["#petal-width"] > 1.0 for inst in right)
    assert not set(map(id, left)) & set(map(id, right))


def test_split_values():
    parts = _weather().split_values("outlook")
    assert list(parts) == ["sunny", "rain", "overcast"]
    assert [len(p) for p in parts.values()] == [2, 2, 1]
    assert parts["rain"].class_counts == {"yes": 2}


def test_split_folds_round_robin(iris):
    folds = iris.split_folds(7)
    assert len(folds) == 7
    assert sum(len(f) for f in folds) == len(iris)
    assert [len(f) for f in folds] == [22, 22, 22, 21, 21, 21, 21]
    assert folds[1][0] is iris[1]
    assert folds[1][1] is iris[8]


def test_split_folds_rejects_small_k(iris):
    assert iris.split_folds(1) is None
    assert iris.split_folds(0) is None


def test_merge_excluding_fold(iris):
    folds = iris.split_folds(5)
    merged = merge_excluding_fold(folds, 2)
    assert len(merged) == len(iris) - len(folds[2])
    held_out = set(map(id, folds[2]))
    assert not any(id(inst) in held_out for inst in merged)


def test_filtered_view_tracks_subset(iris):
    view = iris.filtered(["#petal-length", "#sepal-width"])
    assert len(view) == len(iris)
    assert sorted(view.attributes) == ["#petal-length", "#sepal-width"]
    # partitions keep the filter
    left, right = view.split_threshold("#petal-length", 2.5)
    assert sorted(left.attributes) == ["#petal-length", "#sepal-width"]
    assert view.class_counts == iris.class_counts


def test_from_arrays_validates_names():
    with pytest.raises(ValueError):
        Dataset.from_arrays([[1, "a"]], ["x"], ["#only-one"])


def test_numeric_values_sorted_distinct():
    values = _weather().numeric_values("#temp")
    assert list(values) == [18.0, 21.0, 22.0, 27.0, 30.0]
    assert _weather().numeric_values("outlook") is None


def test_empty_filter_rejected(iris):
    with pytest.raises(ValueError):
        Dataset(filters=[])
    with pytest.raises(ValueError):
        iris.filtered([])
