import logging

import pytest
from id3py import ID3Tree, parse_instance, read_dataset


IRIS_SAMPLE = """#sepal-length,#sepal-width,#petal-length,#petal-width,class
5.1,3.5,1.4,0.2,Iris-setosa
4.9,3.0,1.4,0.2,Iris-setosa

7.0,3.2,4.7,1.4,Iris-versicolor
6.4, 3.2, 4.5, 1.5, Iris-versicolor
6.3,3.3,6.0,2.5,Iris-virginica
"""


def _write(tmp_path, text, name="data.csv"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_read_dataset(tmp_path):
    ds = read_dataset(_write(tmp_path, IRIS_SAMPLE))
    assert len(ds) == 5
    assert ds.attributes == ["#sepal-length", "#sepal-width", "#petal-length", "#petal-width"]
    assert ds.class_counts == {"Iris-setosa": 2, "Iris-versicolor": 2, "Iris-virginica": 1}
    assert ds[3]["#sepal-width"] == 3.2
    assert ds[3].label == "Iris-versicolor"
    assert isinstance(ds[0]["#petal-width"], float)


def test_read_mixed_columns(tmp_path):
    text = "outlook,#temp,play\nsunny,30,no\nrain,18,yes\novercast,21,yes\n"
    ds = read_dataset(_write(tmp_path, text))
    assert ds.values("outlook") == ["sunny", "rain", "overcast"]
    assert list(ds.numeric_values("#temp")) == [18.0, 21.0, 30.0]
    tree = ID3Tree(ds).traverse()
    assert tree.classify(parse_instance(["outlook", "#temp"], ["rain", "19"])) == "yes"


def test_bad_number_reads_as_zero(tmp_path, caplog):
    text = "#x,label\n1.5,a\nabc,b\n"
    with caplog.at_level(logging.WARNING, logger="id3py.records"):
        ds = read_dataset(_write(tmp_path, text))
    assert ds[1]["#x"] == 0.0
    assert "Number format exception" in caplog.text


def test_read_with_filters(tmp_path):
    ds = read_dataset(_write(tmp_path, IRIS_SAMPLE), filters=["#petal-length"])
    assert ds.attributes == ["#petal-length"]
    assert len(ds) == 5


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_dataset(tmp_path / "missing.csv")


def test_empty_file(tmp_path):
    with pytest.raises(ValueError):
        read_dataset(_write(tmp_path, ""))


def test_header_without_attributes(tmp_path):
    with pytest.raises(ValueError):
        read_dataset(_write(tmp_path, "class\na\nb\n"))


def test_parse_instance():
    inst = parse_instance(["#a", "colour"], ["2.5", " red "])
    assert inst["#a"] == 2.5
    assert inst["colour"] == "red"
    assert inst.label is None
    assert parse_instance(["#a"], ["oops"])["#a"] == 0.0
    with pytest.raises(ValueError):
        parse_instance(["#a", "b"], ["1.0"])
