import joblib
import numpy as np
import pytest
from sklearn.base import clone
from sklearn.datasets import load_iris

from id3py import BaggedID3Classifier, Dataset, Ensemble, ID3Tree, Instance, Leaf, TreeTrainer
from id3py.tree import iter_nodes


def _leaf_tree(label):
    """A tree that predicts ``label`` for everything."""
    tree = ID3Tree(Dataset())
    tree.root = Leaf(purity=100.0, entropy=0.0, majority=label, label=label)
    return tree


def test_unanimous_vote():
    ensemble = Ensemble(_leaf_tree("C") for _ in range(3))
    assert ensemble.classify_by_vote(Instance({})) == "C"


def test_majority_vote():
    ensemble = Ensemble([_leaf_tree("A"), _leaf_tree("B"), _leaf_tree("B")])
    assert ensemble.votes(Instance({})) == {"A": 1, "B": 2}
    assert ensemble.classify_by_vote(Instance({})) == "B"


def test_tied_vote_goes_to_first_voted_label():
    ensemble = Ensemble()
    ensemble.extend([_leaf_tree("B"), _leaf_tree("A"), _leaf_tree("A")])
    ensemble.add(_leaf_tree("B"))
    assert len(ensemble) == 4
    assert ensemble.classify_by_vote(Instance({})) == "B"


def test_empty_ensemble_raises():
    with pytest.raises(ValueError):
        Ensemble().classify_by_vote(Instance({}))


def test_subset_size(iris):
    trainer = TreeTrainer(iris)
    assert trainer.subset_size() == 2
    subset = trainer.random_attribute_subset(0)
    assert len(subset) == len(iris)
    assert len(subset.attributes) == 2
    assert set(subset.attributes) <= set(iris.attributes)


def test_train_uses_attribute_subsets(iris):
    ensemble = TreeTrainer(iris, random_state=0).train(5)
    assert len(ensemble) == 5
    for tree in ensemble:
        assert tree.dataset is None
        used = {node.attribute for node in iter_nodes(tree.root) if not node.is_leaf}
        assert len(used) <= 2
        assert all(node.dataset is None for node in iter_nodes(tree.root))


def test_train_keeps_training_data_on_request(iris):
    ensemble = TreeTrainer(iris, release=False, pruning=True, random_state=1).train(2)
    assert all(len(tree.dataset) == len(iris) for tree in ensemble)


def test_train_is_reproducible_across_jobs(iris):
    serial = TreeTrainer(iris, random_state=42).train(4)
    parallel = TreeTrainer(iris, random_state=42, n_jobs=2).train(4)
    assert [t.export_rules() for t in serial] == [t.export_rules() for t in parallel]


def test_save_and_load_round_trip(iris, tmp_path):
    ensemble = TreeTrainer(iris, random_state=3).train(3)
    path = ensemble.save(tmp_path / "forest.joblib")
    restored = Ensemble.load(path)
    assert len(restored) == len(ensemble)
    for inst in iris:
        assert restored.votes(inst) == ensemble.votes(inst)
        assert restored.classify_by_vote(inst) == ensemble.classify_by_vote(inst)


def test_load_rejects_other_objects(tmp_path):
    path = tmp_path / "other.joblib"
    joblib.dump({"trees": []}, path)
    with pytest.raises(TypeError):
        Ensemble.load(path)


def test_bagged_classifier_fit_predict():
    X, y = load_iris(return_X_y=True)
    clf = BaggedID3Classifier(n_estimators=7, random_state=0).fit(X, y)
    assert clf.feature_names_ == ["#f0", "#f1", "#f2", "#f3"]
    assert len(clf.ensemble_) == 7
    preds = clf.predict(X)
    assert preds.shape == y.shape
    assert set(np.unique(preds)) <= set(clf.classes_)
    assert clf.score(X, y) > 0.5


def test_bagged_classifier_params():
    clf = BaggedID3Classifier(n_estimators=3, pruning=True)
    params = clone(clf).get_params()
    assert params["n_estimators"] == 3
    assert params["pruning"] is True
    with pytest.raises(ValueError):
        BaggedID3Classifier(n_estimators=0).fit([[1.0]], [0])


def test_bagged_classifier_not_fitted():
    with pytest.raises(ValueError):
        BaggedID3Classifier().predict([[1.0, 2.0]])
