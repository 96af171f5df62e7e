# -*- coding: utf-8 -*-
"""
id3py.tree
==========

This module implements an ID3-style decision tree.  Trees are grown top-down
by choosing, at every node, the untested attribute with the highest
information gain.  Discrete attributes produce one branch per observed value;
continuous attributes produce a binary ``<= threshold`` / ``> threshold``
branch whose threshold is found by a short bisection over the value range.

After induction a tree may be pruned with a purity criterion: a binary node
whose own purity is higher than the mean purity of its two children is
collapsed into a leaf.

The induced structure is made of three node types, :class:`Leaf`,
:class:`ContinuousSplit` and :class:`DiscreteSplit`.  :class:`ID3Tree` owns a
root node together with the bookkeeping of its last test run, and
:class:`ID3Classifier` wraps it behind a scikit-learn–like API.
"""

from __future__ import annotations

import logging
import numbers
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.metrics import confusion_matrix as _sk_confusion_matrix

from .dataset import CONTINUOUS_MARKER, Dataset, Instance, is_continuous

logger = logging.getLogger(__name__)

# bisection passes and the purity (in percent) that stops the search early
MAX_SPLIT_PASSES = 3
SPLIT_PURITY_TARGET = 80.0


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _entropy(dist_vec: np.ndarray) -> float:
    tot = dist_vec.sum()
    if tot <= 0:
        return 0.0
    p = dist_vec / tot
    p = p[p > 0]
    return max(0.0, float(-np.sum(p * np.log2(p))))

def entropy(dataset: Dataset) -> float:
    """Shannon entropy (base 2) of the class labels in ``dataset``."""
    return _entropy(np.fromiter(dataset.class_counts.values(), dtype=float))

def information_gain(dataset: Dataset, parts) -> float:
    """
    Entropy reduction obtained by partitioning ``dataset`` into ``parts``.

    Parameters
    ----------
    dataset : Dataset
        The parent subset.
    parts : iterable of Dataset
        A partition of ``dataset``.

    Returns
    -------
    float
        ``entropy(S) - sum(|S_v| / |S| * entropy(S_v))``, never negative.
    """
    n = len(dataset)
    if n == 0:
        return 0.0
    remainder = sum(len(p) / n * entropy(p) for p in parts if len(p))
    return max(0.0, entropy(dataset) - remainder)

def binary_split(dataset: Dataset, attribute: str) -> float | None:
    """
    Search a threshold for a continuous attribute by bisection.

    The search starts from the midpoint of the smallest and largest values.
    Each pass partitions the subset at the current midpoint and moves the
    bound of the less pure side to the midpoint, so the interval shrinks
    towards the purer side.  The search stops after ``MAX_SPLIT_PASSES``
    passes or once the purer side reaches ``SPLIT_PURITY_TARGET`` percent.

    Returns
    -------
    float or None
        The final midpoint, or ``None`` if the attribute is unknown or not
        continuous.
    """
    values = dataset.numeric_values(attribute)
    if values is None or values.size == 0:
        return None
    lo, hi = float(values[0]), float(values[-1])
    mid = (lo + hi) / 2
    for npass in range(1, MAX_SPLIT_PASSES + 1):
        left, right = dataset.split_threshold(attribute, mid)
        left_purity, right_purity = left.purity(), right.purity()
        if left_purity > right_purity:
            purity, hi = left_purity, mid
        else:
            purity, lo = right_purity, mid
        mid = (lo + hi) / 2
        logger.debug("Split pass %d on %s: purity left %.2f right %.2f, next split %s",
                     npass, attribute, left_purity, right_purity, mid)
        if purity >= SPLIT_PURITY_TARGET:
            break
    return mid


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(eq=False)
class TreeNode:
    """Statistics shared by every node of an induced tree.

    Attributes
    ----------
    purity : float
        Majority-class share (percent) of the training subset at this node.
    entropy : float
        Class entropy of that subset.
    majority : object
        Majority class of that subset; used as the pruning label and as the
        classification fallback.
    tested : tuple of str
        Attributes tested on the path from the root, this node excluded.
    dataset : Dataset or None
        The training subset, until released.
    """

    purity: float
    entropy: float
    majority: object
    tested: tuple = ()
    dataset: Dataset | None = field(default=None, repr=False)

    is_leaf = False

    @property
    def children(self) -> list["TreeNode"]:
        return []


@dataclass(eq=False)
class Leaf(TreeNode):
    label: object = None

    is_leaf = True


@dataclass(eq=False)
class ContinuousSplit(TreeNode):
    attribute: str = ""
    threshold: float = 0.0
    left: TreeNode | None = None
    right: TreeNode | None = None

    @property
    def children(self) -> list[TreeNode]:
        return [self.left, self.right]


@dataclass(eq=False)
class DiscreteSplit(TreeNode):
    attribute: str = ""
    # value -> child, in first-seen order
    branches: dict = field(default_factory=dict)
    # majority attribute value, substituted for values unseen in training
    fallback_value: object = None

    @property
    def children(self) -> list[TreeNode]:
        return list(self.branches.values())


def iter_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Depth-first pre-order walk over ``node`` and its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))

def classify(node: TreeNode, instance: Instance):
    """Return the label predicted for ``instance`` by the subtree at ``node``.

    An attribute missing from ``instance`` never raises.  At a continuous
    node the node's majority class is returned; at a discrete node the
    missing value is treated like an unseen one and replaced by the node's
    majority value.
    """
    if node.is_leaf:
        return node.label
    if isinstance(node, ContinuousSplit):
        if node.attribute not in instance:
            logger.debug("Instance has no %s, using majority %r", node.attribute, node.majority)
            return node.majority
        if float(instance[node.attribute]) <= node.threshold:
            return classify(node.left, instance)
        return classify(node.right, instance)
    value = instance.get(node.attribute)
    if value not in node.branches:
        logger.debug("Value %r of %s unseen in training, using %r",
                     value, node.attribute, node.fallback_value)
        value = node.fallback_value
    child = node.branches.get(value)
    if child is None:
        return node.majority
    return classify(child, instance)


# -----------------------------------------------------------------------------
# Tree
# -----------------------------------------------------------------------------
class ID3Tree:
    """
    An ID3 decision tree induced from a :class:`~id3py.dataset.Dataset`.

    Parameters
    ----------
    dataset : Dataset
        Training instances.  Only the attributes tracked by the dataset (see
        its ``filters``) are candidates for splits.

    Attributes
    ----------
    root : TreeNode or None
        Root of the induced tree; ``None`` until :meth:`traverse` has run on a
        non-empty dataset.
    test_set : Dataset or None
        Instances of the last :meth:`test` run.
    predicted : list
        Labels predicted during the last :meth:`test` run, aligned with
        ``test_set``.
    accuracy : float
        Share of correct predictions of the last :meth:`test` run.

    Notes
    -----
    When several attributes reach the same information gain the first one in
    the dataset's attribute order wins.  That order is the order in which
    attributes were first seen and should not be relied upon.
    """

    def __init__(self, dataset: Dataset):
        self.dataset = dataset
        self.root: TreeNode | None = None
        self.test_set: Dataset | None = None
        self.predicted: list = []
        self.accuracy = 0.0

    # ------------------------------------------------------------------
    # Induction
    # ------------------------------------------------------------------
    def traverse(self) -> "ID3Tree":
        """Induce the tree from the training dataset."""
        if self.dataset is None or len(self.dataset) == 0:
            logger.warning("Training set is empty, tree left unresolved")
            return self
        logger.debug("Inducing tree from %d instances", len(self.dataset))
        self.root = self._grow(self.dataset, ())
        return self

    def _grow(self, dataset: Dataset, tested: tuple) -> TreeNode:
        stats = dict(purity=dataset.purity(), entropy=entropy(dataset),
                     majority=dataset.majority_class(), tested=tested, dataset=dataset)
        logger.debug("Node with %d instances, purity %.2f, entropy %.4f",
                     len(dataset), stats["purity"], stats["entropy"])
        if stats["entropy"] == 0:
            return Leaf(label=stats["majority"], **stats)
        if len(tested) >= len(dataset.attributes):
            logger.debug("Attributes exhausted, leaf %s", stats["majority"])
            return Leaf(label=stats["majority"], **stats)

        attribute, threshold = self._select_attribute(dataset, tested)
        # copy-on-write: siblings never share a tested tuple they could mutate
        tested = tested + (attribute,)
        if threshold is not None:
            left, right = dataset.split_threshold(attribute, threshold)
            logger.debug("Binary split on %s at %s: %d / %d",
                         attribute, threshold, len(left), len(right))
            return ContinuousSplit(
                attribute=attribute, threshold=threshold,
                left=self._grow_child(left, tested, stats["majority"]),
                right=self._grow_child(right, tested, stats["majority"]),
                **stats)
        parts = dataset.split_values(attribute)
        logger.debug("Discrete split on %s into %d branches", attribute, len(parts))
        return DiscreteSplit(
            attribute=attribute,
            branches={value: self._grow(part, tested) for value, part in parts.items()},
            fallback_value=dataset.majority_value(attribute),
            **stats)

    def _grow_child(self, dataset: Dataset, tested: tuple, parent_majority) -> TreeNode:
        # an empty side of a binary split inherits the parent's majority class
        if len(dataset) == 0:
            return Leaf(purity=0.0, entropy=0.0, majority=parent_majority, tested=tested,
                        dataset=dataset, label=parent_majority)
        return self._grow(dataset, tested)

    def _select_attribute(self, dataset: Dataset, tested: tuple) -> tuple[str, float | None]:
        best_gain, best_attr, best_thr = -1.0, None, None
        for attribute in dataset.attributes:
            if attribute in tested:
                continue
            if is_continuous(attribute):
                threshold = binary_split(dataset, attribute)
                parts = dataset.split_threshold(attribute, threshold)
            else:
                threshold = None
                parts = dataset.split_values(attribute).values()
            gain = information_gain(dataset, parts)
            logger.debug("Info gain %.4f on %s", gain, attribute)
            if gain > best_gain:
                best_gain, best_attr, best_thr = gain, attribute, threshold
        logger.debug("Max info gain %.4f on %s", best_gain, best_attr)
        return best_attr, best_thr

    # ------------------------------------------------------------------
    # Pruning
    # ------------------------------------------------------------------
    def prune(self) -> "ID3Tree":
        """
        Collapse binary nodes that are purer than their children on average.

        The walk is post-order, so children are simplified before their
        parent is judged.  The walk only follows binary nodes: a discrete
        multiway node ends it, and the subtree below it is left as induced.
        """
        if self.root is not None:
            self.root = self._prune(self.root)
        return self

    def _prune(self, node: TreeNode) -> TreeNode:
        if not isinstance(node, ContinuousSplit):
            return node
        node.left = self._prune(node.left)
        node.right = self._prune(node.right)
        branch_purity = (node.left.purity + node.right.purity) / 2
        if node.purity > branch_purity:
            logger.debug("Pruning %s: node purity %.2f, branch purity %.2f",
                         node.attribute, node.purity, branch_purity)
            return Leaf(purity=node.purity, entropy=node.entropy, majority=node.majority,
                        tested=node.tested, dataset=node.dataset, label=node.majority)
        return node

    # ------------------------------------------------------------------
    # Prediction and testing
    # ------------------------------------------------------------------
    def _check_induced(self):
        if self.root is None:
            raise ValueError("Tree not induced. Call traverse() first.")

    def classify(self, instance: Instance):
        self._check_induced()
        return classify(self.root, instance)

    def test(self, dataset: Dataset) -> float:
        """
        Classify every instance of ``dataset`` and record the outcome.

        Returns
        -------
        float
            Accuracy, the share of instances whose predicted label equals
            their actual label.  An empty dataset scores 0.
        """
        self._check_induced()
        self.test_set = dataset
        self.predicted = [self.classify(inst) for inst in dataset]
        matches = sum(p == inst.label for p, inst in zip(self.predicted, dataset))
        self.accuracy = matches / len(dataset) if len(dataset) else 0.0
        logger.info("Test completed with %d out of %d matches, accuracy %.4f",
                    matches, len(dataset), self.accuracy)
        return self.accuracy

    def confusion_matrix(self) -> pd.DataFrame:
        """
        Confusion matrix of the last :meth:`test` run.

        Rows are actual classes, columns predicted classes; labels follow the
        test set's class order, followed by any predicted label absent from it.
        """
        if self.test_set is None:
            raise ValueError("No test run recorded. Call test(...) first.")
        actual = self.test_set.labels
        labels = list(self.test_set.classes)
        labels += [p for p in dict.fromkeys(self.predicted) if p not in labels]
        grid = _sk_confusion_matrix(actual, self.predicted, labels=labels)
        return pd.DataFrame(grid, index=pd.Index(labels, name="actual"),
                            columns=pd.Index(labels, name="predicted"))

    def release_training_data(self) -> None:
        """Drop the training subsets held by the nodes and the last test run.

        Classification keeps working since every node caches the majority
        class and value it needs.  Pruning afterwards is also safe but the
        released subsets cannot be recovered.
        """
        if self.root is not None:
            for node in iter_nodes(self.root):
                node.dataset = None
        self.dataset = None
        self.test_set = None
        self.predicted = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def n_leaves(self) -> int:
        if self.root is None:
            return 0
        return sum(1 for node in iter_nodes(self.root) if node.is_leaf)

    @property
    def depth(self) -> int:
        def _depth(node):
            kids = node.children
            return 0 if not kids else 1 + max(_depth(ch) for ch in kids)
        return 0 if self.root is None else _depth(self.root)

    def export_rules(self) -> list[str]:
        """
        Export every root-to-leaf path as ``<antecedent> => <label>``.
        """
        self._check_induced()
        rules: list[str] = []
        self._collect_rules(self.root, [], rules)
        return rules

    def _collect_rules(self, node: TreeNode, parts, rules):
        if node.is_leaf:
            body = " AND ".join(parts) if parts else "<root>"
            rules.append(f"{body} => {node.label}")
            return
        if isinstance(node, ContinuousSplit):
            self._collect_rules(node.left, parts + [f"{node.attribute} <= {node.threshold:.4f}"], rules)
            self._collect_rules(node.right, parts + [f"{node.attribute} > {node.threshold:.4f}"], rules)
        else:
            for value, child in node.branches.items():
                self._collect_rules(child, parts + [f"{node.attribute} = {value}"], rules)

    def print_tree(self):
        """Pretty-print the tree to ``stdout``."""
        self._check_induced()
        self._print_node(self.root, "")

    def _print_node(self, node: TreeNode, indent=""):
        if node.is_leaf:
            print(f"{indent}Predict {node.label} | purity={node.purity:.1f}")
            return
        if isinstance(node, ContinuousSplit):
            print(f"{indent}if {node.attribute} <= {node.threshold:.4f}:")
            self._print_node(node.left, indent + "  ")
            print(f"{indent}else:")
            self._print_node(node.right, indent + "  ")
        else:
            for value, child in node.branches.items():
                print(f"{indent}if {node.attribute} = {value}:")
                self._print_node(child, indent + "  ")

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file.  If None, the DOT source is returned
            and no file is written.
        format : str, default="png"
            Output format.  ``'dot'`` writes the DOT source directly without
            calling the external ``dot`` binary.

        Returns
        -------
        str
            Path to the written file, or the DOT source if filename is None.
        """
        self._check_induced()
        try:
            import graphviz
        except ImportError:
            raise RuntimeError("Graphviz is required for export_graphviz but not installed.")
        dot = graphviz.Digraph(format=format)
        self._add_graph_nodes(dot, self.root, "0")

        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except graphviz.ExecutableNotFound:
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _add_graph_nodes(self, dot, node: TreeNode, name: str):
        if node.is_leaf:
            dot.node(name, f"class={node.label}\npurity={node.purity:.1f}",
                     shape="box", style="filled", color="lightgrey")
            return
        if isinstance(node, ContinuousSplit):
            dot.node(name, node.attribute, shape="ellipse", style="filled", color="lightblue")
            edges = [(f"<= {node.threshold:.4f}", node.left), (f"> {node.threshold:.4f}", node.right)]
        else:
            dot.node(name, node.attribute, shape="ellipse", style="filled", color="lightblue")
            edges = [(str(value), child) for value, child in node.branches.items()]
        for i, (label, child) in enumerate(edges):
            child_id = f"{name}_{i}"
            self._add_graph_nodes(dot, child, child_id)
            dot.edge(name, child_id, label=label)


# -----------------------------------------------------------------------------
# Estimator helpers
# -----------------------------------------------------------------------------
def _is_numeric_column(col: np.ndarray) -> bool:
    return all(isinstance(v, numbers.Real) and not isinstance(v, bool) for v in col)

def _resolve_feature_names(X, feature_names=None, continuous_features=None) -> list[str]:
    """
    Map user-facing feature names to internal attribute names.

    Columns named in ``continuous_features`` (by index or name) receive the
    continuous marker.  When ``continuous_features`` is None, names already
    carrying the marker are kept as-is and, if none does, every column with
    only numeric entries is treated as continuous.
    """
    X = np.asarray(X, dtype=object)
    n_features = X.shape[1]
    if feature_names is None:
        names = [f"f{i}" for i in range(n_features)]
    else:
        if len(feature_names) != n_features:
            raise ValueError("feature_names length must match X.shape[1]")
        names = [str(n) for n in feature_names]
    if continuous_features is not None:
        cont = list(continuous_features)
        if len(cont) and isinstance(cont[0], str):
            name_to_idx = {n.lstrip(CONTINUOUS_MARKER): i for i, n in enumerate(names)}
            unknown = [c for c in cont if c.lstrip(CONTINUOUS_MARKER) not in name_to_idx]
            if unknown:
                raise ValueError(f"continuous_features names not in feature_names: {unknown}")
            cont = [name_to_idx[c.lstrip(CONTINUOUS_MARKER)] for c in cont]
        cont = set(int(i) for i in cont)
    elif any(is_continuous(n) for n in names):
        cont = set()
    else:
        cont = {i for i in range(n_features) if _is_numeric_column(X[:, i])}
    return [CONTINUOUS_MARKER + n if (i in cont and not is_continuous(n)) else n
            for i, n in enumerate(names)]


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class ID3Classifier(BaseEstimator, ClassifierMixin):
    """
    Single ID3 decision tree with a scikit-learn–like API.

    Parameters
    ----------
    feature_names : list[str] or None, default=None
        Names of the input columns.  A leading ``"#"`` marks a continuous
        column.  Defaults to ``f0, f1, ...``.
    continuous_features : list[int|str] or None, default=None
        Indices or names of continuous columns.  If None, the ``"#"`` marker
        in ``feature_names`` decides and, when no name carries it, every
        all-numeric column is continuous.
    pruning : bool, default=True
        Whether to run purity-based pruning after induction.

    Attributes
    ----------
    tree_ : ID3Tree
        The induced tree.
    classes_ : ndarray
        Class labels seen during ``fit``.
    feature_names_ : list[str]
        Internal attribute names, continuous ones carrying the marker.
    """

    def __init__(self, *, feature_names: list[str] | None = None,
                 continuous_features: list[int | str] | None = None,
                 pruning: bool = True):
        self.feature_names = feature_names
        self.continuous_features = continuous_features
        self.pruning = pruning

    def fit(self, X, y):
        X = np.asarray(X, dtype=object)
        y = np.asarray(y)
        if len(X) != len(y):
            raise ValueError("X and y must have the same number of rows")
        self.feature_names_ = _resolve_feature_names(X, self.feature_names, self.continuous_features)
        self.n_features_in_ = X.shape[1]
        self.classes_ = np.unique(y)
        dataset = Dataset.from_arrays(X, y, self.feature_names_)
        self.tree_ = ID3Tree(dataset).traverse()
        if self.pruning:
            self.tree_.prune()
        return self

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None or self.tree_.root is None:
            raise ValueError("Estimator not fitted. Call fit(...) first.")

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples, columns in the order used for ``fit``.

        Returns
        -------
        ndarray of shape (n_samples,)
            Predicted class labels.

        Raises
        ------
        ValueError
            If the estimator has not been fitted.
        """
        self._check_fitted()
        data = Dataset.from_arrays(X, None, self.feature_names_)
        return np.array([self.tree_.classify(inst) for inst in data])

    def export_rules(self) -> list[str]:
        self._check_fitted()
        return self.tree_.export_rules()

    def print_tree(self):
        self._check_fitted()
        self.tree_.print_tree()
