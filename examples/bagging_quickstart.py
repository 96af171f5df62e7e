import logging
from time import perf_counter
from sklearn.datasets import load_iris
from sklearn.model_selection import train_test_split
from id3py import BaggedID3Classifier, Ensemble

logging.basicConfig(level=logging.INFO)

X, y = load_iris(return_X_y=True)
feats = ["sepal-length", "sepal-width", "petal-length", "petal-width"]
X_train, X_test, y_train, y_test = train_test_split(X, y, test_size=0.3, random_state=42)

clf = BaggedID3Classifier(n_estimators=25, feature_names=feats, pruning=True,
                          random_state=42, n_jobs=-1)

t0 = perf_counter(); clf.fit(X_train, y_train); print(f"fit: {perf_counter()-t0:.3f} s")
print(f"test accuracy: {clf.score(X_test, y_test):.3f}")

path = clf.ensemble_.save("iris_ensemble.joblib")
restored = Ensemble.load(path)
print(f"restored {len(restored)} trees from {path}")
