import logging
import pandas as pd
from time import perf_counter
from sklearn.datasets import load_iris
from id3py import read_dataset, parse_instance, run_cross_validation, CrossValidator

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

# write iris as a record file: '#' marks continuous columns, last column is the class
iris = load_iris(as_frame=True)
df = iris.data.copy()
df.columns = ["#sepal-length", "#sepal-width", "#petal-length", "#petal-width"]
df["class"] = ["Iris-" + iris.target_names[t] for t in iris.target]
df.to_csv("iris.csv", index=False)

data = read_dataset("iris.csv")

t0 = perf_counter()
cv = CrossValidator(data, k=10)
tree, accuracy = cv.run()
print(f"cross validation: {perf_counter()-t0:.3f} s, best fold accuracy {accuracy:.3f}")
print(cv.confusion_matrix())

tree.print_tree()
for rule in tree.export_rules():
    print(rule)

names = data.attributes
for values in (["5.5", "4.2", "1.4", "0.2"], ["5.7", "2.6", "3.5", "1.0"]):
    print(values, "->", tree.classify(parse_instance(names, values)))

try:
    tree.export_graphviz("iris_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
