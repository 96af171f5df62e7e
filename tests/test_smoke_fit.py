import numpy as np
from id3py import BaggedID3Classifier, ID3Classifier

def test_classifier_smoke():
    X = np.array([[1,'A'],[2,'A'],[3,'B'],[4,'B']], dtype=object)
    y = np.array([0,0,1,1])
    clf = ID3Classifier(continuous_features=[0], feature_names=['num','cat'])
    clf.fit(X,y)
    _ = clf.predict(X)
    _ = clf.export_rules()

def test_bagged_smoke():
    X = np.array([[1.0,'A'],[2.0,'A'],[3.0,'B'],[4.0,'B']], dtype=object)
    y = np.array(['no','no','yes','yes'])
    clf = BaggedID3Classifier(n_estimators=3, continuous_features=[0], feature_names=['num','cat'], random_state=0)
    clf.fit(X,y)
    _ = clf.predict(X)
