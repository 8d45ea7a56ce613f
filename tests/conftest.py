import joblib
import pytest
from sklearn.svm import SVC

from stroke_recognition.gestures.pattern_classifier import reset_shared_classifier

from helpers import cluster_samples


@pytest.fixture(scope='session')
def trained_model_path(tmp_path_factory):
    """A small probability SVC persisted the way training persists it."""
    X, y = cluster_samples()
    classifier = SVC(kernel='rbf', probability=True, random_state=42)
    classifier.fit(X, y)

    path = tmp_path_factory.mktemp('model') / 'pattern_model.pkl'
    joblib.dump({'classifier': classifier, 'scale_range': [1.0] * 5}, str(path))
    return str(path)


@pytest.fixture(autouse=True)
def fresh_shared_classifier():
    reset_shared_classifier()
    yield
    reset_shared_classifier()
