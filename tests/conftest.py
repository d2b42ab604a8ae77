import matplotlib

matplotlib.use("Agg")

import pytest

from keysig.keyboard import resolve_all


@pytest.fixture
def qwerty_points():
    def _points(name):
        return resolve_all(name, "qwerty")
    return _points
