import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5 import QtWidgets

from shanshui.engine import LandscapeEngine


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(["shanshui-tests"])
    yield app


@pytest.fixture
def engine():
    eng = LandscapeEngine(seed=1234)
    eng.merge_state({"system": {"debugEvery": 0}})
    return eng
