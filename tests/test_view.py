import pytest
from PyQt5 import QtCore, QtGui, QtTest, QtWidgets

from shanshui.engine import LandscapeEngine
from shanshui.overlay import paint_overlay
from shanshui.view import FrameLoop, ShanshuiViewWidget, paint_frame


def _quiet_engine(**overrides):
    payload = {
        "system": {"debugEvery": 0},
        "background": {"grainCount": 0},
        "dust": {"count": 0},
    }
    payload.update(overrides)
    return LandscapeEngine(payload, seed=3)


def _image(width, height):
    image = QtGui.QImage(width, height, QtGui.QImage.Format_ARGB32_Premultiplied)
    image.fill(0)
    return image


def test_paint_frame_leaves_painter_opaque(qapp):
    eng = LandscapeEngine(seed=1)
    eng.merge_state({"system": {"debugEvery": 0}})
    eng.pointer_move(50.0, 50.0, 200, 600)
    eng.pointer_move(60.0, 60.0, 200, 600)
    eng.pointer_click(100.0, 100.0)
    frame = eng.step(200, 600, 0.0)
    image = _image(200, 600)
    painter = QtGui.QPainter(image)
    try:
        paint_frame(painter, frame)
        assert painter.opacity() == 1.0
    finally:
        painter.end()


def test_paint_frame_paints_rice_paper_above_the_mountains(qapp):
    frame = _quiet_engine().step(200, 600, 0.0)
    image = _image(200, 600)
    painter = QtGui.QPainter(image)
    try:
        paint_frame(painter, frame)
    finally:
        painter.end()
    assert image.pixelColor(1, 1).name() == "#f4f1e8"


def test_ink_is_painted_on_top_of_ripples(qapp):
    eng = _quiet_engine()
    eng.pointer_click(100.0, 40.0)
    for tick in range(8):
        eng.step(200, 600, tick * 16.0)
    eng.pointer_move(112.0, 40.0, 200, 600)
    eng.pointer_move(112.0, 40.0, 200, 600)
    frame = eng.step(200, 600, 200.0)
    ring = frame.ripples[0]
    assert ring.r == pytest.approx(13.5)
    (drop,) = frame.ink
    image = _image(200, 600)
    painter = QtGui.QPainter(image)
    try:
        paint_frame(painter, frame)
    finally:
        painter.end()
    # the ring alone would leave green above 160 here; the drop darkens it
    pixel = image.pixelColor(int(drop.x), int(drop.y))
    assert pixel.green() < 130


def test_overlay_restores_painter_state(qapp):
    image = _image(400, 300)
    painter = QtGui.QPainter(image)
    try:
        painter.setOpacity(1.0)
        paint_overlay(painter, 400, 300, (20.0, 20.0))
        assert painter.opacity() == 1.0
        assert painter.compositionMode() == QtGui.QPainter.CompositionMode_SourceOver
    finally:
        painter.end()


def test_frame_loop_start_stop_is_idempotent(qapp):
    calls = []
    loop = FrameLoop(lambda: calls.append(1), 5)
    loop.start()
    loop.start()
    QtTest.QTest.qWait(60)
    assert loop.running
    assert calls

    loop.stop()
    loop.stop()
    seen = len(calls)
    QtTest.QTest.qWait(60)
    assert not loop.running
    assert len(calls) == seen

    loop.start()
    QtTest.QTest.qWait(60)
    assert len(calls) > seen
    loop.stop()


def test_frame_loop_zero_interval_stops(qapp):
    loop = FrameLoop(lambda: None, 16)
    loop.start()
    loop.set_interval(0)
    assert not loop.running
    loop.set_interval(33)
    assert loop.interval_ms == 33


@pytest.fixture
def widget(qapp):
    w = ShanshuiViewWidget(force_backend="raster", seed=9, config={"system": {"debugEvery": 0}})
    w.resize(400, 300)
    yield w
    w.shutdown()
    w.deleteLater()


def _mouse(kind, x, y, button=QtCore.Qt.NoButton):
    buttons = QtCore.Qt.NoButton if kind == QtCore.QEvent.MouseMove else button
    return QtGui.QMouseEvent(kind, QtCore.QPointF(x, y), button, buttons, QtCore.Qt.NoModifier)


def test_widget_uses_requested_backend(widget):
    assert widget.backend_name == "raster"
    assert widget.uses_opengl is False
    assert widget.frame_loop.running


def test_widget_routes_pointer_events_to_engine(widget):
    for i in range(4):
        widget.mouseMoveEvent(_mouse(QtCore.QEvent.MouseMove, 100.0 + i, 80.0))
    widget.mousePressEvent(_mouse(QtCore.QEvent.MouseButtonPress, 100.0, 80.0, QtCore.Qt.LeftButton))
    widget.mousePressEvent(_mouse(QtCore.QEvent.MouseButtonPress, 100.0, 80.0, QtCore.Qt.RightButton))
    engine = widget.engine
    assert len(engine.ink) == 2
    assert len(engine.ripples) == 1
    assert engine.pointer.target_x == pytest.approx(103.0 - 200.0)
    # events never tick the scene
    assert engine.clock.frame == 0


def test_widget_paint_runs_one_tick(widget):
    widget.grab()
    assert widget.engine.clock.frame >= 1


def test_widget_shutdown_stops_loop(widget):
    widget.shutdown()
    widget.shutdown()
    assert not widget.frame_loop.running


def test_set_params_updates_interval(widget):
    widget.set_params({"system": {"frameIntervalMs": 40}})
    assert widget.frame_loop.interval_ms == 40


def test_dust_spreads_over_the_laid_out_widget(qapp):
    window = QtWidgets.QMainWindow()
    view = ShanshuiViewWidget(window, force_backend="raster", seed=21, config={"system": {"debugEvery": 0}})
    window.setCentralWidget(view)
    window.resize(1200, 800)
    window.show()
    try:
        QtTest.QTest.qWait(30)
        view.grab()
        xs = [p.x for p in view.engine.dust.particles]
        ys = [p.y for p in view.engine.dust.particles]
        assert view.width() > 600
        assert max(xs) > view.width() / 2
        assert max(ys) > view.height() / 2
    finally:
        view.shutdown()
        window.close()
        window.deleteLater()


def test_repaints_after_shutdown_do_not_tick(widget):
    widget.show()
    QtTest.QTest.qWait(40)
    widget.grab()
    widget.shutdown()
    frames = widget.engine.clock.frame
    widget.resize(500, 350)
    widget.grab()
    QtTest.QTest.qWait(40)
    assert widget.engine.clock.frame == frames
    widget.hide()
