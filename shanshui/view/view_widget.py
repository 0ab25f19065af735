"""Qt widget hosting the animated landscape.

The widget is a thin shell around :class:`~shanshui.engine.LandscapeEngine`:

* a :class:`FrameLoop` asks for a repaint once per refresh interval;
* ``paintEvent`` runs one tick (engine step, :func:`paint_frame`, overlay);
* mouse events feed the engine's pointer and pools and never paint.

:func:`ShanshuiViewWidget` picks an OpenGL-backed widget when the bindings
allow it and falls back to a plain raster ``QWidget`` otherwise. Both expose
the same API.
"""

from __future__ import annotations

import os
import time
from typing import Callable, Mapping, Optional, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

from ..colors import to_qcolor
from ..diagnostics import debug, warn
from ..engine import Frame, LandscapeEngine
from ..overlay import paint_overlay
from ..terrain import render_layer

__all__ = ["FrameLoop", "ShanshuiViewWidget", "paint_frame"]


# ---------------------------------------------------------------------------
# Frame loop


class FrameLoop:
    """Start/stop handle over the refresh timer.

    ``stop`` may be called any number of times; once it returns the callback
    is not invoked again until ``start`` is called.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval_ms: int = 16,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        self._callback = callback
        self._interval_ms = max(int(interval_ms), 1)
        self._timer = QtCore.QTimer(parent)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.timeout.connect(self._fire)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def _fire(self) -> None:
        if self._running:
            self._callback()

    def start(self) -> None:
        self._running = True
        if not self._timer.isActive():
            self._timer.start(self._interval_ms)

    def stop(self) -> None:
        self._running = False
        if self._timer.isActive():
            self._timer.stop()

    def set_interval(self, interval_ms: int) -> None:
        """Update the refresh interval; ``0`` or less stops the loop."""

        interval_ms = int(interval_ms)
        if interval_ms <= 0:
            self.stop()
            return
        self._interval_ms = interval_ms
        if self._timer.isActive():
            self._timer.setInterval(interval_ms)


# ---------------------------------------------------------------------------
# Painting


def _paint_disc(painter: QtGui.QPainter, x: float, y: float, r: float, color: str, alpha: float) -> None:
    if r <= 0:
        return
    painter.setOpacity(max(0.0, min(1.0, alpha)))
    painter.setBrush(to_qcolor(color))
    painter.drawEllipse(QtCore.QRectF(x - r, y - r, r * 2.0, r * 2.0))


def paint_frame(painter: QtGui.QPainter, frame: Frame, *, stroke_width: float = 1.5) -> None:
    """Composite one frame, leaving the painter fully opaque for whatever follows."""

    painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
    painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
    painter.setOpacity(1.0)
    rect = QtCore.QRectF(0.0, 0.0, float(frame.width), float(frame.height))

    # rice paper
    painter.setCompositionMode(QtGui.QPainter.CompositionMode_Source)
    painter.fillRect(rect, QtCore.Qt.transparent)
    painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
    painter.fillRect(rect, to_qcolor(frame.background))
    grain = to_qcolor(frame.grain_color)
    for g in frame.grain:
        painter.fillRect(QtCore.QRectF(g.x, g.y, g.size, g.size), grain)

    for sample in frame.layers:
        render_layer(painter, frame.width, frame.height, sample, stroke_width=stroke_width)

    painter.setPen(QtCore.Qt.NoPen)
    for item in frame.dust:
        _paint_disc(painter, item.x, item.y, item.r, item.color, item.alpha)

    painter.setBrush(QtCore.Qt.NoBrush)
    for ring in frame.ripples:
        if ring.r <= 0:
            continue
        painter.setOpacity(max(0.0, min(1.0, ring.alpha)))
        painter.setPen(QtGui.QPen(to_qcolor(ring.color), ring.width))
        painter.drawEllipse(QtCore.QPointF(ring.x, ring.y), ring.r, ring.r)

    painter.setPen(QtCore.Qt.NoPen)
    for item in frame.ink:
        _paint_disc(painter, item.x, item.y, item.r, item.color, item.alpha)

    painter.setOpacity(1.0)


# ---------------------------------------------------------------------------
# OpenGL helpers


def _create_opengl_functions() -> Tuple[Optional[object], Optional[BaseException]]:
    """Safely instantiate ``QOpenGLFunctions`` when available.

    Returns a tuple ``(functions, error)`` where ``functions`` is the
    initialised OpenGL function table or ``None`` when the binding is not
    present.
    """

    factory = getattr(QtGui, "QOpenGLFunctions", None)
    if factory is None:
        return None, AttributeError("PyQt5.QtGui has no attribute 'QOpenGLFunctions'")
    try:
        functions = factory()
    except Exception as exc:  # pragma: no cover - depends on bindings
        return None, exc
    try:
        functions.initializeOpenGLFunctions()
    except Exception as exc:  # pragma: no cover - depends on runtime GL state
        return None, exc
    return functions, None


# ---------------------------------------------------------------------------
# Widgets


class _ViewWidgetBase:
    """Common behaviour shared by both the OpenGL and raster backends."""

    def _init_view_widget(self, config: Optional[Mapping[str, object]] = None, seed: Optional[int] = None) -> None:
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setAutoFillBackground(False)
        self.setMouseTracking(True)
        self.setCursor(QtCore.Qt.BlankCursor)
        # dust is seeded on the first tick that sees the laid-out size
        self.engine = LandscapeEngine(config, seed=seed)
        self._last_frame: Optional[Frame] = None
        self._start_time = time.perf_counter()
        self._show_overlay = True
        system = self.engine.state["system"]
        self._loop = FrameLoop(self.update, int(system["frameIntervalMs"]), parent=self)
        self._loop.start()

    @property
    def now_ms(self) -> float:
        return (time.perf_counter() - self._start_time) * 1000.0

    @property
    def frame_loop(self) -> FrameLoop:
        return self._loop

    # ------------------------------------------------------------------ API
    def set_params(self, payload: Mapping[str, object]) -> None:
        self.engine.merge_state(payload)
        self._loop.set_interval(int(self.engine.state["system"]["frameIntervalMs"]))

    def set_overlay_visible(self, enabled: bool) -> None:
        self._show_overlay = bool(enabled)
        self.update()

    def reset_visual_state(self) -> None:
        """Drop transient ink and ripples."""

        self.engine.reset_visual_state()
        self.update()

    def shutdown(self) -> None:
        self._loop.stop()

    # ------------------------------------------------------------------ input
    def _handle_pointer_move(self, event: QtGui.QMouseEvent) -> None:
        pos = event.localPos()
        self.engine.pointer_move(pos.x(), pos.y(), self.width(), self.height())
        event.accept()

    def _handle_pointer_press(self, event: QtGui.QMouseEvent) -> None:
        if event.button() == QtCore.Qt.LeftButton:
            pos = event.localPos()
            self.engine.pointer_click(pos.x(), pos.y())
            event.accept()
            return
        event.ignore()

    # ------------------------------------------------------------------ rendering
    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        if self._loop.running:
            frame = self.engine.step(self.width(), self.height(), self.now_ms)
            if frame is not None:
                self._last_frame = frame
        else:
            # repaints Qt asks for on its own never advance a stopped scene
            frame = self._last_frame
        if frame is None:
            return
        stroke_width = float(self.engine.state["terrain"]["strokeWidth"])
        paint_frame(painter, frame, stroke_width=stroke_width)
        if self._show_overlay:
            pointer = self.engine.pointer
            cursor = None if pointer.raw_x is None else (pointer.raw_x, pointer.raw_y)
            paint_overlay(painter, frame.width, frame.height, cursor)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed renderer when the system can create a GL context."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        config: Optional[Mapping[str, object]] = None,
        seed: Optional[int] = None,
    ) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._gl: Optional[object] = None
        self._init_view_widget(config, seed)

    def initializeGL(self) -> None:  # pragma: no cover - requires GUI context
        self._gl, error = _create_opengl_functions()
        if error is not None:
            warn(f"OpenGL initialisation failed: {error}. Falling back to raster clear handling.")

    def resizeGL(self, width: int, height: int) -> None:  # pragma: no cover - requires GUI context
        debug(f"surface resized to {width}x{height}")

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        if self._gl is not None:
            # GL_COLOR_BUFFER_BIT
            self._gl.glClear(0x00004000)
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_pointer_move(event)

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_pointer_press(event)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.shutdown()
        super().closeEvent(event)


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback renderer using the traditional raster ``QWidget`` backend."""

    def __init__(
        self,
        parent: Optional[QtWidgets.QWidget] = None,
        config: Optional[Mapping[str, object]] = None,
        seed: Optional[int] = None,
    ) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(config, seed)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        if not painter.isActive():
            # no backing store yet; the next tick retries
            return
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self.update()

    def mouseMoveEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_pointer_move(event)

    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # type: ignore[override]
        self._handle_pointer_press(event)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.shutdown()
        super().closeEvent(event)


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True

    env_backend = os.environ.get("SHANSHUI_FORCE_BACKEND", "").strip().lower()
    if env_backend == "raster":
        return False
    if env_backend == "opengl":
        return True

    if os.environ.get("SHANSHUI_FORCE_RASTER", "").strip().lower() in {"1", "true", "yes"}:
        return False
    if os.environ.get("SHANSHUI_FORCE_OPENGL", "").strip().lower() in {"1", "true", "yes"}:
        return True
    return hasattr(QtWidgets, "QOpenGLWidget")


def ShanshuiViewWidget(
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
    config: Optional[Mapping[str, object]] = None,
    seed: Optional[int] = None,
) -> QtWidgets.QWidget:
    """Factory returning the best available renderer widget.

    Parameters
    ----------
    parent:
        Parent widget used by Qt for ownership.
    force_backend:
        ``"opengl"`` forces the OpenGL widget while ``"raster"`` selects the
        pure QWidget implementation.
    config:
        Optional configuration overrides merged over the defaults.
    seed:
        Seed for the engine's random source (dust layout, ink and ripple jitter).
    """

    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(parent, config, seed)
            setattr(widget, "backend_name", "opengl")
            setattr(widget, "uses_opengl", True)
            return widget
        except Exception as exc:
            warn(f"Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.")
    widget = _RasterViewWidget(parent, config, seed)
    setattr(widget, "backend_name", "raster")
    setattr(widget, "uses_opengl", False)
    return widget
