# -*- coding: utf-8 -*-
"""Launch the landscape in its own window.

    python -m shanshui.main [--config overrides.json] [--windowed] [--verbose]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, NoReturn, Optional

from .diagnostics import debug, install_debug_silencer, warn


def _handle_qt_import_error(exc: ImportError) -> NoReturn:
    """Exit with a helpful message when the Qt bindings cannot be imported."""

    details = str(exc)
    message_lines = [
        "Unable to start Shanshui: importing PyQt5 failed.",
        "Check that PyQt5 is installed and that the required OpenGL libraries are available.",
    ]
    if "libGL.so.1" in details:
        message_lines.append(
            "Hint: the system library libGL.so.1 is missing. Install the Mesa/OpenGL packages."
        )
    message_lines.append(f"Original error: {details}")
    raise SystemExit("\n".join(message_lines)) from exc


try:
    from PyQt5 import QtCore, QtGui, QtWidgets
    from PyQt5.QtCore import Qt
except ImportError as exc:  # pragma: no cover - environment dependent
    _handle_qt_import_error(exc)

from .config import load_config, sanitize_config
from .view import ShanshuiViewWidget

ROOT = Path(__file__).resolve().parents[1]


class ViewWindow(QtWidgets.QMainWindow):
    def __init__(
        self,
        screen: QtGui.QScreen,
        *,
        config: Optional[Dict[str, dict]] = None,
        seed: Optional[int] = None,
        force_backend: Optional[str] = None,
        windowed: bool = False,
    ):
        super().__init__(None)
        self.setWindowTitle("Shanshui")
        self._target_screen = screen
        self._windowed = windowed
        self.view = ShanshuiViewWidget(self, force_backend=force_backend, config=config, seed=seed)
        debug(f"view backend: {getattr(self.view, 'backend_name', '?')}")

        w = QtWidgets.QWidget()
        w.setAutoFillBackground(False)
        lay = QtWidgets.QVBoxLayout(w)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.view)
        self.setCentralWidget(w)

        self._apply_screen_geometry(screen)
        QtWidgets.QShortcut(Qt.Key_Escape, self, activated=self.close)
        QtWidgets.QShortcut(Qt.Key_R, self, activated=self.view.reset_visual_state)
        QtWidgets.QShortcut(Qt.Key_H, self, activated=self._toggle_overlay)
        self._overlay = True

    def _apply_screen_geometry(self, screen: QtGui.QScreen):
        if window_handle := self.windowHandle():
            window_handle.setScreen(screen)
        geometry = screen.availableGeometry()
        if not self._windowed:
            self.setGeometry(geometry)
            return
        width = int(geometry.width() * 0.8)
        height = int(geometry.height() * 0.8)
        left = geometry.left() + (geometry.width() - width) // 2
        top = geometry.top() + (geometry.height() - height) // 2
        self.setGeometry(left, top, width, height)

    def _toggle_overlay(self) -> None:
        self._overlay = not self._overlay
        self.view.set_overlay_visible(self._overlay)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        self.view.shutdown()
        super().closeEvent(event)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Animated blue-green landscape with parallax mountains, ink trails and ripples."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file overriding the default tunables.",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Frame interval in milliseconds (default: 16).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random source (dust layout, ink and ripple jitter).",
    )
    parser.add_argument(
        "--backend",
        choices=("auto", "opengl", "raster"),
        default="auto",
        help="Rendering backend (default: auto).",
    )
    parser.add_argument(
        "--windowed",
        action="store_true",
        help="Open a centered window instead of covering the screen.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show [Shanshui][DEBUG] diagnostics.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Dict[str, dict]:
    if args.config is not None:
        try:
            config = load_config(args.config)
        except (OSError, ValueError) as exc:
            raise SystemExit(f"Unable to read configuration: {exc}") from exc
    else:
        config = sanitize_config(None)
    if args.interval is not None:
        config["system"]["frameIntervalMs"] = max(1, int(args.interval))
    return config


def main(argv: Optional[list[str]] = None, headless: bool = False) -> int:
    """Start the application and return the exit code.

    When ``headless`` is True the arguments and configuration are validated
    and 0 is returned without creating any Qt object.
    """

    args = parse_args(sys.argv[1:] if argv is None else argv)
    if not args.verbose:
        install_debug_silencer()
    config = build_config(args)
    if headless:
        return 0

    # Write unhandled exceptions raised inside the event loop to
    # <repo>/run_exception.txt before delegating to the default hook.
    def _write_unhandled(exc_type, exc_value, exc_tb):
        try:
            out_path = ROOT / "run_exception.txt"
            import traceback as _tb

            with out_path.open("w", encoding="utf-8") as f:
                _tb.print_exception(exc_type, exc_value, exc_tb, file=f)
        except OSError as err:
            warn(f"could not write run_exception.txt: {err}")
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _write_unhandled
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv[:1])
    screen = QtGui.QGuiApplication.primaryScreen()

    backend = None if args.backend == "auto" else args.backend
    window = ViewWindow(screen, config=config, seed=args.seed, force_backend=backend, windowed=args.windowed)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
