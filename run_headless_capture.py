"""Start the application headless for a few frames and capture its output.

The parent launches a child Python process with ``QT_QPA_PLATFORM=offscreen``
so OS-level stdout/stderr (including messages from Qt's C++ layer) end up in
files rather than on the console. The child builds the real window, lets the
frame loop run briefly, then quits.

Usage:
  python run_headless_capture.py [--frames N]

Outputs:
  - run_output.txt : combined stdout+stderr from the child run
  - run_exception.txt : the full output when the child exited with an error
"""
from __future__ import annotations
import os
import sys
import traceback

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

out_file = os.path.join(ROOT, "run_output.txt")
err_file = os.path.join(ROOT, "run_exception.txt")


def _run_child_mode(frames: int) -> int:
    """Open the window in-process and quit after roughly ``frames`` ticks."""
    try:
        from PyQt5 import QtCore, QtWidgets

        from shanshui.main import ViewWindow
    except Exception:
        traceback.print_exc()
        return 3

    try:
        app = QtWidgets.QApplication(sys.argv[:1])
        window = ViewWindow(app.primaryScreen(), seed=1, force_backend="raster", windowed=True)
        window.show()
        interval = window.view.frame_loop.interval_ms
        QtCore.QTimer.singleShot(max(1, frames) * interval, window.close)
        QtCore.QTimer.singleShot(max(1, frames) * interval + 50, app.quit)
        rc = app.exec_()
        engine = window.view.engine
        print("frames rendered:", engine.clock.frame)
        print("dust:", len(engine.dust), "ink:", len(engine.ink), "ripples:", len(engine.ripples))
        print("loop running after close:", window.view.frame_loop.running)
        return int(rc)
    except Exception:
        traceback.print_exc()
        return 2


def _run_parent_mode(frames: int) -> None:
    """Launch a child Python process and capture its combined output."""
    import subprocess

    env = dict(os.environ)
    env["RUN_AS_CHILD"] = "1"
    env.setdefault("QT_QPA_PLATFORM", "offscreen")

    proc = subprocess.run(
        [sys.executable, __file__, "--frames", str(frames)], env=env, capture_output=True, text=True
    )

    combined = proc.stdout + ("\n" + proc.stderr if proc.stderr else "")
    with open(out_file, "w", encoding="utf-8") as outf:
        outf.write(combined)

    if proc.returncode != 0:
        with open(err_file, "w", encoding="utf-8") as errf:
            errf.write(combined)
        print("Child process failed; see", err_file)
    else:
        print("Run completed without exception; see", out_file)


def _frames_from_argv(argv: list[str]) -> int:
    if "--frames" in argv:
        idx = argv.index("--frames")
        try:
            return int(argv[idx + 1])
        except (IndexError, ValueError):
            pass
    return 60


if __name__ == "__main__":
    n_frames = _frames_from_argv(sys.argv[1:])
    if os.environ.get("RUN_AS_CHILD") == "1":
        sys.exit(_run_child_mode(n_frames))
    else:
        _run_parent_mode(n_frames)
