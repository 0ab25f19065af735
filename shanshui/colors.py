"""Colour helpers turning the palette strings into Qt colours."""

from __future__ import annotations

import re
from typing import Tuple

from PyQt5 import QtGui

__all__ = ["clamp01", "parse_rgba", "to_qcolor"]

_RGBA_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    try:
        number = int(value, 16)
    except ValueError:
        return 0, 0, 0
    return (number >> 16) & 255, (number >> 8) & 255, number & 255


def parse_rgba(value: str) -> Tuple[int, int, int, float]:
    """Return ``(r, g, b, alpha)`` for ``#hex``, ``rgb()`` or ``rgba()`` strings.

    Unparseable components fall back to ``0`` (opaque black), the same
    leniency the gradient parser has always had.
    """

    text = (value or "").strip()
    match = _RGBA_RE.match(text)
    if match is None:
        r, g, b = _hex_to_rgb(text)
        return r, g, b, 1.0
    parts = [part.strip() for part in match.group(1).split(",")]
    channels = []
    for part in parts[:3]:
        try:
            channels.append(max(0, min(255, int(float(part)))))
        except ValueError:
            channels.append(0)
    while len(channels) < 3:
        channels.append(0)
    alpha = 1.0
    if len(parts) > 3:
        try:
            alpha = clamp01(float(parts[3]))
        except ValueError:
            alpha = 1.0
    return channels[0], channels[1], channels[2], alpha


def to_qcolor(value: str, alpha: float = 1.0) -> QtGui.QColor:
    """Build a ``QColor`` from a palette string, multiplying in ``alpha``."""

    r, g, b, a = parse_rgba(value)
    color = QtGui.QColor(r, g, b)
    color.setAlphaF(clamp01(a * alpha))
    return color
