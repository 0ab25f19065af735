"""Static typography drawn over the landscape: title, poem, seal and cursor hint."""

from __future__ import annotations

from typing import Optional, Tuple

from PyQt5 import QtCore, QtGui

from .colors import to_qcolor
from .config import PALETTE

__all__ = ["HINT", "POEM", "SEAL", "TITLE", "paint_overlay"]

TITLE = "只此青绿"
POEM = "心中若有丘壑 眉目便是山河"
SEAL = "千里江山"
HINT = "移动鼠标以观山河 • 点击水面以生涟漪"

_FONT_FAMILY = "Ma Shan Zheng"


def _font(pixel_size: int, bold: bool = False) -> QtGui.QFont:
    font = QtGui.QFont(_FONT_FAMILY)
    font.setStyleHint(QtGui.QFont.Serif)
    font.setPixelSize(max(1, pixel_size))
    font.setBold(bold)
    return font


def _draw_vertical(painter: QtGui.QPainter, text: str, x: float, y: float, size: int, spacing: float) -> float:
    """Draw ``text`` top-to-bottom in a column centred on ``x``; returns the column bottom."""

    cell = size * spacing
    for ch in text:
        if not ch.strip():
            y += cell * 0.5
            continue
        rect = QtCore.QRectF(x - size / 2.0, y, float(size), cell)
        painter.drawText(rect, QtCore.Qt.AlignCenter, ch)
        y += cell
    return y


def paint_overlay(
    painter: QtGui.QPainter,
    width: int,
    height: int,
    cursor: Optional[Tuple[float, float]] = None,
) -> None:
    painter.save()
    try:
        wide = width >= 768
        margin_x = 96 if wide else 48
        margin_y = 80 if wide else 48
        title_size = 72 if wide else 60
        poem_size = 30 if wide else 24

        # title column, right-most
        title_x = width - margin_x - title_size / 2.0
        painter.setFont(_font(title_size, bold=True))
        painter.setPen(to_qcolor("#292524", 0.9))
        title_bottom = _draw_vertical(painter, TITLE, title_x, margin_y, title_size, 1.15)

        # poem column to its left
        poem_x = title_x - title_size / 2.0 - 32 - poem_size / 2.0
        painter.setFont(_font(poem_size))
        painter.setPen(to_qcolor("#57534E", 0.8))
        _draw_vertical(painter, POEM, poem_x, margin_y + 64, poem_size, 1.6)

        # seal under the title
        seal_size = 80.0 if wide else 64.0
        seal_rect = QtCore.QRectF(width - margin_x - seal_size + 4, title_bottom + 24, seal_size, seal_size)
        painter.setPen(QtCore.Qt.NoPen)
        painter.setBrush(to_qcolor(PALETTE["sealRed"], 0.9))
        painter.drawRoundedRect(seal_rect, 2.0, 2.0)
        painter.setFont(_font(int(seal_size * 0.3)))
        painter.setPen(to_qcolor(PALETTE["bg"], 0.9))
        half = seal_size / 2.0
        for idx, ch in enumerate(SEAL):
            row, col = divmod(idx, 2)
            cell = QtCore.QRectF(seal_rect.left() + col * half, seal_rect.top() + row * half, half, half)
            painter.drawText(cell, QtCore.Qt.AlignCenter, ch)

        painter.setFont(_font(18))
        painter.setPen(to_qcolor("#78716C", 0.6))
        painter.drawText(QtCore.QPointF(32.0, height - 32.0), HINT)

        if cursor is not None:
            cx, cy = cursor
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(to_qcolor("#292524", 0.5))
            painter.setCompositionMode(QtGui.QPainter.CompositionMode_Multiply)
            painter.drawEllipse(QtCore.QPointF(cx, cy), 6.0, 6.0)
    finally:
        painter.restore()
