"""Procedural mountain silhouettes.

Each layer's top edge is a sum of three sines evaluated every few pixels:
a broad primary swell, a finer detail wave and a roughness term whose
parallax runs the other way so the three never crest together. The height
field is a pure function; the renderer turns samples into two independent
``QPainterPath`` objects, a closed one for the gradient fill and an open
one for the ink outline.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Tuple

from PyQt5 import QtCore, QtGui

from .colors import to_qcolor
from .config import TerrainLayerConfig

__all__ = [
    "RidgeSample",
    "breathing",
    "render_layer",
    "ridge_height",
    "sample_ridge",
    "silhouette_paths",
]


@dataclass
class RidgeSample:
    """Top edge of one layer for one frame."""

    layer: TerrainLayerConfig
    baseline: float
    points: List[Tuple[float, float]]


def ridge_height(x: float, time: float, parallax_offset: float, layer: TerrainLayerConfig) -> float:
    """Vertical displacement of ``layer`` at ``x``; subtract it from the baseline."""

    shift = parallax_offset * layer.speed
    freq = layer.frequency
    primary = math.sin((x + shift) * freq + time * 0.1) * layer.amplitude
    detail = math.sin((x + shift) * (freq * 2.5) + time * 0.2) * (layer.amplitude * 0.3)
    rough = math.cos((x - shift) * (freq * 5.0)) * layer.noise
    return primary + detail + rough


def breathing(time: float, amplitude: float = 5.0, omega: float = 0.5) -> float:
    return math.sin(time * omega) * amplitude


def sample_ridge(
    width: int,
    height: int,
    layer: TerrainLayerConfig,
    time: float,
    parallax_x: float,
    *,
    step: int = 5,
    breath_amp: float = 5.0,
    breath_w: float = 0.5,
) -> RidgeSample:
    step = max(1, int(step))
    baseline = height * layer.y_offset + breathing(time, breath_amp, breath_w)
    points = [
        (float(x), baseline - ridge_height(x, time, parallax_x, layer))
        for x in range(0, int(width) + 1, step)
    ]
    return RidgeSample(layer=layer, baseline=baseline, points=points)


def silhouette_paths(width: float, height: float, sample: RidgeSample) -> Tuple[QtGui.QPainterPath, QtGui.QPainterPath]:
    """Return ``(fill_path, stroke_path)`` for a sampled ridge.

    The stroke path only follows the top edge; closing it would draw the
    flat bottom segment as well.
    """

    fill = QtGui.QPainterPath()
    fill.moveTo(0.0, float(height))
    for x, y in sample.points:
        fill.lineTo(x, y)
    fill.lineTo(float(width), float(height))
    fill.closeSubpath()

    stroke = QtGui.QPainterPath()
    for idx, (x, y) in enumerate(sample.points):
        if idx == 0:
            stroke.moveTo(x, y)
        else:
            stroke.lineTo(x, y)
    return fill, stroke


def render_layer(
    painter: QtGui.QPainter,
    width: int,
    height: int,
    sample: RidgeSample,
    *,
    stroke_width: float = 1.5,
) -> None:
    layer = sample.layer
    fill_path, stroke_path = silhouette_paths(width, height, sample)

    gradient = QtGui.QLinearGradient(0.0, sample.baseline - layer.amplitude, 0.0, float(height))
    gradient.setColorAt(0.0, to_qcolor(layer.fill_gradient_start))
    gradient.setColorAt(1.0, to_qcolor(layer.fill_gradient_end))
    painter.setOpacity(layer.opacity)
    painter.setPen(QtCore.Qt.NoPen)
    painter.setBrush(QtGui.QBrush(gradient))
    painter.drawPath(fill_path)

    # Outline in the "iron wire" gongbi manner, always fully opaque.
    painter.setOpacity(1.0)
    pen = QtGui.QPen(to_qcolor(layer.stroke_color), stroke_width)
    pen.setJoinStyle(QtCore.Qt.RoundJoin)
    painter.setPen(pen)
    painter.setBrush(QtCore.Qt.NoBrush)
    painter.drawPath(stroke_path)
