"""Ambient gold dust, ink trail and ripple pools.

The three pools share a record shape but nothing else: dust drifts along a
closed-form oscillation and wraps around the viewport, ink integrates its
velocity and dries out, ripples grow and fade. Each pool owns its entities
and produces plain draw items; painting happens in the view.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence

from .config import DEFAULTS, coerce_float

__all__ = [
    "AmbientDustPool",
    "DiscItem",
    "InkTrailPool",
    "Particle",
    "Ripple",
    "RingItem",
    "RipplePool",
]


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    size: float
    life: float
    max_life: float
    color: str


@dataclass
class Ripple:
    x: float
    y: float
    radius: float
    max_radius: float
    opacity: float
    color: str


@dataclass
class DiscItem:
    """Filled circle ready to be painted."""

    x: float
    y: float
    r: float
    color: str
    alpha: float


@dataclass
class RingItem:
    """Stroked circle ready to be painted."""

    x: float
    y: float
    r: float
    width: float
    color: str
    alpha: float


def _section(name: str, values: Optional[Mapping[str, object]]) -> dict:
    merged = dict(DEFAULTS[name])
    if isinstance(values, Mapping):
        merged.update(values)
    return merged


def _colors(value: object, fallback: Sequence[str]) -> List[str]:
    if isinstance(value, (list, tuple)) and value:
        return [str(item) for item in value]
    return list(fallback)


class AmbientDustPool:
    """Fixed population of gold specks drifting over the whole scene."""

    def __init__(
        self,
        width: float,
        height: float,
        config: Optional[Mapping[str, object]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.particles: List[Particle] = []
        self.configure(config)
        cfg = _section("dust", config)
        count = max(0, int(coerce_float(cfg["count"], 40)))
        size_min = coerce_float(cfg["sizeMin"], 0.5)
        size_span = coerce_float(cfg["sizeSpan"], 2.0)
        velocity = coerce_float(cfg["velocity"], 0.2)
        rnd = self._rng.random
        self.particles = [
            Particle(
                x=rnd() * width,
                y=rnd() * height,
                vx=(rnd() - 0.5) * velocity,
                vy=(rnd() - 0.5) * velocity,
                size=rnd() * size_span + size_min,
                life=1.0,
                max_life=1.0,
                color=self.color,
            )
            for _ in range(count)
        ]

    # keys that shape the population; anything else is applied in place
    LAYOUT_KEYS = ("count", "sizeMin", "sizeSpan", "velocity")

    def configure(self, config: Optional[Mapping[str, object]]) -> None:
        cfg = _section("dust", config)
        self.color = str(cfg["color"])
        self.drift_x = coerce_float(cfg["driftX"], 0.5)
        self.drift_y = coerce_float(cfg["driftY"], 0.2)
        self.twinkle_base = coerce_float(cfg["twinkleBase"], 0.5)
        self.twinkle_amp = coerce_float(cfg["twinkleAmp"], 0.3)
        self.twinkle_w = coerce_float(cfg["twinkleW"], 5.0)
        for p in self.particles:
            p.color = self.color

    def __len__(self) -> int:
        return len(self.particles)

    def update(self, width: float, height: float, time: float) -> None:
        for p in self.particles:
            p.x += math.sin(time + p.y * 0.01) * self.drift_x
            p.y += math.cos(time + p.x * 0.01) * self.drift_y
            # toroidal wrap, never clamped
            if p.x > width:
                p.x = 0.0
            if p.x < 0:
                p.x = float(width)
            if p.y > height:
                p.y = 0.0
            if p.y < 0:
                p.y = float(height)

    def twinkle(self, p: Particle, time: float) -> float:
        return self.twinkle_base + math.sin(time * self.twinkle_w + p.x) * self.twinkle_amp

    def draw_items(self, time: float) -> List[DiscItem]:
        return [DiscItem(p.x, p.y, p.size, p.color, self.twinkle(p, time)) for p in self.particles]


class InkTrailPool:
    """Drops of ink left behind by the pointer."""

    def __init__(self, config: Optional[Mapping[str, object]] = None, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.particles: List[Particle] = []
        self._moves = 0
        self.configure(config)

    def configure(self, config: Optional[Mapping[str, object]]) -> None:
        cfg = _section("ink", config)
        self.spawn_every = max(1, int(coerce_float(cfg["spawnEvery"], 2)))
        self.colors = _colors(cfg["colors"], DEFAULTS["ink"]["colors"])
        self.size_min = coerce_float(cfg["sizeMin"], 2.0)
        self.size_span = coerce_float(cfg["sizeSpan"], 4.0)
        self.jitter = coerce_float(cfg["jitter"], 0.5)
        self.decay = coerce_float(cfg["decay"], 0.02)
        self.shrink = coerce_float(cfg["shrink"], 0.98)
        self.alpha = coerce_float(cfg["alpha"], 0.6)

    def __len__(self) -> int:
        return len(self.particles)

    def spawn(self, x: float, y: float) -> Optional[Particle]:
        """Register one pointer move; returns the new drop when the throttle lets one through."""

        self._moves += 1
        if self._moves % self.spawn_every:
            return None
        rnd = self._rng.random
        particle = Particle(
            x=float(x),
            y=float(y),
            vx=(rnd() - 0.5) * self.jitter,
            vy=rnd() * self.jitter,
            size=rnd() * self.size_span + self.size_min,
            life=1.0,
            max_life=1.0,
            color=self._rng.choice(self.colors),
        )
        self.particles.append(particle)
        return particle

    def update(self) -> None:
        for p in self.particles:
            p.life -= self.decay
            p.size *= self.shrink
            p.x += p.vx
            p.y += p.vy
        self.particles = [p for p in self.particles if p.life > 0]

    def draw_items(self) -> List[DiscItem]:
        return [DiscItem(p.x, p.y, p.size, p.color, p.life * self.alpha) for p in self.particles]

    def clear(self) -> None:
        self.particles = []
        self._moves = 0


class RipplePool:
    """Rings spreading from clicks like ink dropped on wet silk."""

    def __init__(self, config: Optional[Mapping[str, object]] = None, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self.ripples: List[Ripple] = []
        self.configure(config)

    def configure(self, config: Optional[Mapping[str, object]]) -> None:
        cfg = _section("ripple", config)
        self.colors = _colors(cfg["colors"], DEFAULTS["ripple"]["colors"])
        self.opacity = coerce_float(cfg["opacity"], 0.6)
        self.growth = coerce_float(cfg["growth"], 1.5)
        self.fade = coerce_float(cfg["fade"], 0.01)
        self.max_radius_min = coerce_float(cfg["maxRadiusMin"], 100.0)
        self.max_radius_span = coerce_float(cfg["maxRadiusSpan"], 50.0)
        self.base_width = coerce_float(cfg["baseWidth"], 2.0)
        self.bleed_width = coerce_float(cfg["bleedWidth"], 10.0)
        self.ring_threshold = coerce_float(cfg["ringThreshold"], 20.0)
        self.ring_offset = coerce_float(cfg["ringOffset"], 15.0)
        self.inner_width = coerce_float(cfg["innerWidth"], 1.0)

    def __len__(self) -> int:
        return len(self.ripples)

    def spawn(self, x: float, y: float) -> Ripple:
        # max_radius only adds variety; growth is not capped by it
        ripple = Ripple(
            x=float(x),
            y=float(y),
            radius=0.0,
            max_radius=self.max_radius_min + self._rng.random() * self.max_radius_span,
            opacity=self.opacity,
            color=self._rng.choice(self.colors),
        )
        self.ripples.append(ripple)
        return ripple

    def update(self) -> None:
        for r in self.ripples:
            r.radius += self.growth
            r.opacity -= self.fade
        self.ripples = [r for r in self.ripples if r.opacity > 0]

    def draw_items(self) -> List[RingItem]:
        items: List[RingItem] = []
        for r in self.ripples:
            # thickens as it fades, like ink bleeding into paper
            width = self.base_width + (1.0 - r.opacity) * self.bleed_width
            items.append(RingItem(r.x, r.y, r.radius, width, r.color, r.opacity))
            if r.radius > self.ring_threshold:
                items.append(
                    RingItem(r.x, r.y, r.radius - self.ring_offset, self.inner_width, r.color, r.opacity * 0.5)
                )
        return items

    def clear(self) -> None:
        self.ripples = []
