"""Per-frame simulation of the landscape.

``LandscapeEngine`` owns every piece of mutable state of a view (pointer,
clock, the three pools) and turns one timestamp into a :class:`Frame`, an
ordered list of things to paint. Input handlers only touch the pointer and
the pools; nothing here draws.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .config import LAYERS, TerrainLayerConfig, coerce_float, default_config, merge_config, validate_layers
from .diagnostics import debug
from .particles import AmbientDustPool, DiscItem, InkTrailPool, RingItem, RipplePool
from .terrain import RidgeSample, sample_ridge

__all__ = ["Frame", "FrameClock", "GrainRect", "LandscapeEngine", "PointerState"]


@dataclass
class PointerState:
    """Pointer target and its smoothed follower, both relative to the viewport centre."""

    target_x: float = 0.0
    target_y: float = 0.0
    x: float = 0.0
    y: float = 0.0
    # last raw viewport position, for the cursor hint
    raw_x: Optional[float] = None
    raw_y: Optional[float] = None

    def aim(self, x: float, y: float, width: float, height: float) -> None:
        self.raw_x = float(x)
        self.raw_y = float(y)
        self.target_x = float(x) - width / 2.0
        self.target_y = float(y) - height / 2.0

    def smooth(self, ratio: float) -> None:
        self.x += (self.target_x - self.x) * ratio
        self.y += (self.target_y - self.y) * ratio

    def reset(self) -> None:
        self.target_x = self.target_y = self.x = self.y = 0.0
        self.raw_x = self.raw_y = None


@dataclass
class FrameClock:
    """Scene time in seconds plus a frame counter."""

    time: float = 0.0
    frame: int = 0
    _last_ms: Optional[float] = None

    def advance(self, timestamp_ms: float) -> float:
        stamp = float(timestamp_ms)
        if self._last_ms is not None and stamp < self._last_ms:
            stamp = self._last_ms
        self._last_ms = stamp
        self.frame += 1
        self.time = stamp * 0.001
        return self.time


@dataclass
class GrainRect:
    x: float
    y: float
    size: float


@dataclass
class Frame:
    """Everything painted for one tick, in paint order."""

    width: int
    height: int
    time: float
    frame: int
    background: str
    grain_color: str
    grain: List[GrainRect] = field(default_factory=list)
    layers: List[RidgeSample] = field(default_factory=list)
    dust: List[DiscItem] = field(default_factory=list)
    ripples: List[RingItem] = field(default_factory=list)
    ink: List[DiscItem] = field(default_factory=list)


class LandscapeEngine:
    """Frame driver for one landscape view."""

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        layers: Sequence[TerrainLayerConfig] = LAYERS,
        seed: Optional[int] = None,
        width: float = 800.0,
        height: float = 600.0,
    ) -> None:
        validate_layers(layers)
        self.layers: Tuple[TerrainLayerConfig, ...] = tuple(layers)
        self.state: Dict[str, dict] = merge_config(default_config(), config)
        self._rng = random.Random(seed)
        self.pointer = PointerState()
        self.clock = FrameClock()
        self.dust = AmbientDustPool(width, height, self.state["dust"], rng=self._rng)
        self.ink = InkTrailPool(self.state["ink"], rng=self._rng)
        self.ripples = RipplePool(self.state["ripple"], rng=self._rng)
        self._width = width
        self._height = height
        # the pool above only sizes the scene until the first real surface is seen
        self._dust_seeded = False

    def _seed_dust(self, width: float, height: float) -> None:
        self.dust = AmbientDustPool(width, height, self.state["dust"], rng=self._rng)

    # ------------------------------------------------------------------ config
    def merge_state(self, payload: Mapping[str, object]) -> None:
        previous_dust = dict(self.state["dust"])
        self.state = merge_config(self.state, payload)
        self.ink.configure(self.state["ink"])
        self.ripples.configure(self.state["ripple"])
        dust = self.state["dust"]
        if any(dust[key] != previous_dust[key] for key in AmbientDustPool.LAYOUT_KEYS):
            # population stays fixed between reconfigurations
            self._seed_dust(self._width, self._height)
        else:
            self.dust.configure(dust)

    def reset_visual_state(self) -> None:
        self.ink.clear()
        self.ripples.clear()
        self.pointer.reset()

    # ------------------------------------------------------------------ input
    def pointer_move(self, x: float, y: float, width: float, height: float) -> None:
        self.pointer.aim(x, y, width, height)
        self.ink.spawn(x, y)

    def pointer_click(self, x: float, y: float) -> None:
        self.ripples.spawn(x, y)

    # ------------------------------------------------------------------ tick
    def _grain(self, width: int, height: int) -> List[GrainRect]:
        bg = self.state["background"]
        count = max(0, int(bg["grainCount"]))
        max_size = coerce_float(bg["grainMaxSize"], 2.0)
        rnd = self._rng.random
        return [GrainRect(rnd() * width, rnd() * height, rnd() * max_size) for _ in range(count)]

    def step(self, width: int, height: int, timestamp_ms: float) -> Optional[Frame]:
        """Advance the scene by one tick; ``None`` when there is no surface to draw on."""

        if width <= 0 or height <= 0:
            return None
        if not self._dust_seeded:
            self._seed_dust(width, height)
            self._dust_seeded = True
        self._width = width
        self._height = height
        t = self.clock.advance(timestamp_ms)
        self.pointer.smooth(coerce_float(self.state["pointer"]["smoothing"], 0.05))

        terrain = self.state["terrain"]
        bg = self.state["background"]
        frame = Frame(
            width=width,
            height=height,
            time=t,
            frame=self.clock.frame,
            background=bg["color"],
            grain_color=bg["grainColor"],
            grain=self._grain(width, height),
        )
        parallax_x = self.pointer.x
        for layer in self.layers:
            frame.layers.append(
                sample_ridge(
                    width,
                    height,
                    layer,
                    t,
                    parallax_x,
                    step=int(terrain["sampleStep"]),
                    breath_amp=coerce_float(terrain["breathAmp"], 5.0),
                    breath_w=coerce_float(terrain["breathW"], 0.5),
                )
            )

        self.dust.update(width, height, t)
        frame.dust = self.dust.draw_items(t)
        self.ripples.update()
        frame.ripples = self.ripples.draw_items()
        self.ink.update()
        frame.ink = self.ink.draw_items()

        every = int(self.state["system"]["debugEvery"])
        if every > 0 and self.clock.frame % every == 0:
            debug(
                f"frame={self.clock.frame} t={t:.2f}s size={width}x{height} "
                f"dust={len(self.dust)} ripples={len(self.ripples)} ink={len(self.ink)}"
            )
        return frame
