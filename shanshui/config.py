"""Static palette, terrain layer table and tunable defaults."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

__all__ = [
    "DEFAULTS",
    "LAYERS",
    "PALETTE",
    "TerrainLayerConfig",
    "coerce_float",
    "default_config",
    "load_config",
    "merge_config",
    "sanitize_config",
    "validate_layers",
]

# Colours of "A Thousand Li of Rivers and Mountains"
PALETTE: Dict[str, str] = {
    "bg": "#F4F1E8",  # antique rice paper
    "stoneBlue": "#2B5F75",  # shi qing
    "stoneGreen": "#4A8F78",  # shi lu
    "darkGreen": "#1A3B32",
    "ochre": "#A66E4E",  # zhe shi
    "faintBlue": "#8FAABC",
    "gold": "#D4AF37",
    "ink": "#1A1A1A",
    "sealRed": "#B63B34",
}


@dataclass(frozen=True)
class TerrainLayerConfig:
    """One mountain silhouette. ``y_offset`` is a fraction of the surface height."""

    color: str
    stroke_color: str
    fill_gradient_start: str
    fill_gradient_end: str
    y_offset: float
    amplitude: float
    frequency: float
    speed: float
    opacity: float
    noise: float


# Back to front.
LAYERS: Tuple[TerrainLayerConfig, ...] = (
    # distant, faint and slow
    TerrainLayerConfig(
        color=PALETTE["faintBlue"],
        stroke_color="#6B8C9E",
        fill_gradient_start="#8FAABC",
        fill_gradient_end="#F4F1E8",
        y_offset=0.35,
        amplitude=80.0,
        frequency=0.002,
        speed=0.02,
        opacity=0.6,
        noise=10.0,
    ),
    TerrainLayerConfig(
        color=PALETTE["stoneBlue"],
        stroke_color="#1A3B32",
        fill_gradient_start=PALETTE["stoneBlue"],
        fill_gradient_end=PALETTE["bg"],
        y_offset=0.55,
        amplitude=120.0,
        frequency=0.003,
        speed=0.05,
        opacity=0.9,
        noise=20.0,
    ),
    TerrainLayerConfig(
        color=PALETTE["stoneGreen"],
        stroke_color="#2B4F3F",
        fill_gradient_start=PALETTE["stoneGreen"],
        fill_gradient_end=PALETTE["bg"],
        y_offset=0.75,
        amplitude=100.0,
        frequency=0.004,
        speed=0.1,
        opacity=0.95,
        noise=15.0,
    ),
    # ochre foreground, wide and mostly transparent
    TerrainLayerConfig(
        color=PALETTE["ochre"],
        stroke_color="#5C3A28",
        fill_gradient_start="rgba(166, 110, 78, 0.4)",
        fill_gradient_end="rgba(244, 241, 232, 0.1)",
        y_offset=0.9,
        amplitude=60.0,
        frequency=0.0015,
        speed=0.2,
        opacity=0.8,
        noise=5.0,
    ),
)


def validate_layers(layers: Sequence[TerrainLayerConfig]) -> None:
    """Reject a malformed layer table. Meant for start-up and tests, not per frame."""

    if not layers:
        raise ValueError("at least one terrain layer is required")
    for idx, layer in enumerate(layers):
        label = f"layer {idx} ({layer.color})"
        if layer.frequency <= 0:
            raise ValueError(f"{label}: frequency must be positive, got {layer.frequency}")
        if not 0.0 <= layer.opacity <= 1.0:
            raise ValueError(f"{label}: opacity must lie in [0, 1], got {layer.opacity}")
        if not 0.0 <= layer.y_offset <= 1.0:
            raise ValueError(f"{label}: y_offset must lie in [0, 1], got {layer.y_offset}")
        if layer.amplitude < 0:
            raise ValueError(f"{label}: amplitude must not be negative, got {layer.amplitude}")


DEFAULTS: Dict[str, dict] = dict(
    system=dict(frameIntervalMs=16, debugEvery=600, transparent=False),
    terrain=dict(sampleStep=5, breathAmp=5.0, breathW=0.5, strokeWidth=1.5),
    pointer=dict(smoothing=0.05),
    background=dict(
        color=PALETTE["bg"],
        grainColor="rgba(160, 150, 130, 0.08)",
        grainCount=400,
        grainMaxSize=2.0,
    ),
    dust=dict(
        count=40,
        color=PALETTE["gold"],
        sizeMin=0.5,
        sizeSpan=2.0,
        velocity=0.2,
        driftX=0.5,
        driftY=0.2,
        twinkleBase=0.5,
        twinkleAmp=0.3,
        twinkleW=5.0,
    ),
    ink=dict(
        spawnEvery=2,
        colors=["#111111", "#222233"],
        sizeMin=2.0,
        sizeSpan=4.0,
        jitter=0.5,
        decay=0.02,
        shrink=0.98,
        alpha=0.6,
    ),
    ripple=dict(
        colors=[PALETTE["stoneGreen"], PALETTE["stoneBlue"]],
        opacity=0.6,
        growth=1.5,
        fade=0.01,
        maxRadiusMin=100.0,
        maxRadiusSpan=50.0,
        baseWidth=2.0,
        bleedWidth=10.0,
        ringThreshold=20.0,
        ringOffset=15.0,
        innerWidth=1.0,
    ),
)


def default_config() -> Dict[str, dict]:
    return copy.deepcopy(DEFAULTS)


def coerce_float(value: object, default: float = 0.0) -> float:
    """Return ``value`` converted to ``float`` when possible."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except (TypeError, ValueError):
        return default


def _sanitize_value(default: object, value: object) -> object:
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(coerce_float(value, float(default)))
    if isinstance(default, float):
        return coerce_float(value, default)
    if isinstance(default, str):
        return str(value) if isinstance(value, str) and value.strip() else default
    if isinstance(default, list):
        if isinstance(value, (list, tuple)):
            cleaned = [str(item) for item in value if isinstance(item, str) and item.strip()]
            return cleaned or list(default)
        return list(default)
    return value


def merge_config(base: Mapping[str, dict], payload: Optional[Mapping[str, object]]) -> Dict[str, dict]:
    """Deep-merge ``payload`` over ``base``, keeping only known sections and keys."""

    merged = copy.deepcopy(dict(base))
    if not isinstance(payload, Mapping):
        return merged
    for key, value in payload.items():
        section = merged.get(key)
        if not isinstance(section, dict) or not isinstance(value, Mapping):
            continue
        for sub_key, sub_value in value.items():
            if sub_key not in section:
                continue
            section[sub_key] = _sanitize_value(DEFAULTS[key][sub_key], sub_value)
    return merged


def sanitize_config(payload: Optional[Mapping[str, object]]) -> Dict[str, dict]:
    """Return a full configuration built from defaults and a user payload."""

    return merge_config(DEFAULTS, payload)


def load_config(path: Union[str, Path]) -> Dict[str, dict]:
    """Read a JSON override file and return the sanitized configuration."""

    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"config file not found: {source}")
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError(f"{source} must contain a JSON object")
    return sanitize_config(payload)
