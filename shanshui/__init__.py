"""Animated blue-green landscape: parallax mountains, gold dust, ink and ripples."""

__version__ = "0.1.0"
