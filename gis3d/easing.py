"""
Easing Functions - Shaping Progress Over Time

Each function maps normalized progress t in [0, 1] to eased progress,
with f(0) = 0 and f(1) = 1. Use them to remap time before querying a
flight path, or to animate any scalar or vector between two values.

    ease_in_*      slow start
    ease_out_*     slow finish
    ease_in_out_*  slow at both ends
"""

from __future__ import annotations
from typing import Union, overload
import math

from .vector import Vec3


def linear(t: float) -> float:
    return t


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_quad(t: float) -> float:
    return t * (2 - t)


def ease_in_out_quad(t: float) -> float:
    if t < 0.5:
        return 2 * t * t
    return -1 + (4 - 2 * t) * t


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    u = t - 1
    return u * u * u + 1


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return (t - 1) * (2 * t - 2) * (2 * t - 2) + 1


def ease_in_sine(t: float) -> float:
    return 1 - math.cos(t * math.pi / 2)


def ease_out_sine(t: float) -> float:
    return math.sin(t * math.pi / 2)


def ease_in_out_sine(t: float) -> float:
    return -(math.cos(math.pi * t) - 1) / 2


def smooth_step(t: float) -> float:
    """Hermite 3t^2 - 2t^3: zero slope at both ends."""
    return t * t * (3 - 2 * t)


class LinearInterpolator:
    """Straight blend between two floats or two vectors."""

    @overload
    def interpolate(self, start: float, end: float, t: float) -> float: ...

    @overload
    def interpolate(self, start: Vec3, end: Vec3, t: float) -> Vec3: ...

    def interpolate(self, start: Union[float, Vec3], end: Union[float, Vec3], t: float):
        if isinstance(start, Vec3):
            return start.lerp(end, t)
        return start + (end - start) * t


class SmoothStepInterpolator(LinearInterpolator):
    """Linear blend with t remapped through smooth_step."""

    def interpolate(self, start, end, t: float):
        return super().interpolate(start, end, smooth_step(t))
