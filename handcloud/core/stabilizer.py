"""
HandCloud Stabilization Layer (The Anchor).
Exponential low-pass filtering for scalars, vectors and small state records.
"""

from dataclasses import fields


def smooth(previous, incoming, factor):
    """
    previous + (incoming - previous) * factor.
    Works per channel on floats and numpy arrays alike.
    factor in (0, 1]: smaller = heavier smoothing, 1 = raw input.
    """
    return previous + (incoming - previous) * factor


def lerp_toward(current, target, factor):
    """
    Smooths every field of a dataclass value toward the same field of `target`.
    Mutates and returns `current`.
    """
    for f in fields(current):
        setattr(current, f.name, smooth(getattr(current, f.name), getattr(target, f.name), factor))
    return current


def frame_factor(rate: float, dt: float, max_step: float) -> float:
    """
    Frame-rate independent smoothing factor (rate * elapsed seconds).
    Clamped to [0, max_step] so one tick never lands on (or past) the target.
    """
    return min(max(rate * dt, 0.0), max_step)
