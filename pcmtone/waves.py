#!/usr/bin/env python3
"""A few kinds of waveforms as pure functions of time."""

from __future__ import annotations

import enum
import math


# Two's complement range: one more step on the - side.
INT16_MAXVALUE = 32767
INT16_MINVALUE = -32768


class WaveformKind(enum.Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"


def sample(
    kind: WaveformKind, t: float, frequency: float, amplitude: float, phase: float
) -> float:
    """Return the instantaneous value of a `kind` wave at `t` seconds.

    All three shapes are derived from the same sine so they stay in phase
    with each other.  The square wave resolves zero crossings to +amplitude.
    """
    s = math.sin(math.tau * frequency * t + phase)
    if kind is WaveformKind.SINE:
        return amplitude * s

    if kind is WaveformKind.SQUARE:
        return amplitude if s >= 0 else -amplitude

    if kind is WaveformKind.TRIANGLE:
        return (2 * amplitude / math.pi) * math.asin(s)

    raise ValueError(f"Unknown waveform: {kind!r}")
