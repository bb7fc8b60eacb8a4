"""Rendering waveforms into finite mono 16-bit signals."""

from __future__ import annotations

from array import array
import math

from attr import dataclass

from .waves import INT16_MAXVALUE, INT16_MINVALUE, WaveformKind, sample


SAMPLE_RATE = 44100
SUPPORTED_SAMPLE_RATES = (44100, 48000)


@dataclass(frozen=True)
class Signal:
    samples: array[int]  # typecode "h"
    sample_rate: int  # Hz, like: 44100
    channel_count: int = 1

    def __attrs_post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample rate must be positive, got {self.sample_rate}")
        if self.channel_count != 1:
            raise ValueError(f"only mono signals, got {self.channel_count} channels")

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        """Nominal duration in seconds."""
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class WaveParams:
    frequency_hz: float
    amplitude: float  # in sample units, 32767 is full scale
    phase_radians: float = 0.0


@dataclass(frozen=True)
class ToneConfig:
    frequency_hz: float
    amplitude: float  # in sample units, 32767 is full scale
    phase_radians: float = 0.0
    sample_rate_hz: int = SAMPLE_RATE
    duration_seconds: float = 2.0
    waveform_kind: WaveformKind = WaveformKind.SINE

    @property
    def params(self) -> WaveParams:
        return WaveParams(self.frequency_hz, self.amplitude, self.phase_radians)


def quantize(value: float) -> int:
    """Truncate `value` toward zero into a signed 16-bit sample.

    Values outside of the 16-bit range wrap around (two's complement), they
    are not clamped.  Use `mixer.saturate` where clamping is wanted.
    """
    return ((int(value) - INT16_MINVALUE) & 0xFFFF) + INT16_MINVALUE


def generate(
    kind: WaveformKind,
    frequency: float,
    amplitude: float,
    phase: float,
    sample_rate: int,
    duration: float,
) -> Signal:
    """Return `duration` seconds of a `kind` wave sampled at `sample_rate`.

    The signal holds exactly floor(sample_rate * duration) samples.
    """
    if sample_rate <= 0:
        raise ValueError(f"sample rate must be positive, got {sample_rate}")
    if duration < 0:
        raise ValueError(f"duration must not be negative, got {duration}")

    sample_count = math.floor(sample_rate * duration)
    numbers = []
    for i in range(sample_count):
        t = i / sample_rate
        numbers.append(quantize(sample(kind, t, frequency, amplitude, phase)))
    return Signal(array("h", numbers), sample_rate)


def synthesize(tone: ToneConfig) -> Signal:
    return generate(
        tone.waveform_kind,
        tone.frequency_hz,
        tone.amplitude,
        tone.phase_radians,
        tone.sample_rate_hz,
        tone.duration_seconds,
    )


def full_scale(fraction: float) -> float:
    """Convert a fraction of full scale to sample units."""
    return fraction * INT16_MAXVALUE
