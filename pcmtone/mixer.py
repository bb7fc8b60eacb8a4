"""Sample-domain combination of signals."""

from __future__ import annotations

from array import array
from typing import Sequence

from .synth import SAMPLE_RATE, Signal
from .waves import INT16_MAXVALUE, INT16_MINVALUE


def saturate(value: int) -> int:
    """Clamp `value` to the signed 16-bit range."""
    return max(min(value, INT16_MAXVALUE), INT16_MINVALUE)


def combine(signals: Sequence[Signal], sample_rate: int = SAMPLE_RATE) -> Signal:
    """Sum `signals` sample by sample, saturating instead of wrapping around.

    All signals must have the same length and sample rate.  An empty sequence
    produces an empty signal at `sample_rate`.
    """
    if not signals:
        return Signal(array("h"), sample_rate)

    first = signals[0]
    for signal in signals[1:]:
        if len(signal) != len(first):
            raise ValueError(
                f"cannot mix signals of different lengths: {len(first)} != {len(signal)}"
            )
        if signal.sample_rate != first.sample_rate:
            raise ValueError(
                f"cannot mix signals of different sample rates: "
                f"{first.sample_rate} != {signal.sample_rate}"
            )

    out_buffer = array("h", bytes(2 * len(first)))
    buffers = [s.samples for s in signals]
    for i in range(len(first)):
        # Python ints don't overflow so the sum itself is exact.
        out_buffer[i] = saturate(sum(b[i] for b in buffers))
    return Signal(out_buffer, first.sample_rate)
