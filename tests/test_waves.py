import math

import pytest

from pcmtone.waves import INT16_MAXVALUE, WaveformKind, sample


TIMES = [i / 1000 for i in range(0, 50)]


@pytest.mark.parametrize("phase", [0.0, 0.5, math.pi / 3, 2.0])
def test_sine_phase_inversion(phase):
    for t in TIMES:
        a = sample(WaveformKind.SINE, t, 220.0, 1000.0, phase)
        b = sample(WaveformKind.SINE, t, 220.0, 1000.0, phase + math.pi)
        assert a == pytest.approx(-b, abs=1e-9)


def test_sine_peak_at_quarter_period():
    f = 220.0
    value = sample(WaveformKind.SINE, 1 / (4 * f), f, INT16_MAXVALUE, 0.0)
    assert value == pytest.approx(INT16_MAXVALUE)


def test_square_is_only_ever_plus_or_minus_amplitude():
    a = 12345.0
    seen = set()
    for i in range(2000):
        t = i / 44100
        value = sample(WaveformKind.SQUARE, t, 331.0, a, 0.25)
        assert value in (a, -a)
        seen.add(value)
    assert seen == {a, -a}


def test_square_zero_crossing_is_positive():
    assert sample(WaveformKind.SQUARE, 0.0, 100.0, 5.0, 0.0) == 5.0


def test_triangle_is_zero_where_sine_is_zero():
    assert sample(WaveformKind.TRIANGLE, 0.0, 440.0, 1000.0, 0.0) == 0.0
    # half a period later the sine crosses zero again
    value = sample(WaveformKind.TRIANGLE, 1 / 880, 440.0, 1000.0, 0.0)
    assert value == pytest.approx(0.0, abs=1e-9)


def test_triangle_peaks_and_is_piecewise_linear():
    f = 1.0
    a = 1000.0
    assert sample(WaveformKind.TRIANGLE, 0.25, f, a, 0.0) == pytest.approx(a)
    assert sample(WaveformKind.TRIANGLE, 0.75, f, a, 0.0) == pytest.approx(-a)
    # rising edge: equal steps in time give equal steps in value
    steps = [sample(WaveformKind.TRIANGLE, t / 100, f, a, 0.0) for t in range(0, 20)]
    deltas = [b - a_ for a_, b in zip(steps, steps[1:])]
    for d in deltas:
        assert d == pytest.approx(deltas[0], rel=1e-6)
    assert deltas[0] == pytest.approx(4 * a / 100, rel=1e-6)


def test_triangle_stays_within_amplitude():
    a = 2000.0
    for t in TIMES:
        assert abs(sample(WaveformKind.TRIANGLE, t, 97.0, a, 1.0)) <= a + 1e-9


def test_waveform_kind_from_config_value():
    assert WaveformKind("triangle") is WaveformKind.TRIANGLE
    with pytest.raises(ValueError):
        WaveformKind("saw")
