from array import array
import math

import pytest

from pcmtone.synth import (
    SAMPLE_RATE,
    Signal,
    ToneConfig,
    WaveParams,
    full_scale,
    generate,
    quantize,
    synthesize,
)
from pcmtone.waves import INT16_MAXVALUE, WaveformKind


@pytest.mark.parametrize(
    "sample_rate, duration",
    [(44100, 2.0), (48000, 0.5), (44100, 0.0), (8000, 0.123), (44100, 0.00001)],
)
def test_length_is_floor_of_rate_times_duration(sample_rate, duration):
    for kind in WaveformKind:
        signal = generate(kind, 440.0, 1000.0, 0.0, sample_rate, duration)
        assert len(signal) == math.floor(sample_rate * duration)
        assert signal.sample_rate == sample_rate
        assert signal.channel_count == 1


def test_zero_duration_is_empty_not_an_error():
    signal = generate(WaveformKind.SINE, 440.0, 1000.0, 0.0, SAMPLE_RATE, 0)
    assert len(signal) == 0
    assert signal.duration == 0.0


def test_concrete_220hz_scenario():
    amplitude = 0.8 * INT16_MAXVALUE
    signal = generate(WaveformKind.SINE, 220.0, amplitude, 0.0, 44100, 2.0)
    assert len(signal) == 88200
    assert signal.samples[0] == 0
    # the quarter period falls between samples 50 and 51
    quarter = round(44100 / (4 * 220))
    assert signal.samples[quarter] == pytest.approx(amplitude, abs=2)
    assert signal.duration == pytest.approx(2.0)


def test_quantize_truncates_toward_zero():
    assert quantize(0.9) == 0
    assert quantize(-0.9) == 0
    assert quantize(1234.99) == 1234
    assert quantize(-1234.99) == -1234
    assert quantize(32767.9) == 32767
    assert quantize(-32768.5) == -32768


def test_quantize_wraps_around_instead_of_clamping():
    assert quantize(32768.0) == -32768
    assert quantize(32769.5) == -32767
    assert quantize(-32769.0) == 32767
    assert quantize(65536.0) == 0


def test_generate_truncates_samples():
    amplitude = 1000.0
    signal = generate(WaveformKind.SINE, 100.0, amplitude, 0.3, 8000, 0.01)
    for i, s in enumerate(signal.samples):
        expected = amplitude * math.sin(math.tau * 100.0 * (i / 8000) + 0.3)
        assert s == int(expected)


def test_generate_wraps_overdriven_square():
    signal = generate(WaveformKind.SQUARE, 100.0, 40000.0, 0.0, 8000, 0.01)
    # 40000 doesn't fit in 16 bits and comes out as 40000 - 65536
    assert set(signal.samples) == {40000 - 65536, 65536 - 40000}


def test_square_samples_are_exactly_amplitude():
    signal = generate(WaveformKind.SQUARE, 440.0, 20000.0, 0.0, 44100, 0.05)
    assert set(signal.samples) == {20000, -20000}


def test_triangle_signal_starts_at_zero():
    signal = generate(WaveformKind.TRIANGLE, 440.0, 20000.0, 0.0, 44100, 0.05)
    assert signal.samples[0] == 0
    assert max(signal.samples) <= 20000
    assert min(signal.samples) >= -20000


def test_generate_rejects_bad_rate_and_duration():
    with pytest.raises(ValueError):
        generate(WaveformKind.SINE, 440.0, 1.0, 0.0, 0, 1.0)
    with pytest.raises(ValueError):
        generate(WaveformKind.SINE, 440.0, 1.0, 0.0, 44100, -1.0)


def test_signal_validates_metadata():
    with pytest.raises(ValueError):
        Signal(array("h"), 0)
    with pytest.raises(ValueError):
        Signal(array("h"), 44100, channel_count=2)


def test_synthesize_uses_every_config_field():
    tone = ToneConfig(
        frequency_hz=110.0,
        amplitude=full_scale(0.5),
        phase_radians=math.pi / 2,
        sample_rate_hz=48000,
        duration_seconds=0.25,
        waveform_kind=WaveformKind.SQUARE,
    )
    signal = synthesize(tone)
    assert signal == generate(WaveformKind.SQUARE, 110.0, 16383.5, math.pi / 2, 48000, 0.25)
    assert len(signal) == 12000
    assert signal.samples[0] == 16383
    assert tone.params == WaveParams(110.0, 16383.5, math.pi / 2)
