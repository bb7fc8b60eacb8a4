"""Reading tones and audio settings from an ini file."""

from __future__ import annotations

import configparser
import math
from pathlib import Path
from typing import List, Optional

from attr import dataclass, Factory

from .synth import SUPPORTED_SAMPLE_RATES, ToneConfig, full_scale
from .waves import WaveformKind


CURRENT_DIR = Path(__file__).parent
DEFAULT_CONFIG = CURRENT_DIR / "pcmtone.ini"
TONE_PREFIX = "tone"


@dataclass
class AudioOutConfig:
    out_name: Optional[str] = None
    backend: Optional[str] = None
    buffer_msec: int = 200


@dataclass
class Config:
    audio_out: AudioOutConfig = Factory(AudioOutConfig)
    temp_prefix: str = "sine_wave_"
    keep_files: bool = False
    tones: List[ToneConfig] = Factory(list)


def load(path: Path = DEFAULT_CONFIG) -> Config:
    """Return the configuration stored in the ini file at `path`.

    Raises ValueError when the file is missing, malformed, or describes
    a tone that can't be played.
    """
    cfg = configparser.ConfigParser()
    try:
        if not cfg.read(path):
            raise ValueError(f"cannot read config file {path}")
    except configparser.Error as ce:
        raise ValueError(f"malformed config file {path}: {ce}") from ce

    return parse(cfg)


def parse(cfg: configparser.ConfigParser) -> Config:
    result = Config()
    if cfg.has_section("audio-out"):
        section = cfg["audio-out"]
        result.audio_out = AudioOutConfig(
            out_name=section.get("out-name") or None,
            backend=section.get("backend") or None,
            buffer_msec=section.getint("buffer-msec", 200),
        )
    if cfg.has_section("output"):
        section = cfg["output"]
        result.temp_prefix = section.get("temp-prefix", result.temp_prefix)
        result.keep_files = section.getboolean("keep-files", False)

    for name in cfg.sections():
        if name.startswith(TONE_PREFIX):
            result.tones.append(parse_tone(name, cfg[name]))
    if not result.tones:
        raise ValueError(f"no [{TONE_PREFIX}-*] sections in config")

    return result


def parse_tone(name: str, section: configparser.SectionProxy) -> ToneConfig:
    waveform = section.get("waveform", "sine").strip().lower()
    try:
        kind = WaveformKind(waveform)
    except ValueError:
        valid = ", ".join(k.value for k in WaveformKind)
        raise ValueError(
            f"[{name}] waveform not recognized. Got {waveform!r}, expected one of {valid}"
        ) from None

    try:
        frequency = section.getfloat("frequency")
        amplitude = section.getfloat("amplitude", 1.0)
        phase = section.getfloat("phase", 0.0)
        sample_rate = section.getint("sample-rate", SUPPORTED_SAMPLE_RATES[0])
        duration = section.getfloat("duration", 2.0)
    except ValueError as ve:
        raise ValueError(f"[{name}] {ve}") from ve

    if frequency is None:
        raise ValueError(f"[{name}] frequency must be a positive number of Hz")
    for key, value in (
        ("frequency", frequency),
        ("amplitude", amplitude),
        ("phase", phase),
        ("duration", duration),
    ):
        if not math.isfinite(value):
            raise ValueError(f"[{name}] {key} must be a finite number")
    if frequency <= 0:
        raise ValueError(f"[{name}] frequency must be a positive number of Hz")
    if abs(amplitude) > 1.0:
        raise ValueError(f"[{name}] amplitude must be between -1.0 and 1.0")
    if sample_rate not in SUPPORTED_SAMPLE_RATES:
        rates = ", ".join(str(r) for r in SUPPORTED_SAMPLE_RATES)
        raise ValueError(f"[{name}] sample-rate must be one of {rates}")
    if duration < 0:
        raise ValueError(f"[{name}] duration must not be negative")

    return ToneConfig(
        frequency_hz=frequency,
        amplitude=full_scale(amplitude),
        phase_radians=phase,
        sample_rate_hz=sample_rate,
        duration_seconds=duration,
        waveform_kind=kind,
    )
