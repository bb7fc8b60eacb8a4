#!/usr/bin/env python3
from __future__ import annotations

from array import array
import io
from pathlib import Path
import tempfile
from typing import TYPE_CHECKING

import miniaudio
import numpy as np
import soundfile as sf
import structlog

from .errors import AudioSinkError
from .synth import Signal


if TYPE_CHECKING:
    import numpy.typing as npt


log = structlog.get_logger()


def duration_str(duration: float) -> str:
    minutes = int(duration // 60)
    seconds = duration - 60 * minutes
    return f"{minutes}:{seconds:06.3f}"


def encode(signal: Signal) -> bytes:
    """Return `signal` as a 16-bit PCM WAV container."""
    data = np.array(signal.samples, dtype=np.int16)
    buf = io.BytesIO()
    try:
        sf.write(buf, data, signal.sample_rate, subtype="PCM_16", format="WAV")
    except (RuntimeError, TypeError, ValueError) as exc:
        raise AudioSinkError("encode", exc) from exc

    result = buf.getvalue()
    log.debug("encoded", frames=len(signal), size=len(result))
    return result


def decode(data: bytes) -> Signal:
    """Return the mono 16-bit signal stored in the WAV container `data`."""
    try:
        samples, rate = sf.read(io.BytesIO(data), dtype="int16")
    except RuntimeError as exc:
        raise AudioSinkError("decode", exc) from exc

    return _as_signal(samples, rate)


def load(path: Path) -> Signal:
    """Return the mono 16-bit signal stored in the WAV file at `path`."""
    try:
        samples, rate = sf.read(str(path), dtype="int16")
    except (RuntimeError, OSError) as exc:
        raise AudioSinkError("decode", exc) from exc

    log.debug("loaded", path=str(path), frames=len(samples), sample_rate=rate)
    return _as_signal(samples, rate)


def _as_signal(samples: npt.NDArray, rate: int) -> Signal:
    if samples.ndim != 1:
        raise AudioSinkError(
            "decode", ValueError(f"expected mono audio, got {samples.shape[1]} channels")
        )

    numbers: array[int] = array("h")
    numbers.frombytes(samples.astype(np.int16).tobytes())
    return Signal(numbers, rate)


def save(path: Path, signal: Signal) -> Path:
    """Write `signal` as a 16-bit PCM WAV file, creating missing directories."""
    path = Path(path)
    sound_file = miniaudio.DecodedSoundFile(
        path.name,
        signal.channel_count,
        signal.sample_rate,
        miniaudio.SampleFormat.SIGNED16,
        signal.samples,
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        miniaudio.wav_write_file(str(path), sound_file)
    except (OSError, miniaudio.MiniaudioError) as exc:
        raise AudioSinkError("create", exc) from exc

    log.info("wav written", path=str(path), frames=len(signal))
    return path


def save_temporary(signal: Signal, prefix: str = "sine_wave_") -> Path:
    """Write `signal` to a new temporary WAV file and return its path.

    Removing the file is up to the caller.
    """
    try:
        ntf = tempfile.NamedTemporaryFile(prefix=prefix, suffix=".wav", delete=False)
    except OSError as exc:
        raise AudioSinkError("create", exc) from exc

    ntf.close()
    path = Path(ntf.name)
    try:
        return save(path, signal)
    except AudioSinkError:
        path.unlink(missing_ok=True)
        raise


def read(path: Path) -> tuple[npt.NDArray, int]:
    """Return a tuple with a numpy array of samples and the sample rate.

    The numpy array contains all channels and the contents is normalized
    float64 (double precision).
    """
    try:
        data, rate = sf.read(str(path))
    except (RuntimeError, OSError) as exc:
        raise AudioSinkError("decode", exc) from exc

    return data, rate
