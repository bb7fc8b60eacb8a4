"""Playing signals through a system audio device with miniaudio."""

from __future__ import annotations
from typing import *

from array import array
import time

import attr
from attr import dataclass
import miniaudio
import structlog

from .errors import AudioSinkError
from .synth import Signal


if TYPE_CHECKING:
    Audio = Generator[array[int], int, None]


log = structlog.get_logger()


# For clarity we're aliasing `next` because we are using it as an initializer of
# stateful generators to execute until (and including) its first `yield` expression
# to stop right before assigning a value sent to the generator.  Now the generator
# is ready to accept `.send(value)`.
# Note: due to this initialization, the first yield in Audio generators returns an
# empty array.
init = next


def signal_stream(signal: Signal) -> Audio:
    """Feed `signal` to the device, then silence forever."""
    samples = signal.samples
    offset = 0
    want_frames = yield array("h")
    while True:
        out_buffer = samples[offset : offset + want_frames]
        offset += len(out_buffer)
        if len(out_buffer) < want_frames:
            out_buffer.extend([0] * (want_frames - len(out_buffer)))
        want_frames = yield out_buffer


@dataclass
class Playback:
    """A clip handed over to the device.

    The device gives no notice when it's done so `wait()` only waits out the
    nominal duration of the clip counted from `started`.  It's an approximation
    of the moment the hardware finished playing.
    """

    duration: float  # in seconds
    started: float  # clock() at start
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic

    def remaining(self) -> float:
        return max(0.0, self.started + self.duration - self.clock())

    def wait(self) -> None:
        remaining = self.remaining()
        if remaining > 0:
            self.sleep(remaining)


@dataclass
class Player:
    out_name: Optional[str] = None  # None: system default device
    backend: Optional[str] = None  # like: "PULSEAUDIO"; None: all backends
    buffer_msec: int = 200
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic
    _device: Optional[miniaudio.PlaybackDevice] = attr.ib(init=False, default=None)
    _sample_rate: int = attr.ib(init=False, default=0)

    def __enter__(self) -> Player:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def device_id(self) -> Any:
        """Return the miniaudio id of the playback device called `out_name`."""
        if not self.out_name:
            return None

        try:
            if self.backend:
                devices = miniaudio.Devices([getattr(miniaudio.Backend, self.backend)])
            else:
                devices = miniaudio.Devices()
            playbacks = devices.get_playbacks()
        except (AttributeError, miniaudio.MiniaudioError) as exc:
            raise AudioSinkError("open", exc) from exc

        for playback in playbacks:
            if playback["name"] == self.out_name:
                return playback["id"]

        raise AudioSinkError("open", LookupError(f"no audio out called {self.out_name}"))

    def open(self, sample_rate: int) -> None:
        """Open the device for mono 16-bit audio at `sample_rate`.

        An already open device at a different sample rate is closed first.
        """
        if self._device is not None:
            if self._sample_rate == sample_rate:
                return

            log.info(
                "reconfiguring audio out", old_rate=self._sample_rate, new_rate=sample_rate
            )
            self.close()

        try:
            self._device = miniaudio.PlaybackDevice(
                device_id=self.device_id(),
                nchannels=1,
                sample_rate=sample_rate,
                output_format=miniaudio.SampleFormat.SIGNED16,
                buffersize_msec=self.buffer_msec,
            )
        except miniaudio.MiniaudioError as exc:
            raise AudioSinkError("open", exc) from exc

        self._sample_rate = sample_rate
        log.info("audio out opened", out_name=self.out_name, sample_rate=sample_rate)

    def close(self) -> None:
        dev = self._device
        if dev is None:
            return

        self._device = None
        self._sample_rate = 0
        dev.close()

    def play(self, signal: Signal, block: bool = True) -> Playback:
        """Start playing `signal`, replacing anything still queued on the device.

        With `block`, return only after the nominal duration of `signal`.
        """
        self.open(signal.sample_rate)
        dev = self._device
        assert dev is not None
        stream = signal_stream(signal)
        init(stream)
        try:
            if dev.running:
                dev.stop()
            dev.start(stream)
        except miniaudio.MiniaudioError as exc:
            raise AudioSinkError("play", exc) from exc

        playback = Playback(
            duration=signal.duration,
            started=self.clock(),
            sleep=self.sleep,
            clock=self.clock,
        )
        log.info("playing", frames=len(signal), duration=signal.duration)
        if block:
            playback.wait()
        return playback
