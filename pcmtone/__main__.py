"""See the docstring to main()."""

from __future__ import annotations
from typing import *

import logging
import math
from pathlib import Path
import sys

import click
import numpy as np
import pyloudnorm as pyln
import structlog

from . import audiofile, config, mixer, synth
from .errors import AudioSinkError
from .playback import Player


def configure_logging(debug: bool) -> None:
    if not debug:
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO)
        )
    if not sys.stdout.isatty():
        structlog.configure(
            [
                structlog.processors.TimeStamper(),
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        )


def config_option(f: Callable) -> Callable:
    return click.option(
        "--config",
        help="Read configuration from this file",
        default=str(config.DEFAULT_CONFIG),
        type=click.Path(exists=True, file_okay=True, dir_okay=False),
        show_default=True,
    )(f)


def load_config(path: str) -> config.Config:
    try:
        return config.load(Path(path))
    except ValueError as ve:
        raise click.UsageError(str(ve))


def describe(tone: synth.ToneConfig) -> str:
    return f"{tone.waveform_kind.value} wave ({tone.frequency_hz:g} Hz)"


def render_all(cfg: config.Config) -> tuple[list[synth.Signal], Optional[synth.Signal]]:
    """Return a signal for each configured tone and their mix, if there's many."""
    signals = [synth.synthesize(tone) for tone in cfg.tones]
    if len(signals) < 2:
        return signals, None

    try:
        mixed = mixer.combine(signals)
    except ValueError as ve:
        raise click.UsageError(f"tones can't be played together: {ve}")

    return signals, mixed


def abort(ase: AudioSinkError) -> NoReturn:
    click.secho(f"Error: {ase}", fg="red", err=True)
    raise click.Abort


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    help="Log every encode, decode and device operation",
)
def main(debug: bool) -> None:
    """
    Synthesizes sine, square, and triangle test tones, writes them as mono 16-bit
    WAV files, and plays them back through an audio device.

    The tones are described in a config file.  Use `play --make-config` to output
    the default config to stdout, edit it, then pass it with `--config`.
    """
    configure_logging(debug)


@main.command()
@config_option
@click.option(
    "--make-config",
    help="Write a new configuration file to standard output",
    is_flag=True,
)
@click.option("--keep", is_flag=True, help="Don't remove the temporary WAV files")
def play(config: str, make_config: bool, keep: bool) -> None:
    """Play every configured tone in turn, then all of them together."""
    if make_config:
        click.echo(config_text(), nl=False)
        return

    cfg = load_config(config)
    click.echo("Generating signals")
    signals, mixed = render_all(cfg)

    click.echo("Writing signals to temporary files")
    paths: list[Path] = []
    try:
        for signal in signals:
            paths.append(audiofile.save_temporary(signal, cfg.temp_prefix))
        if mixed is not None:
            paths.append(audiofile.save_temporary(mixed, cfg.temp_prefix))

        out = cfg.audio_out
        with Player(out.out_name, out.backend, out.buffer_msec) as player:
            for tone, path in zip(cfg.tones, paths):
                click.echo(f"Playing {describe(tone)}")
                player.play(audiofile.load(path))
            if mixed is not None:
                click.echo("Playing all signals together")
                player.play(audiofile.load(paths[-1]))
    except AudioSinkError as ase:
        abort(ase)
    finally:
        for path in paths:
            if keep or cfg.keep_files:
                click.echo(f"Kept {path}")
            else:
                path.unlink(missing_ok=True)


@main.command()
@config_option
@click.argument(
    "output_dir", type=click.Path(file_okay=False, dir_okay=True, path_type=Path)
)
def render(config: str, output_dir: Path) -> None:
    """Write every configured tone, and their mix, as WAV files to OUTPUT_DIR."""
    cfg = load_config(config)
    signals, mixed = render_all(cfg)
    try:
        for i, (tone, signal) in enumerate(zip(cfg.tones, signals), 1):
            name = f"{i}-{tone.waveform_kind.value}-{tone.frequency_hz:g}hz.wav"
            path = audiofile.save(output_dir / name, signal)
            click.echo(f"{path}  {audiofile.duration_str(signal.duration)}")
        if mixed is not None:
            path = audiofile.save(output_dir / "mix.wav", mixed)
            click.echo(f"{path}  {audiofile.duration_str(mixed.duration)}")
    except AudioSinkError as ase:
        abort(ase)


@main.command()
@click.argument("file", nargs=-1)
def inspect(file: list[str]) -> None:
    """Show sample rate, duration, peak level and loudness of WAV files."""
    for f in file:
        p = Path(f)
        if not p.is_file():
            click.secho(f"{p} does not exist", err=True)
            continue

        try:
            data, rate = audiofile.read(p)
        except AudioSinkError as ase:
            abort(ase)

        peak = float(np.max(np.abs(data))) if len(data) else 0.0
        peak_db = 20 * math.log10(peak) if peak > 0 else -math.inf
        meter = pyln.Meter(rate)
        try:
            loudness = f"{meter.integrated_loudness(data):.3f} LUFS"
        except ValueError:
            loudness = "too short"
        click.echo(
            f"{p} ({rate / 1000:.1f} kHz)  {audiofile.duration_str(len(data) / rate)}"
            f"  peak {peak_db:.2f} dBFS  loudness {loudness}"
        )


def config_text() -> str:
    return config.DEFAULT_CONFIG.read_text()


if __name__ == "__main__":
    main()
