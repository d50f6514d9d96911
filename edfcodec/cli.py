#!/usr/bin/env python3
"""
edfcodec CLI - Inspect EDF/EDF+ files.
"""

import logging
import sys

import click

from . import __version__
from .edffile import EdfFile
from .errors import EdfError


def _load(path: str) -> EdfFile:
    try:
        return EdfFile.read(path)
    except EdfError as e:
        click.echo(f"Error reading {path}: {e}", err=True)
        sys.exit(1)


def format_seconds(seconds: float) -> str:
    """Format seconds as HH:MM:SS.mmm"""
    sign = "-" if seconds < 0 else ""
    ms = int(round(abs(seconds) * 1000))

    hours = ms // 3600000
    minutes = (ms % 3600000) // 60000
    secs = (ms % 60000) // 1000
    milliseconds = ms % 1000

    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}.{milliseconds:03d}"


@click.group()
@click.version_option(__version__)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output with detailed logging",
)
def main(verbose: bool):
    """
    Inspect European Data Format (EDF/EDF+) files.

    Examples:

        edfcodec info recording.edf

        edfcodec annotations recording.edf

        edfcodec samples recording.edf "EEG Fpz-Cz" --physical --limit 20
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def info(path: str):
    """Show header fields and channels."""
    edf = _load(path)
    header = edf.header

    click.echo(f"File: {path}")
    click.echo("-" * 60)
    click.echo(f"  Version:          {header.version}")
    click.echo(f"  Patient:          {header.patient_id}")
    click.echo(f"  Recording:        {header.record_id}")
    click.echo(f"  Start:            {header.start_date} {header.start_time}")
    click.echo(f"  Header bytes:     {header.header_size}")
    click.echo(f"  Reserved:         {header.reserved}")
    click.echo(f"  Records:          {header.record_count} x {header.record_duration}s")
    click.echo(f"  Signals:          {header.signal_count}")
    click.echo("-" * 60)

    for index, channel in enumerate(edf.channels):
        kind = "annotations" if channel.is_annotation else "signal"
        try:
            scale = f"{channel.scale_factor():.6g}"
        except EdfError:
            scale = "n/a"
        click.echo(
            f"  [{index}] {channel.label:<16} {kind:<11} "
            f"{channel.sample_count_per_record:>6}/record  "
            f"{channel.header.physical_dimension or '-':<8} scale={scale}"
        )


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def annotations(path: str):
    """List annotations, one per data record."""
    edf = _load(path)

    if not edf.annotation_signals:
        click.echo("No annotation signals.", err=True)
        sys.exit(1)

    count = 0
    for channel in edf.annotation_signals:
        for record_index, tal in enumerate(channel.annotations):
            if tal is None:
                continue
            duration = format_seconds(tal.duration_seconds) if tal.has_duration else "-"
            click.echo(
                f"  record {record_index:>5}  {format_seconds(tal.start_seconds)}  "
                f"{duration:>12}  {tal.description}"
            )
            count += 1

    click.echo(f"\n{count} annotations")


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("label", type=str)
@click.option(
    "-p", "--physical",
    is_flag=True,
    help="Print physical values (raw sample x scale factor)",
)
@click.option(
    "-n", "--limit",
    type=int,
    default=None,
    help="Print at most N samples",
)
def samples(path: str, label: str, physical: bool, limit):
    """Print the samples of the signal named LABEL."""
    try:
        with EdfFile.open(path) as edf:
            signal = edf.read_signal(label)
    except EdfError as e:
        click.echo(f"Error reading {path}: {e}", err=True)
        sys.exit(1)

    if signal is None:
        click.echo(f"No signal labelled {label!r}.", err=True)
        sys.exit(1)

    values = signal.samples[:limit] if limit is not None else signal.samples
    if physical:
        try:
            values = values * signal.scale_factor()
        except EdfError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    for value in values:
        click.echo(f"{value:g}" if physical else str(value))


@main.command(name="base64")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def to_base64(path: str):
    """Print the file re-encoded as base64."""
    edf = _load(path)
    try:
        click.echo(edf.to_base64())
    except EdfError as e:
        click.echo(f"Error encoding {path}: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
