"""MIDI command implementations."""

import logging
from typing import Optional

import click

from beatsampler.core import DiagnosticSequencer
from beatsampler.exceptions import BeatSamplerError
from beatsampler.midi import MidiInputManager, MidiOutputManager
from beatsampler.models import SequencerConfig

logger = logging.getLogger(__name__)


@click.group(name="midi")
def midi_group():
    """MIDI device commands."""
    pass


@midi_group.command(name="list")
def list_midi():
    """List available MIDI ports."""
    inputs = MidiInputManager.list_ports()
    outputs = MidiOutputManager.list_ports()

    click.echo("MIDI Input Ports:\n")
    if not inputs:
        click.echo("  No MIDI input ports found.")
    for i, port in enumerate(inputs):
        click.echo(f"  [{i}] {port}")

    click.echo("\nMIDI Output Ports:\n")
    if not outputs:
        click.echo("  No MIDI output ports found.")
    for i, port in enumerate(outputs):
        click.echo(f"  [{i}] {port}")


@midi_group.command(name="ping")
@click.option("--port", "-p", default="Arturia BeatStep", show_default=True, help="Exact MIDI output port name")
@click.option("--first-key", type=click.IntRange(0, 127), default=None, help="First pad key")
@click.option("--last-key", type=click.IntRange(0, 127), default=None, help="Last pad key (inclusive)")
@click.option("--dwell-ms", type=click.FloatRange(min=1.0), default=None, help="Note length in milliseconds")
def ping_midi(port: str, first_key: Optional[int], last_key: Optional[int], dwell_ms: Optional[float]):
    """
    Sweep the controller's pads with short notes.

    Sends note on / note off for every pad key in turn so the controller
    lights up its pads, confirming the MIDI output connection.
    """
    overrides = {
        field: value
        for field, value in (("first_key", first_key), ("last_key", last_key), ("dwell_ms", dwell_ms))
        if value is not None
    }
    try:
        settings = SequencerConfig(**overrides)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    manager = MidiOutputManager(port)
    try:
        manager.start()
    except BeatSamplerError as e:
        click.echo(f"ERROR: {e.user_message}", err=True)
        if e.recovery_hint:
            click.echo(e.recovery_hint, err=True)
        raise SystemExit(1)

    try:
        sequencer = DiagnosticSequencer(
            manager.send,
            keys=settings.keys,
            dwell=settings.dwell_ms / 1000,
            channel=settings.channel,
            velocity=settings.velocity,
        )
        swept = sequencer.run()
    finally:
        manager.stop()

    click.echo(f"Swept {swept} pads on {port}")
